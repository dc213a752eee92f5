"""
Simulation Configuration - Everything one run of the engine needs.

The in-memory form is a dataclass with snake_case attributes. The file
form is the JSON object produced by the configuration front end, with
camelCase keys and enum members stored by value:

    {"nTrials": 2000, "blockSize": 100, "seed": 42,
     "payoff": [[3, 0], [5, 1]], "agentStrategy": "rl_agent", ...}

Beyond decoding, nothing here is validated: table shapes and payoff
dimensions are the caller's responsibility.
"""

import copy
import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

from ipd.actions import standard_payoff
from ipd.strategies import Strategy


class LearningAlgorithm(Enum):
    Q_INCREMENTAL = "q_incremental"
    REINFORCE_BASELINE = "reinforce_baseline"
    PREFERENCE = "preference"           # REINFORCE without baseline


class ActionSelection(Enum):
    SOFTMAX = "softmax"
    EPSILON_GREEDY = "epsilon_greedy"
    UCB = "ucb"


class StateMemory(IntEnum):
    """Value is the number of states the memory model distinguishes."""
    S1_GLOBAL = 1
    S2_OPP_MOVE = 2
    S4_BOTH_MOVE = 4


class ExplorationSchedule(Enum):
    NONE = "none"
    EXP = "exp"
    LINEAR = "linear"


MAX_STATES = max(m.value for m in StateMemory)


def _default_q() -> List[List[float]]:
    return [[0.5, 0.5] for _ in range(MAX_STATES)]


def _default_h() -> List[List[float]]:
    return [[0.0, 0.0] for _ in range(MAX_STATES)]


@dataclass
class ExplorationConfig:
    """Annealing of the temperature (softmax) or epsilon (epsilon-greedy)."""
    schedule: ExplorationSchedule = ExplorationSchedule.LINEAR
    start: float = 1.0
    min: float = 0.1
    decay: float = 0.01        # Exponential rate
    slope: float = 0.001       # Linear decrement per trial
    start_trial: int = 500

    def to_dict(self) -> Dict[str, Any]:
        return {
            'schedule': self.schedule.value,
            'start': self.start,
            'min': self.min,
            'decay': self.decay,
            'slope': self.slope,
            'startTrial': self.start_trial,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExplorationConfig':
        defaults = cls()
        return cls(
            schedule=ExplorationSchedule(data.get('schedule', defaults.schedule.value)),
            start=data.get('start', defaults.start),
            min=data.get('min', defaults.min),
            decay=data.get('decay', defaults.decay),
            slope=data.get('slope', defaults.slope),
            start_trial=data.get('startTrial', defaults.start_trial),
        )


# attribute name -> JSON key, for the flat scalar fields
_SCALAR_KEYS = {
    'n_trials': 'nTrials',
    'block_size': 'blockSize',
    'seed': 'seed',
    'p_cooperate': 'pCooperate',
    'p_cooperate_opponent': 'pCooperateOpponent',
    'alpha': 'alpha',
    'alpha_b': 'alphaB',
    'alpha_pi': 'alphaPi',
    'gamma': 'gamma',
    'ucb_c': 'ucbC',
}


@dataclass
class SimulationConfig:
    """Master configuration for one simulation run"""
    n_trials: int = 2000
    block_size: int = 100
    seed: int = 42
    payoff: List[List[float]] = field(default_factory=standard_payoff)  # [agent][opponent]

    # Players
    agent_strategy: Strategy = Strategy.RL_AGENT
    opponent_strategy: Strategy = Strategy.TIT_FOR_TAT
    p_cooperate: float = 0.5               # RANDOM agent
    p_cooperate_opponent: float = 0.5      # RANDOM opponent

    # Learner
    learning_algorithm: LearningAlgorithm = LearningAlgorithm.Q_INCREMENTAL
    action_selection: ActionSelection = ActionSelection.SOFTMAX
    state_memory: StateMemory = StateMemory.S2_OPP_MOVE
    alpha: Optional[float] = 0.1           # None = 1/N incremental average
    alpha_b: float = 0.1
    alpha_pi: float = 0.1
    gamma: float = 0.9
    ucb_c: float = 2.0

    exploration: ExplorationConfig = field(default_factory=ExplorationConfig)

    initial_q: List[List[float]] = field(default_factory=_default_q)  # [state][action]
    initial_h: List[List[float]] = field(default_factory=_default_h)

    @property
    def num_states(self) -> int:
        return int(self.state_memory.value)

    @property
    def agent_is_learner(self) -> bool:
        return self.agent_strategy == Strategy.RL_AGENT

    def replace(self, **changes) -> 'SimulationConfig':
        """Copy with some fields changed; tables are never shared."""
        return dataclasses.replace(copy.deepcopy(self), **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON shape"""
        data: Dict[str, Any] = {
            key: getattr(self, attr) for attr, key in _SCALAR_KEYS.items()
        }
        data.update({
            'payoff': [list(row) for row in self.payoff],
            'agentStrategy': self.agent_strategy.value,
            'opponentStrategy': self.opponent_strategy.value,
            'learningAlgorithm': self.learning_algorithm.value,
            'actionSelection': self.action_selection.value,
            'stateMemory': int(self.state_memory.value),
            'explorationConfig': self.exploration.to_dict(),
            'initialQ': [list(row) for row in self.initial_q],
            'initialH': [list(row) for row in self.initial_h],
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationConfig':
        """Build from the JSON shape; missing keys take default values.

        Raises ValueError for unknown strategy/algorithm/schedule names.
        """
        config = cls()
        for attr, key in _SCALAR_KEYS.items():
            if key in data:
                setattr(config, attr, data[key])
        if 'payoff' in data:
            config.payoff = [list(row) for row in data['payoff']]
        if 'agentStrategy' in data:
            config.agent_strategy = Strategy(data['agentStrategy'])
        if 'opponentStrategy' in data:
            config.opponent_strategy = Strategy(data['opponentStrategy'])
        if 'learningAlgorithm' in data:
            config.learning_algorithm = LearningAlgorithm(data['learningAlgorithm'])
        if 'actionSelection' in data:
            config.action_selection = ActionSelection(data['actionSelection'])
        if 'stateMemory' in data:
            config.state_memory = StateMemory(int(data['stateMemory']))
        if 'explorationConfig' in data:
            config.exploration = ExplorationConfig.from_dict(data['explorationConfig'])
        if 'initialQ' in data:
            config.initial_q = [list(row) for row in data['initialQ']]
        if 'initialH' in data:
            config.initial_h = [list(row) for row in data['initialH']]
        return config

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def save(self, filepath: str):
        """Save configuration to file"""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: str) -> 'SimulationConfig':
        """Load configuration from file"""
        with open(filepath, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{filepath}: expected a JSON object, got {type(data).__name__}")
        return cls.from_dict(data)
