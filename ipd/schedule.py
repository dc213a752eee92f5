"""
Exploration Scheduler - Temperature / epsilon for a given trial.

The parameter holds at `start` until `start_trial`, then anneals towards
its floor linearly or exponentially.
"""

import math

from ipd.config import ExplorationConfig, ExplorationSchedule


def exploration_param(exploration: ExplorationConfig, trial: int) -> float:
    start = exploration.start
    if exploration.schedule == ExplorationSchedule.NONE or trial < exploration.start_trial:
        return start

    t = trial - exploration.start_trial
    if exploration.schedule == ExplorationSchedule.LINEAR:
        return max(exploration.min, start - exploration.slope * t)
    if exploration.schedule == ExplorationSchedule.EXP:
        return max(exploration.min, start * math.exp(-exploration.decay * t))
    raise ValueError(f"Unknown exploration schedule: {exploration.schedule!r}")
