"""
State Encoder - Maps the previous joint action to a table row.

Memory models:
- S1_GLOBAL:    one state, history ignored
- S2_OPP_MOVE:  opponent's last move (C=0, D=1)
- S4_BOTH_MOVE: agent_last * 2 + opponent_last  (CC=0, CD=1, DC=2, DD=3)

Before the first trial there is no history; both players are treated as
having cooperated, so trial 0 starts in the CC / C state.
"""

from typing import List, Optional

from ipd.actions import Action
from ipd.config import StateMemory

STATE_LABELS = {
    StateMemory.S1_GLOBAL: ["*"],
    StateMemory.S2_OPP_MOVE: ["C", "D"],
    StateMemory.S4_BOTH_MOVE: ["CC", "CD", "DC", "DD"],
}


def encode_state(memory: StateMemory, agent_last: Optional[int],
                 opponent_last: Optional[int]) -> int:
    if memory == StateMemory.S1_GLOBAL:
        return 0

    a_last = Action.C if agent_last is None else agent_last
    o_last = Action.C if opponent_last is None else opponent_last

    if memory == StateMemory.S2_OPP_MOVE:
        return int(o_last)
    if memory == StateMemory.S4_BOTH_MOVE:
        return int(a_last) * 2 + int(o_last)
    raise ValueError(f"Unknown state memory: {memory!r}")


def state_labels(memory: StateMemory) -> List[str]:
    """Human-readable name of each state index."""
    return list(STATE_LABELS[memory])
