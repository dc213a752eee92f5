"""Shared test doubles."""

from typing import Iterable

from ipd.rng import SeededRNG


class ScriptedRNG(SeededRNG):
    """Random source that replays a fixed list of draws."""

    def __init__(self, draws: Iterable[float]):
        super().__init__(0)
        self.draws = list(draws)
        self.calls = 0

    def next(self) -> float:
        self.calls += 1
        return self.draws.pop(0)


def format_actions(actions: Iterable[int]) -> str:
    """Compact string such as 'CCDC' for a sequence of actions."""
    return "".join("C" if a == 0 else "D" for a in actions)
