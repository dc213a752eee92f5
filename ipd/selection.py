"""
Action Selection - Turning a row of estimates into a move.

- softmax: Boltzmann distribution at temperature tau (floored at 1e-6)
- epsilon-greedy: uniform move with probability epsilon, else argmax
- UCB1: optimism bonus c * sqrt(ln(N + 1) / n_a), unvisited moves first

Near-ties (|difference| < 1e-10) are broken by a coin flip so floating
noise never locks the learner into one move.
"""

import math
from typing import Sequence

import numpy as np

from ipd.actions import Action
from ipd.config import ActionSelection
from ipd.rng import SeededRNG

MIN_TEMPERATURE = 1e-6
TIE_TOLERANCE = 1e-10


def softmax(values: Sequence[float], tau: float) -> np.ndarray:
    """Boltzmann probabilities of a value row at temperature tau.

    The row is shifted by its maximum before exponentiation, so very low
    temperatures give a near one-hot distribution on the best move. An
    unshifted exp(v / tau) overflows there and yields NaN probabilities,
    which cumulative sampling turns into a constant D; results therefore
    differ from unshifted implementations only at such extreme values.
    """
    scaled = np.asarray(values, dtype=np.float64) / max(tau, MIN_TEMPERATURE)
    # Shift by the max so low temperatures cannot overflow
    exp = np.exp(scaled - np.max(scaled))
    return exp / np.sum(exp)


def sample_index(probs: Sequence[float], rng: SeededRNG) -> int:
    """Index of the first cumulative probability above one uniform draw."""
    r = rng.next()
    cumulative = 0.0
    for i, p in enumerate(probs):
        cumulative += float(p)
        if r < cumulative:
            return i
    return len(probs) - 1


def _argmax_or_coin(v0: float, v1: float, rng: SeededRNG) -> Action:
    if abs(v0 - v1) < TIE_TOLERANCE:
        return Action(rng.coin_flip())
    return Action.C if v0 > v1 else Action.D


def select_epsilon_greedy(values: Sequence[float], epsilon: float,
                          rng: SeededRNG) -> Action:
    if rng.next() < epsilon:
        return Action(rng.coin_flip())
    return _argmax_or_coin(float(values[0]), float(values[1]), rng)


def ucb_scores(values: Sequence[float], counts: Sequence[int], c: float) -> np.ndarray:
    """UCB1 score per action; both counts must be positive."""
    total = counts[0] + counts[1]
    return np.array([
        values[i] + c * math.sqrt(math.log(total + 1) / counts[i])
        for i in range(2)
    ], dtype=np.float64)


def select_ucb(values: Sequence[float], counts: Sequence[int], c: float,
               rng: SeededRNG) -> Action:
    n0, n1 = int(counts[0]), int(counts[1])
    if n0 == 0 and n1 == 0:
        return Action(rng.coin_flip())
    if n0 == 0:
        return Action.C
    if n1 == 0:
        return Action.D
    scores = ucb_scores(values, counts, c)
    return _argmax_or_coin(float(scores[0]), float(scores[1]), rng)


def select_value_action(method: ActionSelection, values: Sequence[float],
                        counts: Sequence[int], param: float, ucb_c: float,
                        rng: SeededRNG):
    """Pick a move from Q-values.

    Returns (action, probs). probs is the softmax distribution for the
    SOFTMAX method and the uniform placeholder otherwise.
    """
    if method == ActionSelection.SOFTMAX:
        probs = softmax(values, param)
        return Action(sample_index(probs, rng)), probs

    placeholder = np.array([0.5, 0.5])
    if method == ActionSelection.EPSILON_GREEDY:
        return select_epsilon_greedy(values, param, rng), placeholder
    if method == ActionSelection.UCB:
        return select_ucb(values, counts, ucb_c, rng), placeholder
    raise ValueError(f"Unknown action selection: {method!r}")
