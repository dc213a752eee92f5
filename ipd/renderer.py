"""
Result Renderer - Text views of a simulation run.

Used by the command line and for logging; the graphical dashboard is a
separate consumer of the same SimulationResult.
"""

from typing import List

from ipd.actions import ACTION_NAMES, Action
from ipd.config import StateMemory
from ipd.encoder import state_labels
from ipd.results import SimulationResult, summarize


class ResultRenderer:
    """Plain-text renderer for block and trial listings."""

    @staticmethod
    def param_headers(param_keys: List[str]) -> List[str]:
        """Column titles 'CD:C' for snapshot keys 'S1C' (state name, action)."""
        if not param_keys:
            return []
        labels = state_labels(StateMemory(len(param_keys) // 2))
        return [f"{labels[int(key[1:-1])]}:{key[-1]}" for key in param_keys]

    @staticmethod
    def render_blocks(result: SimulationResult, show_params: bool = True) -> str:
        """Render the block table as an aligned text table."""
        if not result.blocks:
            return "(no trials)"

        param_keys: List[str] = list(result.blocks[0].parameters) if show_params else []
        header = f"{'block':>5} {'mid':>8} {'coop%':>7} {'opp%':>7} {'reward':>8} {'explore':>8}"
        for title in ResultRenderer.param_headers(param_keys):
            header += f" {title:>8}"
        lines = [header, "-" * len(header)]

        for b in result.blocks:
            row = (f"{b.block:>5} {b.midpoint:>8.1f} {b.pct_cooperate:>7.1f} "
                   f"{b.opp_pct_cooperate:>7.1f} {b.mean_reward:>8.3f} "
                   f"{b.mean_exploration_param:>8.4f}")
            for key in param_keys:
                row += f" {b.parameters.get(key, 0.0):>8.3f}"
            lines.append(row)

        return "\n".join(lines)

    @staticmethod
    def render_summary(result: SimulationResult) -> str:
        """Single-line headline metrics."""
        s = summarize(result.blocks)
        return (f"Agent coop: {s['agent_cooperation']:.1f}%  "
                f"Opponent coop: {s['opponent_cooperation']:.1f}%  "
                f"Convergence score: {s['convergence_score']:.2f}")

    @staticmethod
    def render_trials(result: SimulationResult, limit: int = 20) -> str:
        """First `limit` trials as 'T0000 C/D r=0.00 x=1.0000'."""
        lines = []
        for t in result.trials[:limit]:
            lines.append(
                f"T{t.trial:04d} "
                f"{ACTION_NAMES[Action(t.agent_action)]}/{ACTION_NAMES[Action(t.opponent_action)]} "
                f"r={t.reward:.2f} x={t.exploration_param:.4f}"
            )
        remaining = len(result.trials) - limit
        if remaining > 0:
            lines.append(f"... {remaining} more trials")
        return "\n".join(lines)
