#!/usr/bin/env python3
"""
Iterated Prisoner's Dilemma Simulator - Command Line Interface

Run simulations and manage configuration files.

Usage:
    python cli.py run                                  # Defaults: Q-learner vs tit-for-tat
    python cli.py run --config experiment.json         # Configuration exported from the UI
    python cli.py run --opponent grim_trigger --seed 7 --output result.json
    python cli.py init-config experiment.json          # Write the default configuration
    python cli.py show-config --config experiment.json
"""

import argparse
import logging
import sys
from typing import List, Optional

from ipd.config import (
    ActionSelection, LearningAlgorithm, SimulationConfig, StateMemory,
)
from ipd.engine import run
from ipd.renderer import ResultRenderer
from ipd.strategies import Strategy

logger = logging.getLogger(__name__)

STRATEGY_CHOICES = [s.value for s in Strategy]
OPPONENT_CHOICES = [s.value for s in Strategy if s != Strategy.RL_AGENT]


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ipd-sim',
        description="Iterated Prisoner's Dilemma learning simulator"
    )
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Run command
    run_parser = subparsers.add_parser('run', help='Run one simulation')
    run_parser.add_argument('--config', '-c', type=str, default=None,
                            help='Configuration file (JSON)')
    run_parser.add_argument('--seed', '-s', type=int, default=None,
                            help='Override the random seed')
    run_parser.add_argument('--trials', '-n', type=int, default=None,
                            help='Override the number of trials')
    run_parser.add_argument('--block-size', '-b', type=int, default=None,
                            help='Override the block size')
    run_parser.add_argument('--agent', choices=STRATEGY_CHOICES, default=None,
                            help='Override the agent strategy')
    run_parser.add_argument('--opponent', choices=OPPONENT_CHOICES, default=None,
                            help='Override the opponent strategy')
    run_parser.add_argument('--algorithm', choices=[a.value for a in LearningAlgorithm],
                            default=None, help='Override the learning algorithm')
    run_parser.add_argument('--selection', choices=[a.value for a in ActionSelection],
                            default=None, help='Override the action selection')
    run_parser.add_argument('--memory', type=int, choices=[m.value for m in StateMemory],
                            default=None, help='Override the number of states')
    run_parser.add_argument('--output', '-o', type=str, default=None,
                            help='Write trials and blocks to this JSON file')
    run_parser.add_argument('--show-trials', type=int, default=0,
                            help='Also list the first N trials')

    # Init-config command
    init_parser = subparsers.add_parser('init-config',
                                        help='Write the default configuration')
    init_parser.add_argument('path', type=str, help='Destination file (JSON)')

    # Show-config command
    show_parser = subparsers.add_parser('show-config',
                                        help='Print the effective configuration')
    show_parser.add_argument('--config', '-c', type=str, default=None,
                             help='Configuration file (JSON)')

    return parser


def load_config(path: Optional[str]) -> SimulationConfig:
    if path is None:
        return SimulationConfig()
    return SimulationConfig.load(path)


def apply_overrides(config: SimulationConfig, args) -> SimulationConfig:
    changes = {}
    if args.seed is not None:
        changes['seed'] = args.seed
    if args.trials is not None:
        changes['n_trials'] = args.trials
    if args.block_size is not None:
        changes['block_size'] = args.block_size
    if args.agent is not None:
        changes['agent_strategy'] = Strategy(args.agent)
    if args.opponent is not None:
        changes['opponent_strategy'] = Strategy(args.opponent)
    if args.algorithm is not None:
        changes['learning_algorithm'] = LearningAlgorithm(args.algorithm)
    if args.selection is not None:
        changes['action_selection'] = ActionSelection(args.selection)
    if args.memory is not None:
        changes['state_memory'] = StateMemory(args.memory)
    return config.replace(**changes) if changes else config


def cmd_run(args) -> int:
    """Run a simulation and print its block table"""
    config = apply_overrides(load_config(args.config), args)

    print(f"{config.agent_strategy.value} vs {config.opponent_strategy.value}: "
          f"{config.n_trials} trials, seed {config.seed}")
    if config.agent_is_learner:
        print(f"Learner: {config.learning_algorithm.value}"
              f" ({config.action_selection.value}), {config.num_states} states")

    result = run(config)

    if args.show_trials > 0:
        print()
        print(ResultRenderer.render_trials(result, limit=args.show_trials))
    print()
    print(ResultRenderer.render_blocks(result))
    print()
    print(ResultRenderer.render_summary(result))

    if args.output:
        result.save(args.output)
        logger.info(f"Saved {len(result.trials)} trials to {args.output}")
        print(f"\nResults written to {args.output}")
    return 0


def cmd_init_config(args) -> int:
    """Write the default configuration file"""
    SimulationConfig().save(args.path)
    print(f"Default configuration written to {args.path}")
    return 0


def cmd_show_config(args) -> int:
    """Print configuration JSON"""
    print(load_config(args.config).to_json())
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if not args.command:
        parser.print_help()
        return 0

    # Map commands to functions
    commands = {
        'run': cmd_run,
        'init-config': cmd_init_config,
        'show-config': cmd_show_config,
    }

    if args.command not in commands:
        parser.print_help()
        return 1

    try:
        return commands[args.command](args)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main() or 0)
