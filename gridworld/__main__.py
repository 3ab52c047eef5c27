"""Command-line entry point: train one or more grid worlds and print the results."""

import argparse
import logging
import os
import sys
from typing import List, Optional, Tuple

from .app.parallel import RunPlan, run_parallel
from .domain.exceptions import ConfigurationError
from .domain.types import GridConfig, LearningConfig
from .ui.console import format_checkpoint, format_report, format_run_header
from .utils.grid_factory import create_training_run
from .utils.rng import SeededRNG


def build_parser() -> argparse.ArgumentParser:
    defaults = LearningConfig()
    parser = argparse.ArgumentParser(
        prog="gridworld",
        description="Train a SARSA(lambda) agent to reach a goal on a random grid",
    )
    parser.add_argument("--rows", type=int, default=10, help="Grid row count")
    parser.add_argument("--cols", type=int, default=10, help="Grid column count")
    parser.add_argument("--no-obstacles", action="store_true", help="Disable obstacles")
    parser.add_argument("--obstacle-percent", type=int, default=25,
                        help="Chance in percent that a cell holds an obstacle (0-100)")
    parser.add_argument("--grids", type=int, default=1,
                        help="Number of independent grids to train in parallel")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible runs")
    parser.add_argument("--exploration-rate", type=float, default=defaults.initial_exploration_rate,
                        help="Initial exploration rate, also used as discount")
    parser.add_argument("--learning-rate", type=float, default=defaults.learning_rate)
    parser.add_argument("--trace-decay", type=float, default=defaults.trace_decay)
    parser.add_argument("--rate-decrement", type=float, default=defaults.rate_decrement,
                        help="Exploration rate drop per episode")
    parser.add_argument("--threshold", type=float, default=defaults.termination_threshold,
                        help="Stop once the exploration rate is at or below this value")
    parser.add_argument("--checkpoint-interval", type=int, default=defaults.checkpoint_interval,
                        help="Actions between progress reports")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def configs_from_args(args: argparse.Namespace) -> Tuple[GridConfig, LearningConfig]:
    """
    Raises:
        ConfigurationError: On any invalid option value
    """
    grid_config = GridConfig(
        rows=args.rows,
        cols=args.cols,
        obstacles_enabled=not args.no_obstacles,
        obstacle_percent=args.obstacle_percent,
    )
    learning_config = LearningConfig(
        initial_exploration_rate=args.exploration_rate,
        learning_rate=args.learning_rate,
        trace_decay=args.trace_decay,
        rate_decrement=args.rate_decrement,
        termination_threshold=args.threshold,
        checkpoint_interval=args.checkpoint_interval,
    )
    if not learning_config.terminates():
        raise ConfigurationError("--rate-decrement must be positive for training to terminate")
    return grid_config, learning_config


def run_single(grid_config: GridConfig, learning_config: LearningConfig,
               seed: Optional[int]) -> int:
    def print_board(stage, snapshot):
        if stage == "initial":
            print(format_run_header(driver.run_id, snapshot, grid_config.obstacles_enabled))

    def print_checkpoint(checkpoint):
        print(format_checkpoint(checkpoint))

    driver = create_training_run(grid_config, learning_config, seed=seed,
                                 checkpoint_callback=print_checkpoint,
                                 board_callback=print_board)
    report = driver.run()
    print(format_report(report))
    return 0


def run_many(grid_config: GridConfig, learning_config: LearningConfig,
             seed: Optional[int], count: int) -> int:
    seeds = SeededRNG(seed)
    plans: List[RunPlan] = [
        RunPlan(grid_config, learning_config, seed=seeds.spawn_seed() if seed is not None else None)
        for _ in range(count)
    ]
    print(f"Training {count} grids of {grid_config.rows} x {grid_config.cols} in parallel...")

    # Workers return whole reports, so each grid prints once all have finished
    failures = 0
    for outcome in run_parallel(plans, max_workers=min(count, os.cpu_count() or 1)):
        if outcome.succeeded:
            report = outcome.report
            if report.initial_board is not None:
                print(format_run_header(report.run_id, report.initial_board,
                                        report.obstacles_enabled))
            for checkpoint in report.checkpoints:
                print(format_checkpoint(checkpoint))
            print(format_report(report))
        else:
            failures += 1
            print(f"Grid {outcome.index} failed: {outcome.error}")
    return 1 if failures else 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the grid world trainer."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        grid_config, learning_config = configs_from_args(args)
        if args.grids < 1:
            raise ConfigurationError(f"--grids must be at least 1, got {args.grids}")
        if args.grids == 1:
            status = run_single(grid_config, learning_config, args.seed)
        else:
            status = run_many(grid_config, learning_config, args.seed, args.grids)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        return 2
    except KeyboardInterrupt:
        print("\nTraining interrupted by user")
        return 1

    print("Done!")
    return status


if __name__ == "__main__":
    sys.exit(main())
