"""CLI runner for the Tower of Hanoi Q-learning demo."""
from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

from hanoi_rl import RunLogger, TDConfig, TDLearningEngine, TowerOfHanoi


def _expected_moves(n: int) -> int:
    return (1 << n) - 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Learn the Tower of Hanoi with tabular Q-learning.")
    parser.add_argument("--episodes", type=int, default=300, help="Episodes to train (default: 300)")
    parser.add_argument("--delay-ms", type=int, default=0, help="Pause after every step in ms (default: 0)")
    parser.add_argument("--disks", type=int, default=3, help="Number of disks (default: 3)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the exploration RNG")
    parser.add_argument("--epsilon", type=float, default=0.9, help="Initial exploration rate")
    parser.add_argument("--goal-reward", type=float, default=50.0)
    parser.add_argument("--step-penalty", type=float, default=-0.5)
    parser.add_argument("--log-json", default=None, help="Optional path for the episode log")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show per-episode progress")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    config = TDConfig(
        disk_count=args.disks,
        seed=args.seed,
        epsilon=args.epsilon,
        goal_reward=args.goal_reward,
        step_penalty=args.step_penalty,
    )
    engine = TDLearningEngine(config)
    run_log = RunLogger(record_steps=False)
    run_log.attach(engine.stream)

    asyncio.run(engine.start_learning(args.episodes, args.delay_ms))

    stats = engine.stats.to_dict()
    print("Training statistics:")
    for key, value in stats.items():
        print(f"  {key}: {value}")
    print()

    result = engine.solve_with_policy()
    puzzle = TowerOfHanoi(engine.rules)
    print("Initial state:")
    print(puzzle)
    print()
    for idx, action in enumerate(result.action_sequence, start=1):
        puzzle.move_disk(action)
        print(f"Move {idx:02d}: {action}")
        print(puzzle)
        print()

    expected = _expected_moves(args.disks)
    print(f"Goal reached: {result.solved}")
    print(f"Moves executed: {result.step_count}")
    print(f"Expected moves: {expected}")

    if args.log_json:
        run_log.snapshot(note="final", stats=stats)
        run_log.to_json(args.log_json)

    return 0 if result.solved else 1


if __name__ == "__main__":
    raise SystemExit(main())
