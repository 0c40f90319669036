#!/usr/bin/env python3
"""Play a bot-only match against the engine in-process.

Useful as a soak test: every hand is validated by the engine and the chip
total is checked against the reported rounding loss at the end.

Example:
    python scripts/selfplay.py --players 6 --hands 500 --strategy baseline
"""

from __future__ import annotations

import argparse
import logging

from autoplay.bots import STRATEGIES, get_strategy, seed_bots
from autoplay.selfplay import play_match, standings
from holdem.game import GameEngine
from holdem.models import TableConfig

LOGGER = logging.getLogger("selfplay")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a local bot-only Hold'em match")
    parser.add_argument("--players", type=int, default=4)
    parser.add_argument("--hands", type=int, default=200)
    parser.add_argument("--starting-stack", type=int, default=1_000)
    parser.add_argument("--sb", type=int, default=10)
    parser.add_argument("--bb", type=int, default=20)
    parser.add_argument("--side-pots", action="store_true", help="Split all-in pots into side pots")
    parser.add_argument("--strategy", choices=sorted(STRATEGIES), default="baseline")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="%(message)s")

    config = TableConfig(
        small_blind=args.sb,
        big_blind=args.bb,
        starting_stack=args.starting_stack,
        side_pots=args.side_pots,
        seed=args.seed,
    )
    engine = GameEngine.from_config(config, [f"Bot{i}" for i in range(args.players)], ai_seats=range(args.players))
    seed_bots(args.seed)
    strategy = get_strategy(args.strategy)

    report = play_match(engine, [strategy] * args.players, max_hands=args.hands)

    for line in standings(engine):
        LOGGER.info(line)
    drift = report.starting_total - report.final_total
    if drift != report.rounding_loss:
        LOGGER.error("Chip drift %s does not match rounding loss %s", drift, report.rounding_loss)
        raise SystemExit(1)
    LOGGER.info("%s hands, %s chips lost to split rounding", report.hands_played, report.rounding_loss)


if __name__ == "__main__":
    main()
