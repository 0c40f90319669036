import argparse
import asyncio
import logging

from autoplay.bots import STRATEGIES, get_strategy, seed_bots
from holdem.models import MAX_SEATS, TableConfig
from .server import TableHost


def main() -> None:
    parser = argparse.ArgumentParser(description="Local Hold'em table host (one player seat, house bots)")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--players", type=int, default=4, help=f"Seats including yours (2-{MAX_SEATS})")
    parser.add_argument("--starting-stack", type=int, default=1_000)
    parser.add_argument("--sb", type=int, default=10)
    parser.add_argument("--bb", type=int, default=20)
    parser.add_argument("--side-pots", action="store_true", help="Split all-in pots into side pots")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--strategy", choices=sorted(STRATEGIES), default="simple")
    parser.add_argument(
        "--think-delay-ms",
        type=int,
        default=1200,
        help="Cosmetic pause before each bot action (milliseconds)",
    )
    parser.add_argument(
        "--manual-hands",
        action="store_true",
        help="Wait for a next_hand message before dealing each hand",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = TableConfig(
        small_blind=args.sb,
        big_blind=args.bb,
        starting_stack=args.starting_stack,
        side_pots=args.side_pots,
        seed=args.seed,
        think_delay_ms=args.think_delay_ms,
    )
    seed_bots(args.seed)
    host = TableHost(
        config,
        players=args.players,
        strategy=get_strategy(args.strategy),
        manual_hands=args.manual_hands,
    )
    asyncio.run(host.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
