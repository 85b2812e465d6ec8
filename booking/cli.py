"""`booking` console script: inspect and create bookings from a terminal."""
import argparse
import asyncio
import logging
import sys

from booking.config import Settings
from booking.results import Result
from booking.store import BookingStore, build_store

logger = logging.getLogger(__name__)


def _field(value: str) -> tuple[str, str]:
    key, sep, val = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got {value!r}")
    return key, val


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="booking", description="HappyVille booking store")
    sub = parser.add_subparsers(dest="command", required=True)

    availability = sub.add_parser("availability", help="Show slot availability for a date")
    availability.add_argument("date", help="Date (YYYY-MM-DD)")

    bookings = sub.add_parser("bookings", help="List bookings, newest first")
    bookings.add_argument("--date", help="Only bookings on this date (YYYY-MM-DD)")

    sub.add_parser("activities", help="List activities")

    book = sub.add_parser("book", help="Create a pending booking")
    book.add_argument("--date", required=True, help="Date (YYYY-MM-DD)")
    book.add_argument("--time", required=True, help="Slot (HH:00)")
    book.add_argument("--kids", type=int, default=0)
    book.add_argument("--adults", type=int, default=0)
    book.add_argument(
        "--field", type=_field, action="append", default=[], help="Extra key=value field"
    )
    return parser


async def run(store: BookingStore, args: argparse.Namespace) -> Result:
    if args.command == "availability":
        return await store.get_availability(args.date)
    if args.command == "bookings":
        if args.date:
            return await store.get_bookings_by_date(args.date)
        return await store.get_all_bookings()
    if args.command == "activities":
        return await store.get_activities()
    if args.command == "book":
        data = dict(args.field)
        data.update(date=args.date, time=args.time, kids=args.kids, adults=args.adults)
        return await store.create_booking(data)
    raise ValueError(f"Unknown command {args.command}")


async def run_and_close(store: BookingStore, args: argparse.Namespace) -> Result:
    try:
        return await run(store, args)
    finally:
        await store.aclose()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    store = build_store(settings)
    result = asyncio.run(run_and_close(store, args))
    print(result.model_dump_json(indent=2, by_alias=True))
    if not result:
        logger.error("%s failed: %s", args.command, result.error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
