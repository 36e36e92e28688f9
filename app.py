"""Command-line entry point for generating an NSW Explorer journey."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from dotenv import load_dotenv

from nsw_explorer.core.interests import INTEREST_LABELS
from nsw_explorer.core.places_api import GooglePlacesLookup
from nsw_explorer.core.places_stub import StubPlacesLookup
from nsw_explorer.workflows import JourneyGenerationError, JourneyGenerator


def configure(verbose: bool = False) -> None:
    """Load environment variables and configure logging."""

    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a journey around Sydney from your interests.")
    parser.add_argument(
        "interests",
        nargs="*",
        help=f"Interest labels, e.g. {', '.join(repr(label) for label in INTEREST_LABELS[:3])}",
    )
    parser.add_argument("--days", type=int, default=1, help="Trip length in days")
    parser.add_argument("--offline", action="store_true", help="Use built-in sample places instead of Google")
    parser.add_argument("--timeout", type=float, default=None, help="Per-interest lookup timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    configure(args.verbose)

    lookup = StubPlacesLookup() if args.offline else GooglePlacesLookup()
    generator = JourneyGenerator(lookup, lookup_timeout=args.timeout)
    try:
        itinerary = asyncio.run(generator.generate(args.interests, duration_days=args.days))
    except JourneyGenerationError as exc:
        print(f"{exc}. Please try again.", file=sys.stderr)
        return 1

    print(itinerary.model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
