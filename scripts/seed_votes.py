#!/usr/bin/env python3
"""
Seed, clear or inspect the votes table.

Usage:
    python scripts/seed_votes.py up       # insert seed votes (skips if non-empty)
    python scripts/seed_votes.py down     # delete every vote
    python scripts/seed_votes.py reset    # down + up
    python scripts/seed_votes.py stats    # totals per country

Options:
    --database-url URL   Override DATABASE_URL
    -h, --help           Show this help message
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path for countryvotes.* imports
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from countryvotes.db.engine import close_db, create_schema, get_async_session, init_db
from countryvotes.db.seed import clear_votes, reset_votes, seed_votes, vote_stats
from countryvotes.logging_config import setup_logging
from countryvotes.settings import get_settings

logger = logging.getLogger("seed_votes")

_COMMANDS = ("up", "down", "reset", "stats")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Manage development vote data.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("command", choices=_COMMANDS, help="Action to perform")
    parser.add_argument(
        "--database-url",
        default=None,
        help="Database URL (default: DATABASE_URL / settings)",
    )
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace) -> int:
    init_db(args.database_url)
    try:
        await create_schema()
        async for session in get_async_session():
            if args.command == "up":
                inserted = await seed_votes(session)
                print(f"Seeded {inserted} votes")
            elif args.command == "down":
                deleted = await clear_votes(session)
                print(f"Deleted {deleted} votes")
            elif args.command == "reset":
                inserted = await reset_votes(session)
                print(f"Reset complete, seeded {inserted} votes")
            else:
                total, breakdown = await vote_stats(session)
                print(f"Total votes: {total}")
                for row in breakdown:
                    print(f"  {row.country:<3} {row.votes}")
        return 0
    except Exception:
        logger.exception("Seeder failed")
        return 1
    finally:
        await close_db()


def main(argv: list[str] | None = None) -> None:
    """Parse args and run the selected command."""
    args = _parse_args(argv)
    settings = get_settings()
    setup_logging(level=settings.log_level, json_format=settings.log_json)
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
