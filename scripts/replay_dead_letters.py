#!/usr/bin/env python3
"""
Replay dead-lettered work units onto the staging queue.

Work units land in staging_dead_letter when the upsert worker cannot
persist them. Once the cause is fixed (schema change, database back up),
this script re-submits them and removes the replayed entries.

Usage:
    python -m scripts.replay_dead_letters
    python -m scripts.replay_dead_letters --limit 500

Requirements:
    - Run from the repository root with the service environment (.env) loaded
    - Broker and database reachable with the configured settings
"""

import argparse
import sys

from src.clients.database import get_engine
from src.clients.queue import get_job_dispatcher
from src.exceptions import QueueSubmissionError
from src.services.dead_letter_service import replay_dead_letters


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Replay dead-lettered work units onto the staging queue",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=100,
        help="Maximum number of dead letters to replay (default: 100)",
    )
    args = parser.parse_args()

    dispatcher = get_job_dispatcher()
    try:
        result = replay_dead_letters(get_engine(), dispatcher, limit=args.limit)
    except QueueSubmissionError as e:
        print(f"Queue unavailable, stopping: {e}")
        sys.exit(1)

    print(f"Replayed {result.replayed} work unit(s) onto '{dispatcher.queue}'.")
    if result.skipped:
        print(f"Skipped {result.skipped} entry(ies) that are not valid work units.")


if __name__ == "__main__":
    main()
