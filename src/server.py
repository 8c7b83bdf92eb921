"""Protean Engine runner for the medtrack domain.

Reads the events each committed Unit of Work stored and hands them to the
domain's event handlers, which is how patient notifications go out when
``event_processing`` is async (the default outside development and tests).

Usage:
    PROTEAN_ENV=production python src/server.py
    python src/server.py --test-mode    # Process what is pending, then exit
"""

import argparse

from protean.server.engine import Engine

from medtrack.domain import medtrack
from medtrack.utils.logging import configure_logging


def run(test_mode: bool = False) -> None:
    medtrack.init()
    Engine(medtrack, test_mode=test_mode).run()


def main():
    parser = argparse.ArgumentParser(description="MedTrack Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Run a few processing cycles and exit instead of running forever",
    )
    args = parser.parse_args()

    configure_logging()
    run(test_mode=args.test_mode)


if __name__ == "__main__":
    main()
