"""MedTrack database management CLI.

Creates and drops the relational schema for the medtrack domain. The
memory provider needs neither, so run these with PROTEAN_ENV set to an
environment backed by a SQL database.

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db   # Create all tables
    PROTEAN_ENV=production python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    """Create tables for every medtrack aggregate and entity."""
    from medtrack.domain import medtrack
    from medtrack.utils.db import setup_db

    print("Initializing medtrack domain...")
    medtrack.init()
    print("Creating medtrack database schema...")
    setup_db(medtrack)
    print("Done.")


def drop_database():
    from medtrack.domain import medtrack
    from medtrack.utils.db import drop_db

    print("Initializing medtrack domain...")
    medtrack.init()
    print("Dropping medtrack database schema...")
    drop_db(medtrack)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="MedTrack database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
