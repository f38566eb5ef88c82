"""
init_db.py - create or rebuild the to-do API tables.

Modes:
- python init_db.py --create    create MISSING tables, existing data is kept
- python init_db.py --reset     drop users/tasks/refresh_tokens and create them again (all data is lost)

Works with SQLite and PostgreSQL alike.
"""

import argparse

from app import create_app
from extensions import db

import models  # noqa: F401  (tables must be registered before create_all)


def drop_tables():
    """Drop every table of the API; dependants go first."""
    db.drop_all()
    db.session.commit()


def create_missing_tables():
    """Create tables for the current models without altering existing ones."""
    db.create_all()
    db.session.commit()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Init to-do API tables")
    grp = parser.add_mutually_exclusive_group(required=True)
    grp.add_argument("--create", action="store_true", help="create missing tables (nothing is dropped)")
    grp.add_argument("--reset", action="store_true", help="drop the tables and create them again (data is lost)")

    args = parser.parse_args(argv)

    app = create_app()
    with app.app_context():
        if args.reset:
            print("-> Dropping tables ...")
            drop_tables()
            print("-> Creating tables ...")
            create_missing_tables()
            print("Done: tables recreated from scratch.")
        elif args.create:
            print("-> Creating missing tables ...")
            create_missing_tables()
            print("Done: missing tables created, existing ones left untouched.")


if __name__ == "__main__":
    main()
