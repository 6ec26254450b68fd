"""Storefront management CLI.

Database setup plus the jobs an external scheduler triggers.

Usage:
    python src/manage.py setup-db            # Create indexes
    python src/manage.py drop-db             # Drop the database
    python src/manage.py sms-tick            # Process due SMS queue entries once
    python src/manage.py recalc-popularity   # Rebuild product counters from events
    python src/manage.py run-notifications   # Run notification tasks left submitted
"""

import argparse
import json
import sys

from shared.logging import configure_logging


def setup_database():
    from shared.database import ensure_indexes

    ensure_indexes()
    print("Indexes ready.")


def drop_database():
    from shared.config import get_settings
    from shared.database import drop_database as drop

    settings = get_settings()
    if settings.is_production:
        print("Refusing to drop the production database.")
        sys.exit(1)
    drop()
    print(f"Dropped database {settings.mongodb_database}.")


def sms_tick(batch_size=None):
    from notifications.sms.queue import SMSQueue

    print(json.dumps(SMSQueue().tick(batch_size=batch_size)))


def recalc_popularity():
    from catalogue.product.analytics import recalculate_popularity

    print(f"Updated {recalculate_popularity()} products.")


def run_notifications(limit):
    from notifications.notification.dispatch import run_submitted_tasks

    print(f"Ran {run_submitted_tasks(limit=limit)} notification tasks.")


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create collection indexes")
    subparsers.add_parser("drop-db", help="Drop the storefront database (not in production)")

    tick_parser = subparsers.add_parser("sms-tick", help="Process due SMS queue entries once")
    tick_parser.add_argument("--batch-size", type=int, default=None)

    subparsers.add_parser("recalc-popularity", help="Rebuild product popularity from the event log")

    notify_parser = subparsers.add_parser("run-notifications", help="Run notification tasks still submitted")
    notify_parser.add_argument("--limit", type=int, default=100)

    args = parser.parse_args()
    configure_logging()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "sms-tick":
        sms_tick(args.batch_size)
    elif args.command == "recalc-popularity":
        recalc_popularity()
    elif args.command == "run-notifications":
        run_notifications(args.limit)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
