#!/usr/bin/env python3
"""
Purge readings older than the configured retention period
"""

import argparse
import sys
import os
from datetime import timedelta

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from devicewatch.core.config import settings
from devicewatch.core.logging import configure_logging
from devicewatch.database.connection import Database
from devicewatch.database.reading_store import ReadingStore
from devicewatch.utils.time import to_iso_utc, utc_now


def purge_readings(retention_days: int, device_id: str = None) -> int:
    """Delete readings captured before now minus ``retention_days``"""
    database = Database(settings.database_url, echo=settings.sql_echo)
    try:
        cutoff = to_iso_utc(utc_now() - timedelta(days=retention_days))
        return ReadingStore(database).purge_readings(cutoff, device_id=device_id)
    finally:
        database.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--days", type=int, default=settings.reading_retention_days,
                        help="Keep readings newer than this many days")
    parser.add_argument("--device", default=None, help="Only purge readings of this device")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level, settings.log_json)
    deleted = purge_readings(args.days, args.device)
    print(f"🧹 Deleted {deleted} readings older than {args.days} days")


if __name__ == "__main__":
    main()
