"""Run the attendance reminder sweep once; meant for cron, e.g. ``30 10 * * *``."""

from __future__ import annotations

import argparse
import importlib
import logging

from dotenv import load_dotenv

from config import get_settings_module

from hr_records.common.datetime_utils import parse_day
from hr_records.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--date", help="Day to check (YYYY-MM-DD); defaults to today")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO))

    container = build_container(db_config=dict(settings.DB_CONFIG), settings=settings)
    result = container.reminder_service.sweep(day=parse_day(args.date) if args.date else None)
    print(f"OK: reminders {result.to_dict()}")


if __name__ == "__main__":
    main()
