# -*- coding: utf-8 -*-
import asyncio
import argparse
import logging
import pathlib
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv
from playwright.async_api import Error as PlaywrightError, async_playwright

from gradewatch.display import display_grades
from gradewatch.models import GradeRecord
from gradewatch.portals import get_portal, LmsError
from gradewatch.settings import ConfigError, Settings, load_settings
from gradewatch.storage import StoreError, open_store
from gradewatch.work_flows.fetch_grades import fetch_student_grades
from gradewatch.work_flows.save_snapshot import save_snapshot
from utils.dates import utc_now

logger = logging.getLogger("gradewatch")


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s" if not debug else "%(asctime)s %(name)s %(levelname)s: %(message)s",
    )


async def run(settings: Settings, save: bool = True) -> List[GradeRecord]:
    """Pull grades once, persist the snapshot, return the records."""
    now = utc_now()
    async with async_playwright() as p:
        request = await p.request.new_context()
        try:
            Engine = get_portal(settings.lms)
            client = Engine(request, settings.canvas_domain, settings.canvas_token)
            store = open_store(settings, request) if save else None

            profile, records = await fetch_student_grades(client, settings, now)
            if store is not None:
                await save_snapshot(store, profile.name, records, now)
            return records
        finally:
            await request.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Pull current-term Canvas grades.")
    parser.add_argument("-c", "--config", type=pathlib.Path, help="Path to config.json.")
    parser.add_argument("-t", "--term", help="Grading term title to report on (overrides config).")
    parser.add_argument("--store", choices=["workers_kv", "sqlite"], help="Where to save the snapshot.")
    parser.add_argument("--db-path", type=pathlib.Path, help="SQLite file for --store sqlite.")
    parser.add_argument("--debug", action="store_true", default=None, help="Verbose logging.")
    parser.add_argument("--no-save", action="store_true", help="Skip saving the snapshot.")
    args = parser.parse_args(argv)

    load_dotenv(find_dotenv(usecwd=True))
    try:
        settings = load_settings(args.config).with_overrides(
            grading_term=args.term,
            store=args.store,
            db_path=args.db_path,
            debugging_mode=args.debug,
        )
        # KV credentials only matter when something is saved
        if args.no_save:
            settings = settings.with_overrides(store="sqlite")
        settings.validate()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.debugging_mode)
    try:
        grades = asyncio.run(run(settings, save=not args.no_save))
    except (LmsError, StoreError, PlaywrightError, ValueError) as e:
        print(f"An error occurred: {e}", file=sys.stderr)
        return 1
    logger.debug("Collected %d grade records", len(grades))

    display_grades(
        grades,
        settings.scale,
        term=settings.grading_term,
        colors=settings.colors,
        show_names=settings.name_all_results,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
