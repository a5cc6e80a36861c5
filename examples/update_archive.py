#!/usr/bin/env python3
"""
examples/update_archive.py

Fetches recent FUELINST data from the Elexon Insights API (no API key
required) and folds it into the local FUELINST archive.

Usage:
  python examples/update_archive.py --hours 24
  python examples/update_archive.py --csv-url https://example.org/FUELINST.csv
"""

import argparse
import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pandas as pd

from fuelinst import ArchiveConfig, ArchiveStore, ingest_legacy_csv, ingest_stream_json
from fuelinst.frame import rows_to_frame
from fuelinst.sources import ElexonFuelinstSource

logger = logging.getLogger("update_archive")


def main(args):
    config = ArchiveConfig.from_env()
    if args.archive:
        config = replace(config, archive_path=Path(args.archive))

    store = ArchiveStore(config.archive_path)
    source = ElexonFuelinstSource()

    if args.csv_url:
        report = ingest_legacy_csv(store, source.fetch_legacy_csv(args.csv_url), config=config)
    else:
        end = datetime.now(timezone.utc)
        start = end - timedelta(hours=args.hours)
        report = ingest_stream_json(store, source.fetch_stream(start, end), config=config)

    logger.info("Update summary: %s", report.to_dict())

    df = rows_to_frame(store.load(), config.template)
    if not df.empty:
        with pd.option_context("display.max_columns", 12, "display.width", 160):
            print(df.tail(args.show))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Update the local FUELINST archive")
    parser.add_argument("--hours", type=int, default=24, help="Hours of stream data to fetch")
    parser.add_argument("--csv-url", default=None, help="Fetch a legacy CSV envelope instead")
    parser.add_argument("--archive", default=None, help="Archive path (overrides FUELINST_ARCHIVE_PATH)")
    parser.add_argument("--show", type=int, default=5, help="Newest intervals to print")
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    main(parser.parse_args())
