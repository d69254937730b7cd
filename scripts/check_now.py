"""Run one availability check by hand."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os

from dotenv import load_dotenv

from coffeewatch.config import load_settings
from coffeewatch.jobs.monitor import run_monitor


async def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--profile", default=None, help="deployment profile from profiles.yml")
    parser.add_argument("--dry-run", action="store_true", help="print the message instead of sending it")
    args = parser.parse_args()

    load_dotenv()
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    settings = load_settings(args.profile)
    result = await run_monitor(settings, dry_run=args.dry_run)
    print(result.reason)
    if result.message:
        print(result.message)


if __name__ == "__main__":
    asyncio.run(main())
