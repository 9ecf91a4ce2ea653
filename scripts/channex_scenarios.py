import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import json
import os
from datetime import date

import structlog

from channel_sync.channex.client import ChannexClient
from channel_sync.channex.scenarios import SCENARIOS, discover_certification_ids, run_scenario
from channel_sync.logging_config import setup_logging

setup_logging()
logger = structlog.get_logger(__name__)


def main() -> None:
    """
    Run Channex certification scenarios against the staging test property.

    The API key comes from --api-key or CHANNEX_API_KEY. With --ids only the
    property, room type and rate plan ids to enter on the certification form
    are printed.
    """
    parser = argparse.ArgumentParser(description=main.__doc__)
    parser.add_argument(
        "scenarios", nargs="*", help=f"any of: {', '.join(SCENARIOS)}; default all"
    )
    parser.add_argument("--api-key", default=os.getenv("CHANNEX_API_KEY"))
    parser.add_argument("--start", type=date.fromisoformat, default=None)
    parser.add_argument("--ids", action="store_true")
    args = parser.parse_args()

    if not args.api_key:
        parser.error("--api-key or CHANNEX_API_KEY is required")
    unknown = [name for name in args.scenarios if name not in SCENARIOS]
    if unknown:
        parser.error(f"unknown scenario(s): {', '.join(unknown)}")

    client = ChannexClient(args.api_key)
    ids = discover_certification_ids(client)

    if args.ids:
        print(f"Property ID:                  {ids.property_id}")
        print(f"Twin Room ID:                 {ids.room_type_id}")
        print(f"Twin Best Available Rate ID:  {ids.rate_plan_id}")
        print(f"Twin Bed & Breakfast Rate ID: {ids.second_rate_plan_id or 'NOT FOUND'}")
        print(f"Double Room ID:               {ids.double_room_type_id or 'NOT FOUND'}")
        return

    names = args.scenarios or list(SCENARIOS)
    for name in names:
        try:
            result = run_scenario(client, name, ids=ids, start=args.start)
        except Exception:
            logger.exception("channex_scenario_cli_failed", scenario=name)
            raise
        print(json.dumps({"scenario": name, "result": result}, default=str, indent=2))


if __name__ == "__main__":
    main()
