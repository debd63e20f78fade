"""
Run one record sync from the CLI.
"""

from __future__ import annotations

import argparse
import json

from app.logging_utils import configure_logging
from app.schemas.sync import SyncOutcomeResponse
from app.services.sync_service import get_record_sync_service
from app.sync.errors import SyncFailure
from db.session import SessionLocal


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Sync upstream records into the record store.")
    parser.add_argument(
        "--origin",
        dest="origin",
        default=None,
        help="Upstream origin, e.g. owner/repo. Defaults to SYNC_ORIGIN.",
    )
    parser.add_argument(
        "--page-size",
        dest="page_size",
        type=int,
        default=None,
        help="Max records to fetch. Defaults to SYNC_PAGE_SIZE.",
    )
    args = parser.parse_args(argv)

    configure_logging()
    service = get_record_sync_service()
    with SessionLocal() as db:
        try:
            outcome = service.run_sync(db=db, origin=args.origin, page_size=args.page_size)
        except SyncFailure as exc:
            payload = {
                "success": False,
                "stage": exc.stage,
                "data_fetched": exc.data_fetched,
                "fetched_count": exc.fetched_count,
                "error": str(exc),
            }
            print(json.dumps(payload, indent=2))
            return 1

    print(SyncOutcomeResponse.from_outcome(outcome).model_dump_json(indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
