# src/murmur/scripts/reconcile.py
"""
Batch job that repairs cached counters.

Run periodically (or after administrative user deletion) to recompute:
1. followers_count / following_count from the follows table
2. murmurs_count from the author's visible root murmurs
3. likes_count / replies_count from likes and visible replies
"""

from __future__ import annotations

import argparse
import logging

from sqlalchemy.orm import Session

from murmur.core.settings import settings
from murmur.db.session import SessionLocal
from murmur.services.reconcile import ReconciliationReport, ReconciliationService

logger = logging.getLogger(__name__)


def run_reconciliation(db: Session, dry_run: bool = False) -> ReconciliationReport:
    """Recompute every counter; with ``dry_run`` the repairs are rolled back.

    Args:
        db: Database session
        dry_run: Report drift without persisting the fixes
    """
    report = ReconciliationService(db).reconcile()
    if dry_run:
        db.rollback()
    else:
        db.commit()
    return report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Recompute cached Murmur counters")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report drifted rows without writing the corrections.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level.upper())
    db = SessionLocal()
    try:
        report = run_reconciliation(db, dry_run=args.dry_run)
    finally:
        db.close()

    verb = "would repair" if args.dry_run else "repaired"
    print(
        f"[reconcile] {verb} {report.total} rows "
        f"(followers={report.followers_count}, following={report.following_count}, "
        f"murmurs={report.murmurs_count}, likes={report.likes_count}, "
        f"replies={report.replies_count})"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
