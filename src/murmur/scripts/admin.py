# src/murmur/scripts/admin.py
"""Administrative account operations that have no HTTP surface."""

from __future__ import annotations

import argparse
import logging
import sys

from murmur.core.settings import settings
from murmur.db.session import SessionLocal
from murmur.services import ReconciliationService, UserService


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Murmur account administration")
    sub = parser.add_subparsers(dest="command", required=True)

    deactivate = sub.add_parser("deactivate-user", help="Disable login for an account")
    deactivate.add_argument("user_id", type=int)

    delete = sub.add_parser(
        "delete-user",
        help="Hard-delete an account, then reconcile counters it leaves stale",
    )
    delete.add_argument("user_id", type=int)

    args = parser.parse_args(argv)
    logging.basicConfig(level=settings.log_level.upper())

    db = SessionLocal()
    try:
        users = UserService(db)
        if args.command == "deactivate-user":
            user = users.find_by_id(args.user_id)
            if user is None:
                print(f"[admin] user {args.user_id} not found", file=sys.stderr)
                return 1
            users.deactivate(user)
        else:
            if not users.delete(args.user_id):
                print(f"[admin] user {args.user_id} not found", file=sys.stderr)
                return 1
            report = ReconciliationService(db).reconcile()
            print(f"[admin] reconciled {report.total} counters")
        db.commit()
    finally:
        db.close()

    print(f"[admin] {args.command} {args.user_id}: done")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
