# src/civictrack/scripts/admins.py
"""Grant or revoke administrator rights from the command line."""

from __future__ import annotations

import argparse
import sys

from civictrack.core.errors import NotFound
from civictrack.db.session import SessionLocal
from civictrack.services.user_service import set_admin


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Manage CivicTrack administrators")
    parser.add_argument("action", choices=["grant", "revoke"])
    parser.add_argument("user_id", help="Id of a user who has signed in at least once")
    args = parser.parse_args(argv)

    db = SessionLocal()
    try:
        set_admin(db, args.user_id, args.action == "grant")
    except NotFound:
        print(f"No user with id {args.user_id!r}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(f"{args.action} admin: {args.user_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
