"""
Issue (or revoke) a floor-user session token.

The printed token goes into the client as ``Authorization: Bearer <token>``;
only its sha256 hash is stored.

Usage:
    python -m app.create_session --name 熊沢                    # 24h (SESSION_TTL_HOURS)
    python -m app.create_session --name 熊沢 --email a@b.jp --ttl-hours 720
    python -m app.create_session --revoke <token>
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.core.auth import open_session, revoke_session
from app.core.errors import AuthError

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Issue or revoke a stock-desk session token")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--name", help="表示名（依頼者名として記録される）")
    group.add_argument("--revoke", metavar="TOKEN", help="Revoke an issued token")
    parser.add_argument("--email", help="Contact e-mail stored with the session")
    parser.add_argument("--ttl-hours", type=int, help="Lifetime in hours (default: SESSION_TTL_HOURS)")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None, *, engine: Optional[Engine] = None) -> int:
    args = _parse_args(argv)
    if args.ttl_hours is not None and args.ttl_hours <= 0:
        print("ERROR: --ttl-hours must be positive", file=sys.stderr)
        return 2

    if engine is None:
        from app.core.database import engine

    with Session(engine) as session:
        try:
            if args.revoke:
                revoke_session(session, args.revoke)
                print("revoked")
                return 0
            token = open_session(
                session, args.name, email=args.email, ttl_hours=args.ttl_hours
            )
        except AuthError as exc:
            print(f"ERROR: {exc.message}", file=sys.stderr)
            return 1

    print(token)
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sys.exit(main())
