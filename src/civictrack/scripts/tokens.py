# src/civictrack/scripts/tokens.py
"""
Mint a bearer token for local development.

Production tokens come from the identity provider; this helper signs a token
with the shared secret so the API can be exercised without one, e.g.::

    python -m civictrack.scripts.tokens user-123 --email jo@example.org
"""

from __future__ import annotations

import argparse

from civictrack.core.security import create_access_token


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mint a CivicTrack access token")
    parser.add_argument("subject", help="User id placed in the 'sub' claim")
    parser.add_argument("--email")
    parser.add_argument("--first-name")
    parser.add_argument("--last-name")
    return parser


def main(argv: list[str] | None = None) -> str:
    args = build_parser().parse_args(argv)
    claims = {
        key: value
        for key, value in {
            "email": args.email,
            "first_name": args.first_name,
            "last_name": args.last_name,
        }.items()
        if value is not None
    }
    token = create_access_token(args.subject, claims)
    print(token)
    return token


if __name__ == "__main__":
    main()
