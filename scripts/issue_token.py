#!/usr/bin/env python3
"""
CLI utility to issue a bearer token for local development.

Uses JWT_SECRET, JWT_ISSUER, JWT_AUDIENCE and JWT_ROLE from the environment
(or .env) unless overridden.

Usage:
    JWT_SECRET=dev-secret uv run scripts/issue_token.py user-123 --email me@example.com
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tunevault_core.auth.credentials import create_access_token


def main(argv=None):
    parser = argparse.ArgumentParser(description="Issue a development bearer token")
    parser.add_argument("subject", help="Value for the 'sub' claim")
    parser.add_argument("--email", default=None, help="Optional 'email' claim")
    parser.add_argument("--role", default=None, help="Override settings.JWT_ROLE")
    parser.add_argument("--issuer", default=None, help="Override settings.JWT_ISSUER")
    parser.add_argument("--audience", default=None, help="Override settings.JWT_AUDIENCE")
    parser.add_argument(
        "--ttl",
        type=int,
        default=None,
        help="Lifetime in seconds (defaults to settings.JWT_ACCESS_TTL)",
    )
    parser.add_argument("--secret", default=None, help="Override settings.JWT_SECRET")
    args = parser.parse_args(argv)

    token = create_access_token(
        args.subject,
        secret=args.secret,
        email=args.email,
        role=args.role,
        issuer=args.issuer,
        audience=args.audience,
        ttl_seconds=args.ttl,
    )
    print(token)


if __name__ == "__main__":
    main()
