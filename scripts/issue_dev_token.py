"""Issue a signed bearer token for local development.

Usage:
    python scripts/issue_dev_token.py --email jane@example.com --name "Jane Doe"
"""
import argparse
import sys
from datetime import timedelta
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from timetracker.utils.auth import create_access_token


def build_claims(args: argparse.Namespace) -> dict:
    """Collect the identity claims given on the command line."""
    claims = {"email": args.email, "sub": args.subject or args.email}
    if args.name:
        claims["name"] = args.name
    if args.given_name:
        claims["given_name"] = args.given_name
    if args.family_name:
        claims["family_name"] = args.family_name
    return claims


def main() -> None:
    parser = argparse.ArgumentParser(description="Issue a development JWT")
    parser.add_argument("--email", required=True, help="Email claim")
    parser.add_argument("--name", help="Display name claim")
    parser.add_argument("--given-name", help="Given name claim")
    parser.add_argument("--family-name", help="Family name claim")
    parser.add_argument("--subject", help="Subject id (defaults to the email)")
    parser.add_argument("--minutes", type=int, default=None, help="Lifetime in minutes")
    args = parser.parse_args()

    expires = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_access_token(build_claims(args), expires_delta=expires))


if __name__ == "__main__":
    main()
