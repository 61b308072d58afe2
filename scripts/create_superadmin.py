"""
Create the first superadmin from the command line.

Usage:
    python -m scripts.create_superadmin --email boss@academy.test --full-name "Head Office"

The password is prompted for unless --password is given.
"""
import argparse
import getpass
import sys

from database import get_db_context, init_db
from services import AcademyError, register_superadmin


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create the first superadmin")
    parser.add_argument("--email", required=True)
    parser.add_argument("--full-name", default=None)
    parser.add_argument("--password", default=None)
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")

    init_db()
    with get_db_context() as db:
        try:
            result = register_superadmin(db, args.full_name, args.email, password)
        except AcademyError as e:
            print(f"Error ({e.kind}): {e.message}", file=sys.stderr)
            return 1

    print("Created", result["user"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
