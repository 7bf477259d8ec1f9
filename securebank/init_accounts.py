"""Create an accounts file holding the initial accounts."""

from __future__ import annotations

import argparse
import sys

from .files import dump_accounts
from .models import initial_accounts


def create_accounts_file(path="cuentas.dat") -> int:
    """Write the initial accounts to ``path`` and return how many were written."""
    accounts = initial_accounts()
    dump_accounts(path, accounts)
    return len(accounts)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create the initial accounts file.")
    parser.add_argument("path", nargs="?", default="cuentas.dat")
    args = parser.parse_args(argv)
    try:
        create_accounts_file(args.path)
    except OSError as exc:
        print(f"{args.path}: {exc}", file=sys.stderr)
        return 1
    print(f"Archivo {args.path} creado con la estructura nueva.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())