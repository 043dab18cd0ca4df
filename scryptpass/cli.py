"""Command line interface for scryptpass."""

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from scryptpass import __description__, __version__
from scryptpass.config import options_from_env
from scryptpass.config_loader import load_config
from scryptpass.engine import get_hasher
from scryptpass.exceptions import RecordError, ScryptPassError
from scryptpass.logging_setup import setup_logging
from scryptpass.options import normalize, reconfigure

logger = logging.getLogger("scryptpass")


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="Path to a YAML options file")
    common.add_argument("-N", "--cost", type=int, help="CPU/memory cost")
    common.add_argument("-r", "--block-size", type=int, help="Block size")
    common.add_argument("-p", "--parallelization", type=int, help="Parallelization")
    common.add_argument("--hash-length", type=int, help="Derived key length in bytes")
    common.add_argument("--salt-length", type=int, help="Salt length in bytes")
    common.add_argument("--max-memory", type=int, help="Memory ceiling in bytes")
    common.add_argument("--pepper", help="Secret appended to the password")
    common.add_argument(
        "--strict", action="store_true", default=None,
        help="Require records to match the current options exactly",
    )
    common.add_argument("--phc", action="store_true", help="Emit $scrypt$ PHC records")
    common.add_argument("--log-level", default="WARNING", help="Log level")

    parser = argparse.ArgumentParser(prog="scryptpass", description=__description__)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    hash_cmd = sub.add_parser("hash", parents=[common], help="Hash a password")
    hash_cmd.add_argument("--password", help="Password (prompted when omitted)")

    verify_cmd = sub.add_parser("verify", parents=[common], help="Check a password against a record")
    verify_cmd.add_argument("record", help="Stored hash record")
    verify_cmd.add_argument("--password", help="Password (prompted when omitted)")

    rehash_cmd = sub.add_parser(
        "needs-rehash", parents=[common],
        help="Exit 0 if the record should be reissued under the current options",
    )
    rehash_cmd.add_argument("record", help="Stored hash record")

    inspect_cmd = sub.add_parser("inspect", parents=[common], help="Show the fields of a record")
    inspect_cmd.add_argument("record", help="Stored hash record")

    return parser


def _flag_overrides(args: argparse.Namespace) -> dict:
    """Options given explicitly on the command line."""
    overrides = {}
    for name in ("cost", "block_size", "parallelization", "hash_length",
                 "salt_length", "max_memory", "pepper", "strict"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.phc:
        overrides["record_format"] = "phc"
    return overrides


def _read_password(args: argparse.Namespace) -> str:
    if args.password is not None:
        return args.password
    return getpass.getpass("Password: ")


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not logger.handlers:
        setup_logging(level=args.log_level)

    try:
        # Later sources take precedence: file, then env, then flags
        overrides = {
            **normalize(load_config(args.config)),
            **normalize(options_from_env()),
            **_flag_overrides(args),
        }
        if overrides:
            reconfigure(overrides)

        hasher = get_hasher()

        if args.command == "hash":
            print(hasher.compute_hash(_read_password(args)))
            return 0

        if args.command == "verify":
            matched = hasher.verify(_read_password(args), args.record)
            print("match" if matched else "no match")
            return 0 if matched else 1

        if args.command == "needs-rehash":
            stale = hasher.needs_rehash(args.record)
            print("yes" if stale else "no")
            return 0 if stale else 1

        # inspect
        record = hasher.parse(args.record)
        print(f"format: {record.record_format}")
        print(f"cost: {record.cost}")
        print(f"block_size: {record.block_size}")
        print(f"parallelization: {record.parallelization}")
        print(f"hash_length: {record.hash_length}")
        print(f"salt_length: {record.salt_length}")
        return 0

    except RecordError as e:
        print(f"Invalid record: {e}", file=sys.stderr)
        return 2
    except ScryptPassError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
