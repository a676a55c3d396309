"""Command-line interface for otp-provider."""

import argparse
import logging
import sys
from typing import List, Optional

from otp_provider import base32
from otp_provider.accounts import Account, AccountDb, OtpType, check_counter
from otp_provider.config import load_settings
from otp_provider.exceptions import OtpError
from otp_provider.provider import OtpProvider
from otp_provider.totp import TotpClock


ACCOUNT_NAME = "any"


def counter_value(value: str) -> int:
    """Parse a stored HOTP counter, an unsigned 64-bit integer."""
    try:
        counter = int(value)
        check_counter(counter)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid counter: {value!r}") from e
    return counter


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="otp-provider",
        description="HOTP/TOTP one-time passcode generator",
    )
    parser.add_argument(
        "secret",
        help="Base32 encoded shared secret",
    )
    parser.add_argument(
        "--hotp",
        action="store_true",
        help="Generate a counter-based code instead of a time-based one",
    )
    parser.add_argument(
        "--counter",
        "-c",
        type=counter_value,
        default=0,
        help="Stored HOTP counter; the code uses counter + 1 (default: 0)",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Treat the secret as a plain ASCII key instead of Base32",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def code_command(args: argparse.Namespace, time_correction_minutes: int = 0) -> int:
    """Handle code generation for a single throwaway account."""
    secret = args.secret
    if args.raw:
        secret = base32.encode(secret.encode("ascii"))

    account_db = AccountDb()
    account_db.add(
        Account(
            name=ACCOUNT_NAME,
            secret=secret,
            type=OtpType.HOTP if args.hotp else OtpType.TOTP,
            counter=args.counter,
        )
    )
    provider = OtpProvider(account_db, TotpClock(time_correction_minutes))

    try:
        code = provider.next_code(ACCOUNT_NAME)
    except (OtpError, ValueError) as e:
        print(f"✗ Failed to generate code: {e}", file=sys.stderr)
        return 1

    print(code)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
        logging.basicConfig(
            level=logging.DEBUG if args.verbose else settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1

    if args.raw and not args.secret.isascii():
        print("✗ A raw secret must be ASCII", file=sys.stderr)
        return 1

    return code_command(args, settings.time_correction_minutes)


if __name__ == "__main__":
    sys.exit(main())
