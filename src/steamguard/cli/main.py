"""
Command-line entry point.

``steamguard code <maFile>`` prints the current login code for a stored
credential record; ``steamguard time`` prints the server-aligned time and
the measured clock offset. ``--offline`` skips the server round-trip and
uses the local clock.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from ..api.client import SteamWebClient
from ..api.services import TwoFactorService
from ..core.clock import ClockAligner, FixedTimeSource, TimeSource
from ..core.codes import generate_code, seconds_until_next_code
from ..core.settings import Settings
from ..storage.serialization import deserialize_account


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="steamguard", description="Steam mobile authenticator")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="use the local clock instead of querying Steam's server time",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    code = commands.add_parser("code", help="print the current login code")
    code.add_argument("mafile", type=Path, help="path to a .maFile credential record")

    commands.add_parser("time", help="print the server-aligned time and clock offset")
    return parser


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    async with SteamWebClient(settings.http) as client:
        source: TimeSource
        if args.offline:
            source = FixedTimeSource()
        else:
            source = TwoFactorService(client)
        aligner = ClockAligner(
            source,
            realign_interval_seconds=settings.time.realign_interval_seconds,
            failure_backoff_seconds=settings.time.failure_backoff_seconds,
        )
        aligned_time = await aligner.get_aligned_time()

        if args.command == "time":
            print(f"{aligned_time} (offset {aligner.offset_seconds:+d}s)")
            return 0

        record = deserialize_account(await asyncio.to_thread(args.mafile.read_bytes))
        code = generate_code(record.shared_secret, aligned_time)
        if not code:
            print("Error: credential record has no shared secret", file=sys.stderr)
            return 1
        print(code)
        print(
            f"valid for {seconds_until_next_code(aligned_time)}s",
            file=sys.stderr,
        )
        return 0


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    try:
        return await _run(args, Settings())
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cli_main() -> int:
    """CLI main function for non-async entry."""
    return asyncio.run(main())


if __name__ == "__main__":
    sys.exit(cli_main())
