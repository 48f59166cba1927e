from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from swatchbook.adapters.sqlalchemy import shutdown
from swatchbook.app import match_or_create_texture, open_services, recover
from swatchbook.config import ConfigurationError, configure_logging
from swatchbook.payloads import TelemetrySummaryPayload

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from swatchbook.app import Services

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recover orphaned assets and match textures")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Root log level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    recover_cmd = subparsers.add_parser(
        "recover",
        help="Relink storage objects that no style or material references",
    )
    recover_cmd.add_argument(
        "--style-id",
        type=str,
        help="Limit the run to the folder of a single entity",
    )
    recover_cmd.add_argument(
        "--execute",
        action="store_true",
        help="Write the relinks (default is a dry run that only reports)",
    )

    match_cmd = subparsers.add_parser(
        "match",
        help="Link a texture name to the catalog, creating it when new",
    )
    match_cmd.add_argument("name", type=str, help="Texture name as entered or generated")
    match_cmd.add_argument(
        "--lang",
        type=str,
        required=True,
        help="Language tag of the name (e.g. he, en-US)",
    )

    return parser.parse_args(list(argv))


def _print_payload(payload: dict[str, object]) -> None:
    sys.stdout.write(json.dumps(payload, ensure_ascii=False, indent=2))
    sys.stdout.write("\n")


def _log_telemetry(services: Services) -> None:
    for kind, summary in services.telemetry.summary().items():
        payload = TelemetrySummaryPayload.from_summary(str(kind), summary)
        log.info(
            "telemetry %s: calls=%s, failures=%s, mean=%.0fms, tokens=%s/%s",
            payload.kind,
            payload.calls,
            payload.failures,
            payload.mean_duration_millis,
            payload.prompt_tokens,
            payload.output_tokens,
        )


async def _run_recover(args: argparse.Namespace) -> dict[str, object]:
    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    # first Ctrl+C finishes the objects in flight and reports what was done
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(SIGINT, cancel.set)
    try:
        async with open_services(storage=True) as services:
            return await recover(
                args.style_id,
                dry_run=not args.execute,
                services=services,
                cancel=cancel,
            )
    finally:
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(SIGINT)
        await shutdown()


async def _run_match(args: argparse.Namespace) -> dict[str, object]:
    try:
        async with open_services(model=True) as services:
            payload = await match_or_create_texture(args.name, args.lang, services=services)
            _log_telemetry(services)
            return payload
    finally:
        await shutdown()


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.getLevelNamesMapping()[parsed_args.log_level])

    try:
        if parsed_args.command == "recover":
            payload = asyncio.run(_run_recover(parsed_args))
        elif parsed_args.command == "match":
            payload = asyncio.run(_run_match(parsed_args))
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except (ConfigurationError, ValueError):
        log.exception("CLI validation error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)

    _print_payload(payload)
    if payload.get("success") is False:
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
