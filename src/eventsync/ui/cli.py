from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

import uvicorn
from dotenv import load_dotenv

from eventsync.adapters.crm import CrmClient
from eventsync.app import reconcile_event
from eventsync.config import (
    ConfigurationError,
    configure_logging,
    get_crm_config,
    get_sync_settings,
)
from eventsync.domain.model import ChangeType
from eventsync.ui.webhook import create_app

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise CRM events into Webflow")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Reconcile a single event")
    sync.add_argument("event_id", type=str, help="CRM id of the event")
    sync.add_argument(
        "--change-type",
        type=str,
        choices=[member.value for member in ChangeType],
        default=ChangeType.UPDATE.value,
        help="Change-type hint, as sent by the CRM (default: %(default)s)",
    )

    serve = subparsers.add_parser("serve", help="Run the change-signal ingress")
    serve.add_argument("--host", type=str, default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    subparsers.add_parser("whoami", help="Check connectivity to the CRM")

    return parser.parse_args(list(argv))


async def _who_am_i() -> object:
    async with CrmClient(get_crm_config()) as crm:
        return await crm.who_am_i()


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    try:
        if parsed_args.command == "sync":
            settings = get_sync_settings()
        elif parsed_args.command == "serve":
            app = create_app()
        else:
            get_crm_config()
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)

    try:
        if parsed_args.command == "sync":
            result = asyncio.run(
                reconcile_event(
                    parsed_args.event_id,
                    ChangeType(parsed_args.change_type),
                    settings=settings,
                )
            )
            log.info(
                "Event %s: %s (CMS item %s)",
                result.event_id,
                result.action,
                result.target_item_id,
            )
        elif parsed_args.command == "serve":
            uvicorn.run(app, host=parsed_args.host, port=parsed_args.port)
        elif parsed_args.command == "whoami":
            identity = asyncio.run(_who_am_i())
            log.info("Connected to CRM as %s", identity)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
