"""
Scheduled job to track inventory investments.

Fetches the player's profile, diffs it against the last persisted
snapshot, updates the investment ledger, notifies the chat about changes
and persists the new state. Meant to be triggered by an external
scheduler; each invocation performs exactly one run.

Exit codes:
    0: run completed
    1: run failed (fetch, extraction, store or unexpected error)
    2: configuration missing or invalid, nothing was attempted
"""

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any

import httpx
from sqlalchemy.exc import SQLAlchemyError

from skyledger.clients.telegram import TelegramNotifier
from skyledger.config import Settings, load_settings
from skyledger.context import TrackerContext
from skyledger.db.store import LEDGER_DOCUMENT, PREVIOUS_SNAPSHOT_DOCUMENT
from skyledger.models.failure import ConfigurationError, TrackerError, UnhandledError
from skyledger.models.inventory import InvestmentLedger, ItemChange, ReconciliationResult
from skyledger.services.extractor import extract_inventory
from skyledger.services.notification_formatter import format_changes, format_failure
from skyledger.services.reconciler import reconcile
from skyledger.services.retry import RetryPolicy

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIGURATION_ERROR = 2

STAGE_FETCH = "profile fetch"
STAGE_EXTRACT = "inventory extraction"
STAGE_LOAD = "state load"
STAGE_RECONCILE = "reconciliation"
STAGE_NOTIFY = "notification"
STAGE_PERSIST = "persistence"


@dataclass
class RunReport:
    """Summary of one tracker run."""

    changes: list[ItemChange] = field(default_factory=list)
    dirty: bool = False
    ledger: InvestmentLedger = field(default_factory=dict)
    notified: bool = False
    persisted: bool = False


def should_notify(result: ReconciliationResult, notify_on: str) -> bool:
    """
    Decide whether a reconciliation warrants a chat message.

    "changes" requires at least one moved quantity. "dirty" follows the
    ledger dirty flag and may produce a header-only message.
    """
    if notify_on == "dirty":
        return result.dirty
    return bool(result.changes)


async def notify_failure(
    notifier: TelegramNotifier,
    stage: str,
    error: TrackerError,
    max_length: int,
) -> bool:
    """
    Best-effort failure report.

    Never raises, so the run error it reports is the one that propagates.
    """
    try:
        return await notifier.send(format_failure(stage, error.message, max_length))
    except Exception as e:
        logger.error("Could not report failure during %s: %s", stage, type(e).__name__)
        return False


async def run_tracker(context: TrackerContext, *, dry_run: bool = False) -> RunReport:
    """
    Perform one tracking run.

    Args:
        context: Collaborators for this run
        dry_run: Compute and log the result without notifying or persisting.
            The document table is still created if it is missing, but no
            document is written.

    Returns:
        RunReport describing what happened

    Raises:
        TrackerError: If any stage failed. The failure has already been
            reported to the chat on a best-effort basis.
    """
    settings = context.settings
    store = context.store
    stage = STAGE_FETCH

    try:
        raw_profile = await context.profiles.fetch_profile(settings.player_name)

        stage = STAGE_EXTRACT
        containers = extract_inventory(raw_profile)
        current = containers.merge(settings.merge_policy)
        logger.info(
            "Extracted %d distinct items (%d in inventory, %d in ender chest, %d in storage)",
            len(current),
            len(containers.inventory),
            len(containers.enderchest),
            len(containers.storage),
        )

        stage = STAGE_LOAD
        await store.ensure_schema()
        previous, ledger = await asyncio.gather(
            store.read(PREVIOUS_SNAPSHOT_DOCUMENT),
            store.read(LEDGER_DOCUMENT),
        )

        stage = STAGE_RECONCILE
        result = reconcile(current, previous, ledger)
        logger.info(
            "Reconciled: %d changes, ledger %s",
            len(result.changes),
            "updated" if result.dirty else "unchanged",
        )
        report = RunReport(changes=result.changes, dirty=result.dirty, ledger=result.ledger)

        if dry_run:
            for change in result.changes:
                logger.info(
                    "Dry run change: %s %d -> %d", change.name, change.previous, change.current
                )
            logger.info("Dry run: skipping notification and persistence")
            return report

        stage = STAGE_NOTIFY
        if should_notify(result, settings.notify_on):
            message = format_changes(
                settings.player_name, result.changes, settings.max_message_length
            )
            report.notified = await context.notifier.send(message)

        stage = STAGE_PERSIST
        await store.write_many(
            {PREVIOUS_SNAPSHOT_DOCUMENT: current, LEDGER_DOCUMENT: result.ledger}
        )
        report.persisted = True
        return report

    except Exception as e:
        error = e if isinstance(e, TrackerError) else UnhandledError(stage, e)
        logger.error("Error during %s: %s", stage, error.message)
        await notify_failure(context.notifier, stage, error, settings.max_message_length)
        if error is e:
            raise
        raise error from e


# --- Last line of defense ---


async def send_crash_report(settings: Settings, message: str) -> bool:
    """Send a single-attempt notification on a fresh HTTP client."""
    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        notifier = TelegramNotifier(
            client,
            bot_token=settings.bot_token,
            chat_id=settings.chat_id,
            retry_policy=RetryPolicy(attempts=1),
            api_url=settings.telegram_api_url,
            parse_mode=settings.telegram_parse_mode,
        )
        return await notifier.send(message)


def _terminate(code: int) -> None:
    logging.shutdown()
    os._exit(code)


def make_excepthook(
    settings: Settings,
    terminate: Callable[[int], None] = _terminate,
) -> Callable[[type[BaseException], BaseException, TracebackType | None], None]:
    """Build a sys.excepthook that reports the crash once, then terminates."""

    def excepthook(
        exc_type: type[BaseException],
        exc: BaseException,
        tb: TracebackType | None,
    ) -> None:
        logger.critical("Uncaught exception", exc_info=(exc_type, exc, tb))
        message = format_failure(
            "uncaught exception", f"{exc_type.__name__}: {exc}", settings.max_message_length
        )
        try:
            asyncio.run(send_crash_report(settings, message))
        finally:
            terminate(EXIT_FAILURE)

    return excepthook


def make_loop_exception_handler(
    settings: Settings,
    terminate: Callable[[int], None] = _terminate,
) -> Callable[[asyncio.AbstractEventLoop, dict[str, Any]], None]:
    """Build an event loop exception handler for errors nobody awaited."""

    def handler(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        exc = context.get("exception")
        detail = f"{type(exc).__name__}: {exc}" if exc else str(context.get("message"))
        logger.critical("Unhandled asynchronous error: %s", detail, exc_info=exc)
        message = format_failure("asynchronous task", detail, settings.max_message_length)
        task = loop.create_task(send_crash_report(settings, message))
        task.add_done_callback(lambda _: terminate(EXIT_FAILURE))

    return handler


def install_crash_handlers(
    settings: Settings,
    loop: asyncio.AbstractEventLoop | None = None,
) -> None:
    """Install the uncaught-exception hook and, if given, the loop handler."""
    sys.excepthook = make_excepthook(settings)
    if loop is not None:
        loop.set_exception_handler(make_loop_exception_handler(settings))


async def run_job(
    settings: Settings,
    *,
    dry_run: bool = False,
    crash_handlers: bool = True,
) -> int:
    """Open a tracker context, perform one run and return the exit code."""
    if crash_handlers:
        asyncio.get_running_loop().set_exception_handler(make_loop_exception_handler(settings))

    try:
        async with TrackerContext.open(settings) as context:
            try:
                await run_tracker(context, dry_run=dry_run)
            except TrackerError:
                return EXIT_FAILURE
    except (SQLAlchemyError, ImportError) as e:
        logger.error("Invalid document store configuration: %s", e)
        return EXIT_CONFIGURATION_ERROR

    logger.info("Run completed successfully")
    return EXIT_SUCCESS


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track inventory investments for one player")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute changes without notifying or writing documents",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for a single tracking run."""
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error("%s", e.message)
        return EXIT_CONFIGURATION_ERROR

    install_crash_handlers(settings)
    return asyncio.run(run_job(settings, dry_run=args.dry_run))


if __name__ == "__main__":
    sys.exit(main())
