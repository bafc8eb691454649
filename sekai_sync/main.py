"""
Sekai Sync - Application Entrypoint

Configures structlog, opens the store, applies the schema and performs one
sync run. Exit status: 0 on success, 1 on a fatal error, 130 when
interrupted (SIGINT or SIGTERM).

Run via:
    python -m sekai_sync.main
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

import structlog

from sekai_sync.config import settings
from sekai_sync.db import create_db_engine, migrate
from sekai_sync.pipeline.sync import run_sync

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_INTERRUPTED = 130


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def _configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    # stdlib logging for third-party libraries (httpx, sqlalchemy)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


async def main() -> int:
    """
    Run one sync and return the process exit status.

    Execution order:
    1. Configure logging (structlog JSON)
    2. Create async database engine and session factory
    3. Apply schema (idempotent)
    4. fetch -> upsert -> assets
    """
    _configure_logging(log_level=settings.LOG_LEVEL)
    logger = structlog.get_logger(__name__)

    logger.info(
        "sekai_sync_start",
        download_assets=settings.DOWNLOAD_ASSETS,
        image_repo_dir=settings.IMAGE_REPO_DIR,
        max_concurrency=settings.MAX_CONCURRENCY,
    )

    try:
        engine, session_factory = create_db_engine()
    except Exception as e:
        logger.error("sync_fatal", stage="db_open", error=str(e), error_type=type(e).__name__)
        return EXIT_FATAL

    try:
        await migrate(engine)
        report = await run_sync(session_factory)
    except asyncio.CancelledError:
        logger.warning("sync_interrupted")
        raise
    except Exception as e:
        logger.error("sync_fatal", error=str(e), error_type=type(e).__name__)
        return EXIT_FATAL
    finally:
        await engine.dispose()

    logger.info("done", **report.model_dump(exclude={"assets"}))
    return EXIT_OK


async def _main_until_signalled() -> int:
    """
    Run main() with SIGTERM cancelling it the same way Ctrl-C does.

    Cancellation unwinds through main() (engine disposed, sync_interrupted
    logged) and maps to EXIT_INTERRUPTED.
    """
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    assert task is not None

    handler_installed = True
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except NotImplementedError:
        # Windows event loops do not support add_signal_handler
        handler_installed = False
        structlog.get_logger(__name__).warning("signal_handlers_not_supported_on_platform")

    try:
        return await main()
    except asyncio.CancelledError:
        return EXIT_INTERRUPTED
    finally:
        if handler_installed:
            loop.remove_signal_handler(signal.SIGTERM)


def run() -> None:
    """Console-script entry."""
    try:
        code = asyncio.run(_main_until_signalled())
    except KeyboardInterrupt:
        code = EXIT_INTERRUPTED
    sys.exit(code)


# ---------------------------------------------------------------------------
# CLI Entry
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    run()
