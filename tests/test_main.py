"""
Tests for the process entrypoint (sekai_sync/main.py).
"""

from __future__ import annotations

import asyncio
import os
import signal
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from sekai_sync import main as entry
from sekai_sync.pipeline.master import MasterDataFetchError
from sekai_sync.pipeline.sync import SyncReport


@pytest.mark.asyncio
async def test_missing_connection_string_is_fatal() -> None:
    with patch.object(entry.settings, "POSTGRES_CONNECTION_STRING", ""):
        code = await entry.main()

    assert code == entry.EXIT_FATAL


@pytest.mark.asyncio
async def test_fatal_sync_error_returns_non_zero_and_disposes_engine() -> None:
    engine = MagicMock()
    engine.dispose = AsyncMock()

    with patch("sekai_sync.main.create_db_engine", return_value=(engine, MagicMock())), \
            patch("sekai_sync.main.migrate", AsyncMock()), \
            patch("sekai_sync.main.run_sync", AsyncMock(side_effect=MasterDataFetchError("u", "status=500"))):
        code = await entry.main()

    assert code == entry.EXIT_FATAL
    engine.dispose.assert_awaited_once()


@pytest.mark.asyncio
async def test_successful_run_returns_zero() -> None:
    engine = MagicMock()
    engine.dispose = AsyncMock()
    report = SyncReport(cards=1, gachas=1, pickups=0, events=1)

    with patch("sekai_sync.main.create_db_engine", return_value=(engine, MagicMock())), \
            patch("sekai_sync.main.migrate", AsyncMock()) as migrate, \
            patch("sekai_sync.main.run_sync", AsyncMock(return_value=report)):
        code = await entry.main()

    assert code == entry.EXIT_OK
    migrate.assert_awaited_once_with(engine)
    engine.dispose.assert_awaited_once()


def test_run_exits_with_status() -> None:
    with patch("sekai_sync.main.main", AsyncMock(return_value=entry.EXIT_FATAL)):
        with pytest.raises(SystemExit) as exc_info:
            entry.run()

    assert exc_info.value.code == entry.EXIT_FATAL


def test_cancelled_run_exits_interrupted() -> None:
    with patch("sekai_sync.main.main", AsyncMock(side_effect=asyncio.CancelledError)):
        with pytest.raises(SystemExit) as exc_info:
            entry.run()

    assert exc_info.value.code == entry.EXIT_INTERRUPTED


@pytest.mark.skipif(sys.platform == "win32", reason="loop signal handlers are POSIX only")
def test_sigterm_cancels_run_and_exits_interrupted() -> None:
    cleaned_up: list[bool] = []

    async def long_sync() -> int:
        try:
            os.kill(os.getpid(), signal.SIGTERM)
            await asyncio.sleep(10)
        finally:
            cleaned_up.append(True)
        return entry.EXIT_OK

    with patch("sekai_sync.main.main", long_sync):
        with pytest.raises(SystemExit) as exc_info:
            entry.run()

    assert exc_info.value.code == entry.EXIT_INTERRUPTED
    assert cleaned_up == [True]
