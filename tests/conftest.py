"""
Sekai Sync - Shared pytest Fixtures & Configuration

Provides common fixtures for all test modules:
- File-backed aiosqlite database with the pjsk_* schema and foreign keys on
- Raw master-data payloads shaped like the upstream JSON documents
- Parsed master records built from those payloads
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, AsyncGenerator

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from sekai_sync.models.base import Base
from sekai_sync.pipeline.master import Card, Event, Gacha


# ---------------------------------------------------------------------------
# Database Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def db_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """
    aiosqlite engine on a temp file with all tables created.

    A file (not :memory:) so that every session sees the same database.
    Foreign keys are enforced on every connection, as on PostgreSQL.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'sekai.db'}", echo=False)

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


# ---------------------------------------------------------------------------
# Master-data Payloads
# ---------------------------------------------------------------------------


@pytest.fixture
def cards_payload() -> list[dict[str, Any]]:
    return [
        {
            "id": 1,
            "seq": 10010001,
            "characterId": 1,
            "cardRarityType": "rarity_4",
            "attr": "cool",
            "prefix": "Brand New Me",
            "assetbundleName": "res001_no001",
        },
        {
            "id": 2,
            "seq": 10010002,
            "characterId": 1,
            "cardRarityType": "rarity_1",
            "attr": "happy",
            "prefix": "Leo/need",
            "assetbundleName": "res001_no002",
        },
        {
            "id": 3,
            "seq": 10020001,
            "characterId": 2,
            "cardRarityType": "rarity_3",
            "attr": "mysterious",
            "prefix": "",
            "assetbundleName": "res002_no001",
        },
    ]


@pytest.fixture
def gachas_payload() -> list[dict[str, Any]]:
    return [
        {
            "id": 100,
            "gachaType": "ceil",
            "name": "Leo/need Pickup",
            "seq": 5,
            "assetbundleName": "ab_gacha_100",
            "startAt": 1700000000000,
            "endAt": 1700500000999,
            "gachaCardRarityRates": [
                {"cardRarityType": "rarity_4", "lotteryType": "normal", "rate": 3.0},
                {"cardRarityType": "rarity_3", "lotteryType": "normal", "rate": 8.5},
            ],
            "gachaPickups": [
                {"id": 1, "gachaId": 100, "cardId": 1},
                {"id": 2, "gachaId": 100, "cardId": 3},
            ],
        },
        {
            "id": 101,
            "gachaType": "normal",
            "name": "Colorful Festival",
            "seq": 6,
            "assetbundleName": "ab_gacha_101",
            "startAt": 1701000000000,
            "endAt": 1701500000000,
            "gachaCardRarityRates": [
                {"cardRarityType": "rarity_4", "lotteryType": "normal", "rate": 6.0},
            ],
            "gachaPickups": [{"id": 3, "gachaId": 101, "cardId": 2}],
        },
    ]


@pytest.fixture
def events_payload() -> list[dict[str, Any]]:
    return [
        {
            "id": 7,
            "eventType": "marathon",
            "name": "Light Sound Opera",
            "assetbundleName": "event_lso_2020",
            "bgmAssetbundleName": "bgm/event_lso_2020",
            "eventOnlyComponentDisplayStartAt": 1600000000000,
            "startAt": 1600000001500,
            "aggregateAt": 1600500000000,
            "rankingAnnounceAt": 1600500060000,
            "distributionStartAt": 1600500120000,
            "eventOnlyComponentDisplayEndAt": -1,
            "closedAt": 0,
        },
    ]


@pytest.fixture
def cards(cards_payload: list[dict[str, Any]]) -> list[Card]:
    return [Card.model_validate(c) for c in cards_payload]


@pytest.fixture
def gachas(gachas_payload: list[dict[str, Any]]) -> list[Gacha]:
    return [Gacha.model_validate(g) for g in gachas_payload]


@pytest.fixture
def events(events_payload: list[dict[str, Any]]) -> list[Event]:
    return [Event.model_validate(e) for e in events_payload]
