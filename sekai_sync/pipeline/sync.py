"""
Sekai Sync - Run Orchestration

fetch -> upsert -> assets, strictly in that order on one task:
- Any fetch error aborts before the first write.
- Any store error aborts the run; the asset phase does not start.
- Asset failures are per-job and never abort the run.

The asset phase only reads the collections fetched in this run; it needs
the upsert phase to have finished, not any particular row state.
"""

from __future__ import annotations

import structlog
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sekai_sync.assets.mirror import MirrorReport, sync_assets
from sekai_sync.config import Settings, settings as default_settings
from sekai_sync.pipeline.master import MasterDataClient
from sekai_sync.pipeline.upsert import Upserter

logger = structlog.get_logger(__name__)


class SyncReport(BaseModel):
    cards: int
    gachas: int
    pickups: int
    events: int
    assets: MirrorReport | None = None


async def run_sync(
    session_factory: async_sessionmaker[AsyncSession],
    config: Settings | None = None,
) -> SyncReport:
    """
    Execute one full sync run.

    Args:
        session_factory: Session factory bound to the target store.
        config: Settings override (defaults to the module singleton).

    Returns:
        SyncReport with record counts and, when DOWNLOAD_ASSETS is on, the
        asset MirrorReport.
    """
    cfg = config or default_settings

    # 1) fetch master data
    async with MasterDataClient(
        cards_url=cfg.CARDS_URL,
        gachas_url=cfg.GACHAS_URL,
        events_url=cfg.EVENTS_URL,
        timeout=cfg.HTTP_TIMEOUT_SECONDS,
    ) as client:
        cards = await client.fetch_cards()
        gachas = await client.fetch_gachas()
        events = await client.fetch_events()

    # 2) upsert into the store
    upserter = Upserter(session_factory, batch_size=cfg.UPSERT_BATCH_SIZE)
    result = await upserter.upsert_all(cards, gachas, events)

    logger.info(
        "db_synced",
        cards=result.cards,
        gachas=result.gachas,
        pickups=result.pickups,
        events=result.events,
    )

    report = SyncReport(
        cards=result.cards,
        gachas=result.gachas,
        pickups=result.pickups,
        events=result.events,
    )

    # 3) mirror assets into the local image tree (incremental)
    if cfg.DOWNLOAD_ASSETS:
        report.assets = await sync_assets(
            cards,
            events,
            gachas,
            root=cfg.IMAGE_REPO_DIR,
            max_concurrency=cfg.MAX_CONCURRENCY,
            config=cfg,
        )
    else:
        logger.info("assets_disabled")

    return report
