"""
Sekai Sync - Asset Job Construction

One job per (entity, asset slot). Destination paths are relative to the
asset tree root and unique per job, so workers never share a destination.

Slots:
- card: normal thumbnail; after-training thumbnail for rarity_3 / rarity_4
- event: logo, background (CN candidate first, then JP)
- gacha: banner (CN, JP), falling back to the gacha logo (CN, JP)

Payloads are stored as fetched; the .webp names are the hosting contract.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from sekai_sync.assets import urls
from sekai_sync.config import AssetRegion, CardRarity, Settings
from sekai_sync.pipeline.master import Card, Event, Gacha

AFTER_TRAINING_RARITIES = frozenset({CardRarity.RARITY_3.value, CardRarity.RARITY_4.value})


class AssetJob(BaseModel):
    """Destination (relative to the tree root) plus ordered candidate URLs."""

    model_config = ConfigDict(frozen=True)

    dest_rel: str
    urls: tuple[str, ...]


def card_normal_path(card_id: int) -> str:
    return f"card_thumbnails/{card_id}_normal.webp"


def card_after_training_path(card_id: int) -> str:
    return f"card_thumbnails/{card_id}_after_training.webp"


def event_logo_path(event_id: int) -> str:
    return f"sekai-events/event_{event_id}/logo.webp"


def event_bg_path(event_id: int) -> str:
    return f"sekai-events/event_{event_id}/bg.webp"


def gacha_banner_path(gacha_id: int) -> str:
    return f"sekai-gachas/gacha_{gacha_id}/banner.webp"


def build_card_jobs(cards: Sequence[Card], config: Settings | None = None) -> list[AssetJob]:
    jp = urls.region_base(AssetRegion.JP, config)
    jobs: list[AssetJob] = []
    for card in cards:
        jobs.append(AssetJob(
            dest_rel=card_normal_path(card.id),
            urls=(urls.card_normal_url(jp, card.assetbundle_name),),
        ))
        if card.card_rarity_type in AFTER_TRAINING_RARITIES:
            jobs.append(AssetJob(
                dest_rel=card_after_training_path(card.id),
                urls=(urls.card_after_training_url(jp, card.assetbundle_name),),
            ))
    return jobs


def build_event_jobs(events: Sequence[Event], config: Settings | None = None) -> list[AssetJob]:
    cn = urls.region_base(AssetRegion.CN, config)
    jp = urls.region_base(AssetRegion.JP, config)
    jobs: list[AssetJob] = []
    for event in events:
        jobs.append(AssetJob(
            dest_rel=event_logo_path(event.id),
            urls=(
                urls.event_logo_url(cn, event.assetbundle_name),
                urls.event_logo_url(jp, event.assetbundle_name),
            ),
        ))
        jobs.append(AssetJob(
            dest_rel=event_bg_path(event.id),
            urls=(
                urls.event_bg_url(cn, event.assetbundle_name),
                urls.event_bg_url(jp, event.assetbundle_name),
            ),
        ))
    return jobs


def build_gacha_jobs(gachas: Sequence[Gacha], config: Settings | None = None) -> list[AssetJob]:
    cn = urls.region_base(AssetRegion.CN, config)
    jp = urls.region_base(AssetRegion.JP, config)
    return [
        AssetJob(
            dest_rel=gacha_banner_path(gacha.id),
            urls=(
                urls.gacha_banner_url(cn, gacha.id),
                urls.gacha_banner_url(jp, gacha.id),
                urls.gacha_logo_url(cn, gacha.id),
                urls.gacha_logo_url(jp, gacha.id),
            ),
        )
        for gacha in gachas
    ]


def build_asset_jobs(
    cards: Sequence[Card],
    events: Sequence[Event],
    gachas: Sequence[Gacha],
    config: Settings | None = None,
) -> list[AssetJob]:
    """
    Build the full job list for one run.

    Args:
        cards: Card collection fetched this run.
        events: Event collection fetched this run.
        gachas: Gacha collection fetched this run.
        config: Source of the region asset bases (defaults to the module
            singleton).

    Returns:
        Jobs in card, event, gacha order with at most one job per
        destination (first occurrence wins when upstream repeats an id).
    """
    jobs: list[AssetJob] = []
    seen: set[str] = set()
    candidates = (
        build_card_jobs(cards, config)
        + build_event_jobs(events, config)
        + build_gacha_jobs(gachas, config)
    )
    for job in candidates:
        if job.dest_rel in seen:
            continue
        seen.add(job.dest_rel)
        jobs.append(job)
    return jobs
