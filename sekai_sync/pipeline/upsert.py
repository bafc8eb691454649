"""
Sekai Sync - Master Data Upserter

Reconciles freshly fetched collections into the store with
INSERT ... ON CONFLICT DO UPDATE (last write wins on the primary key).

Write units:
- Cards: batches of UPSERT_BATCH_SIZE rows, each batch committed on its own.
- Gachas + pickups: ONE transaction for the whole run. Per gacha: upsert the
  row, delete its pickup edges, insert the current edge set. Any failure
  rolls back every gacha.
- Events: batches like cards, independent of the gacha transaction.

Card and event batches are deliberately not wrapped in a single
transaction: when batch N fails, batches 0..N-1 stay committed and the
error propagates. Downstream readers may observe that partial state.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from datetime import datetime, timezone
from typing import Any, NamedTuple

import structlog
from sqlalchemy import TIMESTAMP, bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sekai_sync.config import settings
from sekai_sync.engine.classify import classify_gacha
from sekai_sync.pipeline.master import Card, Event, Gacha
from sekai_sync.utils.timestamps import ms_to_sec

logger = structlog.get_logger(__name__)


def _updated_at() -> Any:
    return bindparam("updated_at", type_=TIMESTAMP(timezone=True))


UPSERT_CARD_SQL = text("""
    INSERT INTO pjsk_cards (
        id, character_id, attr, prefix, rarity, assetbundle_name, updated_at
    ) VALUES (
        :id, :character_id, :attr, :prefix, :rarity, :assetbundle_name, :updated_at
    )
    ON CONFLICT (id) DO UPDATE SET
        character_id = EXCLUDED.character_id,
        attr = EXCLUDED.attr,
        prefix = EXCLUDED.prefix,
        rarity = EXCLUDED.rarity,
        assetbundle_name = EXCLUDED.assetbundle_name,
        updated_at = EXCLUDED.updated_at
""").bindparams(_updated_at())

UPSERT_GACHA_SQL = text("""
    INSERT INTO pjsk_gachas (
        id, gacha_type, name, seq, assetbundle_name, start_at, end_at,
        pool_category, rarity4_rate, birthday_rate, updated_at
    ) VALUES (
        :id, :gacha_type, :name, :seq, :assetbundle_name, :start_at, :end_at,
        :pool_category, :rarity4_rate, :birthday_rate, :updated_at
    )
    ON CONFLICT (id) DO UPDATE SET
        gacha_type = EXCLUDED.gacha_type,
        name = EXCLUDED.name,
        seq = EXCLUDED.seq,
        assetbundle_name = EXCLUDED.assetbundle_name,
        start_at = EXCLUDED.start_at,
        end_at = EXCLUDED.end_at,
        pool_category = EXCLUDED.pool_category,
        rarity4_rate = EXCLUDED.rarity4_rate,
        birthday_rate = EXCLUDED.birthday_rate,
        updated_at = EXCLUDED.updated_at
""").bindparams(_updated_at())

DELETE_PICKUPS_SQL = text("DELETE FROM pjsk_gacha_pickups WHERE gacha_id = :gacha_id")

INSERT_PICKUP_SQL = text("""
    INSERT INTO pjsk_gacha_pickups (gacha_id, card_id, character_id)
    VALUES (:gacha_id, :card_id, :character_id)
    ON CONFLICT (gacha_id, card_id) DO UPDATE SET
        character_id = EXCLUDED.character_id
""")

UPSERT_EVENT_SQL = text("""
    INSERT INTO pjsk_events (
        id, event_type, name, assetbundle_name, bgm_assetbundle_name,
        event_only_component_display_start_at, start_at, aggregate_at,
        ranking_announce_at, distribution_start_at,
        event_only_component_display_end_at, closed_at, updated_at
    ) VALUES (
        :id, :event_type, :name, :assetbundle_name, :bgm_assetbundle_name,
        :event_only_component_display_start_at, :start_at, :aggregate_at,
        :ranking_announce_at, :distribution_start_at,
        :event_only_component_display_end_at, :closed_at, :updated_at
    )
    ON CONFLICT (id) DO UPDATE SET
        event_type = EXCLUDED.event_type,
        name = EXCLUDED.name,
        assetbundle_name = EXCLUDED.assetbundle_name,
        bgm_assetbundle_name = EXCLUDED.bgm_assetbundle_name,
        event_only_component_display_start_at = EXCLUDED.event_only_component_display_start_at,
        start_at = EXCLUDED.start_at,
        aggregate_at = EXCLUDED.aggregate_at,
        ranking_announce_at = EXCLUDED.ranking_announce_at,
        distribution_start_at = EXCLUDED.distribution_start_at,
        event_only_component_display_end_at = EXCLUDED.event_only_component_display_end_at,
        closed_at = EXCLUDED.closed_at,
        updated_at = EXCLUDED.updated_at
""").bindparams(_updated_at())


class UpsertResult(NamedTuple):
    """Row counts written by one upsert phase, plus the card lookup it built."""
    cards: int
    gachas: int
    pickups: int
    events: int
    card_to_character: dict[int, int]


def _chunks(rows: Sequence[dict[str, Any]], size: int) -> Iterator[Sequence[dict[str, Any]]]:
    size = max(1, size)
    for start in range(0, len(rows), size):
        yield rows[start:start + size]


def resolve_character_id(card_id: int, card_to_character: dict[int, int]) -> int | None:
    """
    Look up the character of a pickup card.

    Returns None ("unknown") when the card was not in this run's card
    collection; 0 is treated the same way since upstream never uses it.
    """
    character_id = card_to_character.get(card_id, 0)
    return character_id or None


class Upserter:
    """
    Writes master collections into the store.

    The cardId -> characterId lookup is owned by the caller of upsert_cards
    and passed explicitly into upsert_gachas.

    Usage:
        upserter = Upserter(session_factory)
        result = await upserter.upsert_all(cards, gachas, events)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        batch_size: int | None = None,
    ):
        self.session_factory = session_factory
        self.batch_size = batch_size or settings.UPSERT_BATCH_SIZE

    async def _execute_batches(self, kind: str, stmt: Any, rows: list[dict[str, Any]]) -> int:
        """executemany rows in independently committed batches."""
        written = 0
        for batch in _chunks(rows, self.batch_size):
            async with self.session_factory() as session:
                await session.execute(stmt, list(batch))
                await session.commit()
            written += len(batch)
            logger.debug("upsert_batch_committed", kind=kind, rows=len(batch), written=written)
        return written

    async def upsert_cards(self, cards: Sequence[Card]) -> dict[int, int]:
        """
        Upsert all cards.

        Returns:
            cardId -> characterId lookup. It is complete before the first
            batch is dispatched, so it covers cards whose write later fails.
        """
        card_to_character: dict[int, int] = {}
        now = datetime.now(timezone.utc)
        rows: list[dict[str, Any]] = []
        for card in cards:
            card_to_character[card.id] = card.character_id
            rows.append({
                "id": card.id,
                "character_id": card.character_id,
                "attr": card.attr,
                "prefix": card.prefix,
                "rarity": card.card_rarity_type,
                "assetbundle_name": card.assetbundle_name,
                "updated_at": now,
            })

        written = await self._execute_batches("cards", UPSERT_CARD_SQL, rows)
        logger.info("upsert_cards_complete", count=written)
        return card_to_character

    async def upsert_gachas(
        self,
        gachas: Sequence[Gacha],
        card_to_character: dict[int, int],
    ) -> int:
        """
        Upsert gachas and replace their pickup edges in a single transaction.

        Returns:
            Number of pickup edges written.
        """
        now = datetime.now(timezone.utc)
        pickup_count = 0
        unresolved = 0

        async with self.session_factory() as session:
            async with session.begin():
                for gacha in gachas:
                    classification = classify_gacha(gacha)
                    await session.execute(
                        UPSERT_GACHA_SQL,
                        {
                            "id": gacha.id,
                            "gacha_type": gacha.gacha_type,
                            "name": gacha.name,
                            "seq": gacha.seq,
                            "assetbundle_name": gacha.assetbundle_name,
                            "start_at": ms_to_sec(gacha.start_at),
                            "end_at": ms_to_sec(gacha.end_at),
                            "pool_category": classification.category.value,
                            "rarity4_rate": classification.rarity4_rate,
                            "birthday_rate": classification.birthday_rate,
                            "updated_at": now,
                        },
                    )

                    await session.execute(DELETE_PICKUPS_SQL, {"gacha_id": gacha.id})

                    rows = []
                    for pickup in gacha.pickups:
                        character_id = resolve_character_id(pickup.card_id, card_to_character)
                        if character_id is None:
                            unresolved += 1
                        rows.append({
                            "gacha_id": gacha.id,
                            "card_id": pickup.card_id,
                            "character_id": character_id,
                        })
                    if rows:
                        await session.execute(INSERT_PICKUP_SQL, rows)
                        pickup_count += len(rows)

        if unresolved:
            logger.warning("upsert_pickups_unresolved_character", count=unresolved)
        logger.info("upsert_gachas_complete", gachas=len(gachas), pickups=pickup_count)
        return pickup_count

    async def upsert_events(self, events: Sequence[Event]) -> int:
        """Upsert all events with timestamps normalised to epoch seconds."""
        now = datetime.now(timezone.utc)
        rows = [
            {
                "id": e.id,
                "event_type": e.event_type,
                "name": e.name,
                "assetbundle_name": e.assetbundle_name,
                "bgm_assetbundle_name": e.bgm_assetbundle_name,
                "event_only_component_display_start_at": ms_to_sec(
                    e.event_only_component_display_start_at
                ),
                "start_at": ms_to_sec(e.start_at),
                "aggregate_at": ms_to_sec(e.aggregate_at),
                "ranking_announce_at": ms_to_sec(e.ranking_announce_at),
                "distribution_start_at": ms_to_sec(e.distribution_start_at),
                "event_only_component_display_end_at": ms_to_sec(
                    e.event_only_component_display_end_at
                ),
                "closed_at": ms_to_sec(e.closed_at),
                "updated_at": now,
            }
            for e in events
        ]

        written = await self._execute_batches("events", UPSERT_EVENT_SQL, rows)
        logger.info("upsert_events_complete", count=written)
        return written

    async def upsert_all(
        self,
        cards: Sequence[Card],
        gachas: Sequence[Gacha],
        events: Sequence[Event],
    ) -> UpsertResult:
        """Cards, then gachas + pickups, then events. The first failure aborts."""
        card_to_character = await self.upsert_cards(cards)
        pickups = await self.upsert_gachas(gachas, card_to_character)
        event_count = await self.upsert_events(events)
        return UpsertResult(
            cards=len(cards),
            gachas=len(gachas),
            pickups=pickups,
            events=event_count,
            card_to_character=card_to_character,
        )
