"""
Sekai Sync - Gacha & Pickup Models

pool_category, rarity4_rate and birthday_rate are derived at sync time by
the gacha classifier; they are not upstream-authoritative.

Pickup edges for a gacha are replaced wholesale on every run, so a pickup
removed upstream disappears from pjsk_gacha_pickups.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BIGINT, INTEGER, REAL, TIMESTAMP, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from sekai_sync.models.base import Base


class Gacha(Base):
    """Gacha banner master record."""

    __tablename__ = "pjsk_gachas"

    id: Mapped[int] = mapped_column(INTEGER, primary_key=True, autoincrement=False)
    gacha_type: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    seq: Mapped[int] = mapped_column(INTEGER, nullable=False)
    assetbundle_name: Mapped[str] = mapped_column(String, nullable=False)
    start_at: Mapped[int] = mapped_column(BIGINT, nullable=False, comment="Epoch seconds, 0 = absent")
    end_at: Mapped[int] = mapped_column(BIGINT, nullable=False, comment="Epoch seconds, 0 = absent")
    pool_category: Mapped[str] = mapped_column(
        String, nullable=False, comment="birthday | fes | normal | other"
    )
    rarity4_rate: Mapped[float | None] = mapped_column(REAL, nullable=True)
    birthday_rate: Mapped[float | None] = mapped_column(REAL, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_pjsk_gachas_start_end", "start_at", "end_at"),
    )

    def __repr__(self) -> str:
        return f"<Gacha id={self.id!r} type={self.gacha_type!r} category={self.pool_category!r}>"


class GachaPickup(Base):
    """Featured card of a gacha. character_id is NULL when the card was unknown at sync time."""

    __tablename__ = "pjsk_gacha_pickups"

    gacha_id: Mapped[int] = mapped_column(
        INTEGER, ForeignKey("pjsk_gachas.id", ondelete="CASCADE"), primary_key=True
    )
    card_id: Mapped[int] = mapped_column(
        INTEGER, ForeignKey("pjsk_cards.id"), primary_key=True
    )
    character_id: Mapped[int | None] = mapped_column(INTEGER, nullable=True)

    __table_args__ = (
        Index("idx_pjsk_gacha_pickups_gacha_id", "gacha_id"),
        Index("idx_pjsk_gacha_pickups_character_id", "character_id"),
    )

    def __repr__(self) -> str:
        return f"<GachaPickup gacha_id={self.gacha_id!r} card_id={self.card_id!r}>"
