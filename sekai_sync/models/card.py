"""
Sekai Sync - Card Model

One row per card in the master data. Re-synced every run, last write wins
on id. The character_id column backs pickup character resolution.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import INTEGER, TIMESTAMP, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from sekai_sync.models.base import Base


class Card(Base):
    """Card master record (thumbnail assets are keyed by id)."""

    __tablename__ = "pjsk_cards"

    id: Mapped[int] = mapped_column(INTEGER, primary_key=True, autoincrement=False)
    character_id: Mapped[int] = mapped_column(INTEGER, nullable=False)
    attr: Mapped[str] = mapped_column(String, nullable=False)
    prefix: Mapped[str] = mapped_column(String, nullable=False, server_default="")
    rarity: Mapped[str] = mapped_column(
        String, nullable=False, comment="Upstream cardRarityType (rarity_1 .. rarity_birthday)"
    )
    assetbundle_name: Mapped[str] = mapped_column(String, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="Set on every write",
    )

    __table_args__ = (
        Index("idx_pjsk_cards_character_id", "character_id"),
        Index("idx_pjsk_cards_assetbundle_name", "assetbundle_name"),
    )

    def __repr__(self) -> str:
        return f"<Card id={self.id!r} character_id={self.character_id!r} rarity={self.rarity!r}>"
