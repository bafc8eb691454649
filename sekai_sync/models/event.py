"""
Sekai Sync - Event Model

Upstream timestamps are epoch milliseconds; columns store epoch seconds with
0 meaning "absent".
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BIGINT, INTEGER, TIMESTAMP, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from sekai_sync.models.base import Base


class Event(Base):
    """Event master record."""

    __tablename__ = "pjsk_events"

    id: Mapped[int] = mapped_column(INTEGER, primary_key=True, autoincrement=False)
    event_type: Mapped[str] = mapped_column(String, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    assetbundle_name: Mapped[str] = mapped_column(String, nullable=False)
    bgm_assetbundle_name: Mapped[str] = mapped_column(String, nullable=False, server_default="")
    event_only_component_display_start_at: Mapped[int | None] = mapped_column(BIGINT, nullable=True)
    start_at: Mapped[int] = mapped_column(BIGINT, nullable=False)
    aggregate_at: Mapped[int | None] = mapped_column(BIGINT, nullable=True)
    ranking_announce_at: Mapped[int | None] = mapped_column(BIGINT, nullable=True)
    distribution_start_at: Mapped[int | None] = mapped_column(BIGINT, nullable=True)
    event_only_component_display_end_at: Mapped[int | None] = mapped_column(BIGINT, nullable=True)
    closed_at: Mapped[int | None] = mapped_column(BIGINT, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_pjsk_events_start_at", "start_at"),
    )

    def __repr__(self) -> str:
        return f"<Event id={self.id!r} type={self.event_type!r} name={self.name!r}>"
