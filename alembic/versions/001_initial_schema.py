"""Initial schema - pjsk_cards, pjsk_gachas, pjsk_gacha_pickups, pjsk_events

Revision ID: 001_initial_schema
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- pjsk_cards ---
    op.create_table(
        "pjsk_cards",
        sa.Column("id", sa.INTEGER(), nullable=False, primary_key=True, autoincrement=False),
        sa.Column("character_id", sa.INTEGER(), nullable=False),
        sa.Column("attr", sa.String(), nullable=False),
        sa.Column("prefix", sa.String(), nullable=False, server_default=""),
        sa.Column("rarity", sa.String(), nullable=False),
        sa.Column("assetbundle_name", sa.String(), nullable=False),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("idx_pjsk_cards_character_id", "pjsk_cards", ["character_id"])
    op.create_index("idx_pjsk_cards_assetbundle_name", "pjsk_cards", ["assetbundle_name"])

    # --- pjsk_gachas (pool_category / rates derived at sync time) ---
    op.create_table(
        "pjsk_gachas",
        sa.Column("id", sa.INTEGER(), nullable=False, primary_key=True, autoincrement=False),
        sa.Column("gacha_type", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("seq", sa.INTEGER(), nullable=False),
        sa.Column("assetbundle_name", sa.String(), nullable=False),
        sa.Column("start_at", sa.BIGINT(), nullable=False),
        sa.Column("end_at", sa.BIGINT(), nullable=False),
        sa.Column("pool_category", sa.String(), nullable=False),
        sa.Column("rarity4_rate", sa.REAL(), nullable=True),
        sa.Column("birthday_rate", sa.REAL(), nullable=True),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("idx_pjsk_gachas_start_end", "pjsk_gachas", ["start_at", "end_at"])

    # --- pjsk_gacha_pickups (edge set replaced per gacha every run) ---
    op.create_table(
        "pjsk_gacha_pickups",
        sa.Column(
            "gacha_id",
            sa.INTEGER(),
            sa.ForeignKey("pjsk_gachas.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("card_id", sa.INTEGER(), sa.ForeignKey("pjsk_cards.id"), nullable=False),
        sa.Column("character_id", sa.INTEGER(), nullable=True),
        sa.PrimaryKeyConstraint("gacha_id", "card_id"),
    )
    op.create_index("idx_pjsk_gacha_pickups_gacha_id", "pjsk_gacha_pickups", ["gacha_id"])
    op.create_index("idx_pjsk_gacha_pickups_character_id", "pjsk_gacha_pickups", ["character_id"])

    # --- pjsk_events (timestamps in epoch seconds, 0 = absent) ---
    op.create_table(
        "pjsk_events",
        sa.Column("id", sa.INTEGER(), nullable=False, primary_key=True, autoincrement=False),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("assetbundle_name", sa.String(), nullable=False),
        sa.Column("bgm_assetbundle_name", sa.String(), nullable=False, server_default=""),
        sa.Column("event_only_component_display_start_at", sa.BIGINT(), nullable=True),
        sa.Column("start_at", sa.BIGINT(), nullable=False),
        sa.Column("aggregate_at", sa.BIGINT(), nullable=True),
        sa.Column("ranking_announce_at", sa.BIGINT(), nullable=True),
        sa.Column("distribution_start_at", sa.BIGINT(), nullable=True),
        sa.Column("event_only_component_display_end_at", sa.BIGINT(), nullable=True),
        sa.Column("closed_at", sa.BIGINT(), nullable=True),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("idx_pjsk_events_start_at", "pjsk_events", ["start_at"])


def downgrade() -> None:
    op.drop_index("idx_pjsk_events_start_at", table_name="pjsk_events")
    op.drop_table("pjsk_events")
    op.drop_index("idx_pjsk_gacha_pickups_character_id", table_name="pjsk_gacha_pickups")
    op.drop_index("idx_pjsk_gacha_pickups_gacha_id", table_name="pjsk_gacha_pickups")
    op.drop_table("pjsk_gacha_pickups")
    op.drop_index("idx_pjsk_gachas_start_end", table_name="pjsk_gachas")
    op.drop_table("pjsk_gachas")
    op.drop_index("idx_pjsk_cards_assetbundle_name", table_name="pjsk_cards")
    op.drop_index("idx_pjsk_cards_character_id", table_name="pjsk_cards")
    op.drop_table("pjsk_cards")
