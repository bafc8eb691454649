"""
Sekai Sync - Configuration & Constants

Every source URL, asset base, concurrency limit and store setting lives here.
No hardcoded values in business logic.

Usage:
    from sekai_sync.config import settings
"""

from __future__ import annotations

from enum import Enum

from pydantic_settings import BaseSettings


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class GachaCategory(str, Enum):
    """Derived marketing category of a gacha banner (pool_category column)."""
    BIRTHDAY = "birthday"
    FES = "fes"
    NORMAL = "normal"
    OTHER = "other"


class CardRarity(str, Enum):
    """Upstream cardRarityType values."""
    RARITY_1 = "rarity_1"
    RARITY_2 = "rarity_2"
    RARITY_3 = "rarity_3"
    RARITY_4 = "rarity_4"
    RARITY_BIRTHDAY = "rarity_birthday"


class AssetRegion(str, Enum):
    """Asset CDN regions, in the order candidates are tried."""
    CN = "cn"
    JP = "jp"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

_MASTER_DB_BASE = "https://raw.githubusercontent.com/kotori8823/sekai-sc-master-db/master"


class Settings(BaseSettings):
    """
    Central configuration for Sekai Sync.

    Loads from environment variables with fallback defaults.
    """

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # -----------------------------------------------------------------------
    # Relational store
    # -----------------------------------------------------------------------
    POSTGRES_CONNECTION_STRING: str = ""
    PG_SSLMODE: str = "require"             # require / verify-full / disable ...
    UPSERT_BATCH_SIZE: int = 500            # rows per card/event write batch

    # -----------------------------------------------------------------------
    # Master-data sources (raw JSON arrays)
    # -----------------------------------------------------------------------
    CARDS_URL: str = f"{_MASTER_DB_BASE}/cards.json"
    GACHAS_URL: str = f"{_MASTER_DB_BASE}/gachas.json"
    EVENTS_URL: str = f"{_MASTER_DB_BASE}/events.json"

    # -----------------------------------------------------------------------
    # Asset mirroring
    # -----------------------------------------------------------------------
    DOWNLOAD_ASSETS: bool = True
    IMAGE_REPO_DIR: str = "image-hosting"   # where the hosting repo is checked out
    MAX_CONCURRENCY: int = 6
    ASSET_BASE_URL_CN: str = "https://assets.unipjsk.com"
    ASSET_BASE_URL_JP: str = "https://assets.unipjsk.com"

    # -----------------------------------------------------------------------
    # HTTP
    # -----------------------------------------------------------------------
    HTTP_TIMEOUT_SECONDS: float = 60.0
    USER_AGENT: str = "pjsk-sync-action"

    # -----------------------------------------------------------------------
    # Logging
    # -----------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"


# Singleton instance
settings = Settings()
