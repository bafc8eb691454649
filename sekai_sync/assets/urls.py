"""
Sekai Sync - Asset Source URL Templates

Deterministic templates over assetbundleName / numeric ids and a per-region
base. No authentication.
"""

from __future__ import annotations

from sekai_sync.config import AssetRegion, Settings, settings


def region_base(region: AssetRegion, config: Settings | None = None) -> str:
    """Configured CDN base for a region, without trailing slash."""
    cfg = config or settings
    if region is AssetRegion.CN:
        base = cfg.ASSET_BASE_URL_CN
    else:
        base = cfg.ASSET_BASE_URL_JP
    return base.rstrip("/")


def card_normal_url(base: str, assetbundle_name: str) -> str:
    return f"{base}/startapp/thumbnail/chara/{assetbundle_name}_normal.png"


def card_after_training_url(base: str, assetbundle_name: str) -> str:
    return f"{base}/startapp/thumbnail/chara/{assetbundle_name}_after_training.png"


def event_logo_url(base: str, assetbundle_name: str) -> str:
    return f"{base}/ondemand/event/{assetbundle_name}/logo/logo.png"


def event_bg_url(base: str, assetbundle_name: str) -> str:
    return f"{base}/ondemand/event/{assetbundle_name}/screen/bg.png"


def gacha_banner_url(base: str, gacha_id: int) -> str:
    return f"{base}/startapp/home/banner/banner_gacha{gacha_id}/banner_gacha{gacha_id}.png"


def gacha_logo_url(base: str, gacha_id: int) -> str:
    """Gacha logo, used as a fallback when no banner exists."""
    return f"{base}/ondemand/gacha/ab_gacha_{gacha_id}/logo/logo.png"
