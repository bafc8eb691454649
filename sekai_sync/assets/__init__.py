"""Sekai Sync - Asset mirroring (job construction, download, atomic materialisation)."""

from sekai_sync.assets.jobs import AssetJob, build_asset_jobs
from sekai_sync.assets.mirror import AssetMirror, MirrorReport, sync_assets

__all__ = ["AssetJob", "AssetMirror", "MirrorReport", "build_asset_jobs", "sync_assets"]
