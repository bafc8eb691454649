"""Sekai Sync - master-data sync and asset mirroring for Project SEKAI."""

__version__ = "0.1.0"
