"""
Models package - export all SQLAlchemy models.
"""

from sekai_sync.models.base import Base
from sekai_sync.models.card import Card
from sekai_sync.models.event import Event
from sekai_sync.models.gacha import Gacha, GachaPickup

__all__ = ["Base", "Card", "Event", "Gacha", "GachaPickup"]
