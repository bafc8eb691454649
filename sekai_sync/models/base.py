"""
SQLAlchemy 2.0 async DeclarativeBase for Sekai Sync.

All models inherit from this Base.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all Sekai Sync database models."""
    pass
