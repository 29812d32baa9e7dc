"""Database models package."""

from pricestats.models.base import (
    Base,
    create_all,
    create_engine_for_path,
    create_session_factory,
)
from pricestats.models.series import SeriesPointModel

__all__ = [
    "Base",
    "SeriesPointModel",
    "create_all",
    "create_engine_for_path",
    "create_session_factory",
]
