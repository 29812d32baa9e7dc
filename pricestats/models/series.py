"""Series point table.

Tables: series_point
"""

from __future__ import annotations

from sqlalchemy import Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pricestats.models.base import Base


class SeriesPointModel(Base):
    """One stored observation of a category's series."""

    __tablename__ = "series_point"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category: Mapped[str] = mapped_column(String, nullable=False)
    timestamp: Mapped[str] = mapped_column(String, nullable=False)  # ISO 8601 UTC
    value: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        Index("ix_series_point_category_timestamp", "category", "timestamp"),
    )
