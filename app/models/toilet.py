"""Toilet model."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from app.db.base import Base


class Toilet(Base):
    """Public toilet point of interest.

    On PostgreSQL the table also carries a ``location geography(Point, 4326)``
    column (see ``app.db.init_db``). It is not mapped here; the location store
    writes it alongside ``lat``/``lon``.
    """

    __tablename__ = "toilets"
    __table_args__ = (
        CheckConstraint("lat >= -90 AND lat <= 90", name="ck_toilets_lat_range"),
        CheckConstraint("lon >= -180 AND lon <= 180", name="ck_toilets_lon_range"),
        CheckConstraint("report_count >= 0", name="ck_toilets_report_count"),
        CheckConstraint("verify_count >= 0", name="ck_toilets_verify_count"),
    )

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String(100), nullable=False, unique=True, index=True)  # node/123 or user/<hex>
    lat = Column(Float, nullable=False)
    lon = Column(Float, nullable=False)

    name = Column(String(255))
    operator = Column(String(255))
    fee = Column(String(100))
    is_free = Column(Boolean, nullable=False, default=False)
    is_paid = Column(Boolean, nullable=False, default=False)
    opening_hours = Column(Text)
    wheelchair = Column(String(50))
    is_accessible = Column(Boolean, nullable=False, default=False)

    is_user_created = Column(Boolean, nullable=False, default=False)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True)

    report_count = Column(Integer, nullable=False, default=0)
    verify_count = Column(Integer, nullable=False, default=0)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_hidden = Column(Boolean, nullable=False, default=False, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)

    created_by = relationship("User", back_populates="toilets")
    votes = relationship("Vote", back_populates="toilet", cascade="all, delete")
    reviews = relationship("Review", back_populates="toilet", cascade="all, delete")
