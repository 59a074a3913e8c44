"""Vote model."""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base


class VoteType(str, enum.Enum):
    REPORT = "REPORT"
    VERIFY = "VERIFY"


class Vote(Base):
    """One user's report or verify action on one toilet. Never updated."""

    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("user_id", "toilet_id", "type", name="uq_vote_user_toilet_type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(VoteType, name="vote_type"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    toilet_id = Column(Integer, ForeignKey("toilets.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    user = relationship("User", back_populates="votes")
    toilet = relationship("Toilet", back_populates="votes")
