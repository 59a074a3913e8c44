"""User model."""

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """Local mirror of an identity-provider account."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String(255), nullable=False, unique=True, index=True)  # token "sub"
    email = Column(String(255))
    role = Column(Enum(Role, name="user_role"), nullable=False, default=Role.USER)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    votes = relationship("Vote", back_populates="user")
    toilets = relationship("Toilet", back_populates="created_by")
    reviews = relationship("Review", back_populates="user")
