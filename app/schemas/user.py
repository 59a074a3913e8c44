"""Pydantic schemas for users."""

from datetime import datetime
from typing import Optional

from app.models.user import Role
from app.schemas.toilet import CamelModel


class UserOut(CamelModel):
    id: int
    external_id: str
    email: Optional[str] = None
    role: Role
    created_at: datetime


class RoleUpdate(CamelModel):
    role: Role
