"""Pydantic schemas for reviews."""

from datetime import datetime

from pydantic import Field

from app.schemas.toilet import CamelModel


class ReviewCreate(CamelModel):
    external_id: str = Field(..., min_length=1, description="Toilet external id, e.g. node/123")
    content: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)


class ReviewOut(CamelModel):
    id: int
    toilet_id: int
    content: str
    rating: int
    created_at: datetime
