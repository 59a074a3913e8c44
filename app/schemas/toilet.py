"""Pydantic schemas for toilets."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ToiletCreate(CamelModel):
    """Submission body: claimed toilet position plus the submitter's own position."""

    lat: float = Field(..., ge=-90, le=90, description="Toilet latitude")
    lng: float = Field(..., ge=-180, le=180, description="Toilet longitude")
    user_lat: float = Field(..., ge=-90, le=90, description="Submitter latitude")
    user_lng: float = Field(..., ge=-180, le=180, description="Submitter longitude")
    name: Optional[str] = Field(None, max_length=255)
    operator: Optional[str] = Field(None, max_length=255)
    fee: Optional[str] = Field(None, max_length=100)
    is_free: Optional[bool] = None
    is_paid: Optional[bool] = None
    opening_hours: Optional[str] = None
    wheelchair: Optional[str] = Field(None, max_length=50)
    is_accessible: Optional[bool] = None

    def to_store(self) -> dict:
        """Row data for the location store (``lng`` becomes ``lon``)."""
        data = self.model_dump(exclude={"lat", "lng", "user_lat", "user_lng"}, exclude_none=True)
        data["lat"] = self.lat
        data["lon"] = self.lng
        return data


class ToiletOut(CamelModel):
    id: int
    external_id: str
    lat: float
    lon: float
    name: Optional[str] = None
    operator: Optional[str] = None
    fee: Optional[str] = None
    is_free: bool = False
    is_paid: bool = False
    opening_hours: Optional[str] = None
    wheelchair: Optional[str] = None
    is_accessible: bool = False
    is_user_created: bool = False
    report_count: int = 0
    verify_count: int = 0
    is_verified: bool = False
    is_hidden: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
