"""Toilet reviews."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.models.review import Review
from app.services import toilet_store


def create_review(db: Session, external_id: str, content: str, rating: int, user_id: int | None = None) -> Review:
    toilet = toilet_store.get_by_external_id(db, external_id)
    if toilet is None:
        raise NotFound(f"Toilet {external_id} not found")
    try:
        review = Review(toilet_id=toilet.id, user_id=user_id, content=content, rating=rating)
        db.add(review)
        db.commit()
        db.refresh(review)
        return review
    except Exception:
        db.rollback()
        raise


def reviews_for_toilet(db: Session, external_id: str) -> list[Review]:
    """Newest first."""
    toilet = toilet_store.get_by_external_id(db, external_id)
    if toilet is None:
        raise NotFound(f"Toilet {external_id} not found")
    stmt = (
        select(Review)
        .where(Review.toilet_id == toilet.id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return list(db.execute(stmt).scalars().all())
