"""Review endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_optional_identity
from app.core.security import Identity
from app.db.session import get_db, store_errors
from app.schemas.review import ReviewCreate, ReviewOut
from app.services.reviews import create_review, reviews_for_toilet
from app.services.users import get_or_create_user

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
def add_review(
    payload: ReviewCreate,
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> ReviewOut:
    """Review a toilet; attributed when the caller is signed in."""
    with store_errors(db):
        user_id = None
        if identity is not None:
            user_id = get_or_create_user(db, identity.external_id, identity.email).id
        review = create_review(db, payload.external_id, payload.content, payload.rating, user_id)
        return ReviewOut.model_validate(review)


@router.get("/toilet/{external_id:path}", response_model=list[ReviewOut])
def list_reviews(external_id: str, db: Session = Depends(get_db)) -> list[ReviewOut]:
    with store_errors(db):
        return [ReviewOut.model_validate(r) for r in reviews_for_toilet(db, external_id)]
