"""Local user records for identity-provider accounts."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.models.user import Role, User

logger = logging.getLogger(__name__)


def find_by_external_id(db: Session, external_id: str) -> User | None:
    return db.execute(select(User).where(User.external_id == external_id)).scalar_one_or_none()


def get_or_create_user(db: Session, external_id: str, email: str | None = None) -> User:
    """Idempotent upsert keyed by the external id."""
    user = find_by_external_id(db, external_id)
    if user is not None:
        if email and user.email != email:
            user.email = email
            db.commit()
        return user

    try:
        user = User(external_id=external_id, email=email, role=Role.USER)
        db.add(user)
        db.commit()
    except IntegrityError:
        # created concurrently by another request
        db.rollback()
        user = find_by_external_id(db, external_id)
        if user is None:
            raise
        return user
    db.refresh(user)
    logger.info("Created user record for %s", external_id)
    return user


def list_users(db: Session) -> list[User]:
    return list(db.execute(select(User).order_by(User.created_at.desc())).scalars().all())


def set_role(db: Session, external_id: str, role: Role) -> User:
    user = find_by_external_id(db, external_id)
    if user is None:
        raise NotFound(f"User {external_id} not found")
    try:
        user.role = role
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user)
    logger.info("Set role %s for user %s", role.value, external_id)
    return user


def is_admin(db: Session, external_id: str) -> bool:
    """Authoritative role check; never trusts the token's role claim."""
    user = find_by_external_id(db, external_id)
    return user is not None and user.role == Role.ADMIN
