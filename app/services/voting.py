"""Report/verify voting with threshold-based hide and verify transitions."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings, settings
from app.core.errors import AlreadyVoted, InvariantViolation, NotFound
from app.models.toilet import Toilet
from app.models.vote import Vote, VoteType
from app.services.users import get_or_create_user

logger = logging.getLogger(__name__)

_NO_SYNC = {"synchronize_session": False}


@dataclass
class VoteOutcome:
    toilet: Toilet
    vote_type: VoteType
    hidden_now: bool = False
    verified_now: bool = False

    @property
    def transitioned(self) -> bool:
        return self.hidden_now or self.verified_now


@contextmanager
def locked_transaction(db: Session) -> Iterator[None]:
    """Commit on success, roll back (releasing row locks) on any exception."""
    try:
        yield
        db.commit()
    except BaseException:
        db.rollback()
        raise


def _lock_toilet(db: Session, toilet_id: int) -> Toilet | None:
    stmt = (
        select(Toilet)
        .where(Toilet.id == toilet_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return db.execute(stmt).scalar_one_or_none()


def has_voted(db: Session, user_id: int, toilet_id: int, vote_type: VoteType) -> bool:
    stmt = select(Vote.id).where(
        Vote.user_id == user_id,
        Vote.toilet_id == toilet_id,
        Vote.type == vote_type,
    )
    return db.execute(stmt).first() is not None


def _increment(db: Session, toilet_id: int, vote_type: VoteType) -> None:
    counter = Toilet.report_count if vote_type == VoteType.REPORT else Toilet.verify_count
    db.execute(
        update(Toilet).where(Toilet.id == toilet_id).values({counter: counter + 1}),
        execution_options=_NO_SYNC,
    )


def _apply_thresholds(db: Session, toilet_id: int, vote_type: VoteType, config: Settings) -> tuple[bool, bool]:
    """Flip is_hidden / is_verified when the counter crosses its threshold.

    Each flip is a conditional UPDATE, so only the vote that actually crosses
    the threshold sees ``rowcount == 1``.
    """
    if vote_type == VoteType.REPORT:
        result = db.execute(
            update(Toilet)
            .where(
                Toilet.id == toilet_id,
                Toilet.is_hidden.is_(False),
                Toilet.report_count >= Toilet.verify_count + config.hide_margin,
            )
            .values(is_hidden=True),
            execution_options=_NO_SYNC,
        )
        return result.rowcount == 1, False

    result = db.execute(
        update(Toilet)
        .where(
            Toilet.id == toilet_id,
            Toilet.is_verified.is_(False),
            Toilet.verify_count >= config.verify_threshold,
        )
        .values(is_verified=True),
        execution_options=_NO_SYNC,
    )
    return False, result.rowcount == 1


def record_vote(
    db: Session,
    toilet_id: int,
    external_user_id: str,
    vote_type: VoteType,
    config: Settings = settings,
    email: str | None = None,
) -> VoteOutcome:
    """Record one vote and apply the hide/verify policy atomically."""
    user_id = get_or_create_user(db, external_user_id, email).id

    with locked_transaction(db):
        toilet = _lock_toilet(db, toilet_id)
        if toilet is None or toilet.is_hidden:
            raise NotFound(f"Toilet {toilet_id} not found")
        if has_voted(db, user_id, toilet_id, vote_type):
            raise AlreadyVoted()

        db.add(Vote(type=vote_type, user_id=user_id, toilet_id=toilet_id))
        try:
            db.flush()
        except IntegrityError as exc:
            # lost a race against the same user's concurrent request
            raise AlreadyVoted() from exc

        _increment(db, toilet_id, vote_type)
        hidden_now, verified_now = _apply_thresholds(db, toilet_id, vote_type, config)
        if hidden_now and verified_now:
            logger.error("Vote on toilet %s triggered both hide and verify", toilet_id)
            raise InvariantViolation(f"Vote on toilet {toilet_id} triggered both hide and verify")

    db.refresh(toilet)
    if toilet.report_count < 0 or toilet.verify_count < 0:
        logger.error("Toilet %s has negative counters after vote", toilet_id)
        raise InvariantViolation(f"Toilet {toilet_id} has negative counters")

    if hidden_now:
        logger.info(
            "Toilet %s hidden (reports=%d, verifies=%d)", toilet_id, toilet.report_count, toilet.verify_count
        )
    if verified_now:
        logger.info("Toilet %s verified (verifies=%d)", toilet_id, toilet.verify_count)
    return VoteOutcome(toilet=toilet, vote_type=vote_type, hidden_now=hidden_now, verified_now=verified_now)
