"""Geofence and duplicate checks for user-submitted toilets."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.core.config import Settings, settings
from app.core.errors import Duplicate, InvalidGeometry, TooFar
from app.models.toilet import Toilet
from app.services import toilet_store
from app.services.geo import distance_meters, is_valid_coordinate

logger = logging.getLogger(__name__)


def validate_submission(
    db: Session,
    claimed_lat: float,
    claimed_lon: float,
    submitter_lat: float,
    submitter_lon: float,
    config: Settings = settings,
) -> None:
    """Raise ``TooFar`` or ``Duplicate`` if the submission must be rejected.

    Read-only: nothing is written, the caller performs the insert.
    """
    for lat, lon in ((claimed_lat, claimed_lon), (submitter_lat, submitter_lon)):
        if not is_valid_coordinate(lat, lon):
            raise InvalidGeometry(f"Invalid coordinates: lat={lat}, lon={lon}")

    distance = distance_meters(submitter_lat, submitter_lon, claimed_lat, claimed_lon)
    if distance > config.submit_max_distance_m:
        logger.info("Submission rejected: submitter %.1f m away", distance)
        raise TooFar(distance, config.submit_max_distance_m)

    # find_in_radius applies an exact distance predicate, never the box alone
    nearest = toilet_store.nearest_within(db, claimed_lat, claimed_lon, config.duplicate_radius_m)
    if nearest is not None:
        existing, existing_distance = nearest
        logger.info("Submission rejected: toilet %s is %.1f m away", existing.id, existing_distance)
        raise Duplicate(existing.id, existing_distance)


def insert_checked(
    db: Session,
    data: dict[str, Any],
    submitter_lat: float,
    submitter_lon: float,
    submitter_id: int | None = None,
    config: Settings = settings,
) -> Toilet:
    """Validate and insert a user submission as one serialized step.

    The location lock is held from the duplicate check until the insert
    commits, so concurrent submissions at one spot yield a single toilet.
    """
    lat, lon = data["lat"], data["lon"]
    try:
        toilet_store.lock_location(db, lat, lon, config.duplicate_radius_m)
        validate_submission(db, lat, lon, submitter_lat, submitter_lon, config)
    except BaseException:
        db.rollback()
        raise
    return toilet_store.insert_toilet(db, data, submitter_id=submitter_id, is_user_created=True)
