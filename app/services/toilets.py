"""Toilet service facade: search, submit, vote and admin actions."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.core.config import Settings, settings
from app.core.security import Identity
from app.db.session import store_errors
from app.models.vote import VoteType
from app.schemas.toilet import ToiletCreate, ToiletOut
from app.services import submission_guard, toilet_store, voting
from app.services.cache import QueryCache, cache_key_for
from app.services.users import get_or_create_user

logger = logging.getLogger(__name__)


class ToiletService:
    """Orchestrates store, guard, voting engine and query cache for one request."""

    def __init__(self, db: Session, cache: QueryCache[ToiletOut], config: Settings = settings) -> None:
        self.db = db
        self.cache = cache
        self.config = config

    def search(self, lat: float, lon: float, radius_m: float | None = None) -> list[ToiletOut]:
        """Visible toilets around a point; served from the cache when possible.

        The query runs on the quantized centre, so a cache miss returns the
        same set a hit would.
        """
        rounded_lat, rounded_lon, radius, key = cache_key_for(self.config, lat, lon, radius_m)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache HIT for key: %s", key)
            return cached

        logger.debug("Cache MISS for key: %s", key)
        with store_errors(self.db):
            toilets = toilet_store.find_in_radius(self.db, rounded_lat, rounded_lon, radius)
            items = [ToiletOut.model_validate(t) for t in toilets]
        self.cache.set(key, items)
        return items

    def get(self, toilet_id: int) -> ToiletOut:
        with store_errors(self.db):
            return ToiletOut.model_validate(toilet_store.get_toilet(self.db, toilet_id))

    def submit(self, payload: ToiletCreate, identity: Identity) -> ToiletOut:
        with store_errors(self.db):
            user = get_or_create_user(self.db, identity.external_id, identity.email)
            toilet = submission_guard.insert_checked(
                self.db,
                payload.to_store(),
                payload.user_lat,
                payload.user_lng,
                submitter_id=user.id,
                config=self.config,
            )
            created = ToiletOut.model_validate(toilet)
        logger.info("Toilet %s added by %s", created.id, identity.external_id)
        self.cache.invalidate_all()
        return created

    def vote(self, toilet_id: int, identity: Identity, vote_type: VoteType) -> ToiletOut:
        with store_errors(self.db):
            outcome = voting.record_vote(
                self.db, toilet_id, identity.external_id, vote_type, self.config, identity.email
            )
            updated = ToiletOut.model_validate(outcome.toilet)
        self.cache.invalidate_all()
        return updated

    def list_hidden(self) -> list[ToiletOut]:
        with store_errors(self.db):
            return [ToiletOut.model_validate(t) for t in toilet_store.find_hidden(self.db)]

    def restore(self, toilet_id: int) -> ToiletOut:
        with store_errors(self.db):
            restored = ToiletOut.model_validate(toilet_store.restore_toilet(self.db, toilet_id))
        logger.info("Toilet %s restored", toilet_id)
        self.cache.invalidate_all()
        return restored

    def delete(self, toilet_id: int) -> None:
        with store_errors(self.db):
            toilet_store.delete_toilet(self.db, toilet_id)
        logger.info("Toilet %s deleted", toilet_id)
        self.cache.invalidate_all()
