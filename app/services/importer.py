"""Bulk import of open-data (OpenStreetMap) toilet nodes."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from sqlalchemy.orm import Session

from app.core.config import Settings, settings
from app.core.errors import InvalidGeometry
from app.services import toilet_store

logger = logging.getLogger(__name__)

PAID_MARKERS = ("cent", "eur", "€")


def toilet_from_osm(node: dict[str, Any]) -> dict[str, Any] | None:
    """Map an OSM node ``{"id", "lat", "lon", "tags"}`` to row data.

    Returns None for nodes that are not ``amenity=toilets`` or lack coordinates.
    """
    tags: dict[str, str] = node.get("tags") or {}
    if tags.get("amenity") != "toilets":
        return None
    if node.get("id") is None or node.get("lat") is None or node.get("lon") is None:
        return None

    fee = tags.get("fee") or None
    wheelchair = tags.get("wheelchair") or None
    fee_lower = (fee or "").lower()
    return {
        "external_id": f"node/{node['id']}",
        "lat": float(node["lat"]),
        "lon": float(node["lon"]),
        "name": tags.get("name") or None,
        "operator": tags.get("operator") or None,
        "fee": fee,
        "is_free": fee in ("no", "0"),
        "is_paid": fee == "yes" or any(marker in fee_lower for marker in PAID_MARKERS),
        "opening_hours": tags.get("opening_hours") or None,
        "wheelchair": wheelchair,
        "is_accessible": wheelchair in ("yes", "designated"),
    }


def import_toilets(
    db: Session,
    nodes: Iterable[dict[str, Any]],
    config: Settings = settings,
) -> tuple[int, int, int]:
    """Insert trusted, pre-verified toilets. Returns (imported, skipped, failed)."""
    imported = 0
    skipped = 0
    failed = 0

    for node in nodes:
        data = toilet_from_osm(node)
        if data is None or toilet_store.get_by_external_id(db, data["external_id"]) is not None:
            skipped += 1
            continue
        try:
            toilet_store.insert_toilet(
                db,
                data,
                verify_count=config.trusted_verify_count,
                is_verified=True,
            )
        except InvalidGeometry as exc:
            failed += 1
            logger.warning("Skipping %s: %s", data["external_id"], exc.message)
            continue
        imported += 1
        if imported % 1000 == 0:
            logger.info("Imported %d toilets...", imported)

    return imported, skipped, failed
