"""Location store: persistence and spatial queries over toilets."""

from __future__ import annotations

import uuid
from math import floor
from typing import Any

from geoalchemy2 import Geography
from geoalchemy2.functions import ST_DWithin, ST_MakePoint, ST_SetSRID
from sqlalchemy import Select, and_, cast, column, func, literal_column, or_, select, table, text, update
from sqlalchemy.orm import Session

from app.core.errors import InvalidGeometry, NotFound
from app.models.toilet import Toilet
from app.models.user import User
from app.services.geo import bounding_box, distance_meters, is_valid_coordinate

DESCRIPTIVE_FIELDS = (
    "name",
    "operator",
    "fee",
    "is_free",
    "is_paid",
    "opening_hours",
    "wheelchair",
    "is_accessible",
)

GEOGRAPHY = Geography(geometry_type="POINT", srid=4326)

# Unmapped PostGIS column, created by app.db.init_db on PostgreSQL only.
_spatial = table("toilets", column("id"), column("location", GEOGRAPHY))
_location = literal_column("toilets.location", type_=GEOGRAPHY)


def _point(lat: float, lon: float):
    return cast(ST_SetSRID(ST_MakePoint(lon, lat), 4326), GEOGRAPHY)


def _uses_postgis(db: Session) -> bool:
    return db.get_bind().dialect.name == "postgresql"


def _check_geometry(lat: float, lon: float) -> None:
    if not is_valid_coordinate(lat, lon):
        raise InvalidGeometry(f"Invalid coordinates: lat={lat}, lon={lon}")


def postgis_radius_stmt(lat: float, lon: float, radius_m: float) -> Select:
    """Exact geodesic radius query served by the GiST index."""
    return (
        select(Toilet)
        .where(Toilet.is_hidden.is_(False), ST_DWithin(_location, _point(lat, lon), radius_m))
        .order_by(Toilet.id)
    )


def bbox_prefilter_stmt(lat: float, lon: float, radius_m: float) -> Select:
    """Bounding-box candidate query; results still need an exact distance check."""
    box = bounding_box(lat, lon, radius_m)
    conditions = [
        Toilet.is_hidden.is_(False),
        Toilet.lat >= box.min_lat,
        Toilet.lat <= box.max_lat,
    ]
    if box.wraps_antimeridian:
        # box wraps the antimeridian: split into two longitude intervals
        if box.min_lon < -180.0:
            conditions.append(or_(Toilet.lon >= box.min_lon + 360.0, Toilet.lon <= box.max_lon))
        else:
            conditions.append(or_(Toilet.lon >= box.min_lon, Toilet.lon <= box.max_lon - 360.0))
    else:
        conditions.append(and_(Toilet.lon >= box.min_lon, Toilet.lon <= box.max_lon))
    return select(Toilet).where(*conditions).order_by(Toilet.id)


def find_in_radius(db: Session, lat: float, lon: float, radius_m: float) -> list[Toilet]:
    """Return visible toilets whose distance to (lat, lon) is at most ``radius_m``."""
    _check_geometry(lat, lon)
    if _uses_postgis(db):
        return list(db.execute(postgis_radius_stmt(lat, lon, radius_m)).scalars().all())

    candidates = db.execute(bbox_prefilter_stmt(lat, lon, radius_m)).scalars().all()
    return [t for t in candidates if distance_meters(lat, lon, t.lat, t.lon) <= radius_m]


def nearest_within(db: Session, lat: float, lon: float, radius_m: float) -> tuple[Toilet, float] | None:
    """Closest visible toilet within ``radius_m`` and its distance, if any."""
    found = [(t, distance_meters(lat, lon, t.lat, t.lon)) for t in find_in_radius(db, lat, lon, radius_m)]
    if not found:
        return None
    return min(found, key=lambda pair: pair[1])


# Advisory lock keys: one per 0.001 degree grid cell, plus a shared global key
# that a caller whose neighbourhood spans too many cells takes exclusively.
LOCK_CELL_DEGREES = 0.001
MAX_LOCK_CELLS = 16
_GLOBAL_LOCK_KEY = 0x70117E7


def _cell_lock_keys(lat: float, lon: float, radius_m: float) -> list[int] | None:
    box = bounding_box(lat, lon, radius_m)
    if box.wraps_antimeridian:
        return None
    lat_cells = range(floor(box.min_lat / LOCK_CELL_DEGREES), floor(box.max_lat / LOCK_CELL_DEGREES) + 1)
    lon_cells = range(floor(box.min_lon / LOCK_CELL_DEGREES), floor(box.max_lon / LOCK_CELL_DEGREES) + 1)
    if len(lat_cells) * len(lon_cells) > MAX_LOCK_CELLS:
        return None
    return sorted(1 + (i + 100_000) * 1_000_000 + (j + 200_000) for i in lat_cells for j in lon_cells)


def lock_location(db: Session, lat: float, lon: float, radius_m: float) -> None:
    """Serialize writers whose ``radius_m`` neighbourhoods may overlap.

    Held until the current transaction ends. Two points closer than
    ``radius_m`` always share a grid cell key, so a check-then-insert
    done under this lock cannot race another one nearby.
    """
    _check_geometry(lat, lon)
    if _uses_postgis(db):
        keys = _cell_lock_keys(lat, lon, radius_m)
        if keys is None:
            db.execute(select(func.pg_advisory_xact_lock(_GLOBAL_LOCK_KEY)))
            return
        db.execute(select(func.pg_advisory_xact_lock_shared(_GLOBAL_LOCK_KEY)))
        for key in keys:
            db.execute(select(func.pg_advisory_xact_lock(key)))
        return

    # pysqlite defers BEGIN to the first write; take the database write lock now
    if not db.connection().connection.dbapi_connection.in_transaction:
        db.execute(text("BEGIN IMMEDIATE"))


def get_toilet(db: Session, toilet_id: int, include_hidden: bool = False) -> Toilet:
    toilet = db.get(Toilet, toilet_id)
    if toilet is None or (toilet.is_hidden and not include_hidden):
        raise NotFound(f"Toilet {toilet_id} not found")
    return toilet


def get_by_external_id(db: Session, external_id: str) -> Toilet | None:
    return db.execute(select(Toilet).where(Toilet.external_id == external_id)).scalar_one_or_none()


def _sync_location(db: Session, toilet: Toilet) -> None:
    """Write the geography column from lat/lon; caller owns the transaction."""
    if not _uses_postgis(db):
        return
    db.execute(
        update(_spatial)
        .where(_spatial.c.id == toilet.id)
        .values(location=_point(toilet.lat, toilet.lon))
    )


def insert_toilet(
    db: Session,
    data: dict[str, Any],
    *,
    submitter_id: int | None = None,
    is_user_created: bool = False,
    verify_count: int = 0,
    is_verified: bool = False,
) -> Toilet:
    """Insert a toilet and its spatial index value in one transaction."""
    lat = float(data["lat"])
    lon = float(data["lon"])
    _check_geometry(lat, lon)

    if submitter_id is not None and db.get(User, submitter_id) is None:
        raise NotFound(f"User {submitter_id} not found")

    external_id = data.get("external_id") or f"user/{uuid.uuid4().hex}"
    toilet = Toilet(
        external_id=external_id,
        lat=lat,
        lon=lon,
        is_user_created=is_user_created,
        created_by_id=submitter_id,
        report_count=0,
        verify_count=verify_count,
        is_verified=is_verified,
        is_hidden=False,
        **{field: data[field] for field in DESCRIPTIVE_FIELDS if data.get(field) is not None},
    )
    try:
        db.add(toilet)
        db.flush()
        _sync_location(db, toilet)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(toilet)
    return toilet


def find_hidden(db: Session) -> list[Toilet]:
    return list(
        db.execute(select(Toilet).where(Toilet.is_hidden.is_(True)).order_by(Toilet.updated_at.desc()))
        .scalars()
        .all()
    )


def restore_toilet(db: Session, toilet_id: int) -> Toilet:
    """Unhide a toilet and clear its reports."""
    toilet = get_toilet(db, toilet_id, include_hidden=True)
    try:
        toilet.is_hidden = False
        toilet.report_count = 0
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(toilet)
    return toilet


def delete_toilet(db: Session, toilet_id: int) -> None:
    """Permanently remove a toilet with its votes and reviews."""
    toilet = get_toilet(db, toilet_id, include_hidden=True)
    try:
        db.delete(toilet)
        db.commit()
    except Exception:
        db.rollback()
        raise
