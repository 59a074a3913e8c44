"""Database initialization utilities."""

from sqlalchemy import text
from sqlalchemy.engine import Engine

from app.db.base import Base
from app.db.session import engine as default_engine

# PostGIS geography column kept next to lat/lon; radius queries run against it.
POSTGIS_STATEMENTS = (
    "CREATE EXTENSION IF NOT EXISTS postgis",
    "ALTER TABLE toilets ADD COLUMN IF NOT EXISTS location geography(Point, 4326)",
    "CREATE INDEX IF NOT EXISTS toilets_location_gist ON toilets USING GIST (location)",
    "UPDATE toilets SET location = ST_SetSRID(ST_MakePoint(lon, lat), 4326)::geography "
    "WHERE location IS NULL",
)


def init_db(engine: Engine | None = None) -> None:
    """Create tables and, on PostgreSQL, the spatial column + index."""
    engine = engine or default_engine
    if engine.dialect.name == "postgresql":
        with engine.connect() as conn:
            conn.execute(text(POSTGIS_STATEMENTS[0]))
            conn.commit()
    Base.metadata.create_all(bind=engine)
    if engine.dialect.name == "postgresql":
        with engine.connect() as conn:
            for statement in POSTGIS_STATEMENTS[1:]:
                conn.execute(text(statement))
            conn.commit()
