import random

import pytest
from sqlalchemy.dialects import postgresql

from app.core.errors import InvalidGeometry, NotFound
from app.models.vote import Vote, VoteType
from app.services import toilet_store, voting
from app.services.geo import bounding_box, distance_meters
from helpers import north_of

CENTER = (52.52, 13.405)


def test_insert_initializes_trust_state(make_toilet):
    toilet = make_toilet(*CENTER, name="Alexanderplatz")

    assert toilet.id is not None
    assert toilet.external_id.startswith("user/")
    assert toilet.report_count == 0
    assert toilet.verify_count == 0
    assert toilet.is_verified is False
    assert toilet.is_hidden is False
    assert toilet.name == "Alexanderplatz"


def test_insert_generates_unique_external_ids(make_toilet):
    a = make_toilet(*CENTER)
    b = make_toilet(*north_of(*CENTER, 500))
    assert a.external_id != b.external_id


def test_insert_rejects_invalid_geometry(db):
    with pytest.raises(InvalidGeometry):
        toilet_store.insert_toilet(db, {"lat": 91.0, "lon": 0.0})
    with pytest.raises(InvalidGeometry):
        toilet_store.insert_toilet(db, {"lat": 0.0, "lon": 180.5})


def test_insert_with_unknown_submitter_fails(db):
    with pytest.raises(NotFound):
        toilet_store.insert_toilet(db, {"lat": 1.0, "lon": 1.0}, submitter_id=999)


def test_find_in_radius_returns_only_points_inside(make_toilet, db):
    inside = make_toilet(*north_of(*CENTER, 900))
    make_toilet(*north_of(*CENTER, 1100))

    found = toilet_store.find_in_radius(db, *CENTER, 1000)

    assert [t.id for t in found] == [inside.id]


def test_find_in_radius_drops_bounding_box_corners(make_toilet, db):
    box = bounding_box(*CENTER, 1000)
    corner_lat = CENTER[0] + 0.9 * (box.max_lat - CENTER[0])
    corner_lon = CENTER[1] + 0.9 * (box.max_lon - CENTER[1])
    corner = make_toilet(corner_lat, corner_lon)
    assert distance_meters(*CENTER, corner_lat, corner_lon) > 1000

    candidates = db.execute(toilet_store.bbox_prefilter_stmt(*CENTER, 1000)).scalars().all()
    assert corner.id in [t.id for t in candidates]
    assert toilet_store.find_in_radius(db, *CENTER, 1000) == []


def test_every_result_lies_within_radius(make_toilet, db):
    rng = random.Random(7)
    for _ in range(60):
        make_toilet(CENTER[0] + rng.uniform(-0.02, 0.02), CENTER[1] + rng.uniform(-0.03, 0.03))

    for radius in (300, 800, 1500):
        found = toilet_store.find_in_radius(db, *CENTER, radius)
        assert all(distance_meters(*CENTER, t.lat, t.lon) <= radius for t in found)
    assert toilet_store.find_in_radius(db, *CENTER, 1500)


def test_hidden_toilets_never_returned(make_toilet, db):
    toilet = make_toilet(*CENTER)
    toilet.is_hidden = True
    db.commit()

    assert toilet_store.find_in_radius(db, *CENTER, 5000) == []
    assert [t.id for t in toilet_store.find_hidden(db)] == [toilet.id]


def test_find_in_radius_across_antimeridian(make_toilet, db):
    east = make_toilet(0.0, -179.9995)
    found = toilet_store.find_in_radius(db, 0.0, 179.9995, 500)
    assert [t.id for t in found] == [east.id]


def test_find_in_radius_large_radius_at_high_latitude(make_toilet, db):
    toilet = make_toilet(80.37, 15.65)
    assert distance_meters(80.0, 0.0, 80.37, 15.65) < 300_000

    found = toilet_store.find_in_radius(db, 80.0, 0.0, 300_000)

    assert toilet.id in [t.id for t in found]


def test_nearby_points_share_a_lock_cell():
    here = (69.6492, 18.9553)
    there = north_of(*here, 19.9)
    assert set(toilet_store._cell_lock_keys(*here, 20)) & set(toilet_store._cell_lock_keys(*there, 20))
    assert toilet_store._cell_lock_keys(0.0, 179.99999, 20) is None


def test_nearest_within(make_toilet, db):
    far = make_toilet(*north_of(*CENTER, 15))
    near = make_toilet(*north_of(*CENTER, 5))

    toilet, distance = toilet_store.nearest_within(db, *CENTER, 20)

    assert toilet.id == near.id
    assert distance == pytest.approx(5, abs=1e-6)
    assert far.id != near.id
    assert toilet_store.nearest_within(db, *CENTER, 1) is None


def test_get_toilet_hides_hidden_unless_asked(make_toilet, db):
    toilet = make_toilet(*CENTER)
    toilet.is_hidden = True
    db.commit()

    with pytest.raises(NotFound):
        toilet_store.get_toilet(db, toilet.id)
    assert toilet_store.get_toilet(db, toilet.id, include_hidden=True).id == toilet.id


def test_restore_unhides_and_resets_reports(make_toilet, db):
    toilet = make_toilet(*CENTER)
    for n in range(3):
        voting.record_vote(db, toilet.id, f"user-{n}", VoteType.REPORT)
    assert toilet_store.get_toilet(db, toilet.id, include_hidden=True).is_hidden

    restored = toilet_store.restore_toilet(db, toilet.id)

    assert restored.is_hidden is False
    assert restored.report_count == 0
    assert [t.id for t in toilet_store.find_in_radius(db, *CENTER, 300)] == [toilet.id]


def test_delete_removes_toilet_and_votes(make_toilet, db):
    toilet = make_toilet(*CENTER)
    voting.record_vote(db, toilet.id, "user-1", VoteType.VERIFY)

    toilet_store.delete_toilet(db, toilet.id)

    with pytest.raises(NotFound):
        toilet_store.get_toilet(db, toilet.id, include_hidden=True)
    assert db.query(Vote).count() == 0


def test_delete_unknown_toilet(db):
    with pytest.raises(NotFound):
        toilet_store.delete_toilet(db, 12345)


def test_postgis_statement_uses_radius_predicate():
    sql = str(toilet_store.postgis_radius_stmt(52.52, 13.405, 500).compile(dialect=postgresql.dialect()))
    assert "ST_DWithin" in sql
    assert "toilets.location" in sql
    assert "is_hidden" in sql
