from app.services import toilet_store
from app.services.importer import import_toilets, toilet_from_osm


def _node(node_id, **tags):
    return {"id": node_id, "lat": 41.3874, "lon": 2.1686 + node_id * 0.01, "tags": {"amenity": "toilets", **tags}}


def test_non_toilet_nodes_are_ignored():
    assert toilet_from_osm({"id": 1, "lat": 1.0, "lon": 1.0, "tags": {"amenity": "bench"}}) is None
    assert toilet_from_osm({"id": 1, "lat": 1.0, "lon": 1.0}) is None
    assert toilet_from_osm({"id": 1, "lat": None, "lon": 1.0, "tags": {"amenity": "toilets"}}) is None


def test_fee_and_wheelchair_flags():
    free = toilet_from_osm(_node(1, fee="no", wheelchair="designated"))
    assert free["external_id"] == "node/1"
    assert free["is_free"] is True
    assert free["is_paid"] is False
    assert free["is_accessible"] is True

    paid = toilet_from_osm(_node(2, fee="0.50 EUR"))
    assert paid["is_paid"] is True
    assert paid["is_free"] is False
    assert paid["is_accessible"] is False

    assert toilet_from_osm(_node(3, fee="yes"))["is_paid"] is True
    assert toilet_from_osm(_node(4, fee="50 cent"))["is_paid"] is True
    assert toilet_from_osm(_node(5))["fee"] is None


def test_import_creates_trusted_records(db):
    imported, skipped, failed = import_toilets(db, [_node(1, name="Plaça"), _node(2), {"id": 3, "tags": {}}])

    assert (imported, skipped, failed) == (2, 1, 0)
    toilet = toilet_store.get_by_external_id(db, "node/1")
    assert toilet.is_verified is True
    assert toilet.verify_count == 3
    assert toilet.report_count == 0
    assert toilet.is_user_created is False
    assert toilet.name == "Plaça"


def test_import_skips_existing_external_ids(db):
    import_toilets(db, [_node(1)])
    assert import_toilets(db, [_node(1), _node(2)]) == (1, 1, 0)


def test_import_counts_invalid_geometry_as_failed(db):
    bad = {"id": 9, "lat": 123.0, "lon": 0.0, "tags": {"amenity": "toilets"}}
    assert import_toilets(db, [bad]) == (0, 0, 1)
