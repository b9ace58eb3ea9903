from datetime import date

from equiplend.bookings import BookingStore
from equiplend.db import SqlBlobStore, get_session, make_engine
from equiplend.db_models import KVBlob
from equiplend.lifecycle import BookingManager
from equiplend.models import Actor, Equipment
from equiplend.registry import EquipmentRegistry
from equiplend.store import BOOKINGS_KEY


def _store(tmp_path):
    return SqlBlobStore(engine=make_engine(f"sqlite:///{(tmp_path / 'blobs.db').as_posix()}"))


def test_blob_round_trip(tmp_path):
    s = _store(tmp_path)
    assert s.load("missing") is None
    s.save("things", [{"id": "1"}])
    s.save("things", [{"id": "1"}, {"id": "2"}])
    assert s.load("things") == [{"id": "1"}, {"id": "2"}]
    s.remove("things")
    assert s.load("things") is None


def test_corrupt_blob_reads_as_missing(tmp_path):
    s = _store(tmp_path)
    with get_session(s.engine) as session:
        session.add(KVBlob(key=BOOKINGS_KEY, value="{broken"))
        session.commit()
    assert BookingStore(s).list() == []


def test_lifecycle_on_database_store(tmp_path):
    s = _store(tmp_path)
    registry = EquipmentRegistry(s)
    registry.replace_all([Equipment(id="E1", name="Projector", quantity=5, available=5)])
    m = BookingManager(registry, BookingStore(s), today=lambda: date(2024, 5, 1))
    admin = Actor(id="a", name="A", email="a@x", role="admin")
    user = Actor(id="u", name="U", email="u@x")

    b = m.create_booking(user, "E1", "2024-06-01", "2024-06-05", 3).booking
    assert m.approve_booking(admin, b.id).success
    assert m.checkout_booking(admin, b.id).success
    assert registry.get("E1").available == 2

    reopened = BookingStore(_store(tmp_path))
    assert reopened.get(b.id).status == "active"
