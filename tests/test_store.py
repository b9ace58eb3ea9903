import json
import threading

import pytest

from equiplend.accounts import DEMO_USERS, current_user, list_users, sign_in, sign_out
from equiplend.bookings import BookingStore
from equiplend.errors import AvailabilityBoundsError, NotFoundError, StorageError
from equiplend.models import Equipment
from equiplend.registry import EquipmentRegistry
from equiplend.store import (
    BOOKINGS_KEY,
    EQUIPMENT_KEY,
    JsonFileStore,
    MemoryStore,
    USERS_KEY,
    load_records,
)


def test_json_file_store_round_trip(tmp_path):
    s = JsonFileStore(tmp_path / "store")
    s.save("things", [{"id": "1", "name": "Tripod ü"}])
    assert s.load("things") == [{"id": "1", "name": "Tripod ü"}]
    raw = (tmp_path / "store" / "things.json").read_text(encoding="utf-8")
    assert "Tripod ü" in raw
    s.remove("things")
    assert s.load("things") is None
    s.remove("things")


def test_missing_and_corrupt_collections_read_as_empty(tmp_path):
    s = JsonFileStore(tmp_path)
    assert load_records(s, BOOKINGS_KEY) == []
    (tmp_path / f"{BOOKINGS_KEY}.json").write_text("{not json", encoding="utf-8")
    assert load_records(s, BOOKINGS_KEY) == []
    (tmp_path / f"{BOOKINGS_KEY}.json").write_text(json.dumps({"a": 1}), encoding="utf-8")
    assert load_records(s, BOOKINGS_KEY) == []


def test_memory_store_corrupt_blob():
    s = MemoryStore()
    s.put_raw(EQUIPMENT_KEY, "]]")
    assert EquipmentRegistry(s).list() == []


def test_malformed_booking_records_are_skipped():
    s = MemoryStore({BOOKINGS_KEY: [{"id": "x"}, {
        "id": "ok", "equipment_id": "E1", "equipment_name": "P", "user_id": "u",
        "user_name": "U", "user_email": "u@x", "start_date": "2024-06-01",
        "end_date": "2024-06-02", "quantity": 1, "status": "pending",
    }]})
    assert [b.id for b in BookingStore(s).list()] == ["ok"]


def test_registry_adjust_availability_bounds():
    reg = EquipmentRegistry(MemoryStore())
    reg.replace_all([Equipment(id="E1", name="P", quantity=3, available=3)])
    assert reg.adjust_availability("E1", -2).available == 1
    with pytest.raises(AvailabilityBoundsError):
        reg.adjust_availability("E1", -2)
    with pytest.raises(AvailabilityBoundsError):
        reg.adjust_availability("E1", 3)
    assert reg.get("E1").available == 1
    with pytest.raises(NotFoundError):
        reg.adjust_availability("E9", 1)


def test_registry_seed_only_once():
    reg = EquipmentRegistry(MemoryStore())
    assert reg.seed_if_empty([Equipment(id="1", name="A", quantity=1, available=1, category="B")])
    assert not reg.seed_if_empty([Equipment(id="2", name="Z", quantity=1, available=1)])
    assert [e.id for e in reg.list()] == ["1"]
    assert reg.categories() == ["B"]


def test_registry_persists_across_instances(tmp_path):
    EquipmentRegistry(JsonFileStore(tmp_path)).replace_all(
        [Equipment(id="E1", name="P", quantity=2, available=2)])
    EquipmentRegistry(JsonFileStore(tmp_path)).adjust_availability("E1", -1)
    assert EquipmentRegistry(JsonFileStore(tmp_path)).get("E1").available == 1


def test_demo_accounts_and_session():
    s = MemoryStore()
    users = list_users(s)
    assert [u.id for u in users] == [u.id for u in DEMO_USERS]
    session = {}
    assert current_user(session) is None
    admin = next(u for u in users if u.is_admin)
    sign_in(session, admin)
    assert current_user(session) == admin
    sign_out(session)
    assert current_user(session) is None
    sign_out(session)


def test_sessions_do_not_share_identity(tmp_path):
    s = JsonFileStore(tmp_path)
    admin, _, student = list_users(s)
    first, second = {}, {}
    sign_in(first, admin)
    sign_in(second, student)
    assert current_user(first) == admin
    assert current_user(second) == student
    sign_out(second)
    assert current_user(first) == admin
    assert sorted(p.name for p in tmp_path.iterdir()) == [f"{USERS_KEY}.json"]


def test_json_save_leaves_no_temp_files(tmp_path):
    s = JsonFileStore(tmp_path)
    for n in range(3):
        s.save(BOOKINGS_KEY, [{"n": n}])
    assert s.load(BOOKINGS_KEY) == [{"n": 2}]
    assert [p.name for p in tmp_path.iterdir()] == [f"{BOOKINGS_KEY}.json"]


def test_parallel_json_saves_stay_whole(tmp_path):
    s = JsonFileStore(tmp_path)
    errors = []

    def write(n):
        try:
            for _ in range(20):
                s.save(BOOKINGS_KEY, [{"writer": n}])
        except StorageError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=write, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert s.load(BOOKINGS_KEY)[0]["writer"] in range(4)
    assert not list(tmp_path.glob("*.tmp"))
