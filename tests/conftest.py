from datetime import date

import pytest

from equiplend.bookings import BookingStore
from equiplend.lifecycle import BookingManager
from equiplend.models import Actor, Equipment
from equiplend.registry import EquipmentRegistry
from equiplend.store import MemoryStore

TODAY = date(2024, 5, 1)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def registry(store):
    reg = EquipmentRegistry(store)
    reg.replace_all([
        Equipment(id="E1", name="Projector", quantity=5, available=5, category="AV"),
        Equipment(id="E2", name="Camera", quantity=2, available=2, category="Media"),
    ])
    return reg


@pytest.fixture
def manager(registry, store):
    return BookingManager(registry, BookingStore(store), today=lambda: TODAY)


@pytest.fixture
def admin():
    return Actor(id="a1", name="Admin", email="admin@school.edu", role="admin")


@pytest.fixture
def student():
    return Actor(id="s1", name="Sam", email="sam@school.edu", role="student")


@pytest.fixture
def other_student():
    return Actor(id="s2", name="Kim", email="kim@school.edu", role="student")


@pytest.fixture
def b1(manager, student):
    """Three projectors for 2024-06-01..2024-06-05, still pending."""
    res = manager.create_booking(student, "E1", "2024-06-01", "2024-06-05", 3,
                                 purpose="Science fair presentations")
    assert res.success, res.error
    return res.booking
