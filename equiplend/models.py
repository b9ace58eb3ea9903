# equiplend/models.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from .dates import to_date

# ---------------------------
# Booking status machine
# ---------------------------

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
ACTIVE = "active"
COMPLETED = "completed"
CANCELLED = "cancelled"

STATUSES = (PENDING, APPROVED, REJECTED, ACTIVE, COMPLETED, CANCELLED)
TERMINAL_STATUSES = frozenset({REJECTED, COMPLETED, CANCELLED})
# bookings in these statuses no longer count against capacity
RELEASED_STATUSES = frozenset({REJECTED, CANCELLED})

TRANSITIONS = {
    PENDING: frozenset({APPROVED, REJECTED, CANCELLED}),
    APPROVED: frozenset({ACTIVE, CANCELLED}),
    ACTIVE: frozenset({COMPLETED}),
    REJECTED: frozenset(),
    COMPLETED: frozenset(),
    CANCELLED: frozenset(),
}

ADMIN_ROLE = "admin"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _pick(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}


# ---------------------------
# Catalog
# ---------------------------

@dataclass
class Equipment:
    id: str
    name: str
    quantity: int
    available: int
    category: str = "Uncategorized"
    description: str = ""
    location: str = ""
    specifications: List[str] = field(default_factory=list)
    image_url: Optional[str] = None
    status: str = "available"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Equipment":
        kw = _pick(cls, data)
        kw["id"] = str(kw["id"])
        kw["quantity"] = int(kw.get("quantity") or 0)
        kw["available"] = int(kw.get("available", kw["quantity"]) or 0)
        kw.setdefault("name", "")
        return cls(**kw)


# ---------------------------
# Bookings
# ---------------------------

@dataclass
class Booking:
    id: str
    equipment_id: str
    equipment_name: str
    user_id: str
    user_name: str
    user_email: str
    start_date: date
    end_date: date
    quantity: int
    purpose: str = ""
    status: str = PENDING
    rejection_reason: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    checked_out_at: Optional[str] = None
    returned_at: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def holds_capacity(self) -> bool:
        return self.status not in RELEASED_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["start_date"] = self.start_date.isoformat()
        d["end_date"] = self.end_date.isoformat()
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Booking":
        kw = _pick(cls, data)
        kw["id"] = str(kw["id"])
        kw["equipment_id"] = str(kw["equipment_id"])
        kw["start_date"] = to_date(kw["start_date"])
        kw["end_date"] = to_date(kw["end_date"])
        kw["quantity"] = int(kw["quantity"])
        return cls(**kw)


# ---------------------------
# Parties
# ---------------------------

@dataclass(frozen=True)
class Actor:
    """Whoever issues a command; supplied by the session layer."""

    id: str
    name: str
    email: str
    role: str = "student"

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Actor":
        kw = _pick(cls, data)
        kw["id"] = str(kw["id"])
        kw.setdefault("name", kw.get("email", "").split("@")[0])
        kw.setdefault("email", "")
        return cls(**kw)


# ---------------------------
# Command results
# ---------------------------

@dataclass(frozen=True)
class Availability:
    available: bool
    available_quantity: int
    error: Optional[str] = None
    code: Optional[str] = None


@dataclass(frozen=True)
class BookingResult:
    success: bool
    booking: Optional[Booking] = None
    error: Optional[str] = None
    code: Optional[str] = None
    available_quantity: Optional[int] = None

    @classmethod
    def ok(cls, booking: Optional[Booking] = None) -> "BookingResult":
        return cls(success=True, booking=booking)

    @classmethod
    def fail(cls, exc) -> "BookingResult":
        return cls(
            success=False,
            error=exc.message,
            code=exc.code,
            available_quantity=getattr(exc, "available_quantity", None),
        )
