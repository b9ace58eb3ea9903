from datetime import date

import pandas as pd

from equiplend.catalog import (
    BOOKING_COLUMNS,
    _normalize_cols,
    _postprocess,
    bookings_frame,
    equipment_frame,
    equipment_from_frame,
    load_catalog_from_path,
    seed_equipment,
)
from equiplend.models import Booking
from equiplend.reports import generate_bookings_pdf


def test_seed_catalog_starts_fully_available():
    items = seed_equipment()
    assert len(items) == 6
    assert all(e.available == e.quantity for e in items)
    assert len({e.id for e in items}) == 6


def test_headers_and_aliases_are_normalized():
    raw = pd.DataFrame({
        " Item ": ["Tripod", "Light kit", None],
        "Qty": ["4", "x", "2"],
        "Room": ["Media Lab", None, "Store"],
    })
    df = _postprocess(_normalize_cols(raw))
    assert list(df["name"]) == ["Tripod", "Light kit"]
    assert list(df["quantity"]) == [4, 0]
    assert list(df["available"]) == [4, 0]
    assert list(df["location"]) == ["Media Lab", ""]
    assert list(df["category"]) == ["Uncategorized", "Uncategorized"]
    assert list(df["id"]) == ["1", "2"]


def test_available_column_is_clamped_to_quantity():
    raw = pd.DataFrame({"name": ["A", "B"], "quantity": [3, 3], "available": [5, None]})
    df = _postprocess(_normalize_cols(raw))
    assert list(df["available"]) == [3, 3]


def test_csv_import_builds_equipment(tmp_path):
    p = tmp_path / "catalog.csv"
    p.write_text(
        "ID,Name,Quantity,Category,Specifications\n"
        "L1,Laptop,10,Laptops,i7; 16GB RAM\n"
        "P1,Projector,3,AV,\n",
        encoding="utf-8",
    )
    items = equipment_from_frame(load_catalog_from_path(str(p)))
    assert [(e.id, e.name, e.quantity, e.available, e.category) for e in items] == [
        ("L1", "Laptop", 10, 10, "Laptops"),
        ("P1", "Projector", 3, 3, "AV"),
    ]
    assert items[0].specifications == ["i7", "16GB RAM"]
    assert items[1].specifications == []


def _booking(**kw):
    base = dict(id="b1", equipment_id="E1", equipment_name="Projector", user_id="u",
                user_name="Sam", user_email="sam@x", start_date=date(2024, 6, 1),
                end_date=date(2024, 6, 5), quantity=2, status="active")
    base.update(kw)
    return Booking(**base)


def test_bookings_frame():
    df = bookings_frame([_booking()])
    assert list(df.columns) == BOOKING_COLUMNS
    row = df.iloc[0]
    assert row["days"] == 5
    assert row["status"] == "Active (Checked Out)"
    assert row["start_date"] == "2024-06-01"
    assert bookings_frame([]).empty


def test_equipment_frame():
    df = equipment_frame(seed_equipment())
    assert list(df.columns) == ["id", "name", "category", "quantity", "available", "location"]
    assert equipment_frame([]).empty


def test_pdf_export():
    pdf = generate_bookings_pdf([_booking(), _booking(id="b2", status="pending")],
                                title="June", generated_for="Admin")
    assert pdf.startswith(b"%PDF")
    assert generate_bookings_pdf([]).startswith(b"%PDF")
