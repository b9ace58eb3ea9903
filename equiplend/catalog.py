from __future__ import annotations
import io
from typing import Iterable, List

import pandas as pd
import streamlit as st

from .dates import inclusive_days, status_text
from .models import Booking, Equipment

# ---- Demo catalog installed into an empty registry --------------------------------
SEED_EQUIPMENT: List[dict] = [
    {
        "id": "1", "name": "Dell Latitude 5520 Laptop", "category": "Laptops",
        "quantity": 15, "location": "IT Lab - Block A, Level 2",
        "description": "Intel Core i7 laptop for programming, design work and general productivity.",
        "specifications": ["Intel Core i7", "16GB RAM", "512GB SSD", '15.6" Display'],
    },
    {
        "id": "2", "name": "Epson EB-2250U Projector", "category": "Projectors",
        "quantity": 8, "location": "AV Equipment Room - Block B, Level 1",
        "description": "Full HD 5000 lumen projector for presentations and lectures.",
        "specifications": ["Full HD 1080p", "5000 Lumens", "HDMI/USB", "Wireless Display"],
    },
    {
        "id": "3", "name": "Canon EOS 90D DSLR Camera", "category": "Cameras",
        "quantity": 5, "location": "Media Lab - Block C, Level 3",
        "description": "32.5MP DSLR with 18-135mm lens kit for photography and video projects.",
        "specifications": ["32.5MP APS-C Sensor", "4K Video", "18-135mm Lens", "WiFi/Bluetooth"],
    },
    {
        "id": "4", "name": 'Apple iPad Pro 11"', "category": "Tablets",
        "quantity": 12, "location": "IT Lab - Block A, Level 2",
        "description": "M2 iPad Pro with Apple Pencil for digital art and note-taking.",
        "specifications": ["M2 Chip", '11" Display', "Apple Pencil", "256GB Storage"],
    },
    {
        "id": "5", "name": "Shure SM58 Microphone", "category": "Audio Equipment",
        "quantity": 10, "location": "AV Equipment Room - Block B, Level 1",
        "description": "Dynamic vocal microphone for performances and presentations.",
        "specifications": ["Dynamic Cardioid", "XLR Connection", "Built-in Pop Filter", "Shock Mount"],
    },
    {
        "id": "6", "name": "Arduino Starter Kit", "category": "Electronics",
        "quantity": 20, "location": "Electronics Lab - Block D, Level 1",
        "description": "Arduino Uno board with sensors, LEDs and components for STEM projects.",
        "specifications": ["Arduino Uno R3", "100+ Components", "Project Guide", "USB Cable"],
    },
]


def seed_equipment() -> List[Equipment]:
    return [Equipment.from_dict({**rec, "available": rec["quantity"]}) for rec in SEED_EQUIPMENT]


# ---- Header normalization helper ------------------------------------------------
def _normalize_cols(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    df.columns = (
        df.columns.astype(str)
        .str.strip().str.lower()
        .str.replace(r"[^\w]+", "_", regex=True)  # spaces/punct -> underscore
        .str.strip("_")
    )
    return df


_ALIASES = {
    "name": ["item", "model", "equipment", "title"],
    "quantity": ["qty", "total", "stock", "units", "qty_total"],
    "location": ["room", "place", "storage"],
    "description": ["desc", "notes"],
}


# ---- Canonicalize required columns and dtypes -----------------------------------
def _postprocess(out: pd.DataFrame) -> pd.DataFrame:
    for col, aliases in _ALIASES.items():
        if col in out.columns:
            continue
        for c in aliases:
            if c in out.columns:
                out = out.rename(columns={c: col})
                break
        else:
            out[col] = 0 if col == "quantity" else ""
    out = out[out["name"].astype(str).str.strip().ne("") & out["name"].notna()].copy()
    out["name"] = out["name"].astype(str).str.strip()
    out["quantity"] = pd.to_numeric(out["quantity"], errors="coerce").fillna(0).astype(int).clip(lower=0)
    if "available" in out.columns:
        out["available"] = pd.to_numeric(out["available"], errors="coerce")
        out["available"] = out["available"].fillna(out["quantity"]).astype(int)
        out["available"] = out["available"].clip(lower=0, upper=out["quantity"])
    else:
        out["available"] = out["quantity"]
    if "category" not in out.columns:
        out["category"] = "Uncategorized"
    out["category"] = out["category"].fillna("Uncategorized").astype(str)
    for col in ["description", "location"]:
        out[col] = out[col].fillna("").astype(str)
    if "id" not in out.columns:
        out["id"] = [str(i + 1) for i in range(len(out))]
    out["id"] = out["id"].astype(str)
    return out.reset_index(drop=True)


def _concat_sheets(sheets: dict) -> pd.DataFrame:
    frames = []
    for sheet_name, df in sheets.items():
        if df is None or df.empty:
            continue
        df = _normalize_cols(df)
        if "category" not in df.columns:
            df["category"] = sheet_name
        frames.append(df)
    if not frames:
        return pd.DataFrame()
    return _postprocess(pd.concat(frames, ignore_index=True))


# ---- Load ALL sheets, `category` = sheet name -------------------------------------
@st.cache_data(show_spinner=False)
def load_catalog_from_path(path: str) -> pd.DataFrame:
    """
    Reads an equipment workbook (every sheet) or a CSV file into one DataFrame.
    For workbooks the sheet name becomes the `category` unless a column says otherwise.
    """
    if str(path).lower().endswith(".csv"):
        return _postprocess(_normalize_cols(pd.read_csv(path)))
    return _concat_sheets(pd.read_excel(path, sheet_name=None))


# ---- Same but for uploaded bytes (st.file_uploader) -------------------------------
@st.cache_data(show_spinner=False)
def load_catalog_from_bytes(buf: bytes, filename: str = "catalog.xlsx") -> pd.DataFrame:
    if filename.lower().endswith(".csv"):
        return _postprocess(_normalize_cols(pd.read_csv(io.BytesIO(buf))))
    return _concat_sheets(pd.read_excel(io.BytesIO(buf), sheet_name=None))


def equipment_from_frame(df: pd.DataFrame) -> List[Equipment]:
    if df is None or df.empty:
        return []
    items = []
    for rec in df.to_dict(orient="records"):
        specs = rec.get("specifications", "")
        if isinstance(specs, str):
            rec["specifications"] = [s.strip() for s in specs.split(";") if s.strip()]
        elif not isinstance(specs, list):
            rec["specifications"] = []
        items.append(Equipment.from_dict(rec))
    return items


# ---- Tables for display / CSV export ------------------------------------------------
BOOKING_COLUMNS = [
    "id", "equipment_name", "user_name", "user_email", "start_date", "end_date",
    "days", "quantity", "status", "purpose", "rejection_reason",
    "created_at", "checked_out_at", "returned_at",
]


def bookings_frame(bookings: Iterable[Booking]) -> pd.DataFrame:
    rows = []
    for b in bookings:
        row = b.to_dict()
        row["days"] = inclusive_days(b.start_date, b.end_date)
        row["status"] = status_text(b.status)
        rows.append(row)
    if not rows:
        return pd.DataFrame(columns=BOOKING_COLUMNS)
    return pd.DataFrame(rows)[BOOKING_COLUMNS]


def equipment_frame(items: Iterable[Equipment]) -> pd.DataFrame:
    df = pd.DataFrame([e.to_dict() for e in items])
    if df.empty:
        return df
    return df[["id", "name", "category", "quantity", "available", "location"]]
