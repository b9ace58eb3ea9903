from __future__ import annotations

from io import BytesIO
from typing import Iterable, Optional

# PDF (ReportLab)
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .dates import format_date_readable, format_duration, inclusive_days, status_text
from .models import Booking


def generate_bookings_pdf(bookings: Iterable[Booking], title: str = "",
                          generated_for: Optional[str] = None) -> bytes:
    """Build a one-table PDF summary of the given bookings."""
    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=landscape(A4))
    styles = getSampleStyleSheet()
    elems = []

    header = "Equipment bookings"
    if title:
        header += f" | {title}"
    elems.append(Paragraph(header, styles["Title"]))
    if generated_for:
        elems.append(Paragraph(f"Prepared for: {generated_for}", styles["Normal"]))
    elems.append(Spacer(1, 8))

    bookings = list(bookings)
    if not bookings:
        elems.append(Paragraph("No bookings.", styles["Normal"]))
    else:
        data = [["Booking", "Equipment", "Borrower", "From", "To", "Duration", "Qty", "Status"]]
        for b in bookings:
            data.append([
                b.id,
                b.equipment_name,
                b.user_name,
                format_date_readable(b.start_date),
                format_date_readable(b.end_date),
                format_duration(inclusive_days(b.start_date, b.end_date)),
                str(b.quantity),
                status_text(b.status),
            ])

        t = Table(data, hAlign="LEFT", repeatRows=1)
        t.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
        ]))
        elems.append(t)

    doc.build(elems)
    pdf = buf.getvalue()
    buf.close()
    return pdf
