import streamlit as st

from equiplend.catalog import (
    bookings_frame,
    equipment_from_frame,
    load_catalog_from_bytes,
)
from equiplend.dates import format_date_readable, status_text
from equiplend.models import STATUSES
from equiplend.reports import generate_bookings_pdf
from equiplend.ui import get_manager, identity_sidebar, show_result

st.set_page_config(page_title="Admin", page_icon="🛠️", layout="wide")
st.title("Admin Dashboard")

manager = get_manager()
user = identity_sidebar()

if user is None or not user.is_admin:
    st.warning("Only admins can use this page.")
    st.stop()


def _label(b):
    return (f"{b.equipment_name} ×{b.quantity} • {b.user_name} • "
            f"{format_date_readable(b.start_date)} – {format_date_readable(b.end_date)}")


pending = manager.pending_bookings()
approved = manager.bookings_by_status("approved")
active = manager.active_bookings()

c1, c2, c3 = st.columns(3)
c1.metric("Pending", len(pending))
c2.metric("Ready for checkout", len(approved))
c3.metric("Checked out", len(active))

# Pending requests
st.markdown("### Pending requests")
for b in pending:
    with st.expander(_label(b)):
        st.write(b.purpose or "_no purpose given_")
        reason = st.text_input("Rejection reason", key=f"reason_{b.id}")
        a, r = st.columns(2)
        if a.button("Approve", key=f"approve_{b.id}"):
            if show_result(manager.approve_booking(user, b.id), "Approved."):
                st.rerun()
        if r.button("Reject", key=f"reject_{b.id}"):
            if show_result(manager.reject_booking(user, b.id, reason), "Rejected."):
                st.rerun()

# Checkout / return desk
st.markdown("### Checkout desk")
for b in approved:
    cols = st.columns([5, 1])
    cols[0].write(_label(b))
    if cols[1].button("Check out", key=f"checkout_{b.id}"):
        if show_result(manager.checkout_booking(user, b.id), "Checked out."):
            st.rerun()

st.markdown("### Returns")
for b in active:
    cols = st.columns([5, 1])
    cols[0].write(_label(b))
    if cols[1].button("Return", key=f"return_{b.id}"):
        if show_result(manager.return_booking(user, b.id), "Returned."):
            st.rerun()

# All bookings + exports
st.markdown("### All bookings")
status = st.selectbox("Status", ["(all)"] + list(STATUSES), format_func=lambda s: s if s == "(all)" else status_text(s))
rows = manager.all_bookings() if status == "(all)" else manager.bookings_by_status(status)
df = bookings_frame(rows)
st.dataframe(df, use_container_width=True)

e1, e2 = st.columns(2)
e1.download_button("Download CSV", df.to_csv(index=False).encode("utf-8"),
                   file_name="bookings.csv", mime="text/csv")
e2.download_button("📄 Download PDF", generate_bookings_pdf(rows, title=status, generated_for=user.name),
                   file_name="bookings.pdf", mime="application/pdf")

if rows:
    with st.form("delete_form"):
        to_delete = st.selectbox("Delete booking (cannot be undone)", [b.id for b in rows])
        if st.form_submit_button("Delete"):
            if show_result(manager.delete_booking(user, to_delete), "Deleted."):
                st.rerun()

# Catalog import
with st.sidebar:
    st.subheader("Import / Replace Catalog")
    up = st.file_uploader("Excel (.xlsx, one sheet per category) or CSV", type=["xlsx", "csv"])
    if up is not None and st.button("Replace catalog"):
        items = equipment_from_frame(load_catalog_from_bytes(up.read(), up.name))
        if items:
            show_result(manager.import_catalog(user, items),
                        f"Catalog loaded ({len(items)} items).")
        else:
            st.error("No equipment rows found in that file.")
