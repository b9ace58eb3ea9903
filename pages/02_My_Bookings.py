import streamlit as st

from equiplend.catalog import bookings_frame
from equiplend.dates import format_date_readable, status_text
from equiplend.models import TERMINAL_STATUSES
from equiplend.ui import get_manager, identity_sidebar, show_result

st.set_page_config(page_title="My Bookings", page_icon="🧾", layout="wide")
st.title("My Bookings")

manager = get_manager()
user = identity_sidebar()

if user is None:
    st.info("Pick a user in the sidebar to see your bookings.")
    st.stop()

mine = manager.user_bookings(user.id)
if not mine:
    st.info("You have no bookings yet. Request equipment on the Catalog page.")
    st.stop()

st.dataframe(bookings_frame(mine), use_container_width=True)

open_ = [b for b in mine if b.status not in TERMINAL_STATUSES]
if not open_:
    st.stop()

st.markdown("### Change or cancel")
by_id = {b.id: b for b in open_}
sel = st.selectbox(
    "Booking",
    list(by_id),
    format_func=lambda i: f"{by_id[i].equipment_name} • {format_date_readable(by_id[i].start_date)}"
                          f" – {format_date_readable(by_id[i].end_date)} • {status_text(by_id[i].status)}",
)
b = by_id[sel]

with st.form("edit_form"):
    c1, c2, c3 = st.columns(3)
    with c1:
        start = st.date_input("Start date", value=b.start_date)
    with c2:
        end = st.date_input("End date", value=b.end_date)
    with c3:
        qty = st.number_input("Qty", min_value=1, step=1, value=b.quantity)
    purpose = st.text_area("Purpose", value=b.purpose)
    save = st.form_submit_button("Save changes")
    if save:
        res = manager.update_booking(user, b.id, start, end, int(qty), purpose)
        if show_result(res, "Booking updated."):
            st.rerun()

if st.button("Cancel this booking", disabled=b.status not in ("pending", "approved")):
    res = manager.cancel_booking(user, b.id)
    if show_result(res, "Booking cancelled."):
        st.rerun()
