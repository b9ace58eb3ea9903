import streamlit as st
from datetime import date, timedelta

from equiplend.catalog import equipment_frame
from equiplend.config import load_settings
from equiplend.dates import format_duration, inclusive_days, max_booking_date
from equiplend.ui import get_manager, identity_sidebar, show_result

st.set_page_config(page_title="Catalog", page_icon="📦", layout="wide")
st.title("Equipment Catalog")

manager = get_manager()
user = identity_sidebar()

items = manager.registry.list()
if not items:
    st.info("No equipment yet. An admin can import a catalog on the Admin page.")
    st.stop()

# Filters
with st.form("filter_form"):
    c1, c2, c3 = st.columns(3)
    with c1:
        cat = st.selectbox("Category", ["(all)"] + manager.registry.categories())
    with c2:
        only_free = st.checkbox("Only items with units on the shelf")
    with c3:
        s = st.text_input("Search (name/description contains)")
    st.form_submit_button("Apply")

shown = [e for e in items
         if (cat == "(all)" or e.category == cat)
         and (not only_free or e.available > 0)
         and (not s or s.lower() in (e.name + " " + e.description).lower())]

st.dataframe(equipment_frame(shown), use_container_width=True)

# Booking request
st.markdown("### Request a booking")
if user is None:
    st.info("Pick a user in the sidebar to request equipment.")
    st.stop()
if not shown:
    st.stop()

by_id = {e.id: e for e in shown}
# date pickers stop at the configured horizon; the booking core has no limit
days_ahead = load_settings().max_days_ahead
limit = max_booking_date(days_ahead) if days_ahead else None

with st.form("booking_form"):
    c1, c2, c3, c4 = st.columns([3, 2, 2, 1])
    with c1:
        eq_id = st.selectbox("Equipment", list(by_id),
                             format_func=lambda i: f"{by_id[i].category} • {by_id[i].name}")
    with c2:
        start = st.date_input("Start date", value=date.today(), min_value=date.today(), max_value=limit)
    with c3:
        end = st.date_input("End date", value=date.today() + timedelta(days=1),
                            min_value=date.today(), max_value=limit)
    with c4:
        qty = st.number_input("Qty", min_value=1, step=1, value=1)
    purpose = st.text_area("Purpose of booking")
    check = st.form_submit_button("Check availability")
    submit = st.form_submit_button("Submit request")

if check or submit:
    avail = manager.check_availability(eq_id, start, end, int(qty))
    st.caption(f"Duration: {format_duration(inclusive_days(start, end))}")
    if avail.available:
        st.success(f"{avail.available_quantity} units free for these dates.")
    else:
        st.warning(avail.error)

if submit:
    if len(purpose.strip()) < 10:
        st.error("Please provide a purpose (at least 10 characters).")
    else:
        res = manager.create_booking(user, eq_id, start, end, int(qty), purpose)
        if show_result(res, "Request submitted and waiting for approval."):
            st.caption(f"Booking reference: `{res.booking.id}`")
