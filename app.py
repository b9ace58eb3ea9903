import streamlit as st

from equiplend.dates import status_text
from equiplend.models import STATUSES
from equiplend.ui import get_manager, identity_sidebar

# ----------------- UI CONFIG -----------------
st.set_page_config(page_title="Equipment Booking", page_icon="🎒", layout="wide")
st.title("🎒 School Equipment Booking (demo)")

manager = get_manager()
user = identity_sidebar()

# ----------------- OVERVIEW -----------------
equipment = manager.registry.list()
bookings = manager.all_bookings()

c1, c2, c3, c4 = st.columns(4)
c1.metric("Equipment types", len(equipment))
c2.metric("Units owned", sum(e.quantity for e in equipment))
c3.metric("Units checked out", sum(e.quantity - e.available for e in equipment))
c4.metric("Pending requests", sum(1 for b in bookings if b.status == "pending"))

if user is None:
    st.info("Pick a user in the sidebar to start booking.")
else:
    st.markdown(f"You're signed in as **{user.name}** ({user.role}).")
    mine = [b for b in bookings if b.user_id == user.id]
    if mine:
        st.markdown("### Your bookings by status")
        counts = {status_text(s): sum(1 for b in mine if b.status == s) for s in STATUSES}
        st.bar_chart({k: [v] for k, v in counts.items() if v})

st.markdown("---")
st.caption("Demo: catalog, date-ranged requests, approval, checkout and return. "
           "Data is kept in a local store; see EQUIPLEND_* environment variables.")
