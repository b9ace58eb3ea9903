"""Streamlit glue shared by app.py and pages/."""
from __future__ import annotations

from typing import Optional

import streamlit as st

from .accounts import current_user, list_users, sign_in, sign_out
from .config import configure_logging, load_settings
from .lifecycle import BookingManager
from .models import Actor, BookingResult
from .services import build_manager, open_store
from .store import KeyValueStore


@st.cache_resource(show_spinner=False)
def get_store() -> KeyValueStore:
    configure_logging()
    return open_store(load_settings())


def get_manager() -> BookingManager:
    # cheap to build; every read goes back to the store
    return build_manager(get_store())


def identity_sidebar() -> Optional[Actor]:
    """Sign-in picker in the sidebar; returns the current Actor or None."""
    store = get_store()
    users = list_users(store)
    me = current_user(st.session_state)
    with st.sidebar:
        st.subheader("Signed in as")
        labels = ["(nobody)"] + [f"{u.name} · {u.role}" for u in users]
        idx = 0
        if me is not None:
            idx = next((i + 1 for i, u in enumerate(users) if u.id == me.id), 0)
        choice = st.selectbox("User", range(len(labels)), index=idx,
                              format_func=lambda i: labels[i], key="identity_pick")
        if choice == 0 and me is not None:
            sign_out(st.session_state)
            me = None
        elif choice > 0 and (me is None or me.id != users[choice - 1].id):
            me = sign_in(st.session_state, users[choice - 1])
    return me


def show_result(result: BookingResult, success_msg: str) -> bool:
    if result.success:
        st.success(success_msg)
        return True
    st.error(result.error or "Operation failed")
    return False
