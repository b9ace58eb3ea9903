# equiplend/accounts.py
"""
Demo identities. Sign-in is a picker; there is no password handling.

The signed-in user lives in the caller's session mapping (Streamlit's
`st.session_state`), never in the shared store, so each browser session
has its own identity.
"""
from __future__ import annotations

import logging
from typing import Any, List, MutableMapping, Optional

from .models import Actor
from .store import USERS_KEY, KeyValueStore, load_records

logger = logging.getLogger(__name__)

SESSION_USER = "equiplend_user"

DEMO_USERS = [
    Actor(id="u-admin", name="Lab Administrator", email="admin@school.edu", role="admin"),
    Actor(id="u-teacher", name="Ms. Tan", email="tan@school.edu", role="teacher"),
    Actor(id="u-student", name="Alex Lim", email="alex@school.edu", role="student"),
]


def list_users(store: KeyValueStore) -> List[Actor]:
    recs = load_records(store, USERS_KEY)
    if not recs:
        store.save(USERS_KEY, [u.to_dict() for u in DEMO_USERS])
        return list(DEMO_USERS)
    return [Actor.from_dict(r) for r in recs if r.get("id")]


def current_user(session: MutableMapping[str, Any]) -> Optional[Actor]:
    data = session.get(SESSION_USER)
    if not isinstance(data, dict) or not data.get("id"):
        return None
    return Actor.from_dict(data)


def sign_in(session: MutableMapping[str, Any], user: Actor) -> Actor:
    session[SESSION_USER] = user.to_dict()
    logger.info("Signed in as %s (%s)", user.id, user.role)
    return user


def sign_out(session: MutableMapping[str, Any]) -> None:
    session.pop(SESSION_USER, None)
