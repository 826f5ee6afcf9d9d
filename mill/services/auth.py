from __future__ import annotations

import logging

from mill.ledger import LedgerStore, SetAuth
from mill.utils import clean_text

DEMO_USER = "demo"

logger = logging.getLogger(__name__)


def login(store: LedgerStore, *, email: str, password: str) -> str:
    """
    Demo authentication: any non-empty email and password opens the app.
    Returns the user id used to scope backend rows.
    """
    email = clean_text(email).lower()
    if not email or not password:
        raise ValueError("Please enter both email and password")

    store.dispatch(SetAuth(True))
    logger.info("User %s logged in", email)
    return email


def demo_login(store: LedgerStore) -> str:
    store.dispatch(SetAuth(True))
    logger.info("Demo login")
    return DEMO_USER


def logout(store: LedgerStore) -> None:
    store.dispatch(SetAuth(False))
