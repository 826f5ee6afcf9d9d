from __future__ import annotations

import atexit
import logging
import sqlite3
from pathlib import Path

import streamlit as st

from mill.config import Settings, get_settings
from mill.db import ensure_schema, get_conn
from mill.ledger import LedgerStore
from mill.storage import SnapshotStorage

USER_KEY = "user_id"

logger = logging.getLogger(__name__)


@st.cache_resource
def _open_store(data_dir: Path) -> LedgerStore:
    store = LedgerStore(SnapshotStorage(data_dir)).open()
    atexit.register(store.close)
    logger.info("Opened ledger store in %s", data_dir)
    return store


def get_store(settings: Settings | None = None) -> LedgerStore:
    """The process-wide ledger store for the data dir, opened on first use."""
    settings = settings or get_settings()
    store = _open_store(settings.data_dir)
    if not store.is_open:
        _open_store.clear()
        store = _open_store(settings.data_dir)
    return store


def close_store(settings: Settings | None = None) -> None:
    """Saves and closes the store; the next get_store() reopens it from disk."""
    store = get_store(settings)
    store.close()
    atexit.unregister(store.close)
    _open_store.clear()


def get_backend(settings: Settings | None = None) -> sqlite3.Connection:
    settings = settings or get_settings()
    conn = get_conn(settings.db_path)
    ensure_schema(conn)
    return conn


def current_user_id() -> str:
    return str(st.session_state.get(USER_KEY) or "demo")


def require_auth() -> LedgerStore:
    store = get_store()
    if not store.state.is_authenticated:
        st.warning("Please log in first.")
        st.stop()
    return store
