from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

import streamlit as st

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "FARMFLOUR_DATA_DIR"
ENV_LOG_LEVEL = "FARMFLOUR_LOG_LEVEL"
SESSION_DATA_DIR = "farmflour_data_dir"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    db_path: Path
    currency: str = "KES"


def _default_data_dir() -> Path:
    return Path.home() / ".farmflour"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable %s", cfg)
            return {}
    return {}


def persist_data_dir(data_dir_str: str) -> None:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    # The pointer lives in the default folder so the next start finds it.
    default_dir = _default_data_dir()
    default_dir.mkdir(parents=True, exist_ok=True)
    cfg = default_dir / CONFIG_FILE_NAME
    payload = {"data_dir": str(data_dir)}
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    # Update session for immediate effect
    st.session_state[SESSION_DATA_DIR] = str(data_dir)


def resolve_settings(session: dict | None = None, environ: dict | None = None) -> Settings:
    # Priority order:
    # 1) Session state (set via Settings page)
    # 2) Environment variable
    # 3) Persisted settings in default folder
    # 4) Default folder
    session = {} if session is None else session
    environ = os.environ if environ is None else environ

    if session.get(SESSION_DATA_DIR):
        data_dir = Path(session[SESSION_DATA_DIR]).expanduser().resolve()
    elif environ.get(ENV_DATA_DIR):
        data_dir = Path(environ[ENV_DATA_DIR]).expanduser().resolve()
    else:
        default_dir = _default_data_dir()
        persisted = _load_persisted_settings(default_dir)
        data_dir = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    data_dir.mkdir(parents=True, exist_ok=True)
    db_path = data_dir / "app.db"
    return Settings(data_dir=data_dir, db_path=db_path)


@st.cache_resource
def get_settings() -> Settings:
    return resolve_settings(dict(st.session_state))


def configure_logging() -> None:
    level = os.getenv(ENV_LOG_LEVEL, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
