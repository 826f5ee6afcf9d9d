from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from mill.models import LIST_FIELDS, AppSettings, Inventory, LedgerState
from mill.utils import parse_dt

SNAPSHOT_KEY = "farmflour-data"

logger = logging.getLogger(__name__)


class SnapshotStorage:
    """
    Key/value document store on disk: one JSON file per key inside data_dir.
    """

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            logger.exception("Could not read %s", path)
            return None

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        except OSError:
            logger.exception("Could not save %s", path)
            raise

    def remove_item(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


def _json_default(o: Any):
    if isinstance(o, datetime):
        return o.isoformat()
    raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")


def dump_state(state: LedgerState) -> str:
    return json.dumps(asdict(state), default=_json_default)


def _check_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"'{name}' must be true or false, got {value!r}")
    return value


def revive(cls, raw: Any):
    """
    Builds a model from a JSON object or table row.

    Date fields are parsed and number fields converted with float(); a value
    of the wrong kind raises ValueError or TypeError.
    """
    if not isinstance(raw, dict):
        raise TypeError(f"Expected an object for {cls.__name__}, got {type(raw).__name__}")
    # Annotations are strings here (postponed evaluation in mill.models).
    types = {f.name: f.type for f in fields(cls)}
    data = {k: v for k, v in raw.items() if k in types}
    for name, value in data.items():
        if value is None:
            continue
        if name in cls.DATE_FIELDS:
            data[name] = parse_dt(value)
        elif types[name] == "float":
            if isinstance(value, bool):
                raise TypeError(f"'{name}' must be a number, got {value!r}")
            data[name] = float(value)
        elif types[name] == "bool":
            data[name] = _check_bool(name, value)
    return cls(**data)


def load_state(text: str) -> dict:
    """
    Parses a saved snapshot into a partial state for LoadData.

    Date fields come back as datetime values. Unknown top-level keys are
    dropped; malformed content raises ValueError or TypeError.
    """
    raw = json.loads(text)
    if not isinstance(raw, dict):
        raise ValueError("Saved snapshot is not an object.")

    out: dict = {}
    for key, cls in LIST_FIELDS.items():
        if key in raw:
            if not isinstance(raw[key], list):
                raise TypeError(f"Saved '{key}' is not a list.")
            out[key] = [revive(cls, item) for item in raw[key]]
    if "inventory" in raw:
        out["inventory"] = revive(Inventory, raw["inventory"])
    if "settings" in raw:
        out["settings"] = revive(AppSettings, raw["settings"])
    if "is_authenticated" in raw:
        out["is_authenticated"] = _check_bool("is_authenticated", raw["is_authenticated"])
    return out
