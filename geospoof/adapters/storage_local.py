from __future__ import annotations

import json
import os
import tempfile
from typing import Any, Dict, Optional

from geospoof.domain.ports import StoragePort

SETTINGS_FILE = "user_settings.json"


def write_json_atomic(path: str, payload: Any) -> None:
    """Write JSON next to ``path`` and move it into place in one step."""
    directory = os.path.dirname(os.path.abspath(path)) or "."
    os.makedirs(directory, exist_ok=True)
    stem = os.path.splitext(os.path.basename(path))[0]
    fd, tmp_path = tempfile.mkstemp(prefix=f"{stem}_", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


def read_json(path: str) -> Optional[Any]:
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


class StorageLocal(StoragePort):
    """Local filesystem storage for user settings (JSON)."""

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    @property
    def settings_path(self) -> str:
        return os.path.join(self.root, SETTINGS_FILE)

    def save_user_settings(self, payload: Dict) -> None:
        write_json_atomic(self.settings_path, payload)

    def load_user_settings(self) -> Optional[Dict]:
        data = read_json(self.settings_path)
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError(f"{self.settings_path} must contain a JSON object.")
        return data


__all__ = ["StorageLocal", "read_json", "write_json_atomic"]
