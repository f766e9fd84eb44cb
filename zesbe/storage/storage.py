"""File-based storage"""

import json
import os
from pathlib import Path
from typing import Any


def _default_base_dir() -> Path:
    override = os.environ.get("ZESBE_DATA_DIR")
    if override:
        return Path(override)
    return Path.home() / ".zesbe"


class Storage:
    BASE_DIR = _default_base_dir()

    @classmethod
    def path(cls, key: list[str]) -> Path:
        return cls.BASE_DIR / f"{'/'.join(key)}.json"

    @classmethod
    def exists(cls, key: list[str]) -> bool:
        return cls.path(key).is_file()

    @classmethod
    def write(cls, key: list[str], data: Any) -> Path:
        """Write data to storage, returning the file path"""
        path = cls.path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2, default=str))
        return path

    @classmethod
    def read(cls, key: list[str]) -> Any | None:
        """Read data from storage.

        Returns None when the key does not exist. Decode errors propagate so
        callers can report them.
        """
        path = cls.path(key)
        if not path.exists():
            return None
        return json.loads(path.read_text())

    @classmethod
    def delete(cls, key: list[str]) -> bool:
        """Delete data from storage"""
        path = cls.path(key)
        if path.exists():
            path.unlink()
            return True
        return False

    @classmethod
    def list(cls, prefix: list[str]) -> list[list[str]]:
        """List all keys directly under the given prefix"""
        dir_path = cls.BASE_DIR / "/".join(prefix) if prefix else cls.BASE_DIR
        if not dir_path.exists():
            return []

        keys = []
        for path in dir_path.glob("*.json"):
            rel = path.relative_to(cls.BASE_DIR)
            keys.append(list(rel.with_suffix("").parts))
        return keys
