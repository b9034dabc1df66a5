"""Key-value stores holding the published collection."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol

from coastmiles.common.errors import ConfigError
from coastmiles.common.fs import write_text_atomic

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class CacheStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str) -> None: ...


class MemoryStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def put(self, key: str, value: str) -> None:
        self.values[key] = value


class FileStore:
    """One file per key under ``root``; ``put`` replaces the file atomically."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key) or key.startswith("."):
            raise ValueError(f"Unsafe store key: {key!r}")
        return self.root / key

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def put(self, key: str, value: str) -> None:
        write_text_atomic(self._path(key), value)


def build_store(store_config: dict, *, base_dir: Path | None = None) -> CacheStore:
    backend = store_config.get("backend", "file")
    if backend == "memory":
        return MemoryStore()
    if backend == "file":
        root = Path(store_config["path"])
        if base_dir is not None and not root.is_absolute():
            root = base_dir / root
        return FileStore(root)
    raise ConfigError(f"Unknown store backend: {backend}")
