"""Configuration store — path-addressed reads and writes of raw text.

The file-backed store is what the CLI and ``NetworkConfig`` use by default.
The in-memory store serves embedding applications and tests that should not
touch the filesystem. Read and write failures surface as ``OSError``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class ConfigStore(Protocol):
    """Named durable blob storage for configuration text."""

    def read_text(self, path: str | Path) -> str:
        ...

    def write_text(self, path: str | Path, text: str) -> None:
        ...


class FileConfigStore:
    """Stores configuration as UTF-8 files on the local filesystem."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def read_text(self, path: str | Path) -> str:
        return Path(path).read_text(encoding=self.encoding)

    def write_text(self, path: str | Path, text: str) -> None:
        Path(path).write_text(text, encoding=self.encoding)
        logger.debug("Wrote %d chars to %s", len(text), path)


class MemoryConfigStore:
    """Keeps configuration text in a dict keyed by path string."""

    def __init__(self, blobs: dict[str, str] | None = None) -> None:
        self._blobs: dict[str, str] = dict(blobs or {})

    def read_text(self, path: str | Path) -> str:
        try:
            return self._blobs[str(path)]
        except KeyError:
            raise FileNotFoundError(f"No such config: {path}") from None

    def write_text(self, path: str | Path, text: str) -> None:
        self._blobs[str(path)] = text

    def __contains__(self, path: object) -> bool:
        return str(path) in self._blobs
