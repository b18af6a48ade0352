from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass
class SourceIndex:
    """Path prefix -> source file, in registration order."""

    entries: dict[str, Path] = field(default_factory=dict)

    def register(self, prefix: str, path: Path) -> None:
        # first registration of a prefix wins
        self.entries.setdefault(prefix, path)

    def lookup(self, route_path: str) -> Optional[Path]:
        for prefix, path in self.entries.items():
            if route_path.startswith(prefix):
                return path
        return None

    def __len__(self) -> int:
        return len(self.entries)


def resource_name(file_name: str, suffixes: Sequence[str]) -> Optional[str]:
    # auth.controller.js -> auth
    for suffix in suffixes:
        if file_name.endswith(suffix) and len(file_name) > len(suffix):
            return file_name[: -len(suffix)]
    return None


def build_source_index(directory: Path, suffixes: Sequence[str]) -> SourceIndex:
    """
    Index the files of one directory by the resource they serve.

    Each qualifying file registers under /api/<resource> and /<resource>.
    Files are visited in sorted order so lookups are deterministic. A
    missing directory yields an empty index.
    """
    index = SourceIndex()
    if not directory.is_dir():
        logger.debug("source directory %s does not exist", directory)
        return index

    try:
        files = sorted(p for p in directory.iterdir() if p.is_file())
    except OSError as exc:
        logger.warning("cannot list %s: %s", directory, exc)
        return index

    for p in files:
        resource = resource_name(p.name, suffixes)
        if resource is None:
            continue
        path = p.resolve()
        index.register(f"/api/{resource}", path)
        index.register(f"/{resource}", path)

    return index


def read_source(path: Path, max_bytes: int = 500_000) -> Optional[str]:
    """File text, or None (logged) when the file cannot be read."""
    try:
        data = path.read_bytes()[:max_bytes]
    except OSError as exc:
        logger.warning("cannot read %s: %s", path, exc)
        return None
    return data.decode("utf-8", errors="ignore")
