from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

_MULTI_SLASH = re.compile(r"/{2,}")
_REGEX_ESCAPE = re.compile(r"\\(.)")

# where an Express mount matcher stops being a literal prefix
_MATCHER_TAILS = ("/?(?=", "(?=", "/?$", "$")


class RouteTreeError(ValueError):
    """The route tree has a shape the walker does not understand."""


@dataclass(frozen=True)
class RouteLeaf:
    path: str
    methods: tuple[str, ...]
    # source text of inline handlers, when the host exposes it
    handler_sources: tuple[str, ...] = ()


@dataclass(frozen=True)
class MountNode:
    prefix: str
    children: tuple["RouteNode", ...] = ()


RouteNode = Union[RouteLeaf, MountNode]


@dataclass(frozen=True)
class Registration:
    base_path: str
    router: Any


@dataclass(frozen=True)
class WalkedRoute:
    method: str
    path: str
    handler_name: Optional[str] = None
    handler_file: Optional[Path] = None
    handler_sources: tuple[str, ...] = ()


def join_paths(prefix: str, path: str) -> str:
    """
    Concatenate a mount prefix and a route path.

    "/api/auth" + "/login" -> "/api/auth/login"; "/api/auth" + "/" -> "/api/auth".
    """
    p = f"{prefix or ''}/{path or ''}"
    p = _MULTI_SLASH.sub("/", p)
    if p != "/" and p.endswith("/"):
        p = p[:-1]
    return p or "/"


def mount_prefix_from_matcher(source: str) -> str:
    """
    Literal prefix of an Express mount matcher.

    "^\\/api\\/auth\\/?(?=\\/|$)" -> "/api/auth"; a root mount gives "".
    """
    s = (source or "").strip()
    if s.startswith("^"):
        s = s[1:]
    s = s.replace("\\/", "/")
    for tail in _MATCHER_TAILS:
        cut = s.find(tail)
        if cut != -1:
            s = s[:cut]
    s = _REGEX_ESCAPE.sub(r"\1", s).strip("/")
    return f"/{s}" if s else ""
