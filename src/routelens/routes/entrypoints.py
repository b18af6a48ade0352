from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from routelens.extractors.js.handlers import function_span_at
from routelens.extractors.js.lexer import Token, tokenize
from routelens.repo.discovery import read_source
from routelens.routes.tree import WalkedRoute

logger = logging.getLogger(__name__)

_ROUTE_METHODS = ("get", "post", "put", "delete", "patch")


@dataclass(frozen=True)
class EntryRoute:
    method: str
    path: str
    handler_name: Optional[str] = None
    handler_source: Optional[str] = None


def _handler_at(text: str, tokens: list[Token], j: int) -> tuple[Optional[str], Optional[str]]:
    """(handler identifier, inline handler source) for the argument starting at j."""
    if j >= len(tokens):
        return None, None

    span = function_span_at(tokens, j)
    if span is not None:
        return None, text[tokens[j].start : tokens[span[1]].end]

    if tokens[j].is_ident("async"):
        j += 1
    if j >= len(tokens) or tokens[j].kind != "ident":
        return None, None

    # controller.login -> login
    name = tokens[j].value
    while j + 2 < len(tokens) and tokens[j + 1].is_punct(".") and tokens[j + 2].kind == "ident":
        j += 2
        name = tokens[j].value
    return name, None


def _scan(text: str, tokens: list[Token], receiver: str, verbs: Sequence[str]) -> list[EntryRoute]:
    found: list[EntryRoute] = []
    for i in range(len(tokens) - 5):
        if not tokens[i].is_ident(receiver) or (i > 0 and tokens[i - 1].is_punct(".")):
            continue
        if not tokens[i + 1].is_punct(".") or tokens[i + 2].kind != "ident":
            continue
        verb = tokens[i + 2].value
        if verb not in verbs or not tokens[i + 3].is_punct("("):
            continue
        path_tok = tokens[i + 4]
        if path_tok.kind not in ("string", "template") or not tokens[i + 5].is_punct(","):
            continue
        name, source = _handler_at(text, tokens, i + 6)
        method = "GET" if verb == "use" else verb.upper()
        found.append(EntryRoute(method=method, path=path_tok.value, handler_name=name, handler_source=source))
    return found


def parse_routes_from_content(text: str) -> list[EntryRoute]:
    """
    Route declarations of an entry-point file.

    Recognises app.<method>(path, handler), router.<method>(path, handler)
    and app.use(path, handler); mounted paths are reported as GET. Results
    are grouped in that order.
    """
    tokens = tokenize(text)
    return (
        _scan(text, tokens, "app", _ROUTE_METHODS)
        + _scan(text, tokens, "router", _ROUTE_METHODS)
        + _scan(text, tokens, "app", ("use",))
    )


def find_entrypoint(project_root: Path, candidates: Sequence[str]) -> Optional[Path]:
    for name in candidates:
        p = (project_root / name).resolve()
        if p.is_file():
            return p
    return None


def scan_entrypoint_routes(project_root: Path, candidates: Sequence[str]) -> list[WalkedRoute]:
    """
    Best-effort routes of the first entry-point file found. May be empty.
    """
    entry = find_entrypoint(project_root, candidates)
    if entry is None:
        logger.debug("no entry-point file under %s", project_root)
        return []

    text = read_source(entry)
    if text is None:
        return []

    routes = []
    for r in parse_routes_from_content(text):
        routes.append(
            WalkedRoute(
                method=r.method,
                path=r.path,
                handler_name=r.handler_name,
                handler_file=entry if r.handler_name else None,
                handler_sources=(r.handler_source,) if r.handler_source else (),
            )
        )
    logger.info("entry-point scan of %s found %d routes", entry.name, len(routes))
    return routes
