from __future__ import annotations

import logging
from typing import Callable, Optional

from routelens.domain.models import FIELD_NAME_RE, FieldSchema, field_status
from routelens.extractors.js.lexer import (
    Token,
    brace_depths,
    dotted_path,
    match_sequence,
    matching_close,
    tokenize,
)

logger = logging.getLogger(__name__)

DEFAULT_PAYLOAD = "req.body"

_DECLARATION_KEYWORDS = {"const", "let", "var"}
_GUARD_OPERATORS = {"?", "??", "&&", "||"}

Span = tuple[int, int]  # (index of "{", index of matching "}")


def _arrow_body(tokens: list[Token], j: int, is_async: bool) -> Optional[Span]:
    """Parse `[async] (params) => {` or `[async] param => {` starting at j."""
    n = len(tokens)
    if is_async:
        if j >= n or not tokens[j].is_ident("async"):
            return None
        j += 1
    elif j < n and tokens[j].is_ident("async"):
        return None

    if j >= n:
        return None
    if tokens[j].is_punct("("):
        j = matching_close(tokens, j) + 1
    elif tokens[j].kind == "ident":
        j += 1
    else:
        return None

    if j + 1 < n and tokens[j].is_punct("=>") and tokens[j + 1].is_punct("{"):
        return j + 1, matching_close(tokens, j + 1)
    return None


def _function_body(tokens: list[Token], j: int) -> Optional[Span]:
    """Parse `[async] function [name] (params) {` starting at j."""
    n = len(tokens)
    if j < n and tokens[j].is_ident("async"):
        j += 1
    if j >= n or not tokens[j].is_ident("function"):
        return None
    j += 1
    if j < n and tokens[j].kind == "ident":
        j += 1
    if j >= n or not tokens[j].is_punct("("):
        return None
    j = matching_close(tokens, j) + 1
    if j < n and tokens[j].is_punct("{"):
        return j, matching_close(tokens, j)
    return None


def _declared_value_index(tokens: list[Token], i: int, name: str) -> Optional[int]:
    # const <name> = ...
    if i + 2 < len(tokens) and tokens[i].kind == "ident" and tokens[i].value in _DECLARATION_KEYWORDS:
        if tokens[i + 1].is_ident(name) and tokens[i + 2].is_punct("="):
            return i + 3
    return None


def _exports_value_index(tokens: list[Token], i: int, name: str) -> Optional[int]:
    # exports.<name> = ...  /  module.exports.<name> = ...
    if not tokens[i].is_ident("exports") or i + 3 >= len(tokens):
        return None
    if i > 0 and tokens[i - 1].is_punct(".") and not (i > 1 and tokens[i - 2].is_ident("module")):
        return None
    if tokens[i + 1].is_punct(".") and tokens[i + 2].is_ident(name) and tokens[i + 3].is_punct("="):
        return i + 4
    return None


def _match_const_arrow(tokens: list[Token], i: int, name: str) -> Optional[Span]:
    j = _declared_value_index(tokens, i, name)
    return None if j is None else _arrow_body(tokens, j, is_async=False)


def _match_const_async_arrow(tokens: list[Token], i: int, name: str) -> Optional[Span]:
    j = _declared_value_index(tokens, i, name)
    return None if j is None else _arrow_body(tokens, j, is_async=True)


def _match_function(tokens: list[Token], i: int, name: str) -> Optional[Span]:
    if tokens[i].is_ident("function") and i + 1 < len(tokens) and tokens[i + 1].is_ident(name):
        return _function_body(tokens, i)
    return None


def _match_async_function(tokens: list[Token], i: int, name: str) -> Optional[Span]:
    if tokens[i].is_ident("async") and i + 1 < len(tokens) and tokens[i + 1].is_ident("function"):
        if i + 2 < len(tokens) and tokens[i + 2].is_ident(name):
            return _function_body(tokens, i)
    return None


def function_span_at(tokens: list[Token], j: int) -> Optional[Span]:
    """Body span of a function expression (arrow or `function`) starting at j."""
    return (
        _arrow_body(tokens, j, is_async=True)
        or _arrow_body(tokens, j, is_async=False)
        or _function_body(tokens, j)
    )


def _match_exports(tokens: list[Token], i: int, name: str) -> Optional[Span]:
    j = _exports_value_index(tokens, i, name)
    return None if j is None else function_span_at(tokens, j)


# order matters: the first shape that matches anywhere in the file wins
SPAN_MATCHERS: tuple[Callable[[list[Token], int, str], Optional[Span]], ...] = (
    _match_const_arrow,
    _match_const_async_arrow,
    _match_function,
    _match_async_function,
    _match_exports,
)


def find_handler_span(tokens: list[Token], name: str) -> Optional[Span]:
    for matcher in SPAN_MATCHERS:
        for i in range(len(tokens)):
            span = matcher(tokens, i, name)
            if span is not None:
                return span
    return None


def list_handler_names(text: str) -> list[str]:
    """
    Top-level function names, grouped by declaration shape.

    Shape priority: const async arrow, const arrow, async function,
    function, exports property. Within a shape, source order.
    """
    tokens = tokenize(text)
    depths = brace_depths(tokens)
    top = [i for i in range(len(tokens)) if depths[i] == 0]

    def declared(is_async: bool) -> list[str]:
        out = []
        for i in top:
            tok = tokens[i]
            if tok.kind == "ident" and tok.value in _DECLARATION_KEYWORDS and i + 2 < len(tokens):
                name_tok = tokens[i + 1]
                if name_tok.kind == "ident" and tokens[i + 2].is_punct("="):
                    if _arrow_head(tokens, i + 3, is_async):
                        out.append(name_tok.value)
        return out

    def functions(is_async: bool) -> list[str]:
        out = []
        for i in top:
            if not tokens[i].is_ident("function") or i + 1 >= len(tokens):
                continue
            if is_async and not (i > 0 and tokens[i - 1].is_ident("async")):
                continue
            if tokens[i + 1].kind == "ident":
                out.append(tokens[i + 1].value)
        return out

    def exported() -> list[str]:
        out = []
        for i in top:
            if tokens[i].is_ident("exports") and i + 3 < len(tokens):
                if tokens[i + 1].is_punct(".") and tokens[i + 2].kind == "ident" and tokens[i + 3].is_punct("="):
                    out.append(tokens[i + 2].value)
        return out

    names: list[str] = []
    for group in (declared(True), declared(False), functions(True), functions(False), exported()):
        for name in group:
            if name not in names:
                names.append(name)
    return names


def _arrow_head(tokens: list[Token], j: int, is_async: bool) -> bool:
    n = len(tokens)
    if is_async:
        if j >= n or not tokens[j].is_ident("async"):
            return False
        j += 1
    if j >= n:
        return False
    if tokens[j].is_punct("("):
        j = matching_close(tokens, j) + 1
    elif tokens[j].kind == "ident" and tokens[j].value != "async":
        j += 1
    else:
        return False
    return j < n and tokens[j].is_punct("=>")


def _matching_open(tokens: list[Token], close_index: int, lower: int) -> Optional[int]:
    depth = 0
    for j in range(close_index, lower - 1, -1):
        tok = tokens[j]
        if tok.kind != "punct":
            continue
        if tok.value in (")", "]", "}"):
            depth += 1
        elif tok.value in ("(", "[", "{"):
            depth -= 1
            if depth == 0:
                return j if tok.value == "{" else None
    return None


def _destructured_keys(tokens: list[Token], open_index: int, close_index: int) -> list[str]:
    keys: list[str] = []
    entry: list[Token] = []
    depth = 0

    def flush() -> None:
        if not entry or entry[0].is_punct("..."):
            return
        head = entry[0]
        if head.kind in ("ident", "string"):
            keys.append(head.value)

    for tok in tokens[open_index + 1 : close_index]:
        if tok.kind == "punct" and tok.value in ("(", "[", "{"):
            depth += 1
        elif tok.kind == "punct" and tok.value in (")", "]", "}"):
            depth -= 1
        if depth == 0 and tok.is_punct(","):
            flush()
            entry = []
            continue
        entry.append(tok)
    flush()
    return keys


def extract_payload_fields(
    tokens: list[Token], start: int, end: int, payload: str = DEFAULT_PAYLOAD
) -> list[str]:
    """
    Field names read from the payload object inside tokens[start:end+1].

    Destructuring assignments come first, then dotted property access.
    """
    seq = dotted_path(payload)
    fields: list[str] = []

    def add(name: str) -> None:
        if FIELD_NAME_RE.match(name) and name not in fields:
            fields.append(name)

    # { a, b: c, d = 1 } = req.body
    for k in range(start, end + 1):
        if tokens[k].is_punct("}") and k + 1 <= end and tokens[k + 1].is_punct("="):
            if match_sequence(tokens, k + 2, seq):
                open_index = _matching_open(tokens, k, start)
                if open_index is not None:
                    for key in _destructured_keys(tokens, open_index, k):
                        add(key)

    # req.body.field / req.body?.field
    width = len(seq)
    for k in range(start, end + 1):
        if k > 0 and tokens[k - 1].is_punct("."):
            continue
        if match_sequence(tokens, k, seq) and k + width + 1 < len(tokens):
            accessor = tokens[k + width]
            if (accessor.is_punct(".") or accessor.is_punct("?.")) and tokens[k + width + 1].kind == "ident":
                add(tokens[k + width + 1].value)

    return fields


def is_guarded(tokens: list[Token], start: int, end: int, field: str) -> bool:
    """True when the field is used conditionally: if (f), f ?, f ??, f &&, f ||."""
    for k in range(start, end + 1):
        if not tokens[k].is_ident(field):
            continue
        if k + 1 < len(tokens) and tokens[k + 1].kind == "punct" and tokens[k + 1].value in _GUARD_OPERATORS:
            return True
        if (
            k >= 2
            and tokens[k - 1].is_punct("(")
            and tokens[k - 2].is_ident("if")
            and k + 1 < len(tokens)
            and tokens[k + 1].is_punct(")")
        ):
            return True
    return False


def _schema_for_span(tokens: list[Token], start: int, end: int, payload: str) -> Optional[FieldSchema]:
    fields = extract_payload_fields(tokens, start, end, payload)
    if not fields:
        return None
    return {f: field_status(is_guarded(tokens, start, end, f)) for f in fields}


def extract_handler_schema(
    text: str, function_name: str, payload: str = DEFAULT_PAYLOAD
) -> Optional[FieldSchema]:
    """Payload fields read by the named handler, or None."""
    tokens = tokenize(text)
    span = find_handler_span(tokens, function_name)
    if span is None:
        logger.debug("handler %s not found", function_name)
        return None
    return _schema_for_span(tokens, span[0], span[1], payload)


def extract_schema_from_source(source: str, payload: str = DEFAULT_PAYLOAD) -> Optional[FieldSchema]:
    """Payload fields read anywhere in a standalone function source."""
    tokens = tokenize(source)
    if not tokens:
        return None
    return _schema_for_span(tokens, 0, len(tokens) - 1, payload)
