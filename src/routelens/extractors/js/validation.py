from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from routelens.domain.models import FIELD_NAME_RE, FieldSchema, field_status
from routelens.extractors.js.lexer import Token, brace_depths, matching_close, tokenize

logger = logging.getLogger(__name__)

FIELD_ACCESSORS = ("body",)
_VALIDATOR_SUFFIXES = ("validator", "validation", "custom")
_INFERRED_FIELD_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9]*\Z")
_DECLARATION_KEYWORDS = {"const", "let", "var"}
_STATEMENT_STARTERS = _DECLARATION_KEYWORDS | {"function", "class", "module", "exports", "async"}


@dataclass(frozen=True)
class ValidationChain:
    name: str
    open_index: int   # index of "["
    close_index: int  # index of the matching "]"


def _chains_from_tokens(tokens: list[Token]) -> list[ValidationChain]:
    depths = brace_depths(tokens)
    chains: list[ValidationChain] = []
    seen: set[str] = set()

    for i, tok in enumerate(tokens):
        if depths[i] != 0 or tok.kind != "ident":
            continue

        name_index: Optional[int] = None
        if tok.value in _DECLARATION_KEYWORDS:
            name_index = i + 1
        elif tok.value == "exports" and not (i > 0 and tokens[i - 1].is_punct(".")):
            if i + 1 < len(tokens) and tokens[i + 1].is_punct("."):
                name_index = i + 2
        elif tok.value == "module":
            if (
                i + 3 < len(tokens)
                and tokens[i + 1].is_punct(".")
                and tokens[i + 2].is_ident("exports")
                and tokens[i + 3].is_punct(".")
            ):
                name_index = i + 4

        if name_index is None or name_index + 2 >= len(tokens):
            continue
        name_tok = tokens[name_index]
        if name_tok.kind != "ident":
            continue
        if not tokens[name_index + 1].is_punct("=") or not tokens[name_index + 2].is_punct("["):
            continue
        if name_tok.value in seen:
            continue

        open_index = name_index + 2
        chains.append(ValidationChain(name_tok.value, open_index, matching_close(tokens, open_index)))
        seen.add(name_tok.value)

    return chains


def list_validation_chains(text: str) -> list[str]:
    """Names of the top-level array-literal definitions, in source order."""
    return [c.name for c in _chains_from_tokens(tokenize(text))]


def _accessor_field(tokens: list[Token], i: int) -> Optional[str]:
    # body("field")
    if i + 2 >= len(tokens):
        return None
    if tokens[i].kind == "ident" and tokens[i].value in FIELD_ACCESSORS:
        if tokens[i + 1].is_punct("(") and tokens[i + 2].kind in ("string", "template"):
            return tokens[i + 2].value or None
    return None


def _definition(tokens: list[Token], depths: list[int], name: str) -> Optional[tuple[int, int]]:
    """
    Locate a validator's definition.

    Returns (index of the token after "=" or of the function body "{", end index).
    """
    for i, tok in enumerate(tokens):
        if depths[i] != 0 or tok.kind != "ident" or i + 2 >= len(tokens):
            continue

        if tok.value in _DECLARATION_KEYWORDS:
            if tokens[i + 1].is_ident(name) and tokens[i + 2].is_punct("="):
                start = i + 3
                return start, _statement_end(tokens, depths, start)

        if tok.value == "function" and tokens[i + 1].is_ident(name) and tokens[i + 2].is_punct("("):
            params_close = matching_close(tokens, i + 2)
            body_open = params_close + 1
            if body_open < len(tokens) and tokens[body_open].is_punct("{"):
                return body_open, matching_close(tokens, body_open)

    return None


def _statement_end(tokens: list[Token], depths: list[int], start: int) -> int:
    for j in range(start, len(tokens)):
        if depths[j] != 0:
            continue
        tok = tokens[j]
        if tok.is_punct(";"):
            return j
        if j > start and tok.kind == "ident" and tok.value in _STATEMENT_STARTERS:
            if tok.value == "async" and not (j + 1 < len(tokens) and tokens[j + 1].is_ident("function")):
                continue
            return j - 1
    return len(tokens) - 1


def _arrow_bound_field(tokens: list[Token], start: int) -> Optional[str]:
    # const nameValidator = (...) => body("name")
    j = start
    if j < len(tokens) and tokens[j].is_ident("async"):
        j += 1
    if j >= len(tokens):
        return None
    if tokens[j].is_punct("("):
        j = matching_close(tokens, j) + 1
    elif tokens[j].kind == "ident":
        j += 1
    else:
        return None
    if j < len(tokens) and tokens[j].is_punct("=>"):
        return _accessor_field(tokens, j + 1)
    return None


def _object_key_field(tokens: list[Token], name: str) -> Optional[str]:
    # { nameValidator: body("name") }
    for i in range(1, len(tokens) - 1):
        if not tokens[i].is_ident(name) or not tokens[i + 1].is_punct(":"):
            continue
        if not (tokens[i - 1].is_punct("{") or tokens[i - 1].is_punct(",")):
            continue
        field = _accessor_field(tokens, i + 2)
        if field:
            return field
    return None


def _infer_from_name(validator_name: str) -> Optional[str]:
    field = validator_name.lower()
    for suffix in _VALIDATOR_SUFFIXES:
        if field.endswith(suffix):
            field = field[: -len(suffix)]
            break
    if field and _INFERRED_FIELD_RE.match(field):
        return field
    return None


def resolve_validator_field(
    tokens: list[Token], validator_name: str, depths: Optional[list[int]] = None
) -> Optional[str]:
    """
    Field name checked by a validator.

    Declaration shapes are tried in order: arrow-bound, plain assignment,
    object-literal key, then any accessor call inside the defining span.
    When none declares a field, the name minus a known suffix is used.
    """
    if depths is None:
        depths = brace_depths(tokens)

    definition = _definition(tokens, depths, validator_name)

    if definition is not None:
        start, _ = definition
        field = _arrow_bound_field(tokens, start)
        if field:
            return field
        field = _accessor_field(tokens, start)
        if field:
            return field

    field = _object_key_field(tokens, validator_name)
    if field:
        return field

    if definition is not None:
        start, end = definition
        for j in range(start, end + 1):
            field = _accessor_field(tokens, j)
            if field:
                return field

    return _infer_from_name(validator_name)


def _invocations(tokens: list[Token], chain: ValidationChain) -> list[tuple[str, list[Token]]]:
    out: list[tuple[str, list[Token]]] = []
    j = chain.open_index + 1
    while j < chain.close_index:
        tok = tokens[j]
        if (
            tok.kind == "ident"
            and len(tok.value) > len("Validator")
            and tok.value.endswith("Validator")
            and tokens[j + 1].is_punct("(")
        ):
            close = matching_close(tokens, j + 1)
            out.append((tok.value, tokens[j + 2 : close]))
            j = close + 1
            continue
        j += 1
    return out


def _invoked_with_false(tokens: list[Token], chain: ValidationChain, name: str) -> bool:
    for j in range(chain.open_index + 1, chain.close_index - 3):
        if (
            tokens[j].is_ident(name)
            and tokens[j + 1].is_punct("(")
            and tokens[j + 2].is_ident("false")
            and tokens[j + 3].is_punct(")")
        ):
            return True
    return False


def extract_validation_schema(text: str, chain_name: str) -> Optional[FieldSchema]:
    """
    Fields checked by the validation chain bound to chain_name.

    Returns None when the chain does not exist or resolves no field.
    """
    tokens = tokenize(text)
    chain = next((c for c in _chains_from_tokens(tokens) if c.name == chain_name), None)
    if chain is None:
        return None

    depths = brace_depths(tokens)
    schema: FieldSchema = {}
    for validator_name, args in _invocations(tokens, chain):
        field = resolve_validator_field(tokens, validator_name, depths)
        if not field or not FIELD_NAME_RE.match(field):
            continue
        optional = any(a.is_ident("false") for a in args) or _invoked_with_false(tokens, chain, validator_name)
        schema[field] = field_status(optional)

    if not schema:
        logger.debug("validation chain %s resolved no fields", chain_name)
        return None
    return schema
