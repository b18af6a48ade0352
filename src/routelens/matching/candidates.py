from __future__ import annotations

import re

from routelens.domain.models import is_param_segment, path_segments

METHOD_VERBS: dict[str, tuple[str, ...]] = {
    "GET": ("get", "fetch", "retrieve", "list", "show", "find", "getAll", "view"),
    "POST": ("create", "add", "register", "login", "send", "verify", "resend", "post", "insert"),
    "PUT": ("update", "edit", "modify", "change", "put", "replace"),
    "DELETE": ("delete", "remove", "destroy", "del"),
    "PATCH": ("patch", "update", "modify", "change"),
}

_SEPARATORS = re.compile(r"[-_]")
_CAMEL_BOUNDARY = re.compile(r"[-_](.)")


def capitalize(s: str) -> str:
    return s[:1].upper() + s[1:] if s else ""


def to_camel_case(s: str) -> str:
    # user-profile / user_profile -> userProfile
    return _CAMEL_BOUNDARY.sub(lambda m: m.group(1).upper(), s)


def verbs_for(method: str) -> tuple[str, ...]:
    method = method.upper()
    return METHOD_VERBS.get(method, (method.lower(),))


def name_segments(path: str) -> list[str]:
    """Path segments that can contribute to a name: no "api", no parameters."""
    return [p for p in path_segments(path) if p != "api" and not is_param_segment(p)]


class _OrderedSet:
    def __init__(self) -> None:
        self._items: dict[str, None] = {}

    def add(self, item: str) -> None:
        if item:
            self._items.setdefault(item, None)

    def items(self) -> list[str]:
        return list(self._items)


def generate_candidates(path: str, method: str) -> list[str]:
    """
    Candidate identifier names for a route, in generation order.

    Generation order is the tie-break order for matching, so the sequence
    below is part of the contract:
      1. per segment: raw, separator-free, camelCase, then each verb
         prepended (three spellings) and appended (two spellings);
      2. per adjacent pair: both concatenation orders, both camelCase
         orders, then each verb in four placements;
      3. for three or more segments: the trailing three camel-cased, then
         each verb followed by the trailing three.
    """
    parts = name_segments(path)
    actions = verbs_for(method)
    out = _OrderedSet()

    for part in parts:
        clean = _SEPARATORS.sub("", part)
        camel = to_camel_case(part)

        out.add(part)
        out.add(clean)
        out.add(camel)

        for action in actions:
            out.add(action + capitalize(part))
            out.add(action + capitalize(clean))
            out.add(action + capitalize(camel))
            out.add(part + capitalize(action))
            out.add(clean + capitalize(action))

    if len(parts) >= 2:
        for first, second in zip(parts, parts[1:]):
            out.add(first + capitalize(second))
            out.add(second + capitalize(first))
            out.add(to_camel_case(f"{first}-{second}"))
            out.add(to_camel_case(f"{second}-{first}"))

            for action in actions:
                out.add(action + capitalize(first) + capitalize(second))
                out.add(action + capitalize(second) + capitalize(first))
                out.add(first + capitalize(second) + capitalize(action))
                out.add(second + capitalize(first) + capitalize(action))

    if len(parts) >= 3:
        last_three = parts[-3:]
        out.add(to_camel_case("-".join(last_three)))
        for action in actions:
            out.add(action + "".join(capitalize(p) for p in last_three))

    return out.items()


def with_suffix(candidates: list[str], suffix: str) -> list[str]:
    """Suffixed candidates first, then the bare ones (order preserved, no repeats)."""
    if not suffix:
        return list(candidates)
    out = _OrderedSet()
    for c in candidates:
        out.add(c + suffix)
    for c in candidates:
        out.add(c)
    return out.items()
