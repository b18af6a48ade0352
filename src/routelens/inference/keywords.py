from __future__ import annotations

import re
from typing import Optional

from routelens.domain.models import BODYLESS_METHODS, FieldSchema, field_status
from routelens.matching.candidates import name_segments

# field -> words in the path that suggest the field is sent
FIELD_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("name", re.compile(r"name|user|profile")),
    ("email", re.compile(r"email|login|auth|register|forgot|reset")),
    ("password", re.compile(r"password|login|register|reset|auth")),
    ("phone", re.compile(r"phone|contact|profile|register")),
    ("otp", re.compile(r"otp|verify|code")),
    ("role", re.compile(r"role|user|admin|create")),
    ("title", re.compile(r"title|post|article|blog")),
    ("content", re.compile(r"content|body|text|post|article")),
    ("description", re.compile(r"description|desc|about")),
    ("category", re.compile(r"category|type|kind")),
    ("status", re.compile(r"status|state")),
    # whole word only: "widgets" or "video" are not ids
    ("id", re.compile(r"\bids?\b|identifier")),
)


def path_words(path: str) -> str:
    return " ".join(p.lower() for p in name_segments(path.lower()))


def infer_from_path(path: str, method: str) -> Optional[FieldSchema]:
    """Guess a payload purely from words in the path. None when nothing matches."""
    method = method.upper()
    if method in BODYLESS_METHODS:
        return None

    words = path_words(path)
    partial = method in ("PUT", "PATCH")

    schema: FieldSchema = {}
    for field, pattern in FIELD_PATTERNS:
        if pattern.search(words):
            optional = partial or (field == "phone" and "register" not in words)
            schema[field] = field_status(optional)

    return schema or None
