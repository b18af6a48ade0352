from __future__ import annotations

import re
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]

SUPPORTED_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH")
BODYLESS_METHODS = frozenset({"GET", "DELETE"})

# field name -> "string" | "string (optional)"
FieldSchema = dict[str, str]

MAX_TAGS = 2

REQUIRED = "string"
OPTIONAL = "string (optional)"

FIELD_NAME_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*\Z")

_DESCRIPTION_VERBS = {
    "GET": "Retrieve",
    "POST": "Create",
    "PUT": "Update",
    "DELETE": "Delete",
    "PATCH": "Partially update",
}


def field_status(optional: bool) -> str:
    return OPTIONAL if optional else REQUIRED


def is_param_segment(segment: str) -> bool:
    # express ":id" and starlette "{id}"
    return segment.startswith(":") or (segment.startswith("{") and segment.endswith("}"))


def path_segments(path: str) -> list[str]:
    return [p for p in (path or "").split("/") if p]


def default_headers(method: str) -> Optional[dict[str, str]]:
    if method in ("POST", "PUT", "PATCH"):
        return {"Content-Type": "application/json"}
    return None


def describe_route(path: str, method: str) -> str:
    """
    Short human label for a route, e.g. GET /api/user/:id -> "Retrieve id".
    """
    parts = path_segments(path)
    last = parts[-1] if parts else ""
    if last.startswith(":"):
        last = last[1:]
    elif last.startswith("{") and last.endswith("}"):
        # starlette "{id:int}" -> "id"
        last = last[1:-1].split(":", 1)[0]
    verb = _DESCRIPTION_VERBS.get(method, method)
    return f"{verb} {last or 'resource'}"


def route_tags(path: str) -> list[str]:
    parts = [p for p in path_segments(path) if p != "api" and not is_param_segment(p)]
    return parts[:MAX_TAGS]


class RouteDescriptor(BaseModel):
    """Inferred documentation record for one (method, path) pair."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: HttpMethod
    body_schema: Optional[FieldSchema] = Field(default=None, serialization_alias="schema")
    headers: Optional[dict[str, str]] = None
    description: str = ""
    tags: list[str] = Field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.method, self.path)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
