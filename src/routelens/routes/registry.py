from __future__ import annotations

from typing import Any, Optional

from routelens.routes.tree import Registration


def doc_key(path: str, method: str) -> str:
    return f"{method.upper()}:{path}"


class RouteRegistry:
    """Explicit (basePath, router) registrations plus hand-written route docs."""

    def __init__(self) -> None:
        self._registrations: list[Registration] = []
        self._documentation: dict[str, dict[str, Any]] = {}

    def register(self, base_path: str, router: Any) -> "RouteRegistry":
        self._registrations.append(Registration(base_path=base_path, router=router))
        return self

    def registrations(self) -> list[Registration]:
        return list(self._registrations)

    def add_documentation(self, path: str, method: str, documentation: dict[str, Any]) -> None:
        self._documentation[doc_key(path, method)] = dict(documentation)

    def get_documentation(self, path: str, method: str) -> Optional[dict[str, Any]]:
        doc = self._documentation.get(doc_key(path, method))
        return dict(doc) if doc is not None else None

    def documentation(self) -> dict[str, dict[str, Any]]:
        return {k: dict(v) for k, v in self._documentation.items()}

    def clear(self) -> None:
        self._registrations = []
        self._documentation = {}
