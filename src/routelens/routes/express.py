from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from routelens.routes.tree import (
    MountNode,
    Registration,
    RouteLeaf,
    RouteNode,
    RouteTreeError,
    mount_prefix_from_matcher,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteDump:
    """Route tree exported from an Express process."""

    registrations: list[Registration] = field(default_factory=list)
    stack: Optional[list] = None


def _layer_methods(route: dict) -> tuple[str, ...]:
    methods = route.get("methods") or {}
    if isinstance(methods, dict):
        # express keeps {"get": true, "post": true}
        return tuple(str(m).upper() for m, enabled in methods.items() if enabled)
    if isinstance(methods, (list, tuple)):
        return tuple(str(m).upper() for m in methods)
    raise RouteTreeError(f"unexpected route methods: {methods!r}")


def _layer_paths(route: dict) -> list[str]:
    path = route.get("path")
    if isinstance(path, str):
        return [path]
    if isinstance(path, list) and all(isinstance(p, str) for p in path):
        return list(path)
    raise RouteTreeError(f"unexpected route path: {path!r}")


def _layer_sources(route: dict) -> tuple[str, ...]:
    handlers = route.get("handlers") or []
    if not isinstance(handlers, list):
        raise RouteTreeError("route handlers must be a list of source strings")
    return tuple(h for h in handlers if isinstance(h, str))


def nodes_from_express_stack(stack: Any) -> list[RouteNode]:
    """
    Convert an Express router stack dump into route nodes.

    Route layers become leaves, router layers become mounts; other
    middleware layers are ignored.
    """
    if not isinstance(stack, list):
        raise RouteTreeError(f"router stack must be a list, got {type(stack).__name__}")

    nodes: list[RouteNode] = []
    for layer in stack:
        if not isinstance(layer, dict):
            raise RouteTreeError(f"router layer must be an object, got {type(layer).__name__}")

        route = layer.get("route")
        if route is not None:
            if not isinstance(route, dict):
                raise RouteTreeError("layer.route must be an object")
            methods = _layer_methods(route)
            sources = _layer_sources(route)
            for path in _layer_paths(route):
                nodes.append(RouteLeaf(path=path, methods=methods, handler_sources=sources))
            continue

        handle = layer.get("handle")
        if layer.get("name") == "router" and isinstance(handle, dict):
            prefix = layer.get("path")
            if not isinstance(prefix, str):
                prefix = mount_prefix_from_matcher(str(layer.get("regexp", "")))
            children = nodes_from_express_stack(handle.get("stack", []))
            nodes.append(MountNode(prefix=prefix, children=tuple(children)))

    return nodes


def parse_route_dump(payload: Any) -> RouteDump:
    if isinstance(payload, list):
        return RouteDump(stack=payload)
    if not isinstance(payload, dict):
        raise RouteTreeError("route dump must be a JSON object or a router stack")

    registrations: list[Registration] = []
    for entry in payload.get("registrations") or []:
        if not isinstance(entry, dict) or not isinstance(entry.get("basePath"), str):
            raise RouteTreeError(f"bad registration: {entry!r}")
        router = entry.get("router", {"stack": entry.get("stack", [])})
        registrations.append(Registration(base_path=entry["basePath"], router=router))

    stack = payload.get("stack")
    if stack is not None and not isinstance(stack, list):
        raise RouteTreeError("top-level stack must be a list")
    return RouteDump(registrations=registrations, stack=stack)


def load_route_dump(path: Path) -> RouteDump:
    """Read the JSON route dump used by the CLI and the standalone service."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RouteTreeError(f"cannot read route dump {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise RouteTreeError(f"route dump {path} is not valid JSON: {exc}") from exc
    dump = parse_route_dump(payload)
    logger.debug("loaded %d registrations from %s", len(dump.registrations), path)
    return dump
