from __future__ import annotations

from typing import Any

from starlette.routing import Host, Mount

from routelens.domain.models import SUPPORTED_METHODS
from routelens.routes.tree import MountNode, RouteLeaf, RouteNode, RouteTreeError


def nodes_from_starlette(app: Any) -> list[RouteNode]:
    """
    Route nodes of a live Starlette/FastAPI application or router.

    Mounts keep their literal path as prefix. Routes without HTTP methods
    (websockets) are skipped; HEAD and OPTIONS are not documented.
    """
    routes = getattr(app, "routes", None)
    if routes is None:
        raise RouteTreeError(f"{type(app).__name__} exposes no routes")

    nodes: list[RouteNode] = []
    for route in routes:
        if isinstance(route, Host):
            continue
        if isinstance(route, Mount):
            children = nodes_from_starlette(route) if route.routes else []
            nodes.append(MountNode(prefix=route.path, children=tuple(children)))
            continue

        methods = getattr(route, "methods", None)
        path = getattr(route, "path", None)
        if not methods or not isinstance(path, str):
            continue
        ordered = tuple(m for m in SUPPORTED_METHODS if m in methods)
        if ordered:
            nodes.append(RouteLeaf(path=path, methods=ordered))

    return nodes
