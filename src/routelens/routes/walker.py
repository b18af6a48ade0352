from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from routelens.domain.models import SUPPORTED_METHODS
from routelens.routes.express import nodes_from_express_stack
from routelens.routes.starlette import nodes_from_starlette
from routelens.routes.tree import (
    MountNode,
    Registration,
    RouteLeaf,
    RouteNode,
    RouteTreeError,
    WalkedRoute,
    join_paths,
)

logger = logging.getLogger(__name__)


def as_route_nodes(router: Any) -> list[RouteNode]:
    """
    Normalise anything that describes a router into route nodes.

    Accepts route nodes, Express stack dumps ({"stack": [...]} or the bare
    list) and live objects exposing `.routes` (Starlette/FastAPI).
    """
    if isinstance(router, (RouteLeaf, MountNode)):
        return [router]

    if isinstance(router, dict):
        if "stack" not in router:
            raise RouteTreeError("router object has no stack")
        return nodes_from_express_stack(router["stack"])

    if isinstance(router, (list, tuple)):
        if all(isinstance(n, (RouteLeaf, MountNode)) for n in router):
            return list(router)
        return nodes_from_express_stack(list(router))

    if hasattr(router, "routes"):
        return nodes_from_starlette(router)

    raise RouteTreeError(f"cannot walk router of type {type(router).__name__}")


def walk_route_tree(
    registrations: Iterable[Registration] = (),
    live_tree: Optional[Any] = None,
) -> list[WalkedRoute]:
    """
    Flatten registrations and the live tree into unique (method, path) routes.

    Registrations come first; a (method, path) seen once is not repeated.
    """
    out: list[WalkedRoute] = []
    seen: set[tuple[str, str]] = set()

    def visit(nodes: Iterable[RouteNode], prefix: str) -> None:
        for node in nodes:
            if isinstance(node, MountNode):
                visit(node.children, join_paths(prefix, node.prefix))
            elif isinstance(node, RouteLeaf):
                full_path = join_paths(prefix, node.path)
                for method in node.methods:
                    method = method.upper()
                    if method not in SUPPORTED_METHODS:
                        continue
                    key = (method, full_path)
                    if key in seen:
                        continue
                    seen.add(key)
                    out.append(WalkedRoute(method=method, path=full_path, handler_sources=node.handler_sources))
            else:
                raise RouteTreeError(f"unexpected node {node!r}")

    for reg in registrations:
        visit(as_route_nodes(reg.router), reg.base_path)

    if live_tree is not None:
        visit(as_route_nodes(live_tree), "")

    logger.debug("walked %d routes", len(out))
    return out
