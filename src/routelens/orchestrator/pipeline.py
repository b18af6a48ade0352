from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from routelens.config import AnalyzerConfig
from routelens.domain.models import (
    BODYLESS_METHODS,
    FIELD_NAME_RE,
    MAX_TAGS,
    FieldSchema,
    REQUIRED,
    RouteDescriptor,
    default_headers,
    describe_route,
    route_tags,
)
from routelens.extractors.js.handlers import (
    extract_handler_schema,
    extract_schema_from_source,
    list_handler_names,
)
from routelens.extractors.js.validation import extract_validation_schema, list_validation_chains
from routelens.inference.keywords import infer_from_path
from routelens.matching.resolver import resolve_name
from routelens.repo.discovery import SourceIndex, build_source_index, read_source
from routelens.routes.entrypoints import scan_entrypoint_routes
from routelens.routes.registry import doc_key
from routelens.routes.tree import Registration, WalkedRoute
from routelens.routes.walker import walk_route_tree

logger = logging.getLogger(__name__)

PLACEHOLDER_SCHEMA: FieldSchema = {"field1": REQUIRED, "field2": REQUIRED}

VALIDATION_SUFFIX = "Validation"


@dataclass(frozen=True)
class RouteContext:
    """Everything a resolver stage may look at for one route."""

    method: str
    path: str
    validators: SourceIndex = field(default_factory=SourceIndex)
    controllers: SourceIndex = field(default_factory=SourceIndex)
    payload_object: str = "req.body"
    handler_name: Optional[str] = None
    handler_file: Optional[Path] = None
    handler_sources: tuple[str, ...] = ()


SchemaResolver = Callable[[RouteContext], Optional[FieldSchema]]


def from_validation_chain(ctx: RouteContext) -> Optional[FieldSchema]:
    source_file = ctx.validators.lookup(ctx.path)
    if source_file is None:
        return None
    text = read_source(source_file)
    if text is None:
        return None
    match = resolve_name(ctx.path, ctx.method, list_validation_chains(text), suffix=VALIDATION_SUFFIX)
    if match is None:
        return None
    logger.debug("%s %s -> %s (%s, %s)", ctx.method, ctx.path, match.name, match.strategy, source_file.name)
    return extract_validation_schema(text, match.name)


def from_controller(ctx: RouteContext) -> Optional[FieldSchema]:
    source_file = ctx.controllers.lookup(ctx.path)
    if source_file is None:
        return None
    text = read_source(source_file)
    if text is None:
        return None
    match = resolve_name(ctx.path, ctx.method, list_handler_names(text))
    if match is None:
        return None
    logger.debug("%s %s -> %s (%s, %s)", ctx.method, ctx.path, match.name, match.strategy, source_file.name)
    return extract_handler_schema(text, match.name, ctx.payload_object)


def from_route_handler(ctx: RouteContext) -> Optional[FieldSchema]:
    # handler source attached to the route itself, or a named entry-point handler
    for source in ctx.handler_sources:
        schema = extract_schema_from_source(source, ctx.payload_object)
        if schema:
            return schema
    if ctx.handler_name and ctx.handler_file is not None:
        text = read_source(ctx.handler_file)
        if text is not None:
            return extract_handler_schema(text, ctx.handler_name, ctx.payload_object)
    return None


def from_path_keywords(ctx: RouteContext) -> Optional[FieldSchema]:
    return infer_from_path(ctx.path, ctx.method)


def placeholder_schema(ctx: RouteContext) -> Optional[FieldSchema]:
    return dict(PLACEHOLDER_SCHEMA)


DEFAULT_RESOLVERS: tuple[tuple[str, SchemaResolver], ...] = (
    ("validation", from_validation_chain),
    ("controller", from_controller),
    ("route_handler", from_route_handler),
    ("path_keywords", from_path_keywords),
    ("placeholder", placeholder_schema),
)

DEFAULTS_ONLY: tuple[tuple[str, SchemaResolver], ...] = (("placeholder", placeholder_schema),)


def resolve_schema(
    ctx: RouteContext,
    resolvers: Sequence[tuple[str, SchemaResolver]] = DEFAULT_RESOLVERS,
) -> Optional[FieldSchema]:
    """
    Run resolver stages in order; the first non-empty schema wins.

    GET and DELETE never carry a payload. A stage that raises is logged and
    skipped so one bad file cannot break the other routes.
    """
    if ctx.method.upper() in BODYLESS_METHODS:
        return None

    for name, resolver in resolvers:
        try:
            schema = resolver(ctx)
        except Exception:
            logger.warning("%s stage failed for %s %s", name, ctx.method, ctx.path, exc_info=True)
            continue
        if schema:
            logger.debug("%s %s resolved by %s", ctx.method, ctx.path, name)
            return dict(schema)

    return None


@dataclass(frozen=True)
class AnalyzeResult:
    routes: list[RouteDescriptor]
    mode: str  # "tree" | "entrypoint"
    validator_files: int
    controller_files: int

    def to_json_dict(self) -> dict[str, Any]:
        return {"apis": [r.to_json_dict() for r in self.routes]}


def _override_schema(schema: Any) -> Optional[FieldSchema]:
    # only flat name -> string entries survive; nested schemas are not representable
    if not isinstance(schema, Mapping):
        return None
    kept = {
        k: v
        for k, v in schema.items()
        if isinstance(k, str) and FIELD_NAME_RE.match(k) and isinstance(v, str)
    }
    return kept or None


def _apply_documentation(descriptor: RouteDescriptor, doc: Mapping[str, Any]) -> RouteDescriptor:
    update: dict[str, Any] = {}
    if isinstance(doc.get("description"), str):
        update["description"] = doc["description"]
    if isinstance(doc.get("tags"), list):
        update["tags"] = [str(t) for t in doc["tags"]][:MAX_TAGS]
    if "headers" in doc:
        update["headers"] = doc["headers"]
    if "schema" in doc and descriptor.method not in BODYLESS_METHODS:
        schema = _override_schema(doc["schema"])
        if schema:
            update["body_schema"] = schema
        else:
            logger.warning("ignoring unusable schema override for %s %s", descriptor.method, descriptor.path)
    if not update:
        return descriptor
    return RouteDescriptor.model_validate({**descriptor.model_dump(), **update})


def describe(route: WalkedRoute, schema: Optional[FieldSchema]) -> RouteDescriptor:
    return RouteDescriptor(
        path=route.path,
        method=route.method,
        body_schema=schema,
        headers=default_headers(route.method),
        description=describe_route(route.path, route.method),
        tags=route_tags(route.path),
    )


def analyze_routes(
    config: AnalyzerConfig,
    registrations: Iterable[Registration] = (),
    live_tree: Optional[Any] = None,
    documentation: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> AnalyzeResult:
    """
    Infer a RouteDescriptor for every route of the application.

    Pure function of its inputs and the files on disk: indexes are rebuilt
    on every call and nothing is cached. Raises RouteTreeError when the
    route tree itself cannot be walked; every per-route failure degrades
    that route only.
    """
    walked = walk_route_tree(registrations, live_tree)
    mode = "tree"
    if not walked:
        walked = scan_entrypoint_routes(Path(config.project_root), config.entrypoint_files)
        mode = "entrypoint"

    if config.auto_detect:
        validators = build_source_index(config.validators_path, config.validator_suffixes)
        controllers = build_source_index(config.controllers_path, config.controller_suffixes)
        resolvers = DEFAULT_RESOLVERS
    else:
        validators, controllers = SourceIndex(), SourceIndex()
        resolvers = DEFAULTS_ONLY

    descriptors: list[RouteDescriptor] = []
    seen: set[tuple[str, str]] = set()
    for route in walked:
        if (route.method, route.path) in seen:
            continue
        seen.add((route.method, route.path))

        ctx = RouteContext(
            method=route.method,
            path=route.path,
            validators=validators,
            controllers=controllers,
            payload_object=config.payload_object,
            handler_name=route.handler_name,
            handler_file=route.handler_file,
            handler_sources=route.handler_sources,
        )
        descriptor = describe(route, resolve_schema(ctx, resolvers))

        doc = (documentation or {}).get(doc_key(route.path, route.method))
        if doc:
            try:
                descriptor = _apply_documentation(descriptor, doc)
            except Exception:
                logger.warning("documentation override failed for %s %s", route.method, route.path, exc_info=True)
        descriptors.append(descriptor)

    validator_files = len(set(validators.entries.values()))
    controller_files = len(set(controllers.entries.values()))
    logger.info(
        "analyzed %d routes (%s mode, %d validator files, %d controller files)",
        len(descriptors),
        mode,
        validator_files,
        controller_files,
    )
    return AnalyzeResult(
        routes=descriptors,
        mode=mode,
        validator_files=validator_files,
        controller_files=controller_files,
    )
