from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from routelens.config import AnalyzerConfig
from routelens.orchestrator.pipeline import AnalyzeResult, analyze_routes
from routelens.routes.express import RouteDump
from routelens.routes.registry import RouteRegistry

logger = logging.getLogger(__name__)


class DocsService:
    """
    Serves inferred route descriptors as JSON.

    Holds only configuration and the registry; every request runs a fresh
    analysis over the current files.
    """

    def __init__(self, config: AnalyzerConfig, base_path: str = "/api-docs") -> None:
        self.config = config
        self.base_path = "/" + base_path.strip("/") if base_path.strip("/") else ""
        self.registry = RouteRegistry()

    @property
    def routes_endpoint(self) -> str:
        return f"{self.base_path}/api/routes"

    def register_routes(self, base_path: str, router: Any) -> "DocsService":
        self.registry.register(base_path, router)
        return self

    def add_route_doc(self, path: str, method: str, documentation: dict[str, Any]) -> "DocsService":
        self.registry.add_documentation(path, method, documentation)
        return self

    def list_routes(self, live_tree: Optional[Any] = None) -> AnalyzeResult:
        return analyze_routes(
            self.config,
            registrations=self.registry.registrations(),
            live_tree=live_tree,
            documentation=self.registry.documentation(),
        )

    def init(self, app: FastAPI, live_tree: Optional[Any] = None) -> "DocsService":
        """
        Add the routes endpoint to app.

        Without an explicit live_tree the app documents its own routes.
        """
        tree = app if live_tree is None else live_tree

        @app.get(self.routes_endpoint, include_in_schema=False)
        def list_api_routes():
            try:
                result = self.list_routes(tree)
            except Exception:
                logger.exception("Error analyzing routes")
                return JSONResponse(status_code=500, content={"error": "Failed to analyze routes"})
            return result.to_json_dict()

        return self


def create_docs_app(
    config: AnalyzerConfig,
    dump: Optional[RouteDump] = None,
    base_path: str = "/api-docs",
) -> FastAPI:
    """Standalone documentation app for a project described by a route dump."""
    app = FastAPI(title="routelens", docs_url=None, redoc_url=None, openapi_url=None)
    service = DocsService(config, base_path=base_path)

    live_tree = None
    if dump is not None:
        for reg in dump.registrations:
            service.register_routes(reg.base_path, reg.router)
        if dump.stack is not None:
            live_tree = {"stack": dump.stack}

    # an empty tree falls back to scanning the project's entry-point file
    service.init(app, live_tree=live_tree if live_tree is not None else [])
    app.state.docs_service = service
    return app
