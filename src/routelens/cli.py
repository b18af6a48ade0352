from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from routelens.config import AnalyzerConfig
from routelens.orchestrator.pipeline import analyze_routes
from routelens.routes.express import RouteDump, load_route_dump
from routelens.routes.tree import RouteTreeError

app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _project_path(project: str) -> Path:
    project_path = Path(project).expanduser().resolve()
    if not project_path.exists():
        raise typer.BadParameter(f"Project path does not exist: {project_path}")
    if not project_path.is_dir():
        raise typer.BadParameter(f"Project path is not a directory: {project_path}")
    return project_path


def _load_dump(routes: Optional[str]) -> Optional[RouteDump]:
    if routes is None:
        return None
    try:
        return load_route_dump(Path(routes).expanduser())
    except RouteTreeError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _config(
    project_path: Path,
    auto_detect: bool,
    controllers: Optional[str],
    validators: Optional[str],
) -> AnalyzerConfig:
    return AnalyzerConfig.from_env(
        project_path,
        controllers_dir=controllers,
        validators_dir=validators,
        auto_detect=None if auto_detect else False,
    )


def _schema_cell(schema: Optional[dict]) -> str:
    if not schema:
        return "-"
    return ", ".join(f"{k}?" if v.endswith("(optional)") else k for k, v in schema.items())


@app.command()
def analyze(
    project: str = typer.Argument(..., help="Path to the project to analyze"),
    routes: Optional[str] = typer.Option(None, help="Route tree dump (JSON) exported from the app"),
    format: str = typer.Option("table", help="Output format: table|json"),
    auto_detect: bool = typer.Option(
        True, "--auto-detect/--no-auto-detect", help="Infer schemas from source files"
    ),
    controllers: Optional[str] = typer.Option(None, help="Controllers directory (relative to project)"),
    validators: Optional[str] = typer.Option(None, help="Validators directory (relative to project)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    _setup_logging(verbose)
    project_path = _project_path(project)
    dump = _load_dump(routes)
    config = _config(project_path, auto_detect, controllers, validators)

    fmt = format.lower().strip()
    if fmt not in ("table", "json"):
        raise typer.BadParameter("format must be one of: table, json")

    try:
        result = analyze_routes(
            config,
            registrations=dump.registrations if dump else (),
            live_tree={"stack": dump.stack} if dump and dump.stack is not None else None,
        )
    except RouteTreeError as exc:
        console.print(f"[bold red]Failed to analyze routes:[/bold red] {exc}")
        raise typer.Exit(code=1)

    if fmt == "json":
        console.print_json(json.dumps(result.to_json_dict()))
        return

    console.print(f"[bold green]routelens[/bold green] analyze: {project_path}")
    console.print(
        f"Mode: [bold]{result.mode}[/bold]  validator files: {result.validator_files}  "
        f"controller files: {result.controller_files}"
    )
    console.print("")

    table = Table(show_header=True, header_style="bold")
    table.add_column("METHOD", no_wrap=True)
    table.add_column("PATH")
    table.add_column("SCHEMA")
    table.add_column("TAGS", no_wrap=True)

    for r in result.routes:
        table.add_row(r.method, r.path, _schema_cell(r.body_schema), ",".join(r.tags))

    console.print(table)
    console.print(f"Routes: [bold]{len(result.routes)}[/bold]")


@app.command()
def serve(
    project: str = typer.Argument(..., help="Path to the project to document"),
    routes: Optional[str] = typer.Option(None, help="Route tree dump (JSON) exported from the app"),
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8800, help="Bind port"),
    base_path: str = typer.Option("/api-docs", help="Mount point of the documentation endpoint"),
    auto_detect: bool = typer.Option(
        True, "--auto-detect/--no-auto-detect", help="Infer schemas from source files"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    import uvicorn

    from routelens.service.app import create_docs_app

    _setup_logging(verbose)
    project_path = _project_path(project)
    dump = _load_dump(routes)
    config = _config(project_path, auto_detect, None, None)

    docs_app = create_docs_app(config, dump=dump, base_path=base_path)
    console.print(f"Serving [bold]{docs_app.state.docs_service.routes_endpoint}[/bold] on http://{host}:{port}")
    uvicorn.run(docs_app, host=host, port=port, log_level="debug" if verbose else "info")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
