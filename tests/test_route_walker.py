import json
from pathlib import Path
import textwrap

import pytest
from fastapi import APIRouter, FastAPI

from routelens.routes.entrypoints import parse_routes_from_content, scan_entrypoint_routes
from routelens.routes.express import load_route_dump, parse_route_dump
from routelens.routes.tree import (
    MountNode,
    Registration,
    RouteLeaf,
    RouteTreeError,
    join_paths,
    mount_prefix_from_matcher,
)
from routelens.routes.walker import walk_route_tree


def route(path, *methods, handlers=None):
    layer = {"route": {"path": path, "methods": {m.lower(): True for m in methods}}}
    if handlers:
        layer["route"]["handlers"] = list(handlers)
    return layer


def mount(regexp, *layers):
    return {"name": "router", "regexp": regexp, "handle": {"stack": list(layers)}}


def pairs(walked):
    return [(r.method, r.path) for r in walked]


def test_join_paths():
    assert join_paths("/api/auth", "/login") == "/api/auth/login"
    assert join_paths("/api/auth", "/") == "/api/auth"
    assert join_paths("/api/", "//users/") == "/api/users"
    assert join_paths("", "/") == "/"


def test_mount_prefix_from_matcher():
    assert mount_prefix_from_matcher("^\\/api\\/auth\\/?(?=\\/|$)") == "/api/auth"
    assert mount_prefix_from_matcher("^\\/?(?=\\/|$)") == ""
    assert mount_prefix_from_matcher("^\\/v1\\.0\\/?$") == "/v1.0"


def test_nested_express_stack():
    stack = [
        mount(
            "^\\/api\\/?(?=\\/|$)",
            mount(
                "^\\/auth\\/?(?=\\/|$)",
                route("/login", "post"),
                route("/me", "get", "put"),
            ),
        ),
        {"name": "query", "handle": "function query(req, res, next) {}"},
        route("/health", "get", "head"),
    ]

    walked = walk_route_tree(live_tree={"stack": stack})

    assert pairs(walked) == [
        ("POST", "/api/auth/login"),
        ("GET", "/api/auth/me"),
        ("PUT", "/api/auth/me"),
        ("GET", "/health"),
    ]


def test_registrations_first_and_deduplicated():
    regs = [
        Registration("/api/user", {"stack": [route("/profile", "put"), route("/", "get")]}),
    ]
    live = [mount("^\\/api\\/user\\/?(?=\\/|$)", route("/profile", "put")), route("/api/status", "get")]

    walked = walk_route_tree(regs, live)

    assert pairs(walked) == [
        ("PUT", "/api/user/profile"),
        ("GET", "/api/user"),
        ("GET", "/api/status"),
    ]


def test_route_paths_list_and_handler_sources():
    stack = [route(["/a", "/b"], "post", handlers=["(req, res) => { const { x } = req.body; }"])]
    walked = walk_route_tree(live_tree=stack)

    assert pairs(walked) == [("POST", "/a"), ("POST", "/b")]
    assert walked[0].handler_sources == ("(req, res) => { const { x } = req.body; }",)


def test_route_nodes_are_accepted_directly():
    tree = [MountNode("/api", (RouteLeaf("/ping", ("GET",)),))]
    assert pairs(walk_route_tree(live_tree=tree)) == [("GET", "/api/ping")]


def test_malformed_trees_raise():
    with pytest.raises(RouteTreeError):
        walk_route_tree(live_tree={"stack": "nope"})
    with pytest.raises(RouteTreeError):
        walk_route_tree(live_tree={"routes": []})
    with pytest.raises(RouteTreeError):
        walk_route_tree(live_tree=42)
    with pytest.raises(RouteTreeError):
        walk_route_tree(live_tree=[{"route": {"path": 7, "methods": {"get": True}}}])


def test_fastapi_app_with_router_and_mount():
    app = FastAPI(openapi_url=None, docs_url=None, redoc_url=None)
    router = APIRouter()

    @router.post("/login")
    def login():
        return {}

    app.include_router(router, prefix="/api/auth")

    sub = FastAPI(openapi_url=None, docs_url=None, redoc_url=None)

    @sub.get("/items/{item_id}")
    def item(item_id: int):
        return {"id": item_id}

    app.mount("/v2", sub)

    assert pairs(walk_route_tree(live_tree=app)) == [
        ("POST", "/api/auth/login"),
        ("GET", "/v2/items/{item_id}"),
    ]


def test_parse_route_dump_shapes(tmp_path: Path):
    dump = parse_route_dump(
        {
            "registrations": [{"basePath": "/api/auth", "stack": [route("/login", "post")]}],
            "stack": [route("/health", "get")],
        }
    )
    assert dump.registrations[0].base_path == "/api/auth"
    assert pairs(walk_route_tree(dump.registrations, {"stack": dump.stack})) == [
        ("POST", "/api/auth/login"),
        ("GET", "/health"),
    ]

    p = tmp_path / "routes.json"
    p.write_text(json.dumps([route("/x", "get")]), encoding="utf-8")
    assert load_route_dump(p).stack == [route("/x", "get")]

    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(RouteTreeError):
        load_route_dump(p)
    with pytest.raises(RouteTreeError):
        parse_route_dump({"registrations": [{"stack": []}]})


ENTRY = """
const express = require("express");
const authController = require("./controllers/auth.controller");
const app = express();
const router = express.Router();

const createTodo = async (req, res) => {
  const { title, done } = req.body;
  res.json({ title, done: done || false });
};

app.post("/todos", createTodo);
app.get("/todos", listTodos);
router.put("/todos/:id", (req, res) => {
  const { title } = req.body;
  res.json({ title });
});
router.post("/login", authController.login);
app.use("/api", router);
"""


def test_parse_entrypoint_routes():
    found = parse_routes_from_content(ENTRY)

    assert [(r.method, r.path, r.handler_name) for r in found] == [
        ("POST", "/todos", "createTodo"),
        ("GET", "/todos", "listTodos"),
        ("PUT", "/todos/:id", None),
        ("POST", "/login", "login"),
        ("GET", "/api", "router"),
    ]
    assert found[2].handler_source.startswith("(req, res) => {")
    assert found[2].handler_source.endswith("}")


def test_scan_entrypoint_prefers_candidate_order(tmp_path: Path):
    (tmp_path / "server.js").write_text(textwrap.dedent(ENTRY), encoding="utf-8")
    (tmp_path / "app.js").write_text('app.get("/other", h);', encoding="utf-8")

    walked = scan_entrypoint_routes(tmp_path, ("index.js", "server.js", "app.js"))

    assert ("POST", "/todos") in pairs(walked)
    assert walked[0].handler_file == (tmp_path / "server.js").resolve()
    assert scan_entrypoint_routes(tmp_path / "empty", ("index.js",)) == []
