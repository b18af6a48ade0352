from routelens.domain.models import RouteDescriptor, default_headers, describe_route, route_tags


def test_describe_route_strips_parameter_markers():
    assert describe_route("/api/user/:id", "GET") == "Retrieve id"
    assert describe_route("/api/user/{id}", "DELETE") == "Delete id"
    assert describe_route("/api/user/{id:int}", "GET") == "Retrieve id"
    assert describe_route("/", "POST") == "Create resource"


def test_route_tags_skip_api_and_parameters():
    assert route_tags("/api/user/{id:int}/posts/extra") == ["user", "posts"]
    assert route_tags("/api") == []


def test_json_form_uses_schema_key():
    d = RouteDescriptor(
        path="/api/widgets",
        method="POST",
        body_schema={"size": "string"},
        headers=default_headers("POST"),
    )
    assert d.to_json_dict()["schema"] == {"size": "string"}
    assert "body_schema" not in d.to_json_dict()
