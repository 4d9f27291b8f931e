from __future__ import annotations

import copy
from typing import Any, Dict

import pytest

from spec_renderer.spec.assemble import (
    DRAFT4_SCHEMA,
    document_version,
    is_v3,
    render_for_path,
    render_full,
)
from spec_renderer.spec.bundle import Bundler
from spec_renderer.utils.errors import ErrorCode, PathNotFound


def test_document_version_and_is_v3() -> None:
    assert document_version({"swagger": "2.0"}) == "2.0"
    assert document_version({"openapi": "3.1.0"}) == "3.1.0"
    assert document_version({}) == ""
    assert is_v3({"openapi": "3.0.3"}) is True
    assert is_v3({"swagger": "2.0"}) is False
    assert is_v3({"openapi": "2.9"}) is False


def test_render_full_v2_points_at_request_host(minimal_v2: Dict[str, Any]) -> None:
    spec = render_full(minimal_v2, "https://new.example/docs")

    assert spec["host"] == "new.example"
    assert spec["basePath"] == "/api"
    assert "servers" not in spec
    assert minimal_v2["host"] == "old.example"


def test_render_full_v2_keeps_port_and_root_path(minimal_v2: Dict[str, Any]) -> None:
    document = dict(minimal_v2, servers=[{"url": "http://ignored"}])
    spec = render_full(document, "http://localhost:8080/api", root_path="/mounted/")

    assert spec["host"] == "localhost:8080"
    assert spec["basePath"] == "/mounted/api"
    assert "servers" not in spec


def test_render_full_v2_defaults_base_path() -> None:
    spec = render_full({"swagger": "2.0", "paths": {}}, "http://testserver/")
    assert spec["basePath"] == "/"
    assert spec["host"] == "testserver"


def test_render_full_v3_has_one_server_with_request_url() -> None:
    document = {
        "openapi": "3.0.0",
        "basePath": "/legacy",
        "servers": [{"url": "http://a"}, {"url": "http://b"}],
        "paths": {},
    }
    original = copy.deepcopy(document)
    spec = render_full(document, "https://docs.example/v1?format=json")

    assert spec["servers"] == [{"url": "https://docs.example/v1?format=json"}]
    assert "basePath" not in spec
    assert document == original


def test_render_for_path_minimal_document(minimal_v2: Dict[str, Any]) -> None:
    partial = render_for_path(Bundler(minimal_v2), "/pets")

    assert partial == {
        "$schema": "http://json-schema.org/draft-04/schema#",
        "title": "",
        "description": "",
        "definitions": {},
        "parameters": [],
        "get": {"responses": {"200": {"description": "ok"}}},
    }


def test_render_for_path_missing_path_is_not_found(minimal_v2: Dict[str, Any]) -> None:
    with pytest.raises(PathNotFound) as excinfo:
        render_for_path(Bundler(minimal_v2), "/owners")

    assert excinfo.value.code is ErrorCode.PATH_NOT_FOUND
    assert excinfo.value.status == 404


def test_render_for_path_collects_path_and_operation_parameters(petstore_v2: Dict[str, Any]) -> None:
    bundler = Bundler(petstore_v2)
    partial = render_for_path(bundler, "/pets/{petId}")

    assert partial["$schema"] == DRAFT4_SCHEMA
    assert partial["title"] == "Pet Store"
    assert partial["description"] == "A *sample* pet store."
    assert partial["parameters"] == [
        {"name": "petId", "in": "path", "required": True, "type": "string"}
    ]
    assert set(partial) >= {"get", "delete"}
    assert set(partial["definitions"]) == {"Pet", "Tag"}


def test_render_for_path_with_method_selects_operation(petstore_v2: Dict[str, Any]) -> None:
    bundler = Bundler(petstore_v2)
    partial = render_for_path(bundler, "/pets/{petId}", "GET")

    assert partial["operationId"] == "showPetById"
    assert "get" not in partial and "delete" not in partial
    assert partial["parameters"][0]["name"] == "petId"
    assert partial["responses"]["200"]["schema"] == {"$ref": "#/definitions/Pet"}


def test_render_for_path_appends_operation_parameters(petstore_v2: Dict[str, Any]) -> None:
    partial = render_for_path(Bundler(petstore_v2), "/pets", "get")

    assert partial["parameters"] == [{"$ref": "#/definitions/parameters_limit"}]
    assert partial["definitions"]["parameters_limit"]["name"] == "limit"


def test_render_for_path_empty_method_is_ignored(petstore_v2: Dict[str, Any]) -> None:
    bundler = Bundler(petstore_v2)
    assert render_for_path(bundler, "/pets", "") == render_for_path(bundler, "/pets")


def test_render_for_path_unknown_method_is_not_found(petstore_v2: Dict[str, Any]) -> None:
    with pytest.raises(PathNotFound) as excinfo:
        render_for_path(Bundler(petstore_v2), "/pets", "patch")
    assert "PATCH /pets" in str(excinfo.value)


def test_render_for_path_does_not_mutate_document(petstore_v2: Dict[str, Any]) -> None:
    original = copy.deepcopy(petstore_v2)
    bundler = Bundler(petstore_v2)
    render_for_path(bundler, "/pets/{petId}", "get")
    render_for_path(bundler, "/pets", "post")
    assert petstore_v2 == original
