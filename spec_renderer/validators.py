"""Check documents and rendered envelopes against the packaged JSON schemas."""
from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, List, Tuple

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError
from referencing import Registry, Resource

from .utils.errors import InvalidDocument

SCHEMA_PACKAGE = "spec_renderer.schemas"


def _read(name: str) -> Dict[str, Any]:
    return json.loads(resources.files(SCHEMA_PACKAGE).joinpath(name).read_text(encoding="utf-8"))


@lru_cache(maxsize=1)
def _schemas() -> Dict[str, Dict[str, Any]]:
    return {
        entry.name: _read(entry.name)
        for entry in resources.files(SCHEMA_PACKAGE).iterdir()
        if entry.name.endswith(".json")
    }


@lru_cache(maxsize=1)
def _registry() -> Registry:
    resources_by_id = [
        (contents["$id"], Resource.from_contents(contents))
        for contents in _schemas().values()
        if "$id" in contents
    ]
    return Registry().with_resources(resources_by_id)


@lru_cache(maxsize=None)
def _validator(name: str) -> Draft202012Validator:
    return Draft202012Validator(_schemas()[name], registry=_registry())


def _describe(error: ValidationError) -> str:
    location = "/".join(str(part) for part in error.absolute_path)
    return f"/{location}: {error.message}" if location else error.message


def validate_payload(schema_name: str, payload: Any) -> Tuple[bool, List[str]]:
    errors = [_describe(error) for error in _validator(schema_name).iter_errors(payload)]
    return not errors, errors


def ensure_document(document: Any) -> None:
    """Raise :class:`InvalidDocument` unless ``document`` looks like OpenAPI 2 or 3."""

    valid, errors = validate_payload("document.v1.json", document)
    if not valid:
        raise InvalidDocument(errors)


__all__ = ["ensure_document", "validate_payload"]
