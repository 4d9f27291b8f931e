"""Human readable rendering of a specification.

The templates only loop over what the view helpers below return, so the body
and the navigation share one set of ordering and filtering rules and every
navigation anchor has a matching heading.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass
from importlib import resources as package_resources
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from jinja2 import (
    ChainableUndefined,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    select_autoescape,
)

from ..spec.assemble import document_version, is_v3
from .helpers import is_extension, markdown, serialize, slugify

LAYOUT = "spec_renderer/layout.html"
INFINITY = "∞"


@dataclass(frozen=True)
class Operation:
    method: str
    path: str
    op: Mapping[str, Any]
    anchor: str


@dataclass(frozen=True)
class Reference:
    kind: str
    key: str
    pointer: str
    anchor: str
    value: Any


@dataclass(frozen=True)
class ParameterRow:
    name: str
    location: str
    type: str
    required: bool
    description: str
    schema: Any
    anchor: Optional[str]


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _sorted_keys(mapping: Mapping[Any, Any]) -> List[Any]:
    return sorted((key for key in mapping if not is_extension(key)), key=str)


def resources(spec: Mapping[str, Any]) -> List[Operation]:
    """Operations ordered by path length, then path, then method."""

    paths = _mapping(spec.get("paths"))
    ordered = sorted(
        (path for path in paths if not is_extension(path)),
        key=lambda path: (len(str(path)), str(path)),
    )
    operations: List[Operation] = []
    for path in ordered:
        item = _mapping(paths[path])
        for method in _sorted_keys(item):
            op = item[method]
            if method == "parameters" or not isinstance(op, Mapping):
                continue
            operations.append(Operation(method, path, op, slugify("op", method, path)))
    return operations


def references(spec: Mapping[str, Any]) -> List[Reference]:
    """Shared definitions, components and parameters in display order."""

    found: List[Reference] = []
    definitions = _mapping(spec.get("definitions"))
    for key in _sorted_keys(definitions):
        found.append(
            Reference(
                "definitions",
                key,
                f"#/definitions/{key}",
                slugify("ref", "definitions", key),
                definitions[key],
            )
        )

    components = _mapping(spec.get("components"))
    for kind in _sorted_keys(components):
        section = _mapping(components[kind])
        for key in _sorted_keys(section):
            found.append(
                Reference(
                    "components",
                    key,
                    f"#/components/{kind}/{key}",
                    slugify("ref", "components", kind, key),
                    section[key],
                )
            )

    parameters = _mapping(spec.get("parameters"))
    for key in _sorted_keys(parameters):
        found.append(
            Reference(
                "parameters",
                key,
                f"#/parameters/{key}",
                slugify("ref", "parameters", key),
                parameters[key],
            )
        )
    return found


def response_codes(op: Mapping[str, Any]) -> List[Tuple[Any, Mapping[str, Any]]]:
    responses = _mapping(op.get("responses"))
    return [(code, _mapping(responses[code])) for code in _sorted_keys(responses)]


def _shared_parameter(
    spec: Mapping[str, Any], raw: Mapping[str, Any]
) -> Tuple[Mapping[str, Any], Optional[str]]:
    ref = raw.get("$ref")
    if isinstance(ref, str):
        sections = (
            ("#/parameters/", _mapping(spec.get("parameters")), ("ref", "parameters")),
            (
                "#/components/parameters/",
                _mapping(_mapping(spec.get("components")).get("parameters")),
                ("ref", "components", "parameters"),
            ),
        )
        for prefix, section, anchor_prefix in sections:
            if not ref.startswith(prefix):
                continue
            key = ref[len(prefix):].replace("~1", "/").replace("~0", "~")
            target = section.get(key)
            if isinstance(target, Mapping):
                return target, slugify(*anchor_prefix, key)
    return raw, None


def operation_parameters(spec: Mapping[str, Any], op: Mapping[str, Any]) -> List[ParameterRow]:
    shared = _mapping(spec.get("parameters"))
    rows: List[ParameterRow] = []
    for raw in op.get("parameters") or []:
        if not isinstance(raw, Mapping):
            continue
        param, anchor = _shared_parameter(spec, raw)
        name = str(param.get("name", ""))
        if anchor is None and name in shared and not is_extension(name):
            anchor = slugify("ref", "parameters", name)
        schema = _mapping(param.get("schema"))
        rows.append(
            ParameterRow(
                name=name,
                location=str(param.get("in", "")),
                type=str(param.get("type") or schema.get("type") or ""),
                required=bool(param.get("required")),
                description=str(param.get("description") or ""),
                schema=param.get("schema"),
                anchor=anchor,
            )
        )
    return rows


def _is_set(value: Any) -> bool:
    return value is not None and value is not False


def _display(value: Any) -> str:
    if isinstance(value, (dict, list, bool)) or value is None:
        return serialize(value)
    return str(value)


def _bound(value: Any, exclusive: Any, *, lower: bool) -> str:
    if isinstance(exclusive, bool) or exclusive is None:
        if _is_set(value):
            op = "<" if exclusive else "<="
            return f"{value} {op}" if lower else f"{op} {value}"
    else:
        return f"{exclusive} <" if lower else f"< {exclusive}"
    return f"{INFINITY} <=" if lower else f"<= {INFINITY}"


def _range(item: Mapping[str, Any], low: str, high: str, label: str) -> Optional[str]:
    if not (_is_set(item.get(low)) or _is_set(item.get(high))):
        return None
    return f"Min / max: {_bound(item.get(low), None, lower=True)} {label} {_bound(item.get(high), None, lower=False)}"


def parameter_constraints(item: Mapping[str, Any]) -> List[str]:
    """Bullet lines describing a shared parameter."""

    lines = [f"In: {item.get('in', '')}"]
    type_line = f"Type: {item.get('type') or _mapping(item.get('schema')).get('type') or ''}"
    for key in ("format", "pattern"):
        if item.get(key):
            type_line += f" / {item[key]}"
    lines.append(type_line)

    value_keys = ("exclusiveMinimum", "exclusiveMaximum", "minimum", "maximum")
    if any(_is_set(item.get(key)) for key in value_keys):
        lower = _bound(item.get("minimum"), item.get("exclusiveMinimum"), lower=True)
        upper = _bound(item.get("maximum"), item.get("exclusiveMaximum"), lower=False)
        lines.append(f"Min / max: {lower} value {upper}")

    for low, high, label in (("minLength", "maxLength", "length"), ("minItems", "maxItems", "items")):
        line = _range(item, low, high, label)
        if line:
            lines.append(line)

    for key in ("collectionFormat", "uniqueItems", "multipleOf", "enum"):
        if item.get(key):
            lines.append(f"{key[0].upper()}{key[1:]}: {_display(item[key])}")

    lines.append(f"Required: {'Yes.' if item.get('required') else 'No.'}")
    if "default" in item:
        lines.append(f"Default: {serialize(item['default'])}")
    else:
        lines.append("No default value.")
    return lines


def base_urls(spec: Mapping[str, Any]) -> List[Tuple[str, str]]:
    """``(url, description)`` pairs: one per server (v3) or per scheme (v2)."""

    if is_v3(spec):
        servers = spec.get("servers") or []
        return [
            (str(server.get("url", "")), str(server.get("description") or ""))
            for server in servers
            if isinstance(server, Mapping)
        ]
    host = spec.get("host") or ""
    return [(f"{scheme}://{host}", "") for scheme in spec.get("schemes") or ["http"]]


class HtmlRenderer:
    """Jinja2 environment over the overridable ``spec_renderer/*.html`` templates."""

    def __init__(self, template_dirs: Iterable[str | Path] = ()) -> None:
        self._user_loader = FileSystemLoader([str(path) for path in template_dirs])
        self.env = Environment(
            loader=ChoiceLoader(
                [self._user_loader, PackageLoader("spec_renderer", "html/templates")]
            ),
            autoescape=select_autoescape(["html"]),
            undefined=ChainableUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.globals.update(
            base_urls=base_urls,
            document_version=document_version,
            is_extension=is_extension,
            is_v3=is_v3,
            markdown=markdown,
            operation_parameters=operation_parameters,
            parameter_constraints=parameter_constraints,
            references=references,
            resources=resources,
            response_codes=response_codes,
            serialize=serialize,
            slugify=slugify,
        )

    def add_template_dirs(self, template_dirs: Iterable[str | Path]) -> None:
        added = False
        for path in template_dirs:
            if str(path) not in self._user_loader.searchpath:
                self._user_loader.searchpath.append(str(path))
                added = True
        # templates loaded before the new directories would otherwise win
        if added and self.env.cache is not None:
            self.env.cache.clear()

    def render(self, spec: Mapping[str, Any], *, logo_url: Optional[str] = None) -> str:
        template = self.env.get_template(LAYOUT)
        return template.render(spec=spec, logo_url=logo_url or self.logo_data_uri())

    @staticmethod
    def logo_data_uri() -> str:
        data = package_resources.files("spec_renderer").joinpath("static/logo.png").read_bytes()
        return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


__all__ = [
    "HtmlRenderer",
    "Operation",
    "ParameterRow",
    "Reference",
    "base_urls",
    "operation_parameters",
    "parameter_constraints",
    "references",
    "resources",
    "response_codes",
]
