"""Produce self-contained copies of a specification or of one of its fragments.

Every ``$ref`` met while copying is resolved through :mod:`referencing`, the
target is copied into the ``definitions`` of the result and the reference is
rewritten to point there. Bundling the whole document keeps references that
are local to it, since those already resolve.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Set, Tuple
from urllib.parse import unquote, urldefrag, urljoin, urlsplit

from referencing import Registry, Resource
from referencing.exceptions import NoSuchResource, Unresolvable, Unretrievable

from ..utils.errors import InvalidDocument

DEFAULT_BASE_URI = "urn:spec-renderer:document"

Retrieve = Callable[[str], Resource]

log = logging.getLogger(__name__)


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def _escape(token: str) -> str:
    return token.replace("~", "~0").replace("/", "~1")


def _stem(uri: str) -> str:
    return PurePosixPath(urlsplit(uri).path).stem or "external"


@dataclass
class _BundleState:
    keep_local: bool
    names: Set[str]
    imported: Dict[Tuple[str, str], str] = field(default_factory=dict)
    definitions: Dict[str, Any] = field(default_factory=dict)


class Bundler:
    """Resolve and inline references of one root document."""

    def __init__(
        self,
        document: Mapping[str, Any],
        *,
        base_uri: str = DEFAULT_BASE_URI,
        retrieve: Optional[Retrieve] = None,
    ) -> None:
        self.document = document
        self.base_uri = base_uri
        registry: Registry = Registry(retrieve=retrieve) if retrieve is not None else Registry()
        self._registry = registry.with_resource(base_uri, Resource.opaque(document))

    def get(self, tokens: Sequence[str], default: Any = None) -> Any:
        """Walk the root document by mapping keys and list indexes."""

        node: Any = self.document
        for token in tokens:
            if isinstance(node, Mapping) and token in node:
                node = node[token]
            elif isinstance(node, list) and str(token).isdigit() and int(token) < len(node):
                node = node[int(token)]
            else:
                return default
        return node

    def bundle(self, schema: Any = None) -> Any:
        """Return a self-contained copy of ``schema`` (the root document by default)."""

        keep_local = schema is None
        bundled = copy.deepcopy(self.document if keep_local else schema)
        existing = bundled.get("definitions") if isinstance(bundled, dict) else None
        if not isinstance(existing, dict):
            existing = {}

        state = _BundleState(keep_local=keep_local, names=set(existing))
        bundled = self._walk(bundled, self.base_uri, state)
        if state.definitions and isinstance(bundled, dict):
            merged = dict(bundled.get("definitions") or {})
            merged.update(state.definitions)
            bundled["definitions"] = merged
        log.debug(
            "spec.bundled",
            extra={"imported": len(state.definitions), "whole_document": keep_local},
        )
        return bundled

    def _walk(self, node: Any, base: str, state: _BundleState) -> Any:
        if isinstance(node, dict):
            walked: Dict[str, Any] = {}
            for key, value in node.items():
                if key == "$ref" and isinstance(value, str):
                    walked[key] = self._reference(value, base, state)
                else:
                    walked[key] = self._walk(value, base, state)
            return walked
        if isinstance(node, list):
            return [self._walk(item, base, state) for item in node]
        return node

    def _reference(self, ref: str, base: str, state: _BundleState) -> str:
        if ref.startswith("#"):
            if state.keep_local and base == self.base_uri:
                return ref
            uri, fragment = base, ref[1:]
        else:
            uri, fragment = urldefrag(urljoin(base, ref))

        key = (uri, fragment)
        name = state.imported.get(key)
        if name is None:
            resolved = self._resolver(uri).lookup(f"#{fragment}")
            name = self._definition_name(uri, fragment, state)
            state.imported[key] = name
            state.definitions[name] = self._walk(copy.deepcopy(resolved.contents), uri, state)
        return "#/definitions/" + _escape(name)

    def _resolver(self, uri: str):
        try:
            retrieved = self._registry.get_or_retrieve(uri)
        except (NoSuchResource, Unretrievable) as exc:
            raise Unresolvable(ref=uri) from exc
        self._registry = retrieved.registry
        return self._registry.resolver(base_uri=uri)

    def _definition_name(self, uri: str, fragment: str, state: _BundleState) -> str:
        pointer = unquote(fragment).strip("/")
        tokens = [_unescape(token) for token in pointer.split("/")] if pointer else []
        if tokens[:1] == ["definitions"] and len(tokens) > 1:
            tokens = tokens[1:]
        elif tokens[:2] == ["components", "schemas"] and len(tokens) > 2:
            tokens = tokens[2:]

        name = "_".join(tokens)
        if uri != self.base_uri:
            name = f"{_stem(uri)}_{name}" if name else _stem(uri)
        name = name or "root"

        candidate, counter = name, 1
        while candidate in state.names:
            counter += 1
            candidate = f"{name}_{counter}"
        state.names.add(candidate)
        return candidate


def bundle_document(bundler: Bundler) -> Dict[str, Any]:
    """Bundle the root document, reporting broken references as :class:`InvalidDocument`."""

    try:
        return bundler.bundle()
    except Unresolvable as exc:
        raise InvalidDocument([f"{bundler.base_uri}: unresolvable reference {exc.ref}"]) from exc


__all__ = ["Bundler", "DEFAULT_BASE_URI", "Retrieve", "bundle_document"]
