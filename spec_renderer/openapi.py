"""A minimal OpenAPI host: owns a document and the API routes generated from it.

Plugins such as :class:`spec_renderer.plugin.SpecRenderer` hook into the host
through :meth:`OpenAPI.install` and the ``routes_added`` event.
"""
from __future__ import annotations

import logging
import re
from collections import defaultdict
from pathlib import Path
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
)
from urllib.parse import urlsplit

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from .spec.assemble import document_version, is_v3
from .spec.bundle import DEFAULT_BASE_URI, Bundler, Retrieve, bundle_document
from .spec.loader import document_uri, file_retriever, load_document
from .utils.errors import ErrorCode, error_response
from .validators import ensure_document

Endpoint = Callable[[Request], Awaitable[Response]]

HTTP_METHODS = ("delete", "get", "head", "options", "patch", "post", "put", "trace")

_PATH_PARAM = re.compile(r"{([^}]+)}")
_NON_WORD = re.compile(r"\W")

log = logging.getLogger(__name__)


class Plugin(Protocol):
    def register(self, app: Starlette, openapi: Optional["OpenAPI"] = None) -> None:
        ...


class OperationRoute(Route):
    """A route generated for one operation of the document."""

    def __init__(
        self,
        path: str,
        endpoint: Endpoint,
        *,
        openapi_path: str,
        http_method: str,
        operation_id: Optional[str] = None,
    ) -> None:
        super().__init__(
            path,
            endpoint,
            methods=[http_method.upper()],
            name=operation_id,
        )
        self.openapi_path = openapi_path
        self.http_method = http_method
        self.operation_id = operation_id


async def _not_implemented(request: Request) -> Response:
    return error_response(ErrorCode.NOT_IMPLEMENTED)


def _route_path(base_path: str, openapi_path: str) -> str:
    """Join the base path and a path template using Starlette placeholders."""

    path = _PATH_PARAM.sub(lambda match: "{" + _NON_WORD.sub("_", match.group(1)) + "}", openapi_path)
    return base_path.rstrip("/") + path


class OpenAPI:
    def __init__(
        self,
        document: Mapping[str, Any],
        *,
        handlers: Optional[Mapping[str, Endpoint]] = None,
        plugins: Sequence[Plugin] = (),
        base_uri: str = DEFAULT_BASE_URI,
        retrieve: Optional[Retrieve] = None,
        validate: bool = True,
    ) -> None:
        if validate:
            ensure_document(document)
        self.document = document
        self.handlers: Dict[str, Endpoint] = dict(handlers or {})
        self.plugins = list(plugins)
        self.bundler = Bundler(document, base_uri=base_uri, retrieve=retrieve)
        self.app: Optional[Starlette] = None
        self.routes: List[OperationRoute] = []
        self._bundled = bundle_document(self.bundler)
        self._listeners: Dict[str, List[Callable[..., None]]] = defaultdict(list)

    @classmethod
    def from_file(cls, path: str | Path, **kwargs: Any) -> "OpenAPI":
        """Load ``path`` and resolve external ``$ref`` targets relative to it."""

        kwargs.setdefault("base_uri", document_uri(path))
        kwargs.setdefault("retrieve", file_retriever)
        return cls(load_document(path), **kwargs)

    @property
    def version(self) -> str:
        return document_version(self.document)

    @property
    def base_path(self) -> str:
        if is_v3(self.document):
            servers = self.document.get("servers") or []
            url = servers[0].get("url", "") if servers and isinstance(servers[0], Mapping) else ""
            path = urlsplit(str(url)).path
        else:
            path = str(self.document.get("basePath") or "")
        return path if path.startswith("/") else "/"

    @property
    def bundled(self) -> Dict[str, Any]:
        """The whole document with external references inlined at load time."""

        return self._bundled

    def once(self, event: str, callback: Callable[..., None]) -> None:
        """Subscribe ``callback`` to the next ``event`` only."""

        self._listeners[event].append(callback)

    def emit(self, event: str, *args: Any) -> None:
        listeners = self._listeners.pop(event, [])
        for callback in listeners:
            callback(*args)

    def add_route(
        self,
        path: str,
        endpoint: Endpoint,
        *,
        methods: Iterable[str],
        name: Optional[str] = None,
    ) -> Route:
        if self.app is None:
            raise RuntimeError("OpenAPI.install() must be called before adding routes")
        route = Route(path, endpoint, methods=list(methods), name=name)
        self.app.router.routes.append(route)
        return route

    def operations(self) -> List[OperationRoute]:
        paths = self.document.get("paths") or {}
        routes: List[OperationRoute] = []
        for openapi_path, item in paths.items():
            if not isinstance(item, Mapping) or not str(openapi_path).startswith("/"):
                continue
            for method in HTTP_METHODS:
                operation = item.get(method)
                if not isinstance(operation, Mapping):
                    continue
                operation_id = operation.get("operationId")
                endpoint = self.handlers.get(operation_id, _not_implemented) if operation_id else _not_implemented
                routes.append(
                    OperationRoute(
                        _route_path(self.base_path, openapi_path),
                        endpoint,
                        openapi_path=openapi_path,
                        http_method=method,
                        operation_id=operation_id,
                    )
                )
        return routes

    def install(self, app: Starlette) -> List[OperationRoute]:
        """Register plugins, add the API routes to ``app`` and announce them."""

        self.app = app
        for plugin in self.plugins:
            plugin.register(app, self)

        routes = self.operations()
        app.router.routes.extend(routes)
        self.routes.extend(routes)
        log.info(
            "openapi.routes_added",
            extra={"count": len(routes), "base_path": self.base_path, "version": self.version},
        )
        self.emit("routes_added", self, routes)
        return routes


__all__ = ["HTTP_METHODS", "OpenAPI", "OperationRoute", "Plugin"]
