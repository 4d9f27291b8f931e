"""Starlette plugin that renders an OpenAPI document as JSON or HTML."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, Response
from starlette.routing import Mount
from starlette.staticfiles import StaticFiles

from .error_handlers import install_error_handlers
from .html.render import HtmlRenderer
from .openapi import OpenAPI, OperationRoute
from .spec.assemble import render_for_path
from .spec.source import Hosted, SpecSource, Standalone
from .utils.config import RendererConfig
from .utils.errors import NoSpecificationAvailable
from .utils.logging import RenderContext, request_scope
from .validators import validate_payload

STATIC_ROUTE_NAME = "spec_renderer_static"
STATIC_PATH = "/spec_renderer"

log = logging.getLogger(__name__)


class SpecRenderer:
    """Adds the documentation endpoints to an application.

    Without an :class:`~spec_renderer.openapi.OpenAPI` host the plugin works
    standalone: the application stores a document on ``request.state`` or
    ``app.state`` under ``openapi_spec`` and calls :meth:`render_spec` from
    its own endpoints.
    """

    def __init__(self, config: Optional[RendererConfig] = None) -> None:
        self.config = config or RendererConfig()
        self.source: SpecSource = Standalone()
        self.app: Optional[Starlette] = None

    @property
    def standalone(self) -> bool:
        return isinstance(self.source, Standalone)

    @property
    def html(self) -> HtmlRenderer:
        if self.app is None:
            raise RuntimeError("SpecRenderer.register() has not been called")
        return self.app.state.spec_renderer_html

    def register(self, app: Starlette, openapi: Optional[OpenAPI] = None) -> None:
        self.app = app
        self.source = Hosted(openapi) if openapi is not None else Standalone()

        if not getattr(app.state, "spec_renderer_initialized", False):
            app.router.routes.append(
                Mount(
                    STATIC_PATH,
                    app=StaticFiles(packages=[("spec_renderer", "static")]),
                    name=STATIC_ROUTE_NAME,
                )
            )
            app.state.spec_renderer_html = HtmlRenderer(self.config.template_dirs)
            install_error_handlers(app)
            app.state.spec_renderer_initialized = True
        else:
            app.state.spec_renderer_html.add_template_dirs(self.config.template_dirs)

        app.state.spec_renderer = self
        if openapi is not None:
            self._register_with_openapi(openapi)

    def _register_with_openapi(self, openapi: OpenAPI) -> None:
        if self.config.render_specification:
            async def render_whole_spec(request: Request) -> Response:
                return self.render_spec(request)

            base_path = openapi.base_path
            name = self.config.spec_route_name or openapi.document.get("x-spec-route-name")
            openapi.add_route(base_path, render_whole_spec, methods=["GET"], name=name)
            if base_path != "/":
                openapi.add_route(
                    base_path.rstrip("/") + ".{format}",
                    render_whole_spec,
                    methods=["GET"],
                    name=f"{name}_format" if name else None,
                )

        if self.config.render_specification_for_paths:
            openapi.once("routes_added", self._add_documentation_routes)

    def _add_documentation_routes(
        self, openapi: OpenAPI, routes: Sequence[OperationRoute]
    ) -> None:
        seen = set()
        for route in routes:
            if route.path in seen:
                continue
            seen.add(route.path)

            name = f"{route.operation_id}_openapi_documentation" if route.operation_id else None
            openapi.add_route(
                route.path,
                self._documentation_endpoint(route.openapi_path),
                methods=["OPTIONS"],
                name=name,
            )
            log.debug(
                "documentation.route_added",
                extra={"path": route.path, "openapi_path": route.openapi_path, "route_name": name},
            )

    def _documentation_endpoint(self, openapi_path: str):
        async def render_documentation(request: Request) -> Response:
            return self.render_spec(request, openapi_path)

        return render_documentation

    def render_spec(self, request: Request, path: Optional[str] = None) -> Response:
        """Render the whole document, or the documentation of one path."""

        with request_scope(
            "spec.render",
            extra={"path": request.url.path, "openapi_path": path, "standalone": self.standalone},
        ) as context:
            if path:
                context.record(format="json", partial=True)
                return JSONResponse(self._render_partial_spec(request, path, context))

            spec = self.source.current_document(request)
            if not spec:
                raise NoSpecificationAvailable()

            format_ = request.path_params.get("format") or request.query_params.get("format") or "json"
            context.record(format=format_, partial=False)
            if format_ != "html":
                return JSONResponse(spec)
            logo_url = str(request.url_for(STATIC_ROUTE_NAME, path="/logo.png"))
            body = self.html.render(spec, logo_url=logo_url)
            context.record(size=len(body))
            return HTMLResponse(body)

    def _render_partial_spec(
        self, request: Request, path: str, context: RenderContext
    ) -> Dict[str, Any]:
        bundler = self.source.bundler(request)
        if bundler is None:
            raise NoSpecificationAvailable()

        partial = render_for_path(bundler, path, request.query_params.get("method"))
        valid, errors = validate_payload("partial.v1.json", partial)
        if not valid:
            context.log(logging.WARNING, "spec.partial_invalid", extra={"errors": errors})
        return partial


__all__ = ["STATIC_PATH", "STATIC_ROUTE_NAME", "SpecRenderer"]
