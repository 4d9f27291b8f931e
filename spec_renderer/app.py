"""Application wiring for the documentation server."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from .openapi import Endpoint, OpenAPI
from .plugin import SpecRenderer
from .spec.bundle import Bundler, bundle_document
from .spec.loader import document_uri, file_retriever, load_document
from .utils.config import AppSettings
from .utils.logging import configure_root

_CONFIGURED = False

log = logging.getLogger(__name__)


def configure(debug: bool = False) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    configure_root(logging.DEBUG if debug else logging.INFO)
    _CONFIGURED = True


async def render_spec(request: Request) -> Response:
    return request.app.state.spec_renderer.render_spec(request)


def build_hosted_app(
    document: Path,
    settings: AppSettings,
    *,
    handlers: Optional[Mapping[str, Endpoint]] = None,
) -> Starlette:
    app = Starlette(debug=settings.debug)
    openapi = OpenAPI.from_file(
        document, handlers=handlers, plugins=[SpecRenderer(settings.renderer)]
    )
    openapi.install(app)
    app.state.openapi = openapi
    return app


def build_standalone_app(document: Path, settings: AppSettings) -> Starlette:
    bundler = Bundler(
        load_document(document),
        base_uri=document_uri(document),
        retrieve=file_retriever,
    )
    app = Starlette(
        debug=settings.debug,
        routes=[
            Route("/spec", render_spec, methods=["GET"], name="spec"),
            Route("/spec.{format}", render_spec, methods=["GET"], name="spec_format"),
        ],
    )
    app.state.openapi_spec = bundle_document(bundler)
    SpecRenderer(settings.renderer).register(app)
    return app


def create_app(settings: Optional[AppSettings] = None) -> Starlette:
    """Factory compatible with ``uvicorn --factory``."""

    settings = settings or AppSettings.from_env()
    configure(settings.debug)
    if settings.document is None:
        raise RuntimeError("SPEC_RENDERER_DOCUMENT must point at an OpenAPI document")

    if settings.standalone:
        app = build_standalone_app(settings.document, settings)
    else:
        app = build_hosted_app(settings.document, settings)
    log.info(
        "app.created",
        extra={"document": str(settings.document), "standalone": settings.standalone},
    )
    return app


__all__ = [
    "build_hosted_app",
    "build_standalone_app",
    "configure",
    "create_app",
    "render_spec",
]
