"""Turn renderer failures into the JSON error envelope."""
import logging
import uuid

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse

from .utils.errors import SpecRendererError, error_response

log = logging.getLogger(__name__)


def install_error_handlers(app: Starlette) -> None:
    async def _on_spec_error(request: Request, exc: SpecRendererError) -> JSONResponse:
        log.warning(
            "%s: %s",
            exc.code.value,
            exc,
            extra={
                "correlation_id": exc.request_id or uuid.uuid4().hex,
                "path": request.url.path,
                "status_code": exc.status,
            },
        )
        return error_response(exc.code)

    app.add_exception_handler(SpecRendererError, _on_spec_error)
