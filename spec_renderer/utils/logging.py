"""Structured logging for documentation requests."""
from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import monotonic
from typing import Dict, Iterator, Mapping, Optional

from .errors import SpecRendererError

_RENDER_CONTEXT: contextvars.ContextVar["RenderContext | None"] = contextvars.ContextVar(
    "spec_renderer_render_context", default=None
)

REQUEST_LOGGER = "spec_renderer.request"


def configure_root(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


@dataclass(slots=True)
class RenderContext:
    """What one documentation request rendered, and for how long."""

    name: str
    request_id: str
    logger: logging.Logger
    metadata: Dict[str, object] = field(default_factory=dict)
    outcome: Dict[str, object] = field(default_factory=dict)
    start_time: float = field(default_factory=monotonic)

    def extra(self, **values: object) -> Dict[str, object]:
        payload = {"request_id": self.request_id, "request": self.name, **self.metadata}
        payload.update(values)
        return payload

    def log(
        self, level: int, message: str, *, extra: Optional[Mapping[str, object]] = None
    ) -> None:
        self.logger.log(level, message, extra=self.extra(**dict(extra or {})))

    def record(self, **values: object) -> None:
        """Attach facts about the response (format, size...) to ``request.finish``."""

        self.outcome.update(values)

    @property
    def elapsed(self) -> float:
        return monotonic() - self.start_time


@contextmanager
def request_scope(
    name: str,
    *,
    logger: Optional[logging.Logger] = None,
    extra: Optional[Mapping[str, object]] = None,
) -> Iterator[RenderContext]:
    """Log ``request.start``/``request.finish`` around one rendering request.

    Expected failures (:class:`SpecRendererError`) are logged as warnings and
    tagged with the request id so the error handler can report it; anything
    else is logged with its traceback. Both are re-raised.
    """

    context = RenderContext(
        name=name,
        request_id=uuid.uuid4().hex,
        logger=logger or logging.getLogger(REQUEST_LOGGER),
        metadata=dict(extra or {}),
    )
    token = _RENDER_CONTEXT.set(context)
    context.log(logging.INFO, "request.start")
    try:
        yield context
    except SpecRendererError as exc:
        exc.request_id = context.request_id
        context.log(
            logging.WARNING,
            "request.error",
            extra={"code": exc.code.value, "status_code": exc.status, "error": str(exc)},
        )
        raise
    except Exception:
        context.logger.exception("request.error", extra=context.extra())
        raise
    finally:
        context.log(
            logging.INFO,
            "request.finish",
            extra={"duration_s": context.elapsed, **context.outcome},
        )
        _RENDER_CONTEXT.reset(token)


def current_request() -> Optional[RenderContext]:
    return _RENDER_CONTEXT.get(None)


__all__ = [
    "REQUEST_LOGGER",
    "RenderContext",
    "configure_root",
    "current_request",
    "request_scope",
]
