"""Error codes, exceptions and envelope helpers for the spec renderer."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Optional

from starlette.responses import JSONResponse


class ErrorCode(str, Enum):
    """Stable error codes returned from the documentation endpoints."""

    NO_SPECIFICATION = "NO_SPECIFICATION"
    PATH_NOT_FOUND = "PATH_NOT_FOUND"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"


@dataclass(frozen=True)
class ErrorTemplate:
    """Default status and message for an error code."""

    status: int
    message: str


_TEMPLATES: Mapping[ErrorCode, ErrorTemplate] = {
    ErrorCode.NO_SPECIFICATION: ErrorTemplate(
        status=500,
        message="No specification to render.",
    ),
    ErrorCode.PATH_NOT_FOUND: ErrorTemplate(
        status=404,
        message="No spec defined.",
    ),
    ErrorCode.NOT_IMPLEMENTED: ErrorTemplate(
        status=501,
        message="Not implemented.",
    ),
}


def _resolve_template(code: ErrorCode) -> ErrorTemplate:
    try:
        return _TEMPLATES[code]
    except KeyError:  # pragma: no cover - every code has a template
        raise ValueError(f"No error template registered for {code!s}") from None


class SpecRendererError(Exception):
    """Base class for failures that end the current request."""

    code: ErrorCode = ErrorCode.NO_SPECIFICATION

    def __init__(self, message: Optional[str] = None) -> None:
        self.template = _resolve_template(self.code)
        self.request_id: Optional[str] = None
        super().__init__(message or self.template.message)

    @property
    def status(self) -> int:
        return self.template.status


class NoSpecificationAvailable(SpecRendererError):
    """Raised when no document can be assembled for the request."""

    code = ErrorCode.NO_SPECIFICATION


class PathNotFound(SpecRendererError):
    """Raised when a path key (or method) is missing from ``paths``."""

    code = ErrorCode.PATH_NOT_FOUND

    def __init__(self, path: str, method: Optional[str] = None) -> None:
        self.path = path
        self.method = method
        target = f"{method.upper()} {path}" if method else path
        super().__init__(f"No spec defined for {target}.")


class InvalidDocument(ValueError):
    """Raised when a specification document fails validation on load."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid specification document: " + "; ".join(self.errors))


def make_error(code: ErrorCode, message: Optional[str] = None) -> Dict[str, object]:
    """Create a JSON-serialisable error item."""

    template = _resolve_template(code)
    return {"message": message if message is not None else template.message}


def envelope_error(code: ErrorCode, message: Optional[str] = None) -> Dict[str, object]:
    return {"errors": [make_error(code, message)]}


def error_response(
    code: ErrorCode,
    message: Optional[str] = None,
    *,
    status: Optional[int] = None,
) -> JSONResponse:
    resolved_status = status if status is not None else _resolve_template(code).status
    return JSONResponse(envelope_error(code, message), status_code=resolved_status)


__all__ = [
    "ErrorCode",
    "ErrorTemplate",
    "InvalidDocument",
    "NoSpecificationAvailable",
    "PathNotFound",
    "SpecRendererError",
    "envelope_error",
    "error_response",
    "make_error",
]
