"""Runtime configuration helpers for the spec renderer."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Optional, Tuple


def _parse_bool(value: str | None, *, default: bool = False) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    if not value:
        return default
    return value in {"1", "true", "yes", "on"}


def _parse_paths(value: str | None) -> Tuple[Path, ...]:
    if value is None or not value.strip():
        return ()
    return tuple(
        Path(item.strip()).expanduser()
        for item in value.split(os.pathsep)
        if item.strip()
    )


def _env_bool(name: str, *, default: bool = False) -> bool:
    return _parse_bool(os.getenv(name), default=default)


def _env_str(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


DEBUG: Final[bool] = _env_bool("SPEC_RENDERER_DEBUG", default=False)


@dataclass(frozen=True)
class RendererConfig:
    """Options accepted by :class:`spec_renderer.plugin.SpecRenderer`."""

    render_specification: bool = True
    render_specification_for_paths: bool = True
    spec_route_name: Optional[str] = None
    template_dirs: Tuple[Path, ...] = field(default_factory=tuple)

    @classmethod
    def from_env(cls) -> "RendererConfig":
        return cls(
            render_specification=_env_bool(
                "SPEC_RENDERER_RENDER_SPECIFICATION", default=True
            ),
            render_specification_for_paths=_env_bool(
                "SPEC_RENDERER_RENDER_FOR_PATHS", default=True
            ),
            spec_route_name=_env_str("SPEC_RENDERER_SPEC_ROUTE_NAME"),
            template_dirs=_parse_paths(os.getenv("SPEC_RENDERER_TEMPLATE_DIRS")),
        )


@dataclass(frozen=True)
class AppSettings:
    """Settings read by the application factory."""

    document: Optional[Path]
    standalone: bool
    debug: bool
    renderer: RendererConfig

    @classmethod
    def from_env(cls) -> "AppSettings":
        document = _env_str("SPEC_RENDERER_DOCUMENT")
        return cls(
            document=Path(document).expanduser() if document else None,
            standalone=_env_bool("SPEC_RENDERER_STANDALONE", default=False),
            debug=_env_bool("SPEC_RENDERER_DEBUG", default=DEBUG),
            renderer=RendererConfig.from_env(),
        )


__all__ = [
    "AppSettings",
    "DEBUG",
    "RendererConfig",
]
