"""Render OpenAPI specifications as JSON or HTML documentation."""

from .utils.env import load_env

# Ensure environment defaults from `.env` are available to all modules on import.
load_env()

from .openapi import OpenAPI  # noqa: E402
from .plugin import SpecRenderer  # noqa: E402

__all__ = ["OpenAPI", "SpecRenderer"]
