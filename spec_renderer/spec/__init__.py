"""Specification bundling and assembly."""

from .assemble import DRAFT4_SCHEMA, document_version, is_v3, render_for_path, render_full
from .bundle import Bundler, bundle_document
from .source import Hosted, SpecSource, Standalone

__all__ = [
    "Bundler",
    "bundle_document",
    "DRAFT4_SCHEMA",
    "Hosted",
    "SpecSource",
    "Standalone",
    "document_version",
    "is_v3",
    "render_for_path",
    "render_full",
]
