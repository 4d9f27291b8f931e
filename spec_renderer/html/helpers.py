"""Small pure helpers shared by the templates."""
from __future__ import annotations

import json
import re
from typing import Any

import markdown as markdown_engine
from markupsafe import Markup

_NON_WORD = re.compile(r"\W+")
_EXTENSION = re.compile(r"^x-")


def slugify(*tokens: Any) -> str:
    """Join ``tokens`` into a lowercase anchor, collapsing non-word runs into ``-``."""

    return "-".join(_NON_WORD.sub("-", str(token)).lower() for token in tokens)


def is_extension(key: Any) -> bool:
    """Return True for vendor extension keys (``x-`` prefix)."""

    return bool(_EXTENSION.match(str(key)))


def markdown(text: str) -> Markup:
    """Convert Markdown to HTML for the description fields."""

    return Markup(markdown_engine.markdown(str(text)))


def serialize(value: Any) -> str:
    """Canonical JSON used for the raw schema blocks."""

    return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


__all__ = ["is_extension", "markdown", "serialize", "slugify"]
