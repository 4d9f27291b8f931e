"""HTML rendering of specification documents."""

from .helpers import markdown, serialize, slugify
from .render import HtmlRenderer

__all__ = ["HtmlRenderer", "markdown", "serialize", "slugify"]
