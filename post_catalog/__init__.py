"""post_catalog - index, check and render a directory of Markdown posts."""

__version__ = "0.1.0"
