"""Exceptions raised by post_catalog."""

from typing import List, Optional


class PostCatalogError(Exception):
    """Base class for all post_catalog errors."""


class FrontMatterError(PostCatalogError, ValueError):
    """Raised when a document's front matter is missing or invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class UnbalancedFenceError(PostCatalogError, ValueError):
    """Raised when a fenced code block is opened but never closed."""

    def __init__(self, line: int, fence: str):
        super().__init__(f"Code fence '{fence}' opened on line {line} is never closed")
        self.line = line
        self.fence = fence


class BuildError(PostCatalogError):
    """Raised when the site cannot be built from the content directory."""

    def __init__(self, message: str, issues: Optional[List] = None):
        super().__init__(message)
        self.issues = issues or []
