"""Data models for post_catalog.

This module defines the core data structures for posts, code blocks and
catalog records.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class Post:
    """A Markdown post parsed from its source file."""

    slug: str
    path: str
    title: str
    date: datetime
    body: str
    draft: bool = False
    front_matter_format: str = "toml"
    params: Dict[str, Any] = field(default_factory=dict)
    source: str = field(default="", repr=False)

    @property
    def is_published(self) -> bool:
        return not self.draft


@dataclass
class CodeBlock:
    """A fenced code block located inside a post body."""

    language: str
    info: str
    content: str
    raw: str
    start: int
    end: int
    line: int


@dataclass
class ValidationIssue:
    """A single well-formedness problem found in a document."""

    path: str
    code: str
    message: str
    line: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "code": self.code,
            "message": self.message,
            "line": self.line,
        }


@dataclass
class PostRecord:
    """A post as stored in the catalog database."""

    id: int
    slug: str
    path: str
    title: str
    date: datetime
    draft: bool
    content_hash: str
    code_block_count: int
    indexed_date: Optional[datetime]
