"""Content loading service.

This module finds Markdown documents in a content directory and loads them
into Post objects.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Union

from post_catalog.errors import FrontMatterError
from post_catalog.log_system.unified_logger import UnifiedLogger
from post_catalog.models.schemas import Post, ValidationIssue
from post_catalog.services.front_matter import parse_post

MARKDOWN_SUFFIXES = {".md", ".markdown"}


@dataclass
class LoadResult:
    """Posts loaded from a directory plus the documents that failed."""

    posts: List[Post] = field(default_factory=list)
    errors: List[ValidationIssue] = field(default_factory=list)


def discover_documents(content_dir: Union[str, Path]) -> List[Path]:
    """Find every Markdown document below a directory.

    Hidden files and directories (leading ".") are skipped.

    Raises:
        FileNotFoundError: If the directory does not exist
    """
    root = Path(content_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"Content directory not found: {root}")

    documents = []
    for path in root.rglob("*"):
        if path.suffix.lower() not in MARKDOWN_SUFFIXES or not path.is_file():
            continue
        if any(part.startswith(".") for part in path.relative_to(root).parts):
            continue
        documents.append(path)

    return sorted(documents)


def load_post(path: Union[str, Path]) -> Post:
    """Read and parse a single document.

    Raises:
        OSError: If the file cannot be read
        FrontMatterError: If the front matter is invalid
    """
    source = Path(path)
    text = source.read_text(encoding="utf-8")
    return parse_post(text, path=str(source))


def load_collection(content_dir: Union[str, Path]) -> LoadResult:
    """Load every document in a directory.

    A document that cannot be read or parsed is reported in ``errors``; the
    remaining documents still load.
    """
    logger = UnifiedLogger.get_logger(__name__)
    result = LoadResult()

    for path in discover_documents(content_dir):
        try:
            result.posts.append(load_post(path))
        except FrontMatterError as e:
            result.errors.append(ValidationIssue(
                path=str(path),
                code=e.field or "front-matter",
                message=str(e),
            ))
        except (OSError, UnicodeDecodeError) as e:
            result.errors.append(ValidationIssue(
                path=str(path),
                code="read-error",
                message=str(e),
            ))

    logger.info(
        f"Loaded {len(result.posts)} posts from {content_dir} "
        f"({len(result.errors)} failed)"
    )
    return result


def select_published(posts: Iterable[Post], include_drafts: bool = False) -> List[Post]:
    """Return the posts that belong in published output, newest first."""
    selected = [p for p in posts if include_drafts or p.is_published]
    # two stable sorts: slug ascending within date descending
    selected.sort(key=lambda p: p.slug)
    selected.sort(key=lambda p: p.date, reverse=True)
    return selected
