"""Front matter parsing service.

This module splits a Markdown document into its front-matter block and body,
and turns the front matter into a validated Post.

Supported formats:
    +++ ... +++   TOML
    --- ... ---   YAML
"""

import re
import tomllib
from datetime import date, datetime, time, timezone
from pathlib import PurePath
from typing import Any, Dict, Tuple

import yaml

from post_catalog.errors import FrontMatterError
from post_catalog.models.schemas import Post

DELIMITERS = {
    "+++": "toml",
    "---": "yaml",
}

BUNDLE_INDEX_NAMES = {"index", "_index"}

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")


def split_front_matter(text: str) -> Tuple[str, str, str]:
    """Split a document into (raw front matter, format, body).

    Raises:
        FrontMatterError: If the document has no front matter or the block is
            never closed
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    lines = text.splitlines(keepends=True)
    if not lines:
        raise FrontMatterError("Document is empty")

    delimiter = lines[0].rstrip()
    fmt = DELIMITERS.get(delimiter)
    if fmt is None:
        raise FrontMatterError("Document does not start with a '+++' or '---' front matter block")

    for index in range(1, len(lines)):
        if lines[index].rstrip() == delimiter:
            raw = "".join(lines[1:index])
            body = "".join(lines[index + 1:])
            return raw, fmt, body

    raise FrontMatterError(f"Front matter block opened with '{delimiter}' is never closed")


def parse_front_matter(text: str) -> Tuple[Dict[str, Any], str, str]:
    """Parse the front matter of a document.

    Returns:
        Tuple of (metadata, format, body)

    Raises:
        FrontMatterError: If the block cannot be parsed into a mapping
    """
    raw, fmt, body = split_front_matter(text)

    try:
        if fmt == "toml":
            metadata = tomllib.loads(raw)
        else:
            metadata = yaml.safe_load(raw)
    except (tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise FrontMatterError(f"Invalid {fmt.upper()} front matter: {e}") from e

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise FrontMatterError(f"{fmt.upper()} front matter must be a mapping")

    return metadata, fmt, body


def parse_post(text: str, path: str = "", slug: str = "") -> Post:
    """Parse a complete document into a Post.

    Args:
        text: Full document text
        path: Source path, used for the slug and error messages
        slug: Explicit slug (overrides the front matter and the path)

    Returns:
        Post with a UTC date and the remaining front matter in ``params``

    Raises:
        FrontMatterError: If title, date or draft are missing or invalid
    """
    metadata, fmt, body = parse_front_matter(text)

    title = metadata.get("title")
    if not isinstance(title, str) or not title.strip():
        raise FrontMatterError("'title' must be a non-empty string", field="title")

    if "date" not in metadata:
        raise FrontMatterError("'date' is required", field="date")
    post_date = parse_timestamp(metadata["date"])

    draft = metadata.get("draft", False)
    if not isinstance(draft, bool):
        raise FrontMatterError(
            f"'draft' must be a boolean, got {type(draft).__name__} {draft!r}",
            field="draft",
        )

    params = {k: v for k, v in metadata.items() if k not in ("title", "date", "draft")}

    return Post(
        slug=slug or resolve_slug(path, params.get("slug")),
        path=path,
        title=title.strip(),
        date=post_date,
        body=body,
        draft=draft,
        front_matter_format=fmt,
        params=params,
        source=text,
    )


def parse_timestamp(value: Any) -> datetime:
    """Convert a front-matter date value into an aware UTC datetime.

    Accepts native datetimes and dates (TOML and YAML both produce them) and
    ISO-8601 strings. Naive values are taken as UTC.

    Raises:
        FrontMatterError: If the value is not a valid timestamp
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise FrontMatterError(f"'date' is not a valid timestamp: {value!r}", field="date") from e
    else:
        raise FrontMatterError(f"'date' is not a valid timestamp: {value!r}", field="date")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def slugify(value: str) -> str:
    return _SLUG_INVALID.sub("-", value.lower()).strip("-")


def resolve_slug(path: str, explicit: Any = None) -> str:
    """Work out the slug for a document.

    An explicit front-matter slug wins, then the file stem. Page bundles
    (``post-name/index.md``) take the directory name.
    """
    if isinstance(explicit, str) and slugify(explicit):
        return slugify(explicit)

    source = PurePath(path)
    stem = source.stem
    if stem in BUNDLE_INDEX_NAMES and source.parent.name:
        stem = source.parent.name
    return slugify(stem) or "post"
