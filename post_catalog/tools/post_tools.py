"""Post catalog MCP tools.

This module provides MCP tools for indexing, inspecting, validating and
rendering a directory of Markdown posts.

NOTE: Never use Optional parameters in MCP tools - they break MCP clients.
Use empty string "" for optional strings and 0 for optional integers.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from mcp.server.fastmcp import Context

from post_catalog.config import get_config
from post_catalog.errors import BuildError, FrontMatterError, UnbalancedFenceError
from post_catalog.log_system.unified_logger import UnifiedLogger
from post_catalog.models.schemas import Post, PostRecord
from post_catalog.storage import database
from post_catalog.services.code_blocks import extract_code_blocks as find_code_blocks
from post_catalog.services.link_checker import check_links as check_urls
from post_catalog.services.loader import discover_documents, load_collection, load_post
from post_catalog.services.renderer import SiteInfo, render_post as render_body
from post_catalog.services.site_builder import build_site as build_static_site
from post_catalog.services.validator import validate_collection


def _content_dir(directory: str) -> Path:
    return Path(directory or get_config().content_dir).expanduser().resolve()


def _record_to_dict(record: PostRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "slug": record.slug,
        "path": record.path,
        "title": record.title,
        "date": record.date.isoformat(),
        "draft": record.draft,
        "code_block_count": record.code_block_count,
        "indexed_date": record.indexed_date.isoformat() if record.indexed_date else None,
    }


async def _load_indexed_post(slug: str) -> Tuple[Optional[Post], Optional[str]]:
    """Load the current source of an indexed post.

    Returns:
        Tuple of (post, error) - exactly one is None
    """
    record = await database.get_post_by_slug(slug)
    if record is None:
        return None, f"Post '{slug}' not found"

    try:
        post = load_post(record.path)
    except FileNotFoundError:
        return None, f"Source file for '{slug}' no longer exists: {record.path}"
    except FrontMatterError as e:
        return None, f"Post '{slug}' has invalid front matter: {e}"

    post.slug = record.slug
    return post, None


async def scan_content(directory: str = "", ctx: Context = None) -> Dict[str, Any]:
    """Index every Markdown post in the content directory.

    Parses each document's front matter and stores title, date, draft flag and
    code block count. Documents that were indexed before but no longer exist
    are dropped from the index. Source files are never modified.

    Args:
        directory: Content directory to scan (empty string uses the configured content_dir)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - directory: the directory scanned
        - added, updated, unchanged, removed: counts
        - indexed: index totals after the scan (total, published, drafts)
        - errors: list of documents that could not be indexed
    """
    logger = UnifiedLogger.get_logger(__name__)
    content_dir = _content_dir(directory)
    logger.info(f"scan_content called: directory={content_dir}")

    try:
        loaded = load_collection(content_dir)
        existing_paths = [str(p) for p in discover_documents(content_dir)]
    except FileNotFoundError as e:
        return {
            "success": False,
            "error": str(e),
        }

    counts = {"added": 0, "updated": 0, "unchanged": 0}
    errors = [issue.to_dict() for issue in loaded.errors]

    # Stale rows go first so a moved file can take over its old slug
    removed = await database.remove_missing_posts(existing_paths)

    for post in loaded.posts:
        try:
            _, status = await database.upsert_post(post)
            counts[status] += 1
        except ValueError as e:
            logger.warning(f"Could not index {post.path}: {e}")
            errors.append({"path": post.path, "code": "duplicate-slug", "message": str(e), "line": None})

    return {
        "success": True,
        "directory": str(content_dir),
        **counts,
        "removed": removed,
        "indexed": await database.count_posts(),
        "errors": errors,
    }


async def list_posts(
    include_drafts: bool = False,
    limit: int = 50,
    since: str = "",
    before: str = "",
    days: int = 0,
    ctx: Context = None,
) -> Dict[str, Any]:
    """List indexed posts with optional filters for draft status and date range.

    Drafts are excluded unless include_drafts is set. Results are ordered by
    date (newest first). Run scan_content first to refresh the index.

    Args:
        include_drafts: Include posts with draft = true (default: False, published only)
        limit: Maximum number of posts to return (default: 50)
        since: Only posts dated on or after this date (ISO format: "2020-01-01" or "2020-01-01T00:00:00Z", empty string for no filter)
        before: Only posts dated before this date (ISO format, empty string for no filter)
        days: Shorthand for "last N days" - if > 0, overrides `since` parameter (0 means no filter)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - count: number of posts returned
        - posts: list of post objects with slug, title, date, draft, path
        - filters_applied: summary of active filters
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"list_posts called: include_drafts={include_drafts}, limit={limit}, since={since}, before={before}, days={days}")

    since_dt = None
    before_dt = None

    if since:
        try:
            since_dt = datetime.fromisoformat(since.replace("Z", "+00:00"))
        except ValueError:
            return {
                "success": False,
                "error": f"Invalid 'since' date format: {since}. Use ISO format like '2020-01-01' or '2020-01-01T00:00:00Z'",
            }

    if before:
        try:
            before_dt = datetime.fromisoformat(before.replace("Z", "+00:00"))
        except ValueError:
            return {
                "success": False,
                "error": f"Invalid 'before' date format: {before}. Use ISO format like '2020-01-01' or '2020-01-01T00:00:00Z'",
            }

    posts = await database.list_posts(
        include_drafts=include_drafts,
        limit=limit,
        since=since_dt,
        before=before_dt,
        days=days if days > 0 else None,
    )

    return {
        "success": True,
        "count": len(posts),
        "filters_applied": {
            "include_drafts": include_drafts,
            "limit": limit,
            "days": days if days > 0 else None,
            "since": since or None,
            "before": before or None,
        },
        "posts": [_record_to_dict(p) for p in posts],
    }


async def get_post(slug: str, ctx: Context = None) -> Dict[str, Any]:
    """Get an indexed post's metadata and Markdown body.

    The body is read from the source file, so it reflects edits made since
    the last scan.

    Args:
        slug: Slug of the post (from list_posts)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - post: object with slug, path, title, date, draft, params, body
        - error: string if the post is not indexed or its source is gone
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"get_post called: slug={slug}")

    post, error = await _load_indexed_post(slug)
    if error:
        return {
            "success": False,
            "error": error,
        }

    return {
        "success": True,
        "post": {
            "slug": post.slug,
            "path": post.path,
            "title": post.title,
            "date": post.date.isoformat(),
            "draft": post.draft,
            "front_matter_format": post.front_matter_format,
            "params": post.params,
            "body": post.body,
        },
    }


async def validate_content(directory: str = "", ctx: Context = None) -> Dict[str, Any]:
    """Check every document in the content directory for well-formedness.

    Checks that front matter parses, title is a non-empty string, date is a
    valid timestamp, draft (if present) is a boolean, every fenced code block
    is closed and no two documents share a slug.

    Args:
        directory: Content directory to check (empty string uses the configured content_dir)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - valid: True when no issues were found
        - issue_count: number of issues
        - issues: list of {path, code, message, line}
    """
    logger = UnifiedLogger.get_logger(__name__)
    content_dir = _content_dir(directory)
    logger.info(f"validate_content called: directory={content_dir}")

    try:
        issues = validate_collection(content_dir)
    except FileNotFoundError as e:
        return {
            "success": False,
            "error": str(e),
        }

    return {
        "success": True,
        "valid": not issues,
        "issue_count": len(issues),
        "issues": [issue.to_dict() for issue in issues],
    }


async def extract_code_blocks(slug: str, language: str = "", ctx: Context = None) -> Dict[str, Any]:
    """Extract the fenced code blocks from a post.

    Args:
        slug: Slug of the post
        language: Only return blocks tagged with this language (empty string returns all)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - count: number of blocks returned
        - blocks: list of {language, info, content, line}
        - error: string if the post is missing or has an unclosed fence
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"extract_code_blocks called: slug={slug}, language={language}")

    post, error = await _load_indexed_post(slug)
    if error:
        return {
            "success": False,
            "error": error,
        }

    try:
        blocks = find_code_blocks(post.body)
    except UnbalancedFenceError as e:
        return {
            "success": False,
            "error": str(e),
        }

    if language:
        blocks = [b for b in blocks if b.language.lower() == language.lower()]

    return {
        "success": True,
        "count": len(blocks),
        "blocks": [
            {
                "language": b.language,
                "info": b.info,
                "content": b.content,
                "line": b.line,
            }
            for b in blocks
        ],
    }


async def render_post(slug: str, ctx: Context = None) -> Dict[str, Any]:
    """Render a post's Markdown body to HTML.

    Args:
        slug: Slug of the post
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - html: rendered body
        - headings: list of {level, text, anchor}
        - links: list of link targets in the body
        - summary: explicit summary or first paragraph
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"render_post called: slug={slug}")

    post, error = await _load_indexed_post(slug)
    if error:
        return {
            "success": False,
            "error": error,
        }

    rendered = render_body(post)

    return {
        "success": True,
        "slug": post.slug,
        "title": post.title,
        "html": rendered.html,
        "headings": [
            {"level": h.level, "text": h.text, "anchor": h.anchor}
            for h in rendered.headings
        ],
        "links": rendered.links,
        "summary": rendered.summary,
    }


async def build_site(
    output_dir: str = "",
    include_drafts: bool = False,
    ctx: Context = None,
) -> Dict[str, Any]:
    """Render the published posts of the content directory to a static site.

    Writes one page per post under posts/<slug>/index.html, plus index.html and
    an RSS feed at index.xml. Drafts are skipped unless include_drafts is set.
    The build fails without writing anything if a document is malformed.

    Args:
        output_dir: Directory to write into (empty string uses the configured output_dir)
        include_drafts: Render drafts too (default: False)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - output_dir: where the site was written
        - pages_written: number of post pages
        - drafts_skipped: paths of drafts left out
        - issues: list of problems if the build failed
    """
    logger = UnifiedLogger.get_logger(__name__)
    config = get_config()
    target = Path(output_dir or config.output_dir).expanduser().resolve()
    logger.info(f"build_site called: output_dir={target}, include_drafts={include_drafts}")

    site = SiteInfo(title=config.site_title, base_url=config.base_url)

    try:
        result = build_static_site(
            _content_dir(""),
            target,
            site,
            include_drafts=include_drafts,
        )
    except FileNotFoundError as e:
        return {
            "success": False,
            "error": str(e),
        }
    except BuildError as e:
        return {
            "success": False,
            "error": str(e),
            "issues": [issue.to_dict() for issue in e.issues],
        }

    return {
        "success": True,
        "output_dir": result.output_dir,
        "pages_written": result.post_count,
        "drafts_skipped": result.drafts_skipped,
    }


async def check_links(slug: str, ctx: Context = None) -> Dict[str, Any]:
    """Check that every external link in a post still resolves.

    Only absolute http(s) links are checked. Relative links and anchors are
    ignored.

    Args:
        slug: Slug of the post
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - checked: number of links checked
        - broken: number of links that failed
        - links: list of {url, ok, status_code, error}
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"check_links called: slug={slug}")

    post, error = await _load_indexed_post(slug)
    if error:
        return {
            "success": False,
            "error": error,
        }

    statuses = await check_urls(render_body(post).links)

    return {
        "success": True,
        "checked": len(statuses),
        "broken": sum(1 for s in statuses if not s.ok),
        "links": [
            {
                "url": s.url,
                "ok": s.ok,
                "status_code": s.status_code,
                "error": s.error,
            }
            for s in statuses
        ],
    }


async def remove_post(slug: str, ctx: Context = None) -> Dict[str, Any]:
    """Remove a post from the index.

    The source document is left untouched; the next scan_content adds it back
    while it still exists.

    Args:
        slug: Slug of the post to remove (must match exactly)
        ctx: MCP Context object (injected automatically)

    Returns:
        Dictionary with:
        - success: bool
        - message: confirmation string if successful
        - error: string if the post is not indexed
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"remove_post called: slug={slug}")

    if await database.remove_post(slug):
        return {
            "success": True,
            "message": f"Removed '{slug}' from the index",
        }
    else:
        return {
            "success": False,
            "error": f"Post '{slug}' not found",
        }


# List of post tools for registration
post_tools = [
    scan_content,
    list_posts,
    get_post,
    validate_content,
    extract_code_blocks,
    render_post,
    build_site,
    check_links,
    remove_post,
]
