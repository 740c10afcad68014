"""Site builder service.

This module renders the published posts of a content directory into a
static site:

    <output>/index.html
    <output>/index.xml
    <output>/posts/<slug>/index.html
"""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from post_catalog.errors import BuildError
from post_catalog.log_system.unified_logger import UnifiedLogger
from post_catalog.models.schemas import ValidationIssue
from post_catalog.services.loader import load_collection, select_published
from post_catalog.services.renderer import (
    SiteInfo,
    render_feed,
    render_index_page,
    render_post_page,
)


@dataclass
class BuildResult:
    """Outcome of a site build."""

    output_dir: str
    pages_written: List[str] = field(default_factory=list)
    drafts_skipped: List[str] = field(default_factory=list)

    @property
    def post_count(self) -> int:
        return len(self.pages_written)


def _remove_stale_page(page_dir: Path) -> None:
    """Delete the page an earlier build wrote for a post that is now a draft."""
    page = page_dir / "index.html"
    if not page.is_file():
        return

    UnifiedLogger.get_logger(__name__).info(f"Removing stale page: {page}")
    page.unlink()
    if not any(page_dir.iterdir()):
        page_dir.rmdir()


def build_site(
    content_dir: Union[str, Path],
    output_dir: Union[str, Path],
    site: SiteInfo,
    include_drafts: bool = False,
) -> BuildResult:
    """Render every published post to the output directory.

    A page left behind by an earlier build for a post that is now a draft is
    removed.

    Args:
        content_dir: Directory containing the Markdown documents
        output_dir: Directory to write the site into (created if missing)
        site: Site title and base URL
        include_drafts: Render drafts as well (default: False)

    Returns:
        BuildResult listing the post pages written and the drafts skipped

    Raises:
        BuildError: If any document is malformed or two documents share a slug
    """
    logger = UnifiedLogger.get_logger(__name__)
    logger.info(f"Building site from {content_dir} into {output_dir}")

    loaded = load_collection(content_dir)
    if loaded.errors:
        raise BuildError(
            f"{len(loaded.errors)} document(s) could not be parsed",
            issues=loaded.errors,
        )

    duplicates = [slug for slug, count in Counter(p.slug for p in loaded.posts).items() if count > 1]
    if duplicates:
        raise BuildError(
            f"Duplicate slugs: {', '.join(sorted(duplicates))}",
            issues=[
                ValidationIssue(path=p.path, code="duplicate-slug", message=f"Slug '{p.slug}' is not unique")
                for p in loaded.posts
                if p.slug in duplicates
            ],
        )

    published = select_published(loaded.posts, include_drafts=include_drafts)
    result = BuildResult(output_dir=str(output_dir))
    published_paths = {p.path for p in published}
    result.drafts_skipped = sorted(p.path for p in loaded.posts if p.path not in published_paths)

    out = Path(output_dir)
    for post in published:
        page = out / "posts" / post.slug / "index.html"
        page.parent.mkdir(parents=True, exist_ok=True)
        page.write_text(render_post_page(post, site), encoding="utf-8")
        result.pages_written.append(str(page))

    out.mkdir(parents=True, exist_ok=True)
    (out / "index.html").write_text(render_index_page(published, site), encoding="utf-8")
    (out / "index.xml").write_text(render_feed(published, site), encoding="utf-8")

    for post in loaded.posts:
        if post.path in published_paths:
            continue
        logger.info(f"Skipped draft: {post.path}")
        _remove_stale_page(out / "posts" / post.slug)
    logger.info(f"Built {result.post_count} pages ({len(result.drafts_skipped)} drafts skipped)")
    return result
