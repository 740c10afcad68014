"""Services for post_catalog."""

from .code_blocks import extract_code_blocks, embed_code_block
from .front_matter import parse_front_matter, parse_post
from .link_checker import check_links, LinkStatus
from .loader import load_collection, load_post, select_published
from .renderer import render_markdown, SiteInfo
from .site_builder import build_site, BuildResult
from .validator import validate_collection, validate_document

__all__ = [
    "extract_code_blocks",
    "embed_code_block",
    "parse_front_matter",
    "parse_post",
    "check_links",
    "LinkStatus",
    "load_collection",
    "load_post",
    "select_published",
    "render_markdown",
    "SiteInfo",
    "build_site",
    "BuildResult",
    "validate_collection",
    "validate_document",
]
