"""Storage layer for post_catalog."""

from .database import (
    get_database,
    init_database,
    upsert_post,
    get_post_by_slug,
    remove_post,
    remove_missing_posts,
    list_posts,
    count_posts,
    close_database,
)

__all__ = [
    "get_database",
    "init_database",
    "upsert_post",
    "get_post_by_slug",
    "remove_post",
    "remove_missing_posts",
    "list_posts",
    "count_posts",
    "close_database",
]
