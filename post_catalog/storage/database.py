"""Database storage for post_catalog.

This module provides async SQLite operations for the post index.
Database location: ~/.post_catalog/post_catalog.db (or POST_CATALOG_DB_PATH env var)

The index only mirrors the content directory. Removing a row never touches
the source document.
"""

import hashlib
import os
import aiosqlite
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from post_catalog.errors import UnbalancedFenceError
from post_catalog.models.schemas import Post, PostRecord
from post_catalog.services.code_blocks import extract_code_blocks


def _get_db_path() -> Path:
    """Get the database path, respecting POST_CATALOG_DB_PATH env var for testing."""
    env_path = os.environ.get("POST_CATALOG_DB_PATH")
    if env_path:
        return Path(env_path)
    return Path.home() / ".post_catalog" / "post_catalog.db"


# Singleton connection
_db_connection: Optional[aiosqlite.Connection] = None


async def get_database() -> aiosqlite.Connection:
    """Get or create a singleton database connection.

    Returns:
        Active database connection
    """
    global _db_connection

    if _db_connection is None:
        db_path = _get_db_path()
        db_path.parent.mkdir(parents=True, exist_ok=True)

        _db_connection = await aiosqlite.connect(db_path)
        _db_connection.row_factory = aiosqlite.Row
        await init_database(_db_connection)

    return _db_connection


async def init_database(db: Optional[aiosqlite.Connection] = None) -> None:
    """Initialize database tables if they don't exist.

    Args:
        db: Optional database connection (uses singleton if not provided)
    """
    if db is None:
        db = await get_database()

    await db.execute("""
        CREATE TABLE IF NOT EXISTS posts (
            id INTEGER PRIMARY KEY,
            slug TEXT NOT NULL UNIQUE,
            path TEXT NOT NULL UNIQUE,
            title TEXT NOT NULL,
            date TIMESTAMP NOT NULL,
            draft BOOLEAN DEFAULT FALSE,
            content_hash TEXT NOT NULL,
            code_block_count INTEGER DEFAULT 0,
            indexed_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS idx_posts_date ON posts(date)
    """)

    await db.execute("""
        CREATE INDEX IF NOT EXISTS idx_posts_draft ON posts(draft)
    """)

    await db.commit()


def content_hash(post: Post) -> str:
    """Hash the post's source text together with the fields the index stores."""
    digest = hashlib.sha256()
    for part in (post.title, post.date.isoformat(), str(post.draft), post.slug, post.body, post.source):
        digest.update(part.encode("utf-8"))
        digest.update(b"\0")
    return digest.hexdigest()


def _count_code_blocks(post: Post) -> int:
    try:
        return len(extract_code_blocks(post.body))
    except UnbalancedFenceError:
        return 0


def _to_utc_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _row_to_record(row: aiosqlite.Row) -> PostRecord:
    return PostRecord(
        id=row["id"],
        slug=row["slug"],
        path=row["path"],
        title=row["title"],
        date=datetime.fromisoformat(row["date"]),
        draft=bool(row["draft"]),
        content_hash=row["content_hash"],
        code_block_count=row["code_block_count"],
        indexed_date=datetime.fromisoformat(row["indexed_date"])
        if row["indexed_date"]
        else None,
    )


async def upsert_post(post: Post) -> Tuple[PostRecord, str]:
    """Add a post to the index or refresh its entry.

    Posts are matched by source path.

    Args:
        post: Parsed post

    Returns:
        Tuple of (record, status) where status is "added", "updated" or "unchanged"

    Raises:
        ValueError: If another document already uses the post's slug
    """
    db = await get_database()
    new_hash = content_hash(post)

    cursor = await db.execute("SELECT * FROM posts WHERE path = ?", (post.path,))
    row = await cursor.fetchone()

    if row is not None and row["content_hash"] == new_hash:
        return (_row_to_record(row), "unchanged")

    values = (
        post.slug,
        post.title,
        _to_utc_iso(post.date),
        post.draft,
        new_hash,
        _count_code_blocks(post),
        datetime.now(timezone.utc).isoformat(),
    )

    try:
        if row is None:
            await db.execute(
                """
                INSERT INTO posts (slug, title, date, draft, content_hash, code_block_count, indexed_date, path)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                values + (post.path,),
            )
            status = "added"
        else:
            await db.execute(
                """
                UPDATE posts
                SET slug = ?, title = ?, date = ?, draft = ?, content_hash = ?,
                    code_block_count = ?, indexed_date = ?
                WHERE path = ?
                """,
                values + (post.path,),
            )
            status = "updated"
        await db.commit()
    except aiosqlite.IntegrityError as e:
        raise ValueError(f"Slug '{post.slug}' is already used by another document") from e

    cursor = await db.execute("SELECT * FROM posts WHERE path = ?", (post.path,))
    return (_row_to_record(await cursor.fetchone()), status)


async def get_post_by_slug(slug: str) -> Optional[PostRecord]:
    """Get an indexed post by its slug.

    Returns:
        PostRecord if found, None otherwise
    """
    db = await get_database()

    cursor = await db.execute("SELECT * FROM posts WHERE slug = ?", (slug,))
    row = await cursor.fetchone()

    if row is None:
        return None

    return _row_to_record(row)


async def remove_post(slug: str) -> bool:
    """Remove a post from the index.

    Returns:
        True if an entry was removed
    """
    db = await get_database()

    cursor = await db.execute("DELETE FROM posts WHERE slug = ?", (slug,))
    await db.commit()
    return cursor.rowcount > 0


async def remove_missing_posts(existing_paths: List[str]) -> int:
    """Remove index entries whose source path is not in ``existing_paths``.

    Returns:
        Number of entries removed
    """
    db = await get_database()

    if existing_paths:
        placeholders = ",".join("?" * len(existing_paths))
        cursor = await db.execute(
            f"DELETE FROM posts WHERE path NOT IN ({placeholders})",
            existing_paths,
        )
    else:
        cursor = await db.execute("DELETE FROM posts")

    await db.commit()
    return cursor.rowcount


async def list_posts(
    include_drafts: bool = False,
    limit: int = 50,
    since: Optional[datetime] = None,
    before: Optional[datetime] = None,
    days: Optional[int] = None,
) -> List[PostRecord]:
    """List indexed posts with optional filters for draft status and date range.

    Args:
        include_drafts: Whether to include drafts (default: False)
        limit: Maximum number of posts to return (default: 50)
        since: Only return posts dated at or after this datetime
        before: Only return posts dated before this datetime
        days: Shorthand for "last N days" - overrides `since` if provided

    Returns:
        List of PostRecord objects, newest first
    """
    db = await get_database()

    if days is not None:
        since = datetime.now(timezone.utc) - timedelta(days=days)

    query = "SELECT * FROM posts WHERE 1=1"
    params: List = []

    if not include_drafts:
        query += " AND draft = 0"

    # dates are stored as UTC ISO strings, so string comparison orders correctly
    if since:
        query += " AND date >= ?"
        params.append(_to_utc_iso(since))

    if before:
        query += " AND date < ?"
        params.append(_to_utc_iso(before))

    query += " ORDER BY date DESC, slug ASC LIMIT ?"
    params.append(limit)

    cursor = await db.execute(query, params)

    posts = []
    async for row in cursor:
        posts.append(_row_to_record(row))

    return posts


async def count_posts() -> Dict[str, int]:
    """Count indexed posts.

    Returns:
        Dict with total, published and drafts
    """
    db = await get_database()

    cursor = await db.execute("""
        SELECT COUNT(*) as total,
               SUM(CASE WHEN draft = 1 THEN 1 ELSE 0 END) as drafts
        FROM posts
    """)
    row = await cursor.fetchone()
    total = row["total"]
    drafts = row["drafts"] or 0

    return {"total": total, "published": total - drafts, "drafts": drafts}


async def close_database() -> None:
    """Close the database connection."""
    global _db_connection

    if _db_connection is not None:
        await _db_connection.close()
        _db_connection = None
