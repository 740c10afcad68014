"""Shared fixtures for post_catalog tests."""

import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, patch

import aiosqlite
import pytest

from post_catalog import config as config_module
from post_catalog.storage.database import init_database


@pytest.fixture
def anyio_backend():
    return "asyncio"


def write_post(
    directory: Path,
    name: str,
    title: str = "X",
    date: str = "2020-12-12T00:00:00Z",
    draft: str = "false",
    body: str = "Hello.\n",
) -> Path:
    """Write a TOML front matter post and return its path."""
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        f"+++\ntitle = '{title}'\ndate = {date}\ndraft = {draft}\n+++\n{body}",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def post_writer():
    return write_post


@pytest.fixture
def content_dir(tmp_path):
    """A content directory with two published posts and one draft."""
    root = tmp_path / "content"
    write_post(
        root,
        "posts/ef-core-cache.md",
        title="EF Core query cache leak",
        date="2020-12-12T00:00:00Z",
        body=textwrap.dedent("""\
            The query cache kept growing.

            ## Reproduction

            ```csharp
            var q = context.Posts.Where(predicate);
            ```

            See [the docs](https://learn.microsoft.com/ef/core/) and [below](#fix).

            ## Fix
            """),
    )
    write_post(
        root,
        "posts/oauth2-redirect/index.md",
        title="OAuth2 redirect_uri bypass",
        date="2021-03-01T09:30:00Z",
        body="Open redirects are dangerous.\n\n```http\nGET /authorize?redirect_uri=https://evil.example HTTP/1.1\n```\n",
    )
    write_post(
        root,
        "posts/work-in-progress.md",
        title="Unfinished",
        date="2021-06-01T00:00:00Z",
        draft="true",
    )
    return root


@pytest.fixture
def app_config(content_dir, tmp_path, monkeypatch):
    """Point the process-wide config at the test content directory."""
    monkeypatch.setenv("POST_CATALOG_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("POST_CATALOG_CONTENT_DIR", str(content_dir))
    monkeypatch.setenv("POST_CATALOG_OUTPUT_DIR", str(tmp_path / "public"))
    monkeypatch.setattr(config_module, "_config", None)
    yield config_module.get_config()
    monkeypatch.setattr(config_module, "_config", None)


@pytest.fixture
async def in_memory_db():
    """Create an in-memory database for testing."""
    db = await aiosqlite.connect(":memory:")
    db.row_factory = aiosqlite.Row
    await init_database(db)

    # Patch get_database to return our in-memory connection
    with patch("post_catalog.storage.database.get_database", AsyncMock(return_value=db)):
        yield db

    await db.close()
