"""Unit tests for content loading and validation."""

import pytest

from post_catalog.services.loader import (
    discover_documents,
    load_collection,
    select_published,
)
from post_catalog.services import validator
from post_catalog.services.validator import (
    validate_collection,
    validate_document,
    validate_text,
)


class TestDiscoverDocuments:
    """Tests for finding documents."""

    def test_finds_markdown_recursively(self, content_dir):
        names = [p.name for p in discover_documents(content_dir)]

        assert sorted(names) == ["ef-core-cache.md", "index.md", "work-in-progress.md"]

    def test_skips_hidden_and_other_files(self, content_dir, post_writer):
        post_writer(content_dir, ".drafts/hidden.md")
        (content_dir / "notes.txt").write_text("not markdown")

        names = [p.name for p in discover_documents(content_dir)]

        assert "hidden.md" not in names
        assert "notes.txt" not in names

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            discover_documents(tmp_path / "nope")


class TestLoadCollection:
    """Tests for loading a whole directory."""

    def test_loads_all_posts(self, content_dir):
        result = load_collection(content_dir)

        assert result.errors == []
        assert {p.slug for p in result.posts} == {"ef-core-cache", "oauth2-redirect", "work-in-progress"}

    def test_draft_stays_in_collection(self, content_dir):
        result = load_collection(content_dir)

        drafts = [p for p in result.posts if p.draft]
        assert [p.slug for p in drafts] == ["work-in-progress"]

    def test_malformed_document_is_reported(self, content_dir):
        (content_dir / "broken.md").write_text("no front matter here\n", encoding="utf-8")

        result = load_collection(content_dir)

        assert len(result.posts) == 3
        assert len(result.errors) == 1
        assert result.errors[0].code == "front-matter"
        assert result.errors[0].path.endswith("broken.md")

    def test_invalid_draft_reports_field(self, content_dir, post_writer):
        post_writer(content_dir, "bad-draft.md", draft="'yes'")

        result = load_collection(content_dir)

        assert [e.code for e in result.errors] == ["draft"]


class TestSelectPublished:
    """Tests for choosing the published set."""

    def test_excludes_drafts_newest_first(self, content_dir):
        posts = load_collection(content_dir).posts

        published = select_published(posts)

        assert [p.slug for p in published] == ["oauth2-redirect", "ef-core-cache"]

    def test_include_drafts(self, content_dir):
        posts = load_collection(content_dir).posts

        published = select_published(posts, include_drafts=True)

        assert [p.slug for p in published] == ["work-in-progress", "oauth2-redirect", "ef-core-cache"]

    def test_same_date_ordered_by_slug(self, tmp_path, post_writer):
        post_writer(tmp_path, "b.md")
        post_writer(tmp_path, "a.md")

        published = select_published(load_collection(tmp_path).posts)

        assert [p.slug for p in published] == ["a", "b"]


class TestValidator:
    """Tests for document well-formedness checks."""

    def test_valid_document_has_no_issues(self):
        assert validate_text("+++\ntitle = 'X'\ndate = 2020-12-12T00:00:00Z\n+++\n```sh\nls\n```\n") == []

    def test_unclosed_fence_reports_document_line(self):
        text = "+++\ntitle = 'X'\ndate = 2020-12-12\n+++\nIntro\n\n```python\nprint(1)\n"

        issues = validate_text(text, path="post.md")

        assert len(issues) == 1
        assert issues[0].code == "unclosed-fence"
        assert issues[0].line == 7

    def test_multiple_problems_reported(self):
        text = "+++\ntitle = ''\ndate = 2020-12-12\n+++\n~~~\nopen\n"

        codes = [i.code for i in validate_text(text)]

        assert codes == ["title", "unclosed-fence"]

    def test_missing_front_matter(self):
        issues = validate_text("# Heading only\n")

        assert [i.code for i in issues] == ["front-matter"]

    def test_unreadable_document(self, tmp_path):
        path = tmp_path / "binary.md"
        path.write_bytes(b"\xff\xfe\x00bad")

        issues = validate_document(path)

        assert [i.code for i in issues] == ["read-error"]

    def test_collection_is_valid(self, content_dir):
        assert validate_collection(content_dir) == []

    def test_duplicate_slug(self, content_dir, post_writer):
        post_writer(content_dir, "other/ef-core-cache.md")

        issues = validate_collection(content_dir)

        assert [i.code for i in issues] == ["duplicate-slug"]
        assert "ef-core-cache" in issues[0].message

    def test_collection_parses_each_document_once(self, content_dir, monkeypatch):
        calls = []
        real_parse_post = validator.parse_post

        def counting_parse_post(text, path="", slug=""):
            calls.append(path)
            return real_parse_post(text, path=path, slug=slug)

        monkeypatch.setattr(validator, "parse_post", counting_parse_post)

        assert validate_collection(content_dir) == []
        assert len(calls) == 3
        assert len(set(calls)) == 3
