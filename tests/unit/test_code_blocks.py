"""Unit tests for fenced code block extraction."""

import pytest

from post_catalog.errors import UnbalancedFenceError
from post_catalog.services.code_blocks import embed_code_block, extract_code_blocks


BODY = """Intro paragraph.

```csharp
var query = context.Posts.Where(predicate);
```

Some text.

~~~ sql {linenos=true}
SELECT * FROM posts;
~~~
"""


class TestExtractCodeBlocks:
    """Tests for locating fenced code blocks."""

    def test_extracts_blocks_in_order(self):
        blocks = extract_code_blocks(BODY)

        assert [b.language for b in blocks] == ["csharp", "sql"]
        assert blocks[0].content == "var query = context.Posts.Where(predicate);\n"
        assert blocks[0].line == 3
        assert blocks[1].info == "sql {linenos=true}"
        assert blocks[1].line == 9

    def test_raw_matches_source_slice(self):
        for block in extract_code_blocks(BODY):
            assert BODY[block.start:block.end] == block.raw
            assert block.raw.startswith(("```", "~~~"))

    def test_block_without_language(self):
        blocks = extract_code_blocks("```\nplain\n```\n")

        assert blocks[0].language == ""
        assert blocks[0].content == "plain\n"

    def test_no_blocks(self):
        assert extract_code_blocks("Just prose with `inline code`.\n") == []

    def test_longer_fence_contains_shorter_fence(self):
        body = "````markdown\n```python\nprint(1)\n```\n````\n"

        blocks = extract_code_blocks(body)

        assert len(blocks) == 1
        assert blocks[0].language == "markdown"
        assert blocks[0].content == "```python\nprint(1)\n```\n"

    def test_tilde_fence_not_closed_by_backticks(self):
        body = "~~~\n```\n~~~\n"

        blocks = extract_code_blocks(body)

        assert len(blocks) == 1
        assert blocks[0].content == "```\n"

    def test_closing_fence_without_trailing_newline(self):
        body = "```js\nlet a = 1;\n```"

        blocks = extract_code_blocks(body)

        assert blocks[0].raw == body
        assert blocks[0].end == len(body)

    def test_backtick_info_with_backtick_is_not_a_fence(self):
        assert extract_code_blocks("```not `a` fence\n") == []

    def test_four_space_indent_is_not_a_fence(self):
        assert extract_code_blocks("    ```\n    code\n") == []

    def test_unclosed_fence_raises(self):
        with pytest.raises(UnbalancedFenceError) as exc_info:
            extract_code_blocks("Text\n\n```python\nprint('never closed')\n")

        assert exc_info.value.line == 3
        assert exc_info.value.fence == "```"

    def test_crlf_line_endings(self):
        body = "```python\r\nx = 1\r\n```\r\n"

        blocks = extract_code_blocks(body)

        assert blocks[0].language == "python"
        assert blocks[0].raw == body


class TestEmbedCodeBlock:
    """Tests for putting code blocks back into a body."""

    def test_reembedding_is_byte_for_byte(self):
        body = BODY
        for block in extract_code_blocks(BODY):
            body = embed_code_block(body, block)

        assert body == BODY

    def test_replace_content_keeps_fences(self):
        block = extract_code_blocks(BODY)[1]

        updated = embed_code_block(BODY, block, "SELECT 1;")

        assert "~~~ sql {linenos=true}\nSELECT 1;\n~~~\n" in updated
        assert updated.startswith(BODY[:block.start])
        assert extract_code_blocks(updated)[1].content == "SELECT 1;\n"
