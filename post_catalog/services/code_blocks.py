"""Fenced code block service.

This module locates fenced code blocks in a Markdown body using the
CommonMark fence rules and puts them back in place.
"""

import re
from typing import List, Optional

from post_catalog.errors import UnbalancedFenceError
from post_catalog.models.schemas import CodeBlock

_OPENING_FENCE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")


def _is_closing_fence(line: str, fence: str) -> bool:
    stripped = line.rstrip("\r\n")
    match = re.match(r"^ {0,3}(`+|~+)[ \t]*$", stripped)
    if not match:
        return False
    candidate = match.group(1)
    return candidate[0] == fence[0] and len(candidate) >= len(fence)


def extract_code_blocks(body: str) -> List[CodeBlock]:
    """Extract every fenced code block from a Markdown body.

    Args:
        body: Markdown text (without front matter)

    Returns:
        List of CodeBlock objects in document order

    Raises:
        UnbalancedFenceError: If a fence is opened but never closed
    """
    blocks = []
    lines = body.splitlines(keepends=True)

    offset = 0
    index = 0
    while index < len(lines):
        line = lines[index]
        match = _OPENING_FENCE.match(line.rstrip("\r\n"))

        if match is None or (match.group("fence")[0] == "`" and "`" in match.group("info")):
            offset += len(line)
            index += 1
            continue

        fence = match.group("fence")
        info = match.group("info").strip()
        start = offset
        opening_line = index + 1

        content_lines = []
        offset += len(line)
        index += 1
        closed = False
        while index < len(lines):
            inner = lines[index]
            offset += len(inner)
            index += 1
            if _is_closing_fence(inner, fence):
                closed = True
                break
            content_lines.append(inner)

        if not closed:
            raise UnbalancedFenceError(line=opening_line, fence=fence)

        blocks.append(CodeBlock(
            language=info.split()[0] if info else "",
            info=info,
            content="".join(content_lines),
            raw=body[start:offset],
            start=start,
            end=offset,
            line=opening_line,
        ))

    return blocks


def embed_code_block(body: str, block: CodeBlock, content: Optional[str] = None) -> str:
    """Put a code block back into a body at its original offsets.

    Args:
        body: Markdown text the block was extracted from
        block: Block returned by extract_code_blocks
        content: New block content; None re-embeds ``block.raw`` unchanged

    Returns:
        The body with the block embedded
    """
    if content is None:
        replacement = block.raw
    else:
        replacement = _rewrite_content(block, content)
    return body[:block.start] + replacement + body[block.end:]


def _rewrite_content(block: CodeBlock, content: str) -> str:
    raw_lines = block.raw.splitlines(keepends=True)
    opening = raw_lines[0]
    closing = raw_lines[-1]
    if content and not content.endswith("\n"):
        content += "\n"
    return opening + content + closing
