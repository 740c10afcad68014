"""Document validation service.

Checks that every document has parseable front matter with a non-empty title,
a valid date and (if present) a boolean draft flag, and that every fenced code
block is closed.
"""

from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from post_catalog.errors import FrontMatterError, UnbalancedFenceError
from post_catalog.log_system.unified_logger import UnifiedLogger
from post_catalog.models.schemas import Post, ValidationIssue
from post_catalog.services.code_blocks import extract_code_blocks
from post_catalog.services.front_matter import parse_front_matter, parse_post
from post_catalog.services.loader import discover_documents


def _check_text(text: str, path: str) -> Tuple[List[ValidationIssue], Optional[Post]]:
    issues = []
    post = None

    try:
        post = parse_post(text, path=path)
    except FrontMatterError as e:
        issues.append(ValidationIssue(path=path, code=e.field or "front-matter", message=str(e)))

    try:
        _, _, body = parse_front_matter(text)
        line_offset = len(text.splitlines()) - len(body.splitlines())
    except FrontMatterError:
        # already reported; check fences across the whole text
        body = text
        line_offset = 0

    try:
        extract_code_blocks(body)
    except UnbalancedFenceError as e:
        issues.append(ValidationIssue(
            path=path,
            code="unclosed-fence",
            message=str(e),
            line=e.line + line_offset,
        ))

    return issues, post


def _check_document(path: Union[str, Path]) -> Tuple[List[ValidationIssue], Optional[Post]]:
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return [ValidationIssue(path=str(source), code="read-error", message=str(e))], None
    return _check_text(text, str(source))


def validate_text(text: str, path: str = "") -> List[ValidationIssue]:
    """Validate one document's text.

    Returns:
        List of issues (empty when the document is well formed)
    """
    return _check_text(text, path)[0]


def validate_document(path: Union[str, Path]) -> List[ValidationIssue]:
    return _check_document(path)[0]


def validate_collection(content_dir: Union[str, Path]) -> List[ValidationIssue]:
    """Validate every document in a directory, including slug uniqueness.

    Each document is read and parsed once.
    """
    logger = UnifiedLogger.get_logger(__name__)

    issues = []
    slugs: Dict[str, List[str]] = defaultdict(list)

    for path in discover_documents(content_dir):
        document_issues, post = _check_document(path)
        issues.extend(document_issues)
        if document_issues or post is None:
            continue
        slugs[post.slug].append(str(path))

    for slug, paths in slugs.items():
        if len(paths) > 1:
            for duplicate in paths[1:]:
                issues.append(ValidationIssue(
                    path=duplicate,
                    code="duplicate-slug",
                    message=f"Slug '{slug}' is already used by {paths[0]}",
                ))

    logger.info(f"Validated {content_dir}: {len(issues)} issues")
    return issues
