"""
Best-effort format sniffing for content of unknown origin.

These checks look at simple structural signals only: whether the text opens
with a ``---`` header, which keys that header carries, whether there is a
markdown H1, and whether it looks like JSON. They can disagree with each
other and with the authoritative parsers. Treat results as hints and always
prefer an explicitly supplied format.
"""

import re
from typing import Optional

from core.canonical_models import Format
from core.frontmatter import normalize_newlines

H1_RE = re.compile(r'^#\s+\S', re.MULTILINE)
HEADING_RE = re.compile(r'^#{1,6}\s+\S', re.MULTILINE)


def _head(content: str) -> str:
    """Frontmatter text, or '' when the content doesn't open with a header."""
    content = normalize_newlines(content)
    if not content.startswith('---\n'):
        return ''
    end = content.find('\n---', 4)
    return content[4:end] if end != -1 else ''


def _has_key(head: str, key: str) -> bool:
    return re.search(rf'^{re.escape(key)}\s*:', head, re.MULTILINE) is not None


def _looks_like_json(content: str) -> bool:
    return content.lstrip().startswith('{')


def is_kiro_format(content: str) -> bool:
    """Kiro steering files declare an inclusion mode."""
    return _has_key(_head(content), 'inclusion')


def is_copilot_format(content: str) -> bool:
    """Path-specific instructions (applyTo header) or headerless markdown."""
    head = _head(content)
    if head:
        return _has_key(head, 'applyTo')
    return bool(HEADING_RE.search(content)) and not _looks_like_json(content)


def is_continue_format(content: str) -> bool:
    """Continue prompts (invokable header) or legacy JSON config with a systemMessage."""
    if _looks_like_json(content):
        return '"systemMessage"' in content
    return _has_key(_head(content), 'invokable')


def is_cursor_format(content: str) -> bool:
    """MDC header keys, or a headerless markdown rule."""
    head = _head(content)
    if head:
        return _has_key(head, 'globs') or _has_key(head, 'alwaysApply')
    return bool(H1_RE.search(content)) and not _looks_like_json(content)


def is_claude_format(content: str) -> bool:
    """Claude files open with a header that names the package."""
    return _has_key(_head(content), 'name')


def is_windsurf_format(content: str) -> bool:
    """Plain markdown with a heading and no header block."""
    return (not normalize_newlines(content).startswith('---\n') and
            bool(HEADING_RE.search(content)) and
            not _looks_like_json(content))


# Header-based checks first; headerless markdown falls through to Windsurf
SNIFF_ORDER = (
    (Format.KIRO, is_kiro_format),
    (Format.CONTINUE, is_continue_format),
    (Format.CURSOR, lambda c: bool(_head(c)) and is_cursor_format(c)),
    (Format.COPILOT, lambda c: bool(_head(c)) and is_copilot_format(c)),
    (Format.CLAUDE, is_claude_format),
    (Format.WINDSURF, is_windsurf_format),
)


def sniff_format(content: str) -> Optional[Format]:
    """
    Guess the format of raw content.

    Returns:
        The first format whose signals match, or None
    """
    for fmt, check in SNIFF_ORDER:
        if check(content):
            return fmt
    return None
