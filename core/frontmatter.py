"""
YAML frontmatter helpers shared by all adapters.

Frontmatter is a ``---`` delimited YAML block at the very top of a file.
Parsing is lenient: a missing, empty or malformed block yields an empty
dict and the full text as body.
"""

import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(
    r'\A---[ \t]*\n(.*?)^---[ \t]*(?:\n|\Z)(.*)\Z',
    re.DOTALL | re.MULTILINE,
)


def normalize_newlines(content: str) -> str:
    return content.replace('\r\n', '\n').replace('\r', '\n')


def has_frontmatter(content: str) -> bool:
    """True when the content opens with a complete ``---`` header."""
    return FRONTMATTER_RE.match(normalize_newlines(content)) is not None


def parse_frontmatter(content: str) -> Tuple[Dict[str, Any], str, bool]:
    """
    Split content into frontmatter and body.

    Returns:
        Tuple of (frontmatter dict, body, whether a header block was present)
    """
    content = normalize_newlines(content)
    match = FRONTMATTER_RE.match(content)
    if not match:
        return {}, content, False

    yaml_content, body = match.groups()
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        logger.warning("Ignoring malformed frontmatter: %s", e)
        return {}, body, True

    if data is None:
        data = {}
    elif not isinstance(data, dict):
        logger.warning("Ignoring frontmatter that is not a mapping (%s)", type(data).__name__)
        data = {}

    return data, body, True


def string_list(value: Any, field: str, separator: Optional[str] = None) -> Optional[List[str]]:
    """
    Read a frontmatter field that holds one or more strings.

    A scalar string or number becomes a one-item list (or is split on
    ``separator``). List items that are not scalars are dropped. Any other
    shape is ignored with a warning and gives None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        if separator is None:
            return [value]
        return [v.strip() for v in value.split(separator) if v.strip()]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return [str(value)]
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value
                if isinstance(v, (str, int, float)) and not isinstance(v, bool)]
    logger.warning("Ignoring '%s' with unsupported value %r", field, value)
    return None


def parse_flag(value: Any, field: str) -> Optional[bool]:
    """Read a boolean field, accepting the strings true/false in any case."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ('true', 'false'):
        return value.strip().lower() == 'true'
    logger.warning("Ignoring '%s' with non-boolean value %r", field, value)
    return None


def _plain(value: Any) -> Any:
    # yaml.dump tags tuples and str enums as python objects
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, Enum):
        return value.value
    return value


def dump_frontmatter(fields: Dict[str, Any]) -> str:
    """
    Render a frontmatter block, dropping fields whose value is None.

    Key order is preserved.
    """
    data = {k: _plain(v) for k, v in fields.items() if v is not None}
    yaml_str = yaml.dump(
        data,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=float('inf'),
    )
    return f"---\n{yaml_str}---"
