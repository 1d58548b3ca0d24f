"""
Taxonomy resolution: (format, frontmatter, hint) -> subtype, and the legacy
compound type string kept for backward compatibility.

Nothing in this module raises. A malformed or minimal file resolves to the
default subtype so ingestion can continue.
"""

import logging
from typing import Any, Dict, NamedTuple, Optional, Union

from core.canonical_models import Format, Subtype

logger = logging.getLogger(__name__)


class Taxonomy(NamedTuple):
    format: Format
    subtype: Subtype
    legacy_type: Optional[str] = None


# Formats whose primary unit is a prompt rather than a rule
PROMPT_FIRST_FORMATS = frozenset({Format.CONTINUE})

# Formats with legacy compound types, keyed by subtype
LEGACY_COMPOUNDS = {
    Subtype.AGENT: frozenset({Format.CURSOR, Format.CLAUDE}),
    Subtype.SKILL: frozenset({Format.CLAUDE}),
    Subtype.SLASH_COMMAND: frozenset({Format.CURSOR, Format.CLAUDE}),
}

# Frontmatter marker fields, checked in this order after the generic ``type``
MARKER_FIELDS = (
    ('agentType', Subtype.AGENT),
    ('skillType', Subtype.SKILL),
    ('commandType', Subtype.SLASH_COMMAND),
)

GENERIC_TYPE_VALUES = frozenset({Subtype.AGENT, Subtype.SKILL, Subtype.SLASH_COMMAND})


def _coerce_format(value: Union[Format, str, None]) -> Optional[Format]:
    if isinstance(value, Format):
        return value
    try:
        return Format(value)
    except (ValueError, TypeError):
        return None


def _coerce_subtype(value: Union[Subtype, str, None]) -> Optional[Subtype]:
    if value is None or isinstance(value, Subtype):
        return value
    try:
        return Subtype(value)
    except (ValueError, TypeError):
        return None


def default_subtype(fmt: Union[Format, str]) -> Subtype:
    """Subtype used when neither a hint nor the file says otherwise."""
    if _coerce_format(fmt) in PROMPT_FIRST_FORMATS:
        return Subtype.PROMPT
    return Subtype.RULE


def _marker_subtype(frontmatter: Dict[str, Any]) -> Optional[Subtype]:
    # Generic ``type`` is checked first and wins over the per-subtype markers
    generic = _coerce_subtype(frontmatter.get('type'))
    if generic in GENERIC_TYPE_VALUES:
        return generic

    for field_name, subtype in MARKER_FIELDS:
        if _coerce_subtype(frontmatter.get(field_name)) == subtype:
            return subtype
    return None


def _has_tools(value: Any) -> bool:
    if isinstance(value, str):
        return any(part.strip() for part in value.split(','))
    if isinstance(value, (list, tuple)):
        return any(str(part).strip() for part in value)
    return False


def _structural_subtype(fmt: Optional[Format], frontmatter: Dict[str, Any]) -> Optional[Subtype]:
    # ``allowed-tools`` restricts a command or skill, it does not make an agent
    if _has_tools(frontmatter.get('tools')):
        return Subtype.AGENT
    if fmt == Format.CONTINUE and frontmatter.get('invokable') is True:
        return Subtype.PROMPT
    return None


def detect_subtype(
    fmt: Union[Format, str],
    frontmatter: Optional[Dict[str, Any]] = None,
    explicit: Union[Subtype, str, None] = None,
) -> Subtype:
    """
    Determine the subtype of a package being parsed.

    Priority:
        1. Explicit hint from the caller (e.g. the source directory)
        2. Frontmatter markers: ``type``, ``agentType``, ``skillType``, ``commandType``
        3. Structural inference (non-empty ``tools`` means agent)
        4. Format default

    Args:
        fmt: Source format
        frontmatter: Parsed frontmatter, or None when the file has none
        explicit: Subtype hint supplied by the caller

    Returns:
        Resolved Subtype
    """
    fmt = _coerce_format(fmt)

    if explicit is not None:
        hinted = _coerce_subtype(explicit)
        if hinted is not None:
            return hinted
        logger.warning("Ignoring unknown subtype hint: %r", explicit)

    if not isinstance(frontmatter, dict):
        frontmatter = {}

    marked = _marker_subtype(frontmatter)
    if marked is not None:
        logger.debug("Subtype %s from frontmatter markers", marked.value)
        return marked

    inferred = _structural_subtype(fmt, frontmatter)
    if inferred is not None:
        logger.debug("Subtype %s inferred from structure", inferred.value)
        return inferred

    return default_subtype(fmt) if fmt else Subtype.RULE


def to_legacy_type(fmt: Union[Format, str], subtype: Union[Subtype, str, None] = None) -> str:
    """
    Compute the legacy compound type for a (format, subtype) pair.

    Only cursor/claude agents, claude skills and cursor/claude slash commands
    have compound forms. Collections map to ``collection`` regardless of
    format; everything else is the bare format name.
    """
    fmt_value = fmt.value if isinstance(fmt, Format) else str(fmt)
    subtype = _coerce_subtype(subtype)

    if subtype == Subtype.COLLECTION:
        return 'collection'
    if subtype is None or subtype in (Subtype.RULE, Subtype.PROMPT):
        return fmt_value

    formats = LEGACY_COMPOUNDS.get(subtype, frozenset())
    if _coerce_format(fmt) in formats:
        return f"{fmt_value}-{subtype.value}"
    return fmt_value


def from_legacy_type(legacy: str) -> Taxonomy:
    """
    Split a legacy compound type back into (format, subtype).

    Inverse of to_legacy_type: only the compounds it produces are
    recognized. ``collection`` resolves to the generic format, unknown
    strings to (generic, rule).
    """
    legacy = (legacy or '').strip()

    if legacy == 'collection':
        return Taxonomy(Format.GENERIC, Subtype.COLLECTION, legacy)

    fmt_part, _, subtype_part = legacy.partition('-')
    fmt = _coerce_format(fmt_part)
    if fmt is None:
        if legacy:
            logger.debug("Unknown legacy type %r, using generic rule", legacy)
        return Taxonomy(Format.GENERIC, Subtype.RULE, to_legacy_type(Format.GENERIC, Subtype.RULE))

    subtype = _coerce_subtype(subtype_part) if subtype_part else None
    if subtype is not None and fmt in LEGACY_COMPOUNDS.get(subtype, frozenset()):
        return Taxonomy(fmt, subtype, legacy)

    return Taxonomy(fmt, Subtype.RULE, fmt.value)


def set_taxonomy(
    fmt: Union[Format, str],
    subtype: Union[Subtype, str, None] = None,
) -> Taxonomy:
    """
    Normalize a (format, subtype) pair and attach its legacy type.

    Unknown formats fall back to generic and unknown or missing subtypes to
    the format default, so callers always get a complete triple.
    """
    resolved_format = _coerce_format(fmt) or Format.GENERIC
    resolved_subtype = _coerce_subtype(subtype) or default_subtype(resolved_format)
    return Taxonomy(
        resolved_format,
        resolved_subtype,
        to_legacy_type(resolved_format, resolved_subtype),
    )


def subtype_markers(subtype: Union[Subtype, str, None]) -> Dict[str, str]:
    """Frontmatter fields that let detect_subtype recover this subtype."""
    subtype = _coerce_subtype(subtype)
    for field_name, marked in MARKER_FIELDS:
        if subtype == marked:
            return {field_name: marked.value}
    return {}
