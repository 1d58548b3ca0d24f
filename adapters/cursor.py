"""
Cursor format adapter.

Cursor stores rules as MDC files (.mdc) under .cursor/rules/:
---
name: rule-name
description: Rule description
version: 1.0.0
globs:
  - "**/*.ts"
alwaysApply: false
---
# Title

Markdown body...

This adapter:
- Preserves globs/alwaysApply in package metadata for later Cursor renders
- Keeps the original text of files that already carry a complete header and
  emits it unchanged when rendering back to Cursor with no config overrides
- Resolves header fields explicit CursorConfig -> package metadata -> default
- Skips tools sections (Cursor rules have no tool declarations)
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from adapters.shared.markdown_adapter import MarkdownFormatAdapter
from core.canonical_models import CanonicalPackage, Format, Subtype
from core.conversion_options import ConversionOptions, CursorConfig, resolve_option
from core.frontmatter import (
    dump_frontmatter,
    has_frontmatter,
    parse_flag,
    parse_frontmatter,
    string_list,
)
from core.markdown import parse_body
from core.taxonomy import subtype_markers

logger = logging.getLogger(__name__)

DEFAULT_VERSION = '1.0.0'
DEFAULT_GLOBS = ['**/*']


def parse_globs(value: Any) -> Optional[List[str]]:
    """Globs may be a list or a comma-separated string."""
    return string_list(value, 'globs', separator=',')


class CursorAdapter(MarkdownFormatAdapter):
    """
    Adapter for Cursor MDC rules.

    Handles bidirectional conversion between .mdc files and the canonical
    package representation.
    """

    unsupported_sections = {
        'tools': 'Tools section skipped (Claude-specific)',
    }

    @property
    def format_name(self) -> str:
        return "cursor"

    @property
    def file_extension(self) -> str:
        return ".mdc"

    @property
    def supported_subtypes(self) -> List[Subtype]:
        return [Subtype.RULE, Subtype.AGENT, Subtype.SLASH_COMMAND]

    def can_handle(self, file_path: Path) -> bool:
        """Cursor files are .mdc rules, legacy .cursorrules, or anything under .cursor/."""
        return (file_path.suffix == '.mdc' or
                file_path.name == '.cursorrules' or
                '.cursor' in file_path.parts)

    def subtype_hint(self, file_path: Path) -> Optional[Subtype]:
        if 'commands' in file_path.parts:
            return Subtype.SLASH_COMMAND
        if 'agents' in file_path.parts:
            return Subtype.AGENT
        return None

    def to_canonical(self, content: str, metadata: Dict[str, Any],
                     known_format: Union[Format, str, None] = None,
                     subtype: Union[Subtype, str, None] = None) -> CanonicalPackage:
        """
        Convert Cursor MDC content to canonical.

        Frontmatter is optional; plain markdown (.cursorrules) parses the same
        way with defaults.
        """
        frontmatter, body, has_header = parse_frontmatter(content)
        parsed = parse_body(body, take_description=not frontmatter.get('description'))

        package_metadata: Dict[str, Any] = {}
        globs = parse_globs(frontmatter.get('globs'))
        if globs:
            package_metadata['globs'] = globs
        if 'alwaysApply' in frontmatter:
            always_apply = parse_flag(frontmatter['alwaysApply'], 'alwaysApply')
            if always_apply is not None:
                package_metadata['alwaysApply'] = always_apply

        return self.build_package(
            metadata, frontmatter, parsed,
            known_format=known_format,
            subtype=subtype,
            package_metadata=package_metadata,
            raw=content if has_header else None,
        )

    def passthrough(self, pkg: CanonicalPackage, options: ConversionOptions) -> Optional[str]:
        # Content already in Cursor form is emitted as-is unless the caller overrides config
        if options.cursor_config is not None:
            return None
        meta = pkg.content.metadata
        if meta and meta.raw and has_frontmatter(meta.raw):
            logger.debug("Passing through original Cursor content for '%s'", pkg.id)
            return meta.raw
        return None

    def render_header(self, pkg: CanonicalPackage, options: ConversionOptions,
                      warnings: List[str]) -> str:
        config = options.cursor_config or CursorConfig()

        fields = {
            'name': pkg.name or pkg.id,
            'description': pkg.display_description,
            'version': resolve_option(config.version, pkg.version or None, DEFAULT_VERSION),
            'globs': parse_globs(resolve_option(config.globs, pkg.get_metadata('globs'), DEFAULT_GLOBS)),
            'alwaysApply': bool(resolve_option(config.always_apply, pkg.get_metadata('alwaysApply'), False)),
            'author': resolve_option(config.author, pkg.author or None),
            'tags': resolve_option(config.tags, list(pkg.tags) or None),
        }
        fields.update(subtype_markers(pkg.subtype))
        return dump_frontmatter(fields)
