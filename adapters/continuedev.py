"""
Continue format adapter.

Continue reads rules from .continue/rules/ and prompts from .continue/prompts/.
Both are markdown; frontmatter is optional:

---
name: Rule name
description: When to apply
globs: "**/*.ts"
alwaysApply: false
invokable: true   # prompts only
---
# Title

First paragraph is the description.

Packages parsed without an explicit marker default to the prompt subtype.
Rendering omits frontmatter unless the caller passes a ContinueConfig.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from adapters.shared.markdown_adapter import MarkdownFormatAdapter
from core.canonical_models import CanonicalPackage, Format, Subtype
from core.conversion_options import ConversionOptions, resolve_option
from core.frontmatter import dump_frontmatter, parse_flag, parse_frontmatter, string_list
from core.markdown import parse_body

# Frontmatter fields kept in metadata['continueConfig']
CONTINUE_FIELDS = ('invokable', 'regex')


class ContinueAdapter(MarkdownFormatAdapter):
    """Adapter for Continue rules and prompts."""

    unsupported_sections = {
        'persona': 'Persona section skipped (not supported in Continue)',
        'tools': 'Tools section skipped (not supported in Continue)',
    }

    @property
    def format_name(self) -> str:
        return "continue"

    @property
    def file_extension(self) -> str:
        return ".md"

    @property
    def supported_subtypes(self) -> List[Subtype]:
        return [Subtype.RULE, Subtype.PROMPT, Subtype.SLASH_COMMAND]

    def can_handle(self, file_path: Path) -> bool:
        return '.continue' in file_path.parts and file_path.suffix in ('.md', '.prompt')

    def subtype_hint(self, file_path: Path) -> Optional[Subtype]:
        if 'rules' in file_path.parts:
            return Subtype.RULE
        if 'prompts' in file_path.parts or file_path.suffix == '.prompt':
            return Subtype.PROMPT
        return None

    def to_canonical(self, content: str, metadata: Dict[str, Any],
                     known_format: Union[Format, str, None] = None,
                     subtype: Union[Subtype, str, None] = None) -> CanonicalPackage:
        """Convert Continue markdown to canonical. Title from the first H1."""
        frontmatter, body, _ = parse_frontmatter(content)
        parsed = parse_body(body, take_description=not frontmatter.get('description'))

        package_metadata: Dict[str, Any] = {}
        globs = string_list(frontmatter.get('globs'), 'globs')
        if globs:
            package_metadata['globs'] = globs
        if 'alwaysApply' in frontmatter:
            always_apply = parse_flag(frontmatter['alwaysApply'], 'alwaysApply')
            if always_apply is not None:
                package_metadata['alwaysApply'] = always_apply

        continue_config = {k: frontmatter[k] for k in CONTINUE_FIELDS if k in frontmatter}
        if 'invokable' in continue_config:
            invokable = parse_flag(continue_config.pop('invokable'), 'invokable')
            if invokable is not None:
                continue_config['invokable'] = invokable
        if continue_config:
            package_metadata['continueConfig'] = continue_config

        return self.build_package(
            metadata, frontmatter, parsed,
            known_format=known_format,
            subtype=subtype,
            package_metadata=package_metadata,
        )

    def render_header(self, pkg: CanonicalPackage, options: ConversionOptions,
                      warnings) -> Optional[str]:
        config = options.continue_config
        if config is None:
            return None

        stored = pkg.get_config('continueConfig')
        is_prompt = pkg.subtype in (Subtype.PROMPT, Subtype.SLASH_COMMAND)
        invokable = resolve_option(config.invokable, stored.get('invokable'), is_prompt)

        fields = {
            'name': pkg.title,
            'description': pkg.display_description or None,
        }
        if invokable:
            fields['invokable'] = True
        else:
            fields['globs'] = resolve_option(config.globs, pkg.get_metadata('globs'))
            fields['regex'] = stored.get('regex')
            fields['alwaysApply'] = resolve_option(config.always_apply, pkg.get_metadata('alwaysApply'))
        return dump_frontmatter(fields)
