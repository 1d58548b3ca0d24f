"""
GitHub Copilot format adapter.

Copilot custom instructions come in two variants:
- Repository-wide: .github/copilot-instructions.md, plain markdown, no frontmatter
- Path-specific: .github/instructions/<name>.instructions.md with frontmatter:

---
applyTo:
  - "src/api/**/*.ts"
excludeAgent: code-review  # optional
---
# Title

Markdown body...

This adapter:
- Distinguishes the two variants and records which one it saw in
  metadata['copilotConfig']
- Carries applyTo (single-item lists unwrapped) and excludeAgent in metadata
- Emits frontmatter only when an applyTo pattern resolves from options or metadata
- Skips persona and tools sections (not supported by Copilot)
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from adapters.shared.markdown_adapter import MarkdownFormatAdapter
from core.canonical_models import CanonicalPackage, Format, Subtype
from core.conversion_options import ConversionOptions, CopilotConfig, as_list, resolve_option
from core.frontmatter import dump_frontmatter, parse_frontmatter, string_list
from core.markdown import parse_body

logger = logging.getLogger(__name__)


def normalize_apply_to(value: Any) -> Any:
    """Unwrap single-item lists; leave strings and longer lists as they are."""
    values = string_list(value, 'applyTo')
    if not values:
        return None
    return values[0] if len(values) == 1 else values


class CopilotAdapter(MarkdownFormatAdapter):
    """Adapter for GitHub Copilot custom instructions."""

    title_with_icon = False
    good_example_heading = '✅ Do: {description}'
    bad_example_heading = "❌ Don't: {description}"

    unsupported_sections = {
        'persona': 'Persona section skipped (not supported by Copilot)',
        'tools': 'Tools section skipped (not supported by Copilot)',
    }

    @property
    def format_name(self) -> str:
        return "copilot"

    @property
    def file_extension(self) -> str:
        return ".instructions.md"

    def can_handle(self, file_path: Path) -> bool:
        """Copilot instruction files by name: copilot-instructions.md or *.instructions.md."""
        return (file_path.name == 'copilot-instructions.md' or
                file_path.name.endswith('.instructions.md'))

    def to_canonical(self, content: str, metadata: Dict[str, Any],
                     known_format: Union[Format, str, None] = None,
                     subtype: Union[Subtype, str, None] = None) -> CanonicalPackage:
        """
        Convert Copilot instructions to canonical.

        A file with an applyTo pattern is path-specific; anything else
        (including frontmatter without applyTo) is repository-wide.
        """
        frontmatter, body, _ = parse_frontmatter(content)
        parsed = parse_body(body, take_description=not frontmatter.get('description'))

        apply_to = normalize_apply_to(frontmatter.get('applyTo'))
        copilot_config: Dict[str, Any] = {'repositoryWide': not apply_to}
        if apply_to:
            copilot_config['applyTo'] = apply_to
        if frontmatter.get('excludeAgent'):
            copilot_config['excludeAgent'] = frontmatter['excludeAgent']

        logger.debug("Copilot instructions are %s",
                     'path-specific' if apply_to else 'repository-wide')

        return self.build_package(
            metadata, frontmatter, parsed,
            known_format=known_format,
            subtype=subtype,
            package_metadata={'copilotConfig': copilot_config},
        )

    def _config(self, options: ConversionOptions) -> CopilotConfig:
        return options.copilot_config or CopilotConfig()

    def render_header(self, pkg: CanonicalPackage, options: ConversionOptions,
                      warnings) -> Optional[str]:
        config = self._config(options)
        stored = pkg.get_config('copilotConfig')

        apply_to = resolve_option(config.apply_to, stored.get('applyTo'))
        if not apply_to:
            # Repository-wide instructions have no header
            return None

        return dump_frontmatter({
            'applyTo': as_list(apply_to),
            'excludeAgent': resolve_option(config.exclude_agent, stored.get('excludeAgent')),
        })

    def title_text(self, pkg: CanonicalPackage, options: ConversionOptions) -> str:
        return self._config(options).instruction_name or pkg.title
