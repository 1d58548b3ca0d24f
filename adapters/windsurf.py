"""
Windsurf format adapter.

Windsurf rules (.windsurfrules, .windsurf/rules/*.md) are plain markdown with
no frontmatter. Title and description come from the first H1 and the
paragraph after it.

Windsurf caps rule files at 12,000 characters; longer renders carry a
warning. The quality score also reflects missing optional content.
"""

from pathlib import Path
from typing import Any, Dict, List, Union

from adapters.shared.markdown_adapter import MarkdownFormatAdapter
from core.canonical_models import (
    CanonicalPackage,
    ExamplesSection,
    Format,
    InstructionsSection,
    PersonaSection,
    Subtype,
)
from core.frontmatter import normalize_newlines
from core.markdown import parse_body

CHARACTER_LIMIT = 12000

# Penalties for missing optional content
MISSING_DESCRIPTION_PENALTY = 10
MISSING_INSTRUCTIONS_PENALTY = 20
MISSING_PERSONA_PENALTY = 5
MISSING_EXAMPLES_PENALTY = 10


class WindsurfAdapter(MarkdownFormatAdapter):
    """Adapter for Windsurf rules."""

    unsupported_sections = {
        'tools': 'Tools section skipped (not supported by Windsurf)',
    }

    @property
    def format_name(self) -> str:
        return "windsurf"

    @property
    def file_extension(self) -> str:
        return ".md"

    def can_handle(self, file_path: Path) -> bool:
        return file_path.name == '.windsurfrules' or '.windsurf' in file_path.parts

    def to_canonical(self, content: str, metadata: Dict[str, Any],
                     known_format: Union[Format, str, None] = None,
                     subtype: Union[Subtype, str, None] = None) -> CanonicalPackage:
        """Convert Windsurf rules to canonical. The whole file is markdown body."""
        content = normalize_newlines(content)
        parsed = parse_body(content, take_description=True)

        return self.build_package(
            metadata, {}, parsed,
            known_format=known_format,
            subtype=subtype,
            package_metadata={'windsurfConfig': {'characterCount': len(content)}},
        )

    def content_deductions(self, pkg: CanonicalPackage, content: str,
                           warnings: List[str]) -> int:
        if len(content) > CHARACTER_LIMIT:
            warnings.append(
                f"Content exceeds Windsurf's {CHARACTER_LIMIT:,} character limit "
                f"({len(content):,} characters)"
            )

        deductions = 0
        if not pkg.display_description:
            deductions += MISSING_DESCRIPTION_PENALTY
            warnings.append('No description provided')
        if pkg.content.find(InstructionsSection) is None:
            deductions += MISSING_INSTRUCTIONS_PENALTY
            warnings.append('No instructions section found')
        if pkg.content.find(PersonaSection) is None:
            deductions += MISSING_PERSONA_PENALTY
        if pkg.content.find(ExamplesSection) is None:
            deductions += MISSING_EXAMPLES_PENALTY
        return deductions
