"""
Shared base for markdown-bodied formats.

All six supported formats use a markdown body, so parsing and rendering
share one pipeline and subclasses only override what differs:

Parsing (to_canonical):
    frontmatter -> taxonomy -> body decomposition -> CanonicalPackage

Rendering (from_canonical):
    header -> title block -> sections in order -> warnings -> quality score

Subclasses customize rendering through class attributes (example labels,
emphasis marker, which sections are unsupported) and by overriding
render_header / render_title / content_deductions.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from core.adapter_interface import FormatAdapter
from core.canonical_models import (
    CanonicalContent,
    CanonicalPackage,
    ContextSection,
    ConversionResult,
    CustomSection,
    ExamplesSection,
    Format,
    InstructionsSection,
    MetadataSection,
    PersonaSection,
    RulesSection,
    Subtype,
    ToolsSection,
)
from core.conversion_options import ConversionOptions
from core.frontmatter import string_list
from core.markdown import ParsedBody, slugify
from core.taxonomy import detect_subtype, set_taxonomy

logger = logging.getLogger(__name__)

LOSSY_MARKERS = ('not supported', 'skipped')

SECTION_RENDERERS = {
    InstructionsSection: 'render_instructions',
    RulesSection: 'render_rules',
    ExamplesSection: 'render_examples',
    PersonaSection: 'render_persona',
    ContextSection: 'render_context',
    ToolsSection: 'render_tools',
    CustomSection: 'render_custom',
}


def is_lossy_warning(warning: str) -> bool:
    return any(marker in warning for marker in LOSSY_MARKERS)


def persona_line(persona: PersonaSection) -> str:
    """'🤖 **TestBot** - Testing Assistant' with missing parts left out."""
    head = ' '.join(part for part in (
        persona.icon,
        f"**{persona.name}**" if persona.name else None,
    ) if part)
    if head and persona.role:
        return f"{head} - {persona.role}"
    return head or persona.role or ''


class MarkdownFormatAdapter(FormatAdapter):
    """Parse/render pipeline for formats with a markdown body."""

    # Rendering style
    title_with_icon = True
    include_description = True
    important_marker = '**Important:**'
    good_example_heading = '✅ Good: {description}'
    bad_example_heading = '❌ Bad: {description}'

    # Section type -> warning emitted when the section is skipped
    unsupported_sections: Dict[str, str] = {}

    lossy_penalty = 10

    # ---- parsing ----

    def build_package(self, metadata: Dict[str, Any], frontmatter: Dict[str, Any],
                      parsed: ParsedBody,
                      known_format: Union[Format, str, None] = None,
                      subtype: Union[Subtype, str, None] = None,
                      package_metadata: Optional[Dict[str, Any]] = None,
                      leading_sections: Sequence[Any] = (),
                      raw: Optional[str] = None) -> CanonicalPackage:
        """
        Assemble a CanonicalPackage from parsed pieces.

        Title falls back from the H1 to frontmatter name, metadata name and
        id. Description falls back from frontmatter to the first body
        paragraph to the metadata input.
        """
        fmt = known_format or self.format
        resolved = detect_subtype(fmt, frontmatter, subtype)
        taxonomy = set_taxonomy(fmt, resolved)

        fm_name = frontmatter.get('name')
        name = str(fm_name) if fm_name else metadata.get('name')
        package_id = metadata.get('id') or slugify(name or parsed.title or '') or 'package'
        name = name or package_id
        title = parsed.title or name

        fm_description = frontmatter.get('description')
        description = (
            str(fm_description).strip() if fm_description
            else parsed.description or metadata.get('description') or ''
        )
        icon = parsed.icon or frontmatter.get('icon')

        sections: List[Any] = [
            MetadataSection(title=title, description=description, icon=icon, raw=raw)
        ]
        sections.extend(leading_sections)
        sections.extend(parsed.sections)

        tags = string_list(metadata.get('tags') or frontmatter.get('tags'), 'tags', separator=',') or ()

        logger.debug("Parsed %s package '%s' as %s with %d sections",
                     self.format_name, package_id, taxonomy.subtype.value, len(sections))

        return CanonicalPackage(
            id=package_id,
            name=name,
            format=taxonomy.format,
            subtype=taxonomy.subtype,
            content=CanonicalContent(sections),
            description=description,
            version=str(metadata.get('version') or frontmatter.get('version') or '1.0.0'),
            author=metadata.get('author') or frontmatter.get('author') or '',
            tags=tags,
            metadata=package_metadata or {},
        )

    # ---- rendering ----

    def from_canonical(self, pkg: CanonicalPackage,
                       options: Optional[ConversionOptions] = None) -> ConversionResult:
        options = options or ConversionOptions()
        warnings: List[str] = []

        try:
            passthrough = self.passthrough(pkg, options)
            if passthrough is not None:
                return ConversionResult(content=passthrough, format=self.format)

            content = self.render(pkg, options, warnings)
            deductions = self.content_deductions(pkg, content, warnings)
        except Exception as e:
            logger.exception("Failed to render package '%s' as %s",
                             getattr(pkg, 'id', '<unknown>'), self.format_name)
            return ConversionResult.failed(self.format, e)

        lossy = any(is_lossy_warning(w) for w in warnings)
        score = 100 - (self.lossy_penalty if lossy else 0) - deductions

        return ConversionResult(
            content=content,
            format=self.format,
            warnings=warnings,
            lossy_conversion=lossy,
            quality_score=max(0, min(100, score)),
        )

    def passthrough(self, pkg: CanonicalPackage, options: ConversionOptions) -> Optional[str]:
        """Return content to emit unchanged, skipping the render pipeline."""
        return None

    def content_deductions(self, pkg: CanonicalPackage, content: str,
                           warnings: List[str]) -> int:
        """Format-specific penalties for missing optional content."""
        return 0

    def render(self, pkg: CanonicalPackage, options: ConversionOptions,
               warnings: List[str]) -> str:
        blocks = []
        header = self.render_header(pkg, options, warnings)
        if header:
            blocks.append(header)

        title = self.render_title(pkg, options)
        if title:
            blocks.append(title)

        for section in pkg.sections:
            if isinstance(section, MetadataSection):
                continue
            rendered = self.render_section(section, pkg, options, warnings)
            if rendered:
                blocks.append(rendered.rstrip())

        return '\n\n'.join(blocks) + '\n'

    def render_header(self, pkg: CanonicalPackage, options: ConversionOptions,
                      warnings: List[str]) -> Optional[str]:
        return None

    def title_text(self, pkg: CanonicalPackage, options: ConversionOptions) -> str:
        return pkg.title

    def render_title(self, pkg: CanonicalPackage, options: ConversionOptions) -> str:
        meta = pkg.content.metadata
        title = self.title_text(pkg, options)
        if self.title_with_icon and meta and meta.icon:
            title = f"{meta.icon} {title}"

        lines = [f"# {title}"]
        description = pkg.display_description
        if self.include_description and description:
            lines.extend(['', description])
        return '\n'.join(lines)

    def render_section(self, section: Any, pkg: CanonicalPackage,
                       options: ConversionOptions, warnings: List[str]) -> Optional[str]:
        method_name = SECTION_RENDERERS.get(type(section))
        if method_name is None:
            kind = getattr(section, 'type', type(section).__name__)
            warnings.append(f"Unknown section type: {kind}")
            return None

        message = self.unsupported_sections.get(section.type)
        if message is not None:
            warnings.append(message)
            return None

        return getattr(self, method_name)(section, pkg, options, warnings)

    # ---- section renderers ----

    def render_instructions(self, section: InstructionsSection, pkg, options, warnings) -> str:
        content = section.content.strip()
        if section.priority == 'high':
            content = f"{self.important_marker} {content}"
        return f"## {section.title}\n\n{content}"

    def render_rules(self, section: RulesSection, pkg, options, warnings) -> str:
        lines = [f"## {section.title}", ""]
        for index, rule in enumerate(section.items, 1):
            bullet = f"{index}." if section.ordered else "-"
            lines.append(f"{bullet} {rule.content}")
            if rule.rationale:
                lines.append(f"   - *Rationale: {rule.rationale}*")
            for example in rule.examples:
                lines.append(f"   - Example: `{example}`")
        return '\n'.join(lines)

    def example_heading(self, description: str, good: Optional[bool]) -> str:
        template = self.bad_example_heading if good is False else self.good_example_heading
        heading = template.format(description=description)
        return heading if description else heading.rstrip(': ')

    def render_examples(self, section: ExamplesSection, pkg, options, warnings) -> str:
        lines = [f"## {section.title}"]
        for example in section.examples:
            lines.extend([
                "",
                f"### {self.example_heading(example.description, example.good)}",
                "",
                f"```{example.language or ''}",
                example.code,
                "```",
            ])
        return '\n'.join(lines)

    def render_persona(self, section: PersonaSection, pkg, options, warnings) -> str:
        lines = ["## Role"]
        line = persona_line(section)
        if line:
            lines.extend(["", line])
        if section.style:
            lines.extend(["", f"**Style:** {', '.join(section.style)}"])
        if section.expertise:
            lines.extend(["", "**Expertise:**"])
            lines.extend(f"- {item}" for item in section.expertise)
        return '\n'.join(lines)

    def render_context(self, section: ContextSection, pkg, options, warnings) -> str:
        return f"## {section.title}\n\n{section.content.strip()}"

    def render_tools(self, section: ToolsSection, pkg, options, warnings) -> Optional[str]:
        warnings.append(f"Tools section skipped (not supported by {self.format_name})")
        return None

    def render_custom(self, section: CustomSection, pkg, options, warnings) -> Optional[str]:
        editor = section.editor_type
        if not editor or editor in ('generic', self.format_name):
            return section.content
        warnings.append(f"Custom {editor} section skipped")
        return None

