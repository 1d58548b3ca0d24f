"""
Claude Code format adapter.

Claude stores agents, skills and slash commands as Markdown files with YAML
frontmatter:
- Agents: .claude/agents/<name>.md
- Skills: .claude/skills/<name>/SKILL.md
- Slash commands: .claude/commands/<name>.md

File format:
---
name: agent-name
description: Agent description
tools: Read, Grep, Glob, Bash  # Comma-separated string
model: sonnet|opus|haiku|inherit
allowed-tools: (optional, commands and skills)
permissionMode: (optional, Claude-specific)
---
Agent instructions in markdown...

This adapter:
- Parses YAML frontmatter + markdown body into sections
- Normalizes tools from comma-separated string to a tools section
- Preserves Claude-specific fields (model, permissionMode, skills,
  allowed-tools, argument-hint) in metadata
- Renders personas as "You are ..." prose, which is how Claude prompts read
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from adapters.shared.markdown_adapter import MarkdownFormatAdapter
from core.canonical_models import (
    CanonicalPackage,
    Format,
    PersonaSection,
    Subtype,
    ToolsSection,
)
from core.conversion_options import ConversionOptions
from core.frontmatter import dump_frontmatter, parse_frontmatter
from core.markdown import parse_body
from core.taxonomy import subtype_markers

logger = logging.getLogger(__name__)

# Frontmatter key -> key inside metadata['claudeAgent']
AGENT_FIELDS = {
    'permissionMode': 'permissionMode',
    'skills': 'skills',
}

# Frontmatter key -> key inside metadata['claudeConfig']
COMMAND_FIELDS = {
    'allowed-tools': 'allowedTools',
    'argument-hint': 'argumentHint',
}


class ClaudeAdapter(MarkdownFormatAdapter):
    """
    Adapter for Claude Code agents, skills and commands.

    Handles bidirectional conversion between Claude's .md format and
    the canonical package representation.
    """

    include_description = False
    important_marker = '**IMPORTANT:**'
    good_example_heading = '✓ {description}'
    bad_example_heading = '❌ Incorrect: {description}'

    @property
    def format_name(self) -> str:
        return "claude"

    @property
    def file_extension(self) -> str:
        return ".md"

    @property
    def supported_subtypes(self) -> List[Subtype]:
        return [Subtype.RULE, Subtype.AGENT, Subtype.SKILL, Subtype.SLASH_COMMAND]

    def can_handle(self, file_path: Path) -> bool:
        """
        Check if file is a Claude agent, skill or command file.

        Matches .md files under a .claude/ directory plus the well-known
        CLAUDE.md and SKILL.md names.
        """
        if file_path.name in ('CLAUDE.md', 'SKILL.md'):
            return True
        return file_path.suffix == '.md' and '.claude' in file_path.parts

    def subtype_hint(self, file_path: Path) -> Optional[Subtype]:
        """Claude's directory layout encodes the subtype."""
        parts = file_path.parts
        if file_path.name == 'SKILL.md' or 'skills' in parts:
            return Subtype.SKILL
        if 'agents' in parts:
            return Subtype.AGENT
        if 'commands' in parts:
            return Subtype.SLASH_COMMAND
        return None

    def to_canonical(self, content: str, metadata: Dict[str, Any],
                     known_format: Union[Format, str, None] = None,
                     subtype: Union[Subtype, str, None] = None) -> CanonicalPackage:
        """
        Convert Claude format to canonical.

        Parses YAML frontmatter and the markdown body. Files without
        frontmatter are accepted and parsed as plain markdown rules.
        """
        frontmatter, body, _ = parse_frontmatter(content)
        parsed = parse_body(body, take_description=not frontmatter.get('description'))

        tools = self._parse_tools(frontmatter.get('tools'))
        leading = [ToolsSection(tools=tuple(tools))] if tools else []

        package_metadata: Dict[str, Any] = {}

        agent_config = {}
        model = self._normalize_model(frontmatter.get('model'))
        if model:
            agent_config['model'] = model
        for fm_key, meta_key in AGENT_FIELDS.items():
            if fm_key in frontmatter:
                agent_config[meta_key] = frontmatter[fm_key]
        if agent_config:
            package_metadata['claudeAgent'] = agent_config

        command_config = {
            meta_key: frontmatter[fm_key]
            for fm_key, meta_key in COMMAND_FIELDS.items()
            if fm_key in frontmatter
        }
        if command_config:
            package_metadata['claudeConfig'] = command_config

        return self.build_package(
            metadata, frontmatter, parsed,
            known_format=known_format,
            subtype=subtype,
            package_metadata=package_metadata,
            leading_sections=leading,
        )

    def render_header(self, pkg: CanonicalPackage, options: ConversionOptions,
                      warnings: List[str]) -> str:
        meta = pkg.content.metadata
        agent_config = pkg.get_config('claudeAgent')
        command_config = pkg.get_config('claudeConfig')
        tools = [tool for section in pkg.content.find_all(ToolsSection) for tool in section.tools]

        fields = {
            'name': pkg.name or pkg.id,
            'description': pkg.display_description,
            'icon': meta.icon if meta else None,
            'tools': ', '.join(tools) if tools else None,
            'model': agent_config.get('model'),
        }
        for fm_key, meta_key in AGENT_FIELDS.items():
            fields[fm_key] = agent_config.get(meta_key)
        for fm_key, meta_key in COMMAND_FIELDS.items():
            fields[fm_key] = command_config.get(meta_key)
        fields.update(subtype_markers(pkg.subtype))

        return dump_frontmatter(fields)

    def render_tools(self, section: ToolsSection, pkg, options, warnings) -> None:
        # Tools are declared in the frontmatter
        return None

    def render_persona(self, section: PersonaSection, pkg, options, warnings) -> Optional[str]:
        paragraphs = []
        if section.name and section.role:
            paragraphs.append(f"You are {section.name}, {section.role}.")
        elif section.name or section.role:
            paragraphs.append(f"You are {section.name or section.role}.")

        if section.style:
            paragraphs.append(f"Your communication style is {', '.join(section.style)}.")

        if section.expertise:
            lines = ["Your areas of expertise include:"]
            lines.extend(f"- {item}" for item in section.expertise)
            paragraphs.append('\n'.join(lines))

        return '\n\n'.join(paragraphs) or None

    def _parse_tools(self, tools_value: Any) -> List[str]:
        """
        Parse tools from comma-separated string or list.

        Args:
            tools_value: Either string "tool1, tool2" or list ["tool1", "tool2"]

        Returns:
            List of tool names
        """
        if isinstance(tools_value, str):
            return [t.strip() for t in tools_value.split(',') if t.strip()]
        elif isinstance(tools_value, list):
            return [str(t).strip() for t in tools_value if str(t).strip()]
        return []

    def _normalize_model(self, model: Optional[str]) -> Optional[str]:
        """
        Normalize model name to canonical form.

        Claude already uses short names (sonnet, opus, haiku) which
        are the canonical form, so just lowercase and return.
        """
        if not model:
            return None
        return str(model).lower()
