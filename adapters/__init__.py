"""
Format adapters for converting between editor-specific formats and the
canonical package representation.

Each adapter knows how to:
- Parse the editor's file format into a canonical package
- Render a canonical package back into the editor's format
- Report what was lost along the way (warnings, quality score)
- Preserve format-specific fields via package metadata

Available adapters:
- CursorAdapter: Cursor MDC rules (.mdc)
- ClaudeAdapter: Claude Code agents, skills and commands (.md)
- ContinueAdapter: Continue rules and prompts (.md)
- WindsurfAdapter: Windsurf rules (.windsurfrules)
- CopilotAdapter: GitHub Copilot instructions (.instructions.md)
- KiroAdapter: Kiro steering files (.kiro/steering/*.md)

Adding a new adapter:
1. Subclass MarkdownFormatAdapter in adapters/yourformat.py
2. Implement to_canonical and override the render hooks that differ
3. Register it in core.registry.create_default_registry
"""

from .claude import ClaudeAdapter
from .continuedev import ContinueAdapter
from .copilot import CopilotAdapter
from .cursor import CursorAdapter
from .kiro import KiroAdapter
from .windsurf import WindsurfAdapter

__all__ = [
    'ClaudeAdapter',
    'ContinueAdapter',
    'CopilotAdapter',
    'CursorAdapter',
    'KiroAdapter',
    'WindsurfAdapter',
]
