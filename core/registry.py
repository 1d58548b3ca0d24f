"""
Format registry.

Keeps the set of available adapters, looks them up by format name, and
offers two kinds of detection:
- detect_format: by file path conventions (adapter.can_handle)
- detect_content_format: by sniffing raw content (core.sniffers)

Path conventions are checked in registration order, so more specific
adapters should be registered first.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from core.adapter_interface import FormatAdapter
from core.canonical_models import Format, Subtype
from core.sniffers import sniff_format

logger = logging.getLogger(__name__)


class FormatRegistry:
    """Registry of format adapters keyed by format name."""

    def __init__(self):
        self._adapters: Dict[str, FormatAdapter] = {}

    def register(self, adapter: FormatAdapter) -> None:
        """
        Register an adapter.

        Raises:
            ValueError: If an adapter for the same format is already registered
        """
        name = adapter.format_name
        if name in self._adapters:
            raise ValueError(f"Format '{name}' is already registered")
        self._adapters[name] = adapter
        logger.debug("Registered adapter for %s", name)

    def unregister(self, format_name: str) -> None:
        """Remove an adapter. Unknown names are ignored."""
        self._adapters.pop(format_name, None)

    def get_adapter(self, format_name: Union[Format, str]) -> Optional[FormatAdapter]:
        if isinstance(format_name, Format):
            format_name = format_name.value
        return self._adapters.get(format_name)

    def require_adapter(self, format_name: Union[Format, str]) -> FormatAdapter:
        """
        Like get_adapter but raises for unknown formats.

        Raises:
            ValueError: If no adapter is registered for the format
        """
        adapter = self.get_adapter(format_name)
        if adapter is None:
            name = format_name.value if isinstance(format_name, Format) else format_name
            raise ValueError(
                f"Unsupported format: {name} (available: {', '.join(self.list_formats())})"
            )
        return adapter

    def list_formats(self) -> List[str]:
        return list(self._adapters)

    def detect_format(self, file_path: Path) -> Optional[FormatAdapter]:
        """Return the first adapter whose path conventions match, or None."""
        for adapter in self._adapters.values():
            if adapter.can_handle(Path(file_path)):
                return adapter
        return None

    def detect_content_format(self, content: str) -> Optional[FormatAdapter]:
        """Best-effort guess from content; None when nothing matches or the format isn't registered."""
        fmt = sniff_format(content)
        if fmt is None:
            return None
        return self.get_adapter(fmt)

    def supports_subtype(self, format_name: Union[Format, str],
                         subtype: Union[Subtype, str]) -> bool:
        adapter = self.get_adapter(format_name)
        if adapter is None:
            return False
        return Subtype(subtype) in adapter.supported_subtypes

    def get_formats_supporting(self, subtype: Union[Subtype, str]) -> List[str]:
        subtype = Subtype(subtype)
        return [name for name, adapter in self._adapters.items()
                if subtype in adapter.supported_subtypes]


def create_default_registry() -> FormatRegistry:
    """
    Registry with every built-in adapter.

    Copilot is registered before Claude so .instructions.md files under
    .claude/ still resolve by their more specific name.
    """
    from adapters import (
        ClaudeAdapter,
        ContinueAdapter,
        CopilotAdapter,
        CursorAdapter,
        KiroAdapter,
        WindsurfAdapter,
    )

    registry = FormatRegistry()
    registry.register(CopilotAdapter())
    registry.register(KiroAdapter())
    registry.register(ContinueAdapter())
    registry.register(WindsurfAdapter())
    registry.register(CursorAdapter())
    registry.register(ClaudeAdapter())
    return registry
