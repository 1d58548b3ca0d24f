"""
Conversion entry points used by callers that don't want to deal with adapters.

    pkg = parse_content(text, {'id': 'my-rule'}, source_format='cursor')
    results = convert_to_all(pkg)

An explicitly supplied format always wins; sniffing is only used when the
caller has no format to give.
"""

import logging
import threading
from typing import Any, Dict, Optional, Union

from core.canonical_models import CanonicalPackage, ConversionResult, Format, Subtype
from core.conversion_options import ConversionOptions
from core.markdown import slugify
from core.registry import FormatRegistry, create_default_registry
from core.sniffers import sniff_format

logger = logging.getLogger(__name__)

_default_registry: Optional[FormatRegistry] = None
_default_registry_lock = threading.Lock()


def get_default_registry() -> FormatRegistry:
    """Shared registry of the built-in adapters, created on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_registry_lock:
            if _default_registry is None:
                _default_registry = create_default_registry()
    return _default_registry


def parse_content(content: str, metadata: Dict[str, Any],
                  source_format: Union[Format, str, None] = None,
                  subtype: Union[Subtype, str, None] = None,
                  registry: Optional[FormatRegistry] = None) -> CanonicalPackage:
    """
    Parse raw content into a canonical package.

    Raises:
        ValueError: If no format was given and none could be detected, or the
            format has no adapter
    """
    registry = registry or get_default_registry()

    if source_format is None:
        source_format = sniff_format(content)
        if source_format is None:
            raise ValueError("Cannot detect source format; pass it explicitly")
        logger.info("Detected source format: %s", source_format.value)

    adapter = registry.require_adapter(source_format)
    return adapter.to_canonical(content, metadata, subtype=subtype)


def convert_package(pkg: CanonicalPackage, target_format: Union[Format, str],
                    options: Optional[ConversionOptions] = None,
                    registry: Optional[FormatRegistry] = None) -> ConversionResult:
    """
    Render a package into one target format.

    Raises:
        ValueError: If the target format has no adapter
    """
    registry = registry or get_default_registry()
    adapter = registry.require_adapter(target_format)
    return adapter.from_canonical(pkg, options)


def convert_to_all(pkg: CanonicalPackage,
                   options: Optional[ConversionOptions] = None,
                   registry: Optional[FormatRegistry] = None) -> Dict[str, ConversionResult]:
    """Render a package into every registered format. Each render is independent."""
    registry = registry or get_default_registry()
    return {
        name: registry.require_adapter(name).from_canonical(pkg, options)
        for name in registry.list_formats()
    }


def convert_content(content: str, target_format: Union[Format, str],
                    metadata: Dict[str, Any],
                    source_format: Union[Format, str, None] = None,
                    subtype: Union[Subtype, str, None] = None,
                    options: Optional[ConversionOptions] = None,
                    registry: Optional[FormatRegistry] = None) -> ConversionResult:
    """Parse then render in one call."""
    pkg = parse_content(content, metadata, source_format, subtype, registry)
    return convert_package(pkg, target_format, options, registry)


def get_output_filename(pkg: CanonicalPackage, target_format: Union[Format, str]) -> str:
    """
    Conventional file name for a rendered package.

    Only the name is returned; directory layout belongs to the caller.
    """
    fmt = Format(target_format)
    stem = slugify(pkg.name) or slugify(pkg.id) or 'package'

    if fmt == Format.CURSOR:
        return f"{stem}.mdc"
    if fmt == Format.CLAUDE:
        return 'SKILL.md' if pkg.subtype == Subtype.SKILL else f"{stem}.md"
    if fmt == Format.WINDSURF:
        return '.windsurfrules'
    if fmt == Format.COPILOT:
        if pkg.get_config('copilotConfig').get('applyTo'):
            return f"{stem}.instructions.md"
        return 'copilot-instructions.md'
    if fmt == Format.KIRO:
        domain = pkg.get_config('kiroConfig').get('domain')
        return f"{slugify(domain) or stem}.md"
    return f"{stem}.md"


def get_content_type(target_format: Union[Format, str]) -> str:
    """MIME type for rendered content. Every supported format is markdown."""
    Format(target_format)  # raises ValueError for unknown formats
    return 'text/markdown'
