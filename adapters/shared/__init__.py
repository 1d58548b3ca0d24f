"""Building blocks shared by the format adapters."""

from .markdown_adapter import MarkdownFormatAdapter, is_lossy_warning

__all__ = ['MarkdownFormatAdapter', 'is_lossy_warning']
