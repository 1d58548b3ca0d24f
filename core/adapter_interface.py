"""
Abstract interface every format adapter implements.

An adapter owns one editor format in both directions:
- to_canonical: raw file text + package metadata -> CanonicalPackage ("from-X")
- from_canonical: CanonicalPackage -> ConversionResult ("to-X")

Adapters keep no per-call state, so one instance can serve concurrent
conversions.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from core.canonical_models import CanonicalPackage, ConversionResult, Format, Subtype
from core.conversion_options import ConversionOptions


class FormatAdapter(ABC):
    """Base class for per-format parse/render implementations."""

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Format identifier (e.g. 'cursor', 'claude')."""

    @property
    @abstractmethod
    def file_extension(self) -> str:
        """Conventional file extension, including the dot."""

    @property
    def format(self) -> Format:
        return Format(self.format_name)

    @property
    def supported_subtypes(self) -> List[Subtype]:
        return [Subtype.RULE]

    @abstractmethod
    def can_handle(self, file_path: Path) -> bool:
        """Return True if the path follows this format's file conventions."""

    def subtype_hint(self, file_path: Path) -> Optional[Subtype]:
        """Subtype implied by where a file lives, if the format has such a convention."""
        return None

    @abstractmethod
    def to_canonical(self, content: str, metadata: Dict[str, Any],
                     known_format: Union[Format, str, None] = None,
                     subtype: Union[Subtype, str, None] = None) -> CanonicalPackage:
        """
        Parse raw file content into a canonical package.

        Args:
            content: Raw file text
            metadata: Package metadata input ({id, name?, version, author, tags, description?})
            known_format: Format to stamp on the package instead of this adapter's own
            subtype: Explicit subtype hint, wins over anything in the file

        Returns:
            CanonicalPackage
        """

    @abstractmethod
    def from_canonical(self, pkg: CanonicalPackage,
                       options: Optional[ConversionOptions] = None) -> ConversionResult:
        """
        Render a canonical package into this format.

        Never raises; failures come back as a zero-quality result.
        """

    def read(self, file_path: Path, metadata: Optional[Dict[str, Any]] = None,
             subtype: Union[Subtype, str, None] = None) -> CanonicalPackage:
        """Read a file and convert it to canonical."""
        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()

        metadata = dict(metadata or {})
        metadata.setdefault('id', Path(file_path).stem)
        if subtype is None:
            subtype = self.subtype_hint(Path(file_path))
        return self.to_canonical(content, metadata, subtype=subtype)

    def write(self, pkg: CanonicalPackage, file_path: Path,
              options: Optional[ConversionOptions] = None) -> ConversionResult:
        """
        Render a package and write it to disk.

        Degraded results (empty content) are not written.
        """
        result = self.from_canonical(pkg, options)
        if result.content:
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(result.content)
        return result
