"""
Kiro format adapter.

Kiro steering files live in .kiro/steering/<domain>.md and always start with
a frontmatter block selecting when the file is included:

---
inclusion: always | fileMatch | manual
fileMatchPattern: "components/**/*.tsx"  # required for fileMatch
domain: testing                         # optional
---
# Title

Markdown body...

Parsing tolerates a missing header (Kiro treats such files as always
included). Rendering requires an inclusion mode from the options or the
package's kiroConfig and fails into a degraded result without one.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Union

from adapters.shared.markdown_adapter import MarkdownFormatAdapter
from core.canonical_models import CanonicalPackage, Format, Subtype
from core.conversion_options import (
    KIRO_INCLUSION_MODES,
    ConversionOptions,
    KiroConfig,
    resolve_option,
)
from core.frontmatter import dump_frontmatter, parse_frontmatter
from core.markdown import parse_body

logger = logging.getLogger(__name__)

DEFAULT_INCLUSION = 'always'


class KiroAdapter(MarkdownFormatAdapter):
    """Adapter for Kiro steering files."""

    title_with_icon = False
    good_example_heading = '✅ Preferred: {description}'
    bad_example_heading = '❌ Avoid: {description}'

    unsupported_sections = {
        'persona': 'Persona section skipped (not supported by Kiro)',
        'tools': 'Tools section skipped (not supported by Kiro)',
    }

    @property
    def format_name(self) -> str:
        return "kiro"

    @property
    def file_extension(self) -> str:
        return ".md"

    def can_handle(self, file_path: Path) -> bool:
        return file_path.suffix == '.md' and '.kiro' in file_path.parts

    def to_canonical(self, content: str, metadata: Dict[str, Any],
                     known_format: Union[Format, str, None] = None,
                     subtype: Union[Subtype, str, None] = None) -> CanonicalPackage:
        """
        Convert a Kiro steering file to canonical.

        Raises:
            ValueError: If the inclusion mode is unknown, or fileMatch is
                used without a fileMatchPattern
        """
        frontmatter, body, has_header = parse_frontmatter(content)
        if not has_header:
            logger.debug("Kiro file without frontmatter, using inclusion '%s'", DEFAULT_INCLUSION)

        config = KiroConfig(
            inclusion=frontmatter.get('inclusion') or DEFAULT_INCLUSION,
            file_match_pattern=frontmatter.get('fileMatchPattern'),
            domain=frontmatter.get('domain'),
        )
        errors = config.validate()
        if errors:
            raise ValueError(f"Invalid Kiro frontmatter: {'; '.join(errors)}")

        kiro_config = {'inclusion': config.inclusion}
        if config.file_match_pattern:
            kiro_config['fileMatchPattern'] = config.file_match_pattern
        if config.domain:
            kiro_config['domain'] = config.domain

        parsed = parse_body(body, take_description=not frontmatter.get('description'))

        return self.build_package(
            metadata, frontmatter, parsed,
            known_format=known_format,
            subtype=subtype,
            package_metadata={'kiroConfig': kiro_config},
        )

    def _resolve_config(self, pkg: CanonicalPackage, options: ConversionOptions) -> KiroConfig:
        explicit = options.kiro_config or KiroConfig()
        stored = KiroConfig.from_metadata(pkg.get_config('kiroConfig'))
        return KiroConfig(
            inclusion=resolve_option(explicit.inclusion, stored.inclusion),
            file_match_pattern=resolve_option(explicit.file_match_pattern, stored.file_match_pattern),
            domain=resolve_option(explicit.domain, stored.domain),
        )

    def render_header(self, pkg: CanonicalPackage, options: ConversionOptions,
                      warnings) -> str:
        config = self._resolve_config(pkg, options)
        if not config.inclusion:
            raise ValueError(
                f"Kiro format requires inclusion mode ({'|'.join(KIRO_INCLUSION_MODES)})"
            )
        errors = config.validate()
        if errors:
            raise ValueError('; '.join(errors))

        return dump_frontmatter({
            'inclusion': config.inclusion,
            'fileMatchPattern': config.file_match_pattern if config.inclusion == 'fileMatch' else None,
            'domain': config.domain,
        })

    def title_text(self, pkg: CanonicalPackage, options: ConversionOptions) -> str:
        explicit = options.kiro_config or KiroConfig()
        return explicit.domain or pkg.title
