"""
Core of the format conversion library.

- canonical_models: CanonicalPackage, sections, ConversionResult, Format/Subtype
- taxonomy: subtype detection and legacy type mapping
- conversion_options: render-time config and three-tier resolution
- frontmatter / markdown: shared parsing helpers
- adapter_interface: the FormatAdapter contract
- sniffers: best-effort format detection from content
- registry: FormatRegistry and the default adapter set
- conversion: parse/convert entry points
"""
