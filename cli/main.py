"""
Main CLI entry point for the format converter.

Converts a single AI-assistant config file (rule, agent, skill, command,
prompt) between editor formats through the canonical representation:
- Cursor (.mdc), Claude (.md), Continue, Windsurf, Copilot, Kiro
- Source format auto-detected from the path, then from the content
- One target format, or all of them at once
- Dry-run mode prints the converted content instead of writing it

Usage:
    python -m cli.main --convert-file .claude/agents/reviewer.md --target-format cursor
    python -m cli.main --convert-file rules.mdc --target-format all --dry-run
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from core.canonical_models import CanonicalPackage, ConversionResult, Subtype
from core.conversion import get_output_filename
from core.conversion_options import (
    KIRO_INCLUSION_MODES,
    ConversionOptions,
    CopilotConfig,
    CursorConfig,
    KiroConfig,
)
from core.log_config import LOG_FORMATS, setup_logging
from core.registry import FormatRegistry, create_default_registry

logger = logging.getLogger(__name__)

FORMAT_CHOICES = ['cursor', 'claude', 'continue', 'windsurf', 'copilot', 'kiro']
DEFAULT_KIRO_INCLUSION = 'always'


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        description='Convert AI coding assistant configuration files between editor formats',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert a Claude agent to a Cursor rule
  %(prog)s --convert-file .claude/agents/reviewer.md --target-format cursor

  # Convert a Cursor rule to path-specific Copilot instructions
  %(prog)s --convert-file .cursor/rules/api.mdc --target-format copilot \\
           --apply-to "src/api/**/*.ts"

  # Preview conversions into every format
  %(prog)s --convert-file rules.mdc --target-format all --dry-run

  # Show which format a file looks like
  %(prog)s --convert-file notes.md --detect
        """
    )

    parser.add_argument(
        '--convert-file',
        type=Path,
        required=True,
        help='File to convert'
    )

    parser.add_argument(
        '--output',
        type=Path,
        help='Output file path (auto-generated if not specified; a directory when --target-format all)'
    )

    parser.add_argument(
        '--source-format',
        type=str,
        choices=FORMAT_CHOICES,
        help='Source format name (auto-detected if not specified)'
    )

    parser.add_argument(
        '--target-format',
        type=str,
        choices=FORMAT_CHOICES + ['all'],
        help='Target format name, or "all" (auto-detected from --output if not specified)'
    )

    parser.add_argument(
        '--subtype',
        type=str,
        choices=[s.value for s in Subtype],
        help='Subtype of the source file (overrides anything inferred from the file)'
    )

    parser.add_argument(
        '--detect',
        action='store_true',
        help='Print the detected source format and subtype, then exit'
    )

    # Package metadata
    parser.add_argument('--id', dest='package_id', help='Package id (default: source file stem)')
    parser.add_argument('--author', help='Package author')
    parser.add_argument('--version', dest='package_version', help='Package version')

    # Target format options
    parser.add_argument(
        '--globs',
        nargs='+',
        help='[Cursor] File globs the rule applies to'
    )

    parser.add_argument(
        '--always-apply',
        action='store_true',
        default=None,
        help='[Cursor] Mark the rule as always applied'
    )

    parser.add_argument(
        '--apply-to',
        nargs='+',
        help='[Copilot] applyTo glob(s); produces path-specific instructions'
    )

    parser.add_argument(
        '--inclusion',
        choices=list(KIRO_INCLUSION_MODES),
        help='[Kiro] Inclusion mode'
    )

    parser.add_argument(
        '--file-match-pattern',
        help='[Kiro] Pattern for fileMatch inclusion'
    )

    parser.add_argument(
        '--domain',
        help='[Kiro] Steering domain'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be done without writing files'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Verbose output with detailed logging'
    )

    parser.add_argument(
        '--log-format',
        choices=LOG_FORMATS,
        default='text',
        help='Log output format on stderr (default: text)'
    )

    return parser


def setup_registry() -> FormatRegistry:
    """
    Initialize format registry with all available adapters.

    Returns:
        FormatRegistry with registered adapters
    """
    return create_default_registry()


def build_options(args, pkg: Optional[CanonicalPackage] = None) -> ConversionOptions:
    """
    Turn target-format flags into ConversionOptions. Unset flags stay None.

    Kiro steering needs an inclusion mode, so when the flag is missing and
    the source package carries none, Kiro renders default to always.
    """
    cursor_config = None
    if args.globs or args.always_apply is not None or args.package_version or args.author:
        cursor_config = CursorConfig(
            version=args.package_version,
            globs=args.globs,
            always_apply=args.always_apply,
            author=args.author,
        )

    copilot_config = CopilotConfig(apply_to=args.apply_to) if args.apply_to else None

    inclusion = args.inclusion
    if inclusion is None and pkg is not None and not pkg.get_config('kiroConfig').get('inclusion'):
        inclusion = DEFAULT_KIRO_INCLUSION

    kiro_config = None
    if inclusion or args.file_match_pattern or args.domain:
        kiro_config = KiroConfig(
            inclusion=inclusion,
            file_match_pattern=args.file_match_pattern,
            domain=args.domain,
        )

    return ConversionOptions(
        cursor_config=cursor_config,
        copilot_config=copilot_config,
        kiro_config=kiro_config,
    )


def print_result(result: ConversionResult) -> None:
    """Report warnings and quality on stderr so stdout stays clean for content."""
    fmt = result.format.value
    lossy = ' (lossy)' if result.lossy_conversion else ''
    print(f"  {fmt}: quality {result.quality_score}/100{lossy}", file=sys.stderr)
    for warning in result.warnings:
        print(f"    warning: {warning}", file=sys.stderr)


def write_result(result: ConversionResult, output_file: Path, args) -> bool:
    """Write or preview one result. Returns False for degraded results."""
    if not result.content:
        print(f"Error: {result.format.value} conversion failed", file=sys.stderr)
        return False

    if args.dry_run:
        print(f"Would write to: {output_file}")
        if args.verbose:
            print("--- Output content ---")
            print(result.content)
        return True

    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(result.content)

    if args.verbose:
        print(f"Successfully converted to {output_file}")
    return True


def convert_single_file(args) -> int:
    """
    Convert a single file from one format to another.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    registry = setup_registry()

    # 1. Validate source file
    source_file = args.convert_file.expanduser().resolve()
    if not source_file.exists():
        print(f"Error: File not found: {source_file}", file=sys.stderr)
        return 1
    if source_file.is_dir():
        print(f"Error: Path is a directory, not a file: {source_file}", file=sys.stderr)
        return 1

    with open(source_file, 'r', encoding='utf-8') as f:
        content = f.read()

    # 2. Determine source adapter (explicit, path conventions, then content)
    if args.source_format:
        source_adapter = registry.get_adapter(args.source_format)
    else:
        source_adapter = (registry.detect_format(source_file) or
                          registry.detect_content_format(content))
        if not source_adapter:
            print(f"Error: Cannot auto-detect format for: {source_file}", file=sys.stderr)
            return 1
    logger.debug("Reading %s as %s", source_file, source_adapter.format_name)

    # 3. Parse to canonical
    metadata = {'id': args.package_id or source_file.stem.split('.')[0]}
    if args.author:
        metadata['author'] = args.author
    if args.package_version:
        metadata['version'] = args.package_version

    subtype = args.subtype or source_adapter.subtype_hint(source_file)

    try:
        canonical = source_adapter.to_canonical(content, metadata, subtype=subtype)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.detect:
        print(f"{source_adapter.format_name} {canonical.subtype.value} ({canonical.type})")
        return 0

    # 4. Determine target adapters (explicit, all, or from output path)
    if args.target_format == 'all':
        targets = [registry.get_adapter(name) for name in registry.list_formats()
                   if name != source_adapter.format_name]
    elif args.target_format:
        targets = [registry.get_adapter(args.target_format)]
    elif args.output:
        target = registry.detect_format(args.output)
        if not target:
            print(f"Error: Cannot auto-detect target format from: {args.output}", file=sys.stderr)
            return 1
        targets = [target]
    else:
        print("Error: --target-format or --output required for conversion", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Converting {source_file}")
        print(f"  Source format: {source_adapter.format_name} ({canonical.type})")
        print(f"  Target format(s): {', '.join(t.format_name for t in targets)}")

    # 5. Render and write
    options = build_options(args, canonical)
    ok = True
    for target in targets:
        result = target.from_canonical(canonical, options)
        print_result(result)
        output_file = _output_path(args, source_file, canonical, target.format_name, len(targets) > 1)
        ok = write_result(result, output_file, args) and ok

    return 0 if ok else 1


def _output_path(args, source_file: Path, pkg: CanonicalPackage,
                 target_format: str, multiple: bool) -> Path:
    if args.output and not multiple:
        return args.output.expanduser().resolve()
    base_dir = args.output.expanduser().resolve() if args.output else source_file.parent
    if multiple:
        base_dir = base_dir / target_format
    return base_dir / get_output_filename(pkg, target_format)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging('DEBUG' if args.verbose else 'WARNING', args.log_format)

    try:
        return convert_single_file(args)
    except KeyboardInterrupt:
        print("\nConversion cancelled by user", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc(file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
