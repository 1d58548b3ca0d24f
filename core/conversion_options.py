"""
Render-time configuration.

Several renderers resolve a value from three places: an explicit option
passed by the caller, a value carried in the package metadata, and a
format default. resolve_option is the single place that precedence lives.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

KIRO_INCLUSION_MODES = ('always', 'fileMatch', 'manual')


def resolve_option(explicit: Any, package_value: Any, default: Any = None) -> Any:
    """
    Resolve a setting: explicit config, then package metadata, then default.

    Only ``None`` counts as "not provided", so explicit falsy values such as
    ``False`` or ``[]`` still override the package value.
    """
    if explicit is not None:
        return explicit
    if package_value is not None:
        return package_value
    return default


def as_list(value: Any) -> Optional[List[str]]:
    """Normalize a glob/pattern value that may be a string or a list."""
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


@dataclass(frozen=True)
class CursorConfig:
    version: Optional[str] = None
    globs: Optional[Sequence[str]] = None
    always_apply: Optional[bool] = None
    author: Optional[str] = None
    tags: Optional[Sequence[str]] = None


@dataclass(frozen=True)
class CopilotConfig:
    """Path-specific instructions are produced when ``apply_to`` resolves."""
    instruction_name: Optional[str] = None
    apply_to: Optional[Sequence[str]] = None
    exclude_agent: Optional[str] = None


@dataclass(frozen=True)
class KiroConfig:
    inclusion: Optional[str] = None
    file_match_pattern: Optional[str] = None
    domain: Optional[str] = None

    @classmethod
    def from_metadata(cls, data: Dict[str, Any]) -> 'KiroConfig':
        return cls(
            inclusion=data.get('inclusion'),
            file_match_pattern=data.get('fileMatchPattern'),
            domain=data.get('domain'),
        )

    def validate(self) -> List[str]:
        """Return a list of problems; empty when the config is usable."""
        errors = []
        if not self.inclusion:
            errors.append("Kiro inclusion mode is required")
        elif self.inclusion not in KIRO_INCLUSION_MODES:
            errors.append(
                f"Invalid Kiro inclusion mode '{self.inclusion}' "
                f"(expected one of: {', '.join(KIRO_INCLUSION_MODES)})"
            )
        if self.inclusion == 'fileMatch' and not self.file_match_pattern:
            errors.append("fileMatch inclusion mode requires fileMatchPattern")
        return errors


@dataclass(frozen=True)
class ContinueConfig:
    """Passing this to the Continue renderer turns on YAML frontmatter."""
    globs: Optional[Sequence[str]] = None
    always_apply: Optional[bool] = None
    invokable: Optional[bool] = None


@dataclass(frozen=True)
class ConversionOptions:
    cursor_config: Optional[CursorConfig] = None
    copilot_config: Optional[CopilotConfig] = None
    kiro_config: Optional[KiroConfig] = None
    continue_config: Optional[ContinueConfig] = None
