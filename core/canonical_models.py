"""
Canonical data models for format conversion.

Every supported editor format is parsed into and rendered from the same
intermediate representation, so N formats need N parsers and N renderers
instead of N² pairwise converters.

A CanonicalPackage holds package identity, a free-form metadata dict for
format-specific configuration, the (format, subtype) taxonomy pair and an
ordered list of sections. Section order is render order.

Sections form a closed set of dataclasses discriminated by their ``type``
class attribute. Deserializing a dict with an unknown discriminant yields an
UnknownSection so renderers can warn and skip it instead of failing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple


class Format(str, Enum):
    """Editor ecosystems a package can target."""
    CURSOR = "cursor"
    CLAUDE = "claude"
    CONTINUE = "continue"
    WINDSURF = "windsurf"
    COPILOT = "copilot"
    KIRO = "kiro"
    GENERIC = "generic"
    MCP = "mcp"


class Subtype(str, Enum):
    """Functional role of a package within its format."""
    RULE = "rule"
    AGENT = "agent"
    SKILL = "skill"
    SLASH_COMMAND = "slash-command"
    PROMPT = "prompt"
    WORKFLOW = "workflow"
    TOOL = "tool"
    TEMPLATE = "template"
    COLLECTION = "collection"


class SectionShapeError(ValueError):
    """Raised when a section payload does not match its discriminant."""


# Section payloads

@dataclass(frozen=True)
class Rule:
    content: str
    rationale: Optional[str] = None
    examples: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Example:
    description: str
    code: str
    language: Optional[str] = None
    good: Optional[bool] = None


@dataclass(frozen=True)
class MetadataSection:
    """Package title block. At most one per package, conventionally first."""
    type: ClassVar[str] = "metadata"

    title: str
    description: str = ""
    icon: Optional[str] = None
    # Original source text, kept by the Cursor parser for pass-through renders
    raw: Optional[str] = None


@dataclass(frozen=True)
class InstructionsSection:
    type: ClassVar[str] = "instructions"

    title: str
    content: str
    priority: Optional[str] = None


@dataclass(frozen=True)
class RulesSection:
    type: ClassVar[str] = "rules"

    title: str
    items: Tuple[Rule, ...] = ()
    ordered: bool = False


@dataclass(frozen=True)
class ExamplesSection:
    type: ClassVar[str] = "examples"

    title: str
    examples: Tuple[Example, ...] = ()


@dataclass(frozen=True)
class PersonaSection:
    type: ClassVar[str] = "persona"

    name: Optional[str] = None
    role: Optional[str] = None
    icon: Optional[str] = None
    style: Tuple[str, ...] = ()
    expertise: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ContextSection:
    type: ClassVar[str] = "context"

    title: str
    content: str


@dataclass(frozen=True)
class ToolsSection:
    type: ClassVar[str] = "tools"

    tools: Tuple[str, ...]
    description: Optional[str] = None


@dataclass(frozen=True)
class CustomSection:
    type: ClassVar[str] = "custom"

    content: str
    editor_type: Optional[str] = None


@dataclass(frozen=True)
class UnknownSection:
    """Section with a discriminant this version does not understand."""
    kind: str
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def type(self) -> str:
        return self.kind


SECTION_CLASSES = (
    MetadataSection,
    InstructionsSection,
    RulesSection,
    ExamplesSection,
    PersonaSection,
    ContextSection,
    ToolsSection,
    CustomSection,
)

SECTION_TYPES = {cls.type: cls for cls in SECTION_CLASSES}


@dataclass(frozen=True)
class CanonicalContent:
    """Ordered section sequence of a package."""
    sections: Tuple[Any, ...] = ()

    def __post_init__(self):
        # Accept any iterable but store an immutable tuple
        object.__setattr__(self, 'sections', tuple(self.sections))
        metadata_count = sum(1 for s in self.sections if isinstance(s, MetadataSection))
        if metadata_count > 1:
            raise SectionShapeError(
                f"A package may contain at most one metadata section, found {metadata_count}"
            )

    def __iter__(self) -> Iterator[Any]:
        return iter(self.sections)

    def __len__(self) -> int:
        return len(self.sections)

    def find(self, section_cls):
        """Return the first section of the given class, or None."""
        for section in self.sections:
            if isinstance(section, section_cls):
                return section
        return None

    def find_all(self, section_cls) -> List[Any]:
        return [s for s in self.sections if isinstance(s, section_cls)]

    @property
    def metadata(self) -> Optional[MetadataSection]:
        return self.find(MetadataSection)


@dataclass(frozen=True)
class CanonicalPackage:
    """
    Format-neutral package representation.

    The legacy ``type`` string is derived from (format, subtype) on access and
    cannot be set independently.
    """
    id: str
    name: str
    format: Format
    subtype: Subtype
    content: CanonicalContent
    description: str = ""
    version: str = "1.0.0"
    author: str = ""
    tags: Tuple[str, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'format', Format(self.format))
        object.__setattr__(self, 'subtype', Subtype(self.subtype))
        object.__setattr__(self, 'tags', tuple(self.tags))
        if not isinstance(self.content, CanonicalContent):
            object.__setattr__(self, 'content', CanonicalContent(self.content))

    @property
    def type(self) -> str:
        from core.taxonomy import to_legacy_type
        return to_legacy_type(self.format, self.subtype)

    @property
    def sections(self) -> Tuple[Any, ...]:
        return self.content.sections

    def get_metadata(self, key: str, default: Any = None) -> Any:
        return self.metadata.get(key, default)

    def has_metadata(self, key: str) -> bool:
        return key in self.metadata

    def get_config(self, key: str) -> Dict[str, Any]:
        """Return a format config blob (e.g. ``copilotConfig``) or an empty dict."""
        value = self.metadata.get(key)
        return value if isinstance(value, dict) else {}

    @property
    def title(self) -> str:
        """Display title: metadata section title, then name, then id."""
        meta = self.content.metadata
        if meta and meta.title:
            return meta.title
        return self.name or self.id

    @property
    def display_description(self) -> str:
        meta = self.content.metadata
        if meta and meta.description:
            return meta.description
        return self.description or ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted camelCase shape."""
        return {
            'id': self.id,
            'name': self.name,
            'version': self.version,
            'author': self.author,
            'description': self.description,
            'tags': list(self.tags),
            'format': self.format.value,
            'subtype': self.subtype.value,
            'type': self.type,
            'metadata': dict(self.metadata),
            'content': {
                'format': 'canonical',
                'version': '1.0',
                'sections': [section_to_dict(s) for s in self.sections],
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CanonicalPackage':
        """
        Build a package from its persisted shape.

        Rows written before format/subtype were split only carry the legacy
        ``type`` string; those are resolved through the taxonomy inverse.
        A stored ``type`` is otherwise ignored and recomputed.
        """
        from core.taxonomy import from_legacy_type

        if 'id' not in data:
            raise ValueError("Canonical package is missing 'id'")

        fmt = data.get('format')
        subtype = data.get('subtype')
        if fmt is None or subtype is None:
            legacy = from_legacy_type(data.get('type', ''))
            fmt = fmt or legacy.format
            subtype = subtype or legacy.subtype

        content = data.get('content') or {}
        raw_sections = content.get('sections', []) if isinstance(content, dict) else content

        return cls(
            id=data['id'],
            name=data.get('name') or data['id'],
            format=fmt,
            subtype=subtype,
            content=CanonicalContent([section_from_dict(s) for s in raw_sections]),
            description=data.get('description') or "",
            version=data.get('version') or "1.0.0",
            author=data.get('author') or "",
            tags=data.get('tags') or (),
            metadata=dict(data.get('metadata') or {}),
        )


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of rendering a package into one target format."""
    content: str
    format: Format
    warnings: Tuple[str, ...] = ()
    lossy_conversion: bool = False
    quality_score: int = 100

    def __post_init__(self):
        object.__setattr__(self, 'warnings', tuple(self.warnings))

    @classmethod
    def failed(cls, fmt: Format, error: Exception) -> 'ConversionResult':
        return cls(
            content="",
            format=fmt,
            warnings=(f"Conversion error: {error}",),
            lossy_conversion=True,
            quality_score=0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'content': self.content,
            'format': Format(self.format).value,
            'warnings': list(self.warnings),
            'lossyConversion': self.lossy_conversion,
            'qualityScore': self.quality_score,
        }


# Section (de)serialization

_SECTION_FIELDS = {
    'metadata': ({'type', 'data'}, {'type', 'data'}),
    'instructions': ({'type', 'title', 'content'}, {'type', 'title', 'content', 'priority'}),
    'rules': ({'type', 'title', 'items'}, {'type', 'title', 'items', 'ordered'}),
    'examples': ({'type', 'title', 'examples'}, {'type', 'title', 'examples'}),
    'persona': ({'type', 'data'}, {'type', 'data'}),
    'context': ({'type', 'title', 'content'}, {'type', 'title', 'content'}),
    'tools': ({'type', 'tools'}, {'type', 'tools', 'description'}),
    'custom': ({'type', 'content'}, {'type', 'content', 'editorType'}),
}


def _check_keys(kind: str, data: Dict[str, Any]) -> None:
    required, allowed = _SECTION_FIELDS[kind]
    missing = required - data.keys()
    if missing:
        raise SectionShapeError(
            f"{kind} section is missing field(s): {', '.join(sorted(missing))}"
        )
    extra = data.keys() - allowed
    if extra:
        raise SectionShapeError(
            f"{kind} section has unexpected field(s): {', '.join(sorted(extra))}"
        )


def _require_mapping(kind: str, value: Any, label: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise SectionShapeError(f"{kind} section field '{label}' must be an object")
    return value


def _require_list(kind: str, value: Any, label: str) -> List[Any]:
    if not isinstance(value, (list, tuple)):
        raise SectionShapeError(f"{kind} section field '{label}' must be a list")
    return list(value)


def _rule_from_dict(item: Any) -> Rule:
    if isinstance(item, str):
        return Rule(content=item)
    item = _require_mapping('rules', item, 'items[]')
    if 'content' not in item:
        raise SectionShapeError("rules section item is missing 'content'")
    return Rule(
        content=item['content'],
        rationale=item.get('rationale'),
        examples=tuple(item.get('examples') or ()),
    )


def _example_from_dict(item: Any) -> Example:
    item = _require_mapping('examples', item, 'examples[]')
    if 'code' not in item:
        raise SectionShapeError("examples section item is missing 'code'")
    return Example(
        description=item.get('description', ''),
        code=item['code'],
        language=item.get('language'),
        good=item.get('good'),
    )


def section_from_dict(data: Dict[str, Any]):
    """
    Build a section from its persisted dict form.

    Raises:
        SectionShapeError: If the payload fields don't match the discriminant
    """
    if not isinstance(data, dict) or 'type' not in data:
        raise SectionShapeError("Section must be an object with a 'type' field")

    kind = data['type']
    if kind not in SECTION_TYPES:
        payload = {k: v for k, v in data.items() if k != 'type'}
        return UnknownSection(kind=str(kind), payload=payload)

    _check_keys(kind, data)

    if kind == 'metadata':
        meta = _require_mapping(kind, data['data'], 'data')
        if 'title' not in meta:
            raise SectionShapeError("metadata section is missing 'data.title'")
        return MetadataSection(
            title=meta['title'],
            description=meta.get('description', ''),
            icon=meta.get('icon'),
            raw=meta.get('raw'),
        )
    if kind == 'instructions':
        return InstructionsSection(
            title=data['title'], content=data['content'], priority=data.get('priority')
        )
    if kind == 'rules':
        items = _require_list(kind, data['items'], 'items')
        return RulesSection(
            title=data['title'],
            items=tuple(_rule_from_dict(i) for i in items),
            ordered=bool(data.get('ordered', False)),
        )
    if kind == 'examples':
        examples = _require_list(kind, data['examples'], 'examples')
        return ExamplesSection(
            title=data['title'], examples=tuple(_example_from_dict(e) for e in examples)
        )
    if kind == 'persona':
        persona = _require_mapping(kind, data['data'], 'data')
        return PersonaSection(
            name=persona.get('name'),
            role=persona.get('role'),
            icon=persona.get('icon'),
            style=tuple(persona.get('style') or ()),
            expertise=tuple(persona.get('expertise') or ()),
        )
    if kind == 'context':
        return ContextSection(title=data['title'], content=data['content'])
    if kind == 'tools':
        tools = _require_list(kind, data['tools'], 'tools')
        return ToolsSection(tools=tuple(tools), description=data.get('description'))
    return CustomSection(content=data['content'], editor_type=data.get('editorType'))


def _drop_none(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def section_to_dict(section) -> Dict[str, Any]:
    """Serialize a section to its persisted dict form."""
    if isinstance(section, UnknownSection):
        return {'type': section.kind, **section.payload}
    if isinstance(section, MetadataSection):
        return {'type': 'metadata', 'data': _drop_none({
            'title': section.title,
            'description': section.description,
            'icon': section.icon,
            'raw': section.raw,
        })}
    if isinstance(section, InstructionsSection):
        return _drop_none({
            'type': 'instructions',
            'title': section.title,
            'content': section.content,
            'priority': section.priority,
        })
    if isinstance(section, RulesSection):
        return {
            'type': 'rules',
            'title': section.title,
            'items': [_drop_none({
                'content': r.content,
                'rationale': r.rationale,
                'examples': list(r.examples) or None,
            }) for r in section.items],
            'ordered': section.ordered,
        }
    if isinstance(section, ExamplesSection):
        return {
            'type': 'examples',
            'title': section.title,
            'examples': [_drop_none({
                'description': e.description,
                'code': e.code,
                'language': e.language,
                'good': e.good,
            }) for e in section.examples],
        }
    if isinstance(section, PersonaSection):
        return {'type': 'persona', 'data': _drop_none({
            'name': section.name,
            'role': section.role,
            'icon': section.icon,
            'style': list(section.style) or None,
            'expertise': list(section.expertise) or None,
        })}
    if isinstance(section, ContextSection):
        return {'type': 'context', 'title': section.title, 'content': section.content}
    if isinstance(section, ToolsSection):
        return _drop_none({
            'type': 'tools',
            'tools': list(section.tools),
            'description': section.description,
        })
    if isinstance(section, CustomSection):
        return _drop_none({
            'type': 'custom',
            'content': section.content,
            'editorType': section.editor_type,
        })
    raise SectionShapeError(f"Not a canonical section: {section!r}")
