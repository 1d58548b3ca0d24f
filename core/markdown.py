"""
Markdown body decomposition into canonical sections.

All supported formats share the same body conventions: an optional H1 title,
a preamble, then ``##`` blocks. Each block is classified by heading text and
shape:

- ``## Role`` / ``## Persona`` with a persona line -> persona
- heading mentioning examples -> examples (split on ``###``)
- heading mentioning context/background/reference -> context
- a block made only of list items -> rules
- anything else -> instructions (kept verbatim)

This is not a general markdown parser. Blocks that don't match a known
shape are kept as instructions so no text is lost.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from core.canonical_models import (
    ContextSection,
    Example,
    ExamplesSection,
    InstructionsSection,
    PersonaSection,
    Rule,
    RulesSection,
)

logger = logging.getLogger(__name__)

HEADING_RE = re.compile(r'^(#{1,6})\s+(.*?)\s*#*\s*$')
FENCE_RE = re.compile(r'^\s*(`{3,}|~{3,})\s*([\w+#.-]*)')
LIST_ITEM_RE = re.compile(r'^([-*+]|\d+[.)])\s+(.*)$')
SUB_BULLET_RE = re.compile(r'^[-*+]\s+')
RATIONALE_RE = re.compile(r'^\*(?:Rationale:\s*)?([^*\s].*?)\*$')
EXAMPLE_LINE_RE = re.compile(r'^Example:\s*(.+)$', re.IGNORECASE)
IMPORTANT_RE = re.compile(r'^\*\*important:\*\*\s*', re.IGNORECASE)
ICON_RE = re.compile(r'^([^\w\s`*#\[\]()<>"\'.,:;!?/\\-]+)\s+(.+)$')

PERSONA_START_RE = re.compile(r'^You are\b')
PERSONA_SENTENCE_RE = re.compile(r'^You are (.+?)(?:\.\s+|\.$|$)(.*)$', re.DOTALL)
PERSONA_LINE_RE = re.compile(
    r'^(?:(?P<icon>[^\w\s*]+)\s*)?(?:\*\*(?P<name>[^*]+)\*\*)?(?:\s*-\s+(?P<role>.+))?$'
)
STYLE_LINE_RE = re.compile(r'^\*\*Style:\*\*\s*(.*)$')
EXPERTISE_LINE_RE = re.compile(r'^\*\*Expertise:\*\*\s*(.*)$')
PROSE_STYLE_RE = re.compile(r'^Your communication style is\s+(.+?)\.?$', re.DOTALL)
PROSE_EXPERTISE_RE = re.compile(r'^Your areas of expertise include:?\s*$')

PERSONA_HEADINGS = ('role', 'persona')
CONTEXT_KEYWORDS = ('context', 'background', 'reference')

GOOD_MARKS = ('✅', '✓', '✔', '👍')
BAD_MARKS = ('❌', '✗', '✘', '👎', '🚫')
EXAMPLE_LABEL_RE = re.compile(
    r"^(good|bad|do|don't|dont|avoid|preferred|correct|incorrect|wrong)\s*:\s*(.*)$",
    re.IGNORECASE,
)
BAD_LABELS = frozenset({'bad', "don't", 'dont', 'avoid', 'incorrect', 'wrong'})


@dataclass
class ParsedBody:
    """Result of decomposing a markdown body."""
    title: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None
    sections: List[object] = field(default_factory=list)


def split_title_icon(title: str) -> Tuple[str, Optional[str]]:
    """Split a leading emoji/symbol off a heading: '🐛 Debugger' -> ('Debugger', '🐛')."""
    match = ICON_RE.match(title.strip())
    if match:
        return match.group(2).strip(), match.group(1)
    return title.strip(), None


def split_paragraphs(text: str) -> List[str]:
    text = text.strip()
    if not text:
        return []
    return [p.strip() for p in re.split(r'\n\s*\n', text) if p.strip()]


def strip_code_ticks(text: str) -> str:
    if len(text) > 1 and text.startswith('`') and text.endswith('`'):
        return text[1:-1]
    return text


def split_blocks(body: str) -> Tuple[Optional[str], List[str], List[Tuple[str, List[str]]]]:
    """
    Split a body into (H1 title, preamble lines, [(H2 heading, lines)]).

    Headings inside fenced code blocks are ignored. Only the first H1 before
    any ``##`` block is treated as the title; later H1s open blocks.
    """
    title = None
    preamble: List[str] = []
    blocks: List[Tuple[str, List[str]]] = []
    in_fence = False

    for line in body.split('\n'):
        target = blocks[-1][1] if blocks else preamble

        if FENCE_RE.match(line):
            in_fence = not in_fence
            target.append(line)
            continue

        if not in_fence:
            match = HEADING_RE.match(line)
            if match:
                level = len(match.group(1))
                text = match.group(2)
                if level == 1 and title is None and not blocks:
                    title = text
                    continue
                if level <= 2:
                    blocks.append((text, []))
                    continue

        target.append(line)

    return title, preamble, blocks


def _split_items(text: str) -> List[str]:
    parts = re.split(r',\s*(?:and\s+)?|\s+and\s+', text.strip().rstrip('.'))
    return [p.strip() for p in parts if p.strip()]


def parse_persona_prose(paragraphs: List[str]) -> Tuple[PersonaSection, List[str]]:
    """
    Parse a ``You are ...`` preamble into a persona.

    Returns the persona and any paragraphs it did not consume.
    """
    match = PERSONA_SENTENCE_RE.match(' '.join(paragraphs[0].split('\n')))
    who = match.group(1).strip() if match else paragraphs[0]
    tail = match.group(2).strip() if match else ''

    name, role = None, who
    if ', ' in who:
        name, role = (part.strip() for part in who.split(', ', 1))

    style: List[str] = []
    expertise: List[str] = []
    leftover: List[str] = [tail] if tail else []

    for paragraph in paragraphs[1:]:
        lines = paragraph.split('\n')
        style_match = PROSE_STYLE_RE.match(' '.join(lines))
        if style_match and not style:
            style = _split_items(style_match.group(1))
            continue
        if PROSE_EXPERTISE_RE.match(lines[0]) and not expertise:
            items = [LIST_ITEM_RE.match(l) for l in lines[1:]]
            if all(items):
                expertise = [m.group(2).strip() for m in items]
                continue
        leftover.append(paragraph)

    return PersonaSection(name=name, role=role, style=tuple(style), expertise=tuple(expertise)), leftover


def parse_persona_block(text: str) -> Optional[PersonaSection]:
    """Parse a rendered ``## Role`` block. Returns None if it isn't one."""
    lines = [l.strip() for l in text.split('\n') if l.strip()]
    if not lines:
        return None

    icon = name = role = None
    start = 0
    first = lines[0]
    match = PERSONA_LINE_RE.match(first)
    if match and (match.group('name') or match.group('role')):
        icon, name, role = match.group('icon'), match.group('name'), match.group('role')
        start = 1
    elif not first.startswith('**'):
        role = first
        start = 1

    style: List[str] = []
    expertise: List[str] = []
    in_expertise = False
    for line in lines[start:]:
        style_match = STYLE_LINE_RE.match(line)
        if style_match:
            style = _split_items(style_match.group(1))
            in_expertise = False
            continue
        expertise_match = EXPERTISE_LINE_RE.match(line)
        if expertise_match:
            in_expertise = True
            if expertise_match.group(1):
                expertise.extend(_split_items(expertise_match.group(1)))
            continue
        item = LIST_ITEM_RE.match(line)
        if in_expertise and item:
            expertise.append(item.group(2).strip())
            continue
        return None

    if not (name or role or style or expertise):
        return None
    return PersonaSection(
        name=name, role=role, icon=icon, style=tuple(style), expertise=tuple(expertise)
    )


def parse_rules(lines: List[str]) -> Optional[Tuple[Tuple[Rule, ...], bool]]:
    """
    Parse a block made only of list items into rules.

    Indented italic lines become the rationale of the preceding item and
    ``Example:`` lines its examples. Returns None when the block contains
    anything else.
    """
    items: List[dict] = []
    ordered = False

    for line in lines:
        if not line.strip():
            continue

        match = LIST_ITEM_RE.match(line)
        if match:
            if not items:
                ordered = match.group(1)[0].isdigit()
            items.append({'content': match.group(2).strip(), 'rationale': None, 'examples': []})
            continue

        if not items:
            return None

        indented = line[:1] in (' ', '\t')
        stripped = line.strip()
        is_sub_bullet = bool(SUB_BULLET_RE.match(stripped))
        sub = SUB_BULLET_RE.sub('', stripped) if indented else stripped

        rationale = RATIONALE_RE.match(sub)
        if rationale:
            items[-1]['rationale'] = rationale.group(1).strip()
            continue
        example = EXAMPLE_LINE_RE.match(sub)
        if example:
            items[-1]['examples'].append(strip_code_ticks(example.group(1).strip()))
            continue
        if indented and not is_sub_bullet:
            # Wrapped continuation line
            items[-1]['content'] += ' ' + stripped
            continue
        return None

    if not items:
        return None

    rules = tuple(
        Rule(content=i['content'], rationale=i['rationale'], examples=tuple(i['examples']))
        for i in items
    )
    return rules, ordered


def classify_example_heading(heading: str) -> Tuple[Optional[bool], str]:
    """Read the good/bad marker off an example heading."""
    text = heading.strip()
    good = None

    for mark in GOOD_MARKS:
        if text.startswith(mark):
            good, text = True, text[len(mark):].strip()
            break
    else:
        for mark in BAD_MARKS:
            if text.startswith(mark):
                good, text = False, text[len(mark):].strip()
                break

    label = EXAMPLE_LABEL_RE.match(text)
    if label:
        good = label.group(1).lower() not in BAD_LABELS
        text = label.group(2).strip()

    return good, text


def parse_examples(lines: List[str], section_title: str) -> List[Example]:
    """Extract fenced code examples, grouped under optional ``###`` headings."""
    chunks: List[Tuple[Optional[str], List[str]]] = [(None, [])]
    in_fence = False
    for line in lines:
        if FENCE_RE.match(line):
            in_fence = not in_fence
        elif not in_fence and line.startswith('### '):
            chunks.append((line[4:].strip(), []))
            continue
        chunks[-1][1].append(line)

    examples: List[Example] = []
    for heading, chunk in chunks:
        good, heading_text = classify_example_heading(heading) if heading else (None, '')
        text: List[str] = []
        code: List[str] = []
        language = None
        in_code = False

        def flush():
            paragraphs = split_paragraphs('\n'.join(text))
            description = heading_text or (paragraphs[-1] if paragraphs else section_title)
            examples.append(Example(
                description=description,
                code='\n'.join(code),
                language=language,
                good=good,
            ))

        for line in chunk:
            fence = FENCE_RE.match(line)
            if fence and not in_code:
                in_code = True
                language = fence.group(2) or None
                code = []
            elif fence and in_code:
                in_code = False
                flush()
                text = []
            elif in_code:
                code.append(line)
            else:
                text.append(line)

        if in_code:
            logger.debug("Unterminated code fence in '%s' examples", section_title)
            flush()

    return examples


def _instructions(title: str, text: str) -> InstructionsSection:
    priority = None
    if IMPORTANT_RE.match(text):
        priority = 'high'
        text = IMPORTANT_RE.sub('', text, count=1)
    return InstructionsSection(title=title, content=text, priority=priority)


def classify_block(heading: str, lines: List[str]):
    """Turn one ``##`` block into a section."""
    text = '\n'.join(lines).strip()
    lowered = heading.lower()

    if lowered in PERSONA_HEADINGS:
        persona = parse_persona_block(text)
        if persona is not None:
            return persona

    if 'example' in lowered:
        examples = parse_examples(lines, heading)
        if examples:
            return ExamplesSection(title=heading, examples=tuple(examples))

    if any(word in lowered for word in CONTEXT_KEYWORDS):
        return ContextSection(title=heading, content=text)

    parsed_rules = parse_rules(lines)
    if parsed_rules is not None:
        items, ordered = parsed_rules
        return RulesSection(title=heading, items=items, ordered=ordered)

    return _instructions(heading, text)


def _is_prose(paragraph: str) -> bool:
    first = paragraph.lstrip()
    return not (
        LIST_ITEM_RE.match(first)
        or FENCE_RE.match(first)
        or first.startswith(('>', '|', '<', '#'))
    )


def parse_body(body: str, take_description: bool = True) -> ParsedBody:
    """
    Decompose a markdown body into title, description and sections.

    Args:
        body: Markdown text without frontmatter
        take_description: Use the first preamble paragraph as the package
            description (for formats whose frontmatter has none)

    Returns:
        ParsedBody with sections in document order
    """
    title, preamble, blocks = split_blocks(body)
    result = ParsedBody()

    if title:
        result.title, result.icon = split_title_icon(title)

    paragraphs = split_paragraphs('\n'.join(preamble))
    if paragraphs:
        if PERSONA_START_RE.match(paragraphs[0]):
            persona, paragraphs = parse_persona_prose(paragraphs)
            result.sections.append(persona)
        elif take_description and _is_prose(paragraphs[0]):
            result.description = ' '.join(paragraphs[0].split('\n'))
            paragraphs = paragraphs[1:]
        if paragraphs:
            result.sections.append(_instructions('Overview', '\n\n'.join(paragraphs)))

    for heading, lines in blocks:
        section = classify_block(heading, lines)
        logger.debug("Block '%s' classified as %s", heading, section.type)
        result.sections.append(section)

    return result


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated identifier: 'Code Reviewer!' -> 'code-reviewer'."""
    text = re.sub(r'[^a-z0-9]+', '-', (text or '').lower())
    return text.strip('-')
