"""
Unit tests for taxonomy resolution.

Tests cover:
- Subtype detection priority (hint, markers, structure, default)
- Legacy compound type mapping in both directions
- Normalization of (format, subtype) pairs
"""

import pytest

from core.canonical_models import Format, Subtype
from core.taxonomy import (
    default_subtype,
    detect_subtype,
    from_legacy_type,
    set_taxonomy,
    subtype_markers,
    to_legacy_type,
)


class TestDetectSubtype:
    """Tests for detect_subtype."""

    def test_explicit_hint_wins(self):
        """Test the caller's hint beats frontmatter markers."""
        assert detect_subtype('claude', {'agentType': 'agent'}, 'skill') == Subtype.SKILL

    def test_generic_type_marker(self):
        """Test the generic type field is honored."""
        assert detect_subtype('claude', {'type': 'skill'}) == Subtype.SKILL
        assert detect_subtype('cursor', {'type': 'slash-command'}) == Subtype.SLASH_COMMAND

    def test_generic_type_checked_before_specific_markers(self):
        """Test conflicting markers resolve to the generic type field."""
        frontmatter = {'type': 'skill', 'agentType': 'agent'}
        assert detect_subtype('claude', frontmatter) == Subtype.SKILL

    @pytest.mark.parametrize('frontmatter,expected', [
        ({'agentType': 'agent'}, Subtype.AGENT),
        ({'skillType': 'skill'}, Subtype.SKILL),
        ({'commandType': 'slash-command'}, Subtype.SLASH_COMMAND),
    ])
    def test_specific_markers(self, frontmatter, expected):
        """Test per-subtype marker fields."""
        assert detect_subtype('cursor', frontmatter) == expected

    def test_tools_imply_agent(self):
        """Test a non-empty tools field makes an agent."""
        assert detect_subtype('claude', {'tools': 'Read, Grep'}) == Subtype.AGENT
        assert detect_subtype('claude', {'tools': ['Read']}) == Subtype.AGENT

    def test_empty_tools_do_not_imply_agent(self):
        """Test blank tools fall through to the default."""
        assert detect_subtype('claude', {'tools': ' , '}) == Subtype.RULE

    def test_allowed_tools_do_not_imply_agent(self):
        """Test allowed-tools alone does not make an agent."""
        assert detect_subtype('claude', {'allowed-tools': 'Bash(git:*)'}) == Subtype.RULE

    def test_marker_beats_tools(self):
        """Test an explicit marker wins over structural inference."""
        frontmatter = {'skillType': 'skill', 'tools': 'Read, Edit'}
        assert detect_subtype('claude', frontmatter) == Subtype.SKILL

    def test_defaults(self):
        """Test format defaults when nothing else applies."""
        assert detect_subtype('cursor', None) == Subtype.RULE
        assert detect_subtype('claude', {}) == Subtype.RULE
        assert detect_subtype('continue', {}) == Subtype.PROMPT
        assert default_subtype(Format.WINDSURF) == Subtype.RULE

    def test_continue_invokable(self):
        """Test invokable Continue files are prompts."""
        assert detect_subtype('continue', {'invokable': True}) == Subtype.PROMPT

    def test_unknown_hint_ignored(self):
        """Test an unrecognized hint falls through to the file's own signals."""
        assert detect_subtype('cursor', {'agentType': 'agent'}, 'widget') == Subtype.AGENT

    def test_non_dict_frontmatter(self):
        """Test malformed frontmatter resolves to the default."""
        assert detect_subtype('cursor', ['not', 'a', 'dict']) == Subtype.RULE


class TestLegacyType:
    """Tests for to_legacy_type / from_legacy_type."""

    @pytest.mark.parametrize('fmt,subtype,expected', [
        ('cursor', 'agent', 'cursor-agent'),
        ('cursor', 'slash-command', 'cursor-slash-command'),
        ('claude', 'agent', 'claude-agent'),
        ('claude', 'skill', 'claude-skill'),
        ('claude', 'slash-command', 'claude-slash-command'),
        ('cursor', 'rule', 'cursor'),
        ('cursor', 'skill', 'cursor'),
        ('continue', 'prompt', 'continue'),
        ('kiro', 'agent', 'kiro'),
        ('mcp', 'tool', 'mcp'),
        ('windsurf', 'collection', 'collection'),
    ])
    def test_to_legacy_type(self, fmt, subtype, expected):
        """Test compound types exist only for the known combinations."""
        assert to_legacy_type(fmt, subtype) == expected

    def test_from_legacy_compound(self):
        """Test compound types split back into format and subtype."""
        assert from_legacy_type('claude-slash-command')[:2] == (Format.CLAUDE, Subtype.SLASH_COMMAND)
        assert from_legacy_type('cursor-agent')[:2] == (Format.CURSOR, Subtype.AGENT)

    def test_from_legacy_bare_format(self):
        """Test bare format names map to rules."""
        assert from_legacy_type('windsurf')[:2] == (Format.WINDSURF, Subtype.RULE)

    def test_from_legacy_collection(self):
        """Test collection maps to the generic format."""
        assert from_legacy_type('collection')[:2] == (Format.GENERIC, Subtype.COLLECTION)

    def test_from_legacy_unknown(self):
        """Test unrecognized strings fall back to a generic rule."""
        assert from_legacy_type('vscode-theme')[:2] == (Format.GENERIC, Subtype.RULE)
        assert from_legacy_type('')[:2] == (Format.GENERIC, Subtype.RULE)

    def test_round_trip_every_pair(self):
        """Test every (format, subtype) survives the legacy string up to documented collapse."""
        for fmt in Format:
            for subtype in Subtype:
                legacy = to_legacy_type(fmt, subtype)
                restored = from_legacy_type(legacy)

                if subtype == Subtype.COLLECTION:
                    assert restored.subtype == Subtype.COLLECTION
                    continue
                assert restored.format == fmt
                if legacy != fmt.value:
                    assert restored.subtype == subtype
                else:
                    assert restored.subtype == Subtype.RULE


class TestSetTaxonomy:
    """Tests for set_taxonomy and subtype_markers."""

    def test_complete_triple(self):
        """Test the legacy type is attached."""
        taxonomy = set_taxonomy('claude', 'skill')
        assert taxonomy == (Format.CLAUDE, Subtype.SKILL, 'claude-skill')

    def test_defaults_applied(self):
        """Test missing or unknown values get defaults."""
        assert set_taxonomy('continue').subtype == Subtype.PROMPT
        assert set_taxonomy('nope', 'agent').format == Format.GENERIC
        assert set_taxonomy('cursor', 'nope').subtype == Subtype.RULE

    def test_subtype_markers(self):
        """Test markers round trip through detect_subtype."""
        assert subtype_markers('skill') == {'skillType': 'skill'}
        assert subtype_markers(Subtype.RULE) == {}
        for subtype in (Subtype.AGENT, Subtype.SKILL, Subtype.SLASH_COMMAND):
            assert detect_subtype('cursor', subtype_markers(subtype)) == subtype
