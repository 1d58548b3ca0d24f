"""
Unit tests for format adapters (rendering direction).

Tests cover:
- Header presence and fields per format
- Three-tier option resolution (explicit option, package metadata, default)
- Unsupported sections, warnings and quality scores
- Degraded results for render failures
"""

import dataclasses
from types import SimpleNamespace

import pytest

from core.canonical_models import (
    CanonicalContent,
    CanonicalPackage,
    CustomSection,
    Format,
    InstructionsSection,
    MetadataSection,
    RulesSection,
    UnknownSection,
)
from core.conversion_options import (
    ContinueConfig,
    ConversionOptions,
    CopilotConfig,
    CursorConfig,
    KiroConfig,
)
from core.frontmatter import parse_frontmatter
from adapters import (
    ClaudeAdapter,
    ContinueAdapter,
    CopilotAdapter,
    CursorAdapter,
    KiroAdapter,
    WindsurfAdapter,
)


def header_of(content):
    frontmatter, _, had_header = parse_frontmatter(content)
    assert had_header
    return frontmatter


class TestToCursor:
    """Tests for CursorAdapter.from_canonical."""

    @pytest.fixture
    def adapter(self):
        """Create CursorAdapter instance."""
        return CursorAdapter()

    def test_header_defaults(self, adapter, sample_package):
        """Test MDC header fields with defaults."""
        result = adapter.from_canonical(sample_package)

        assert result.format == Format.CURSOR
        assert result.content.startswith('---\n')
        header = header_of(result.content)
        assert header['name'] == 'test-package'
        assert header['description'] == 'A test agent for conversion testing'
        assert header['version'] == '1.0.0'
        assert header['globs'] == ['**/*']
        assert header['alwaysApply'] is False
        assert header['author'] == 'testauthor'
        assert header['tags'] == ['test', 'example']
        assert header['agentType'] == 'agent'

    def test_body(self, adapter, sample_package):
        """Test title block and section rendering."""
        content = adapter.from_canonical(sample_package).content

        assert '# 🧪 Test Agent\n\nA test agent for conversion testing' in content
        assert '## Role\n\n🤖 **TestBot** - Testing Assistant' in content
        assert '**Important:** Always write comprehensive tests.' in content
        assert '1. Write tests before code (TDD)\n   - *Rationale: Ensures better design and test coverage*' in content
        assert '### ✅ Good: Good test structure' in content
        assert '### ❌ Bad: Missing assertions' in content
        assert '```typescript' in content
        assert '## Background' in content
        assert content.endswith('\n')

    def test_tools_skipped(self, adapter, sample_package):
        """Test tools are dropped with a lossy warning."""
        result = adapter.from_canonical(sample_package)

        assert result.warnings == ('Tools section skipped (Claude-specific)',)
        assert result.lossy_conversion is True
        assert result.quality_score == 90

    def test_explicit_config_wins(self, adapter, sample_package):
        """Test explicit options beat package metadata."""
        pkg = dataclasses.replace(sample_package, metadata={'globs': ['lib/**'], 'alwaysApply': True})

        header = header_of(adapter.from_canonical(pkg).content)
        assert header['globs'] == ['lib/**']
        assert header['alwaysApply'] is True

        options = ConversionOptions(cursor_config=CursorConfig(globs=['src/**/*.ts'], always_apply=False))
        header = header_of(adapter.from_canonical(pkg, options).content)
        assert header['globs'] == ['src/**/*.ts']
        assert header['alwaysApply'] is False

    def test_passthrough_of_original_content(self, adapter):
        """Test Cursor content renders back unchanged without overrides."""
        content = """---
name: my-rule
description: Test rule
globs:
  - "src/**/*.ts"
alwaysApply: false
---

# My Rule

Use strict types.
"""
        pkg = adapter.to_canonical(content, {'id': 'my-rule'})
        result = adapter.from_canonical(pkg)

        assert result.content == content
        assert result.warnings == ()
        assert result.quality_score == 100

        options = ConversionOptions(cursor_config=CursorConfig(globs=['**/*.py']))
        result = adapter.from_canonical(pkg, options)
        assert result.content != content
        assert header_of(result.content)['globs'] == ['**/*.py']


class TestToClaude:
    """Tests for ClaudeAdapter.from_canonical."""

    @pytest.fixture
    def adapter(self):
        """Create ClaudeAdapter instance."""
        return ClaudeAdapter()

    def test_header(self, adapter, sample_package):
        """Test Claude frontmatter fields."""
        result = adapter.from_canonical(sample_package)

        assert 'tools: Read, Write, Bash' in result.content
        header = header_of(result.content)
        assert header['name'] == 'test-package'
        assert header['description'] == 'A test agent for conversion testing'
        assert header['icon'] == '🧪'
        assert header['agentType'] == 'agent'
        assert 'model' not in header

    def test_body(self, adapter, sample_package):
        """Test persona prose and Claude example labels."""
        result = adapter.from_canonical(sample_package)
        content = result.content

        assert '# 🧪 Test Agent\n\nYou are TestBot, Testing Assistant.' in content
        assert 'Your communication style is analytical, thorough.' in content
        assert '**IMPORTANT:** Always write comprehensive tests.' in content
        assert '### ✓ Good test structure' in content
        assert '### ❌ Incorrect: Missing assertions' in content
        assert '## Role' not in content
        assert result.warnings == ()
        assert result.quality_score == 100

    def test_agent_and_command_fields(self, adapter, minimal_package):
        """Test claudeAgent and claudeConfig metadata render back."""
        pkg = dataclasses.replace(minimal_package, subtype='slash-command', metadata={
            'claudeAgent': {'model': 'opus'},
            'claudeConfig': {'allowedTools': 'Bash', 'argumentHint': '[file]'},
        })
        header = header_of(adapter.from_canonical(pkg).content)

        assert header['model'] == 'opus'
        assert header['allowed-tools'] == 'Bash'
        assert header['argument-hint'] == '[file]'
        assert header['commandType'] == 'slash-command'


class TestToCopilot:
    """Tests for CopilotAdapter.from_canonical."""

    @pytest.fixture
    def adapter(self):
        """Create CopilotAdapter instance."""
        return CopilotAdapter()

    def test_repository_wide(self, adapter, sample_package):
        """Test repository-wide output has no header and no icon."""
        result = adapter.from_canonical(sample_package)

        assert result.content.startswith('# Test Agent\n')
        assert 'TestBot' not in result.content
        assert 'Persona section skipped (not supported by Copilot)' in result.warnings
        assert 'Tools section skipped (not supported by Copilot)' in result.warnings
        assert result.quality_score == 90

    def test_example_labels(self, adapter, sample_package):
        """Test Copilot example headings."""
        content = adapter.from_canonical(sample_package).content
        assert '### ✅ Do: Good test structure' in content
        assert "### ❌ Don't: Missing assertions" in content

    def test_path_specific_from_options(self, adapter, sample_package):
        """Test applyTo from options produces a header."""
        options = ConversionOptions(copilot_config=CopilotConfig(
            apply_to=['src/**/*.ts'], exclude_agent='code-review', instruction_name='TS Rules',
        ))
        content = adapter.from_canonical(sample_package, options).content

        assert header_of(content) == {'applyTo': ['src/**/*.ts'], 'excludeAgent': 'code-review'}
        assert '# TS Rules' in content

    def test_path_specific_from_metadata(self, adapter, minimal_package):
        """Test applyTo stored by the Copilot parser is reused."""
        pkg = dataclasses.replace(minimal_package, metadata={
            'copilotConfig': {'repositoryWide': False, 'applyTo': 'src/api/**/*.ts'},
        })
        assert header_of(adapter.from_canonical(pkg).content) == {'applyTo': ['src/api/**/*.ts']}


class TestToKiro:
    """Tests for KiroAdapter.from_canonical."""

    @pytest.fixture
    def adapter(self):
        """Create KiroAdapter instance."""
        return KiroAdapter()

    def test_inclusion_from_options(self, adapter, sample_package):
        """Test the inclusion mode header and unsupported sections."""
        options = ConversionOptions(kiro_config=KiroConfig(inclusion='manual'))
        result = adapter.from_canonical(sample_package, options)

        assert result.content.startswith('---\ninclusion: manual\n---\n')
        assert '# Test Agent' in result.content
        assert '### ✅ Preferred: Good test structure' in result.content
        assert '### ❌ Avoid: Missing assertions' in result.content
        assert 'TestBot' not in result.content
        assert result.quality_score == 90

    def test_inclusion_required(self, adapter, sample_package):
        """Test rendering without an inclusion mode degrades."""
        result = adapter.from_canonical(sample_package)

        assert result.content == ''
        assert result.quality_score == 0
        assert result.lossy_conversion is True
        assert result.warnings == (
            'Conversion error: Kiro format requires inclusion mode (always|fileMatch|manual)',
        )

    def test_file_match_requires_pattern(self, adapter, sample_package):
        """Test fileMatch without a pattern degrades."""
        options = ConversionOptions(kiro_config=KiroConfig(inclusion='fileMatch'))
        result = adapter.from_canonical(sample_package, options)

        assert result.content == ''
        assert result.warnings == ('Conversion error: fileMatch inclusion mode requires fileMatchPattern',)

    def test_file_match_with_pattern(self, adapter, sample_package):
        """Test fileMatch header fields."""
        options = ConversionOptions(kiro_config=KiroConfig(
            inclusion='fileMatch', file_match_pattern='**/*.test.ts', domain='Custom Domain',
        ))
        content = adapter.from_canonical(sample_package, options).content

        assert header_of(content) == {
            'inclusion': 'fileMatch',
            'fileMatchPattern': '**/*.test.ts',
            'domain': 'Custom Domain',
        }
        assert '# Custom Domain' in content

    def test_inclusion_from_metadata(self, adapter, minimal_package):
        """Test kiroConfig stored by the Kiro parser is reused."""
        pkg = dataclasses.replace(minimal_package, metadata={
            'kiroConfig': {'inclusion': 'always', 'domain': 'Testing'},
        })
        content = adapter.from_canonical(pkg).content

        assert header_of(content) == {'inclusion': 'always', 'domain': 'Testing'}
        assert '# Minimal Package' in content


class TestToContinue:
    """Tests for ContinueAdapter.from_canonical."""

    @pytest.fixture
    def adapter(self):
        """Create ContinueAdapter instance."""
        return ContinueAdapter()

    def test_no_header_by_default(self, adapter, sample_package):
        """Test plain markdown output and skipped sections."""
        result = adapter.from_canonical(sample_package)

        assert result.content.startswith('# 🧪 Test Agent\n')
        assert 'Persona section skipped (not supported in Continue)' in result.warnings
        assert 'Tools section skipped (not supported in Continue)' in result.warnings
        assert result.lossy_conversion is True

    def test_header_with_config(self, adapter, sample_package):
        """Test a ContinueConfig turns on frontmatter."""
        options = ConversionOptions(continue_config=ContinueConfig(globs=['**/*.ts']))
        header = header_of(adapter.from_canonical(sample_package, options).content)
        assert header == {
            'name': 'Test Agent',
            'description': 'A test agent for conversion testing',
            'globs': ['**/*.ts'],
        }

    def test_invokable_prompt(self, adapter, sample_package):
        """Test prompts are marked invokable."""
        options = ConversionOptions(continue_config=ContinueConfig(invokable=True))
        header = header_of(adapter.from_canonical(sample_package, options).content)
        assert header['invokable'] is True
        assert 'globs' not in header


class TestToWindsurf:
    """Tests for WindsurfAdapter.from_canonical."""

    @pytest.fixture
    def adapter(self):
        """Create WindsurfAdapter instance."""
        return WindsurfAdapter()

    def test_plain_markdown(self, adapter, sample_package):
        """Test Windsurf output has no header and keeps the icon."""
        result = adapter.from_canonical(sample_package)

        assert result.content.startswith('# 🧪 Test Agent\n')
        assert '---' not in result.content
        assert result.warnings == ('Tools section skipped (not supported by Windsurf)',)
        assert result.quality_score == 90

    def test_missing_content_deductions(self, adapter, minimal_package):
        """Test missing persona and examples lower the score without being lossy."""
        result = adapter.from_canonical(minimal_package)

        assert result.lossy_conversion is False
        assert result.quality_score == 85

    def test_missing_description_and_instructions(self, adapter):
        """Test the description and instructions warnings."""
        pkg = CanonicalPackage(
            id='bare', name='bare', format='windsurf', subtype='rule',
            content=[MetadataSection(title='Bare')],
        )
        result = adapter.from_canonical(pkg)

        assert 'No description provided' in result.warnings
        assert 'No instructions section found' in result.warnings
        assert result.quality_score == 55

    def test_character_limit_warning(self, adapter, minimal_package):
        """Test long output is flagged."""
        pkg = dataclasses.replace(minimal_package, content=CanonicalContent([
            InstructionsSection(title='Long', content='x' * 13000),
        ]))
        result = adapter.from_canonical(pkg)

        assert any('character limit' in w for w in result.warnings)


class TestRenderPipeline:
    """Behavior shared by every renderer."""

    ALL_ADAPTERS = [CursorAdapter, ClaudeAdapter, ContinueAdapter,
                    CopilotAdapter, KiroAdapter, WindsurfAdapter]

    @pytest.fixture
    def options(self):
        """Options that let every format render."""
        return ConversionOptions(kiro_config=KiroConfig(inclusion='always'))

    @pytest.mark.parametrize('adapter_cls', ALL_ADAPTERS)
    def test_broken_section_degrades(self, adapter_cls, options):
        """Test a section that fails to render yields a degraded result instead of raising."""
        pkg = CanonicalPackage(
            id='broken', name='broken', format='cursor', subtype='rule',
            content=[RulesSection(title='Broken', items=('not a rule',))],
        )
        result = adapter_cls().from_canonical(pkg, options)

        assert result.content == ''
        assert result.quality_score == 0
        assert result.lossy_conversion is True
        assert result.warnings[0].startswith('Conversion error:')

    @pytest.mark.parametrize('adapter_cls', ALL_ADAPTERS)
    @pytest.mark.parametrize('pkg', [None, {}, {'id': 'x'}, SimpleNamespace(content=None)])
    def test_malformed_package_degrades(self, adapter_cls, pkg, options):
        """Test objects that are not packages give a zero-quality result."""
        result = adapter_cls().from_canonical(pkg, options)

        assert result.content == ''
        assert result.quality_score == 0
        assert result.lossy_conversion is True
        assert result.warnings[0].startswith('Conversion error:')

    @pytest.mark.parametrize('adapter_cls', ALL_ADAPTERS)
    def test_unknown_section_warns(self, adapter_cls, options, minimal_package):
        """Test unknown sections are skipped with a warning."""
        pkg = dataclasses.replace(minimal_package, content=CanonicalContent(
            list(minimal_package.sections) + [UnknownSection(kind='hook', payload={'event': 'x'})]
        ))
        result = adapter_cls().from_canonical(pkg, options)

        assert 'Unknown section type: hook' in result.warnings
        assert 'Follow the coding standards.' in result.content

    def test_custom_section_for_other_editor(self, minimal_package):
        """Test custom sections only render in their own editor."""
        pkg = dataclasses.replace(minimal_package, content=CanonicalContent(
            list(minimal_package.sections) + [CustomSection(content='CURSOR ONLY', editor_type='cursor')]
        ))

        assert 'CURSOR ONLY' in CursorAdapter().from_canonical(pkg).content
        result = ClaudeAdapter().from_canonical(pkg)
        assert 'CURSOR ONLY' not in result.content
        assert 'Custom cursor section skipped' in result.warnings
        assert result.lossy_conversion is True

    def test_write_skips_degraded(self, tmp_path, sample_package):
        """Test write() only creates files for successful renders."""
        target = tmp_path / 'steering.md'
        result = KiroAdapter().write(sample_package, target)

        assert result.quality_score == 0
        assert not target.exists()

        result = ClaudeAdapter().write(sample_package, target)
        assert target.read_text(encoding='utf-8') == result.content
