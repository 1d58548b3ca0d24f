"""Shared fixtures: canonical packages used across adapter and conversion tests."""

import pytest

from core.canonical_models import (
    CanonicalContent,
    CanonicalPackage,
    ContextSection,
    Example,
    ExamplesSection,
    InstructionsSection,
    MetadataSection,
    PersonaSection,
    Rule,
    RulesSection,
    ToolsSection,
)


@pytest.fixture
def sample_package():
    """Agent package exercising every common section type."""
    return CanonicalPackage(
        id='test-package',
        name='test-package',
        version='1.0.0',
        author='testauthor',
        description='A test package for conversion',
        tags=('test', 'example'),
        format='claude',
        subtype='agent',
        content=CanonicalContent([
            MetadataSection(
                title='Test Agent',
                description='A test agent for conversion testing',
                icon='🧪',
            ),
            PersonaSection(
                name='TestBot',
                role='Testing Assistant',
                icon='🤖',
                style=('analytical', 'thorough'),
                expertise=('unit testing', 'integration testing'),
            ),
            InstructionsSection(
                title='Core Principles',
                content='Always write comprehensive tests. Test edge cases thoroughly.',
                priority='high',
            ),
            RulesSection(
                title='Testing Guidelines',
                ordered=True,
                items=(
                    Rule(
                        content='Write tests before code (TDD)',
                        rationale='Ensures better design and test coverage',
                        examples=('describe("feature", () => { it("works") })',),
                    ),
                    Rule(content='Test edge cases thoroughly'),
                    Rule(content='Maintain 100% code coverage', rationale='Prevents regressions'),
                ),
            ),
            ExamplesSection(
                title='Code Examples',
                examples=(
                    Example(
                        description='Good test structure',
                        code='describe("Calculator", () => {\n'
                             '  it("adds numbers", () => {\n'
                             '    expect(add(1, 2)).toBe(3);\n'
                             '  });\n'
                             '});',
                        language='typescript',
                        good=True,
                    ),
                    Example(
                        description='Missing assertions',
                        code='test("something", () => {\n  doSomething();\n});',
                        language='typescript',
                        good=False,
                    ),
                ),
            ),
            ToolsSection(tools=('Read', 'Write', 'Bash')),
            ContextSection(
                title='Background',
                content='This agent was created to assist with testing tasks.',
            ),
        ]),
    )


@pytest.fixture
def minimal_package():
    """Rule package with only a title block and one instructions section."""
    return CanonicalPackage(
        id='minimal-package',
        name='minimal-package',
        format='cursor',
        subtype='rule',
        content=CanonicalContent([
            MetadataSection(title='Minimal Package', description='A minimal test package'),
            InstructionsSection(title='Instructions', content='Follow the coding standards.'),
        ]),
    )
