"""Unit tests for logging setup."""

import json
import logging
import sys

import pytest

from core.log_config import JSONFormatter, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    """setup_logging reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_text_format(self):
        """Test level and a single plain handler."""
        setup_logging('debug', 'text')
        root = logging.getLogger()

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_json_format(self):
        """Test json output selects the JSON formatter."""
        setup_logging('INFO', 'json')
        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_unknown_level(self):
        """Test unknown level names fall back to WARNING."""
        setup_logging('chatty')
        assert logging.getLogger().level == logging.WARNING


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_record_fields(self):
        """Test message, level and extra fields are emitted."""
        record = logging.LogRecord(
            name='core.conversion', level=logging.INFO, pathname=__file__, lineno=1,
            msg='Detected %s', args=('kiro',), exc_info=None,
        )
        record.package_id = 'notes'

        data = json.loads(JSONFormatter().format(record))
        assert data['message'] == 'Detected kiro'
        assert data['level'] == 'INFO'
        assert data['logger'] == 'core.conversion'
        assert data['package_id'] == 'notes'

    def test_exception_field(self):
        """Test exception text is included."""
        try:
            raise ValueError('bad header')
        except ValueError:
            record = logging.getLogger('core.frontmatter').makeRecord(
                'core.frontmatter', logging.ERROR, __file__, 1, 'failed', (), sys.exc_info(),
            )

        data = json.loads(JSONFormatter().format(record))
        assert 'ValueError: bad header' in data['exception']
        assert 'exc_info' not in data
