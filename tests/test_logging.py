"""Tests for log level configuration."""

import logging

import pytest

from splitledger.audit import configure_logging
from splitledger.config import LedgerSettings


@pytest.fixture
def package_logger():
    logger = logging.getLogger("splitledger")
    level = logger.level
    yield logger
    logger.setLevel(level)


class TestConfigureLogging:
    """Tests for wiring debug_mode to the package log level."""

    def test_debug_mode_enables_debug(self, package_logger):
        """Test debug mode lets debug events through."""
        configure_logging(LedgerSettings(debug_mode=True).debug_mode)
        assert package_logger.level == logging.DEBUG
        assert logging.getLogger("splitledger.engine.balances").isEnabledFor(logging.DEBUG)

    def test_default_is_info(self, package_logger):
        """Test debug events are filtered out by default."""
        configure_logging(LedgerSettings(debug_mode=False).debug_mode)
        assert package_logger.level == logging.INFO
        assert not logging.getLogger("splitledger.engine.balances").isEnabledFor(logging.DEBUG)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
