"""
Tests for application settings and logging setup.
"""

import logging

import structlog

from py_worldgen.config.config import Settings
from py_worldgen.utils.logging import configure_logging


class TestSettings:
    """Test settings defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("WORLDGEN_OUTPUT_DIR", raising=False)
        settings = Settings(_env_file=None)
        assert settings.output_dir == "assets/maps"
        assert settings.index_filename == "index.json"
        assert settings.default_map_size == 1000
        assert settings.compaction_cell_size == 20

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("WORLDGEN_OUTPUT_DIR", "/tmp/worlds")
        monkeypatch.setenv("WORLDGEN_MAX_MAP_SIZE", "2500")
        settings = Settings(_env_file=None)
        assert settings.output_dir == "/tmp/worlds"
        assert settings.max_map_size == 2500


class TestLogging:
    """Test structlog configuration."""

    def test_configure_plain(self):
        configure_logging("debug", "plain")
        assert logging.getLogger().level == logging.DEBUG
        structlog.get_logger().debug("Logging configured", test=True)

    def test_configure_json(self):
        configure_logging("warning", "json")
        assert logging.getLogger().level == logging.WARNING
