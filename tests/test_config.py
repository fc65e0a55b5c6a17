"""
Tests for settings and logging setup.
"""

import logging

import pytest
from pydantic import ValidationError
from rich.logging import RichHandler

from campaign_graph.config import CollisionPolicy, Settings, get_settings
from campaign_graph.utils.logger import (
    ROOT_LOGGER_NAME,
    LogContext,
    get_logger,
    log_timing,
    setup_logging,
)


class TestSettings:
    """Environment-driven configuration."""

    def test_defaults(self, settings) -> None:
        assert settings.association_field == "associatedEntities"
        assert settings.name_collision_policy == CollisionPolicy.FIRST_WINS
        assert settings.cluster_radius == 400.0
        assert settings.spiral_ring_size == 6
        assert settings.relaxation_iterations == 3
        assert settings.relaxation_strength == 0.05

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("CAMPAIGN_GRAPH_NAME_COLLISION_POLICY", "reject")
        monkeypatch.setenv("CAMPAIGN_GRAPH_CLUSTER_RADIUS", "250")

        settings = Settings(_env_file=None)

        assert settings.name_collision_policy == CollisionPolicy.REJECT
        assert settings.cluster_radius == 250.0

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, relaxation_strength=1.5)
        with pytest.raises(ValidationError):
            Settings(_env_file=None, spiral_ring_size=0)

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestLogging:
    """Rich logging helpers."""

    @pytest.fixture
    def root_logger(self):
        root = logging.getLogger(ROOT_LOGGER_NAME)
        handlers, level = list(root.handlers), root.level
        yield root
        root.handlers = handlers
        root.setLevel(level)

    def test_setup_logging_installs_one_handler(self, root_logger) -> None:
        setup_logging("DEBUG")
        setup_logging("DEBUG")

        rich_handlers = [h for h in root_logger.handlers if isinstance(h, RichHandler)]
        assert len(rich_handlers) == 1
        assert root_logger.level == logging.DEBUG

    def test_get_logger_is_cached(self) -> None:
        assert get_logger("campaign_graph.graph") is get_logger("campaign_graph.graph")

    def test_log_timing(self, caplog) -> None:
        logger = get_logger("campaign_graph.tests")

        with caplog.at_level(logging.DEBUG, logger="campaign_graph.tests"):
            with log_timing(logger, "Layout"):
                pass

        assert any(r.getMessage().startswith("Layout took ") for r in caplog.records)

    def test_log_context_stamps_records(self, caplog) -> None:
        logger = get_logger("campaign_graph.tests")

        with caplog.at_level(logging.INFO, logger="campaign_graph.tests"):
            with LogContext(logger, entity_count=6):
                logger.info("inside")
            logger.info("outside")

        inside, outside = caplog.records[-2:]
        assert inside.entity_count == 6
        assert not hasattr(outside, "entity_count")
