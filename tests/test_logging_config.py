"""
tests/test_logging_config.py

Unit tests for component_13_logging_config.
"""

import logging

from component_13_logging_config import (
    PERFORMANCE_LOGGER_NAME,
    PerformanceLogger,
    ShrdliteLogFormatter,
    StructuredLogger,
    get_logger,
)
from component_2_relations import RelationKind
from component_6_goal_compiler import GoalCompiler


def make_record(message: str, **extra_info) -> logging.LogRecord:
    record = logging.LogRecord("shrdlite.test", logging.INFO, __file__, 1, message, None, None)
    if extra_info:
        record.extra_info = extra_info
    return record


class TestFormatter:
    """Tests for ShrdliteLogFormatter."""

    def test_extra_info_appended(self):
        text = ShrdliteLogFormatter().format(make_record("Plan found", length=3))
        assert "[shrdlite.test] Plan found | length=3" in text

    def test_colors(self):
        text = ShrdliteLogFormatter(use_colors=True).format(make_record("hello"))
        assert text.startswith("\033[32m")
        assert text.endswith("\033[0m")


class TestStructuredLogger:
    """Tests for get_logger / StructuredLogger."""

    def test_get_logger(self):
        logger = get_logger("shrdlite.test")
        assert isinstance(logger, StructuredLogger)
        assert logger.logger.name == "shrdlite.test"

    def test_extra_becomes_extra_info(self, caplog):
        logger = get_logger("shrdlite.test")
        with caplog.at_level(logging.INFO, logger="shrdlite.test"):
            logger.info("Interpreted", extra={"formula": "holding(f)"})
        assert caplog.records[-1].extra_info == {"formula": "holding(f)"}


class TestPerformanceLogger:
    """Tests for PerformanceLogger."""

    def test_duration_recorded(self, caplog):
        with caplog.at_level(logging.INFO, logger=PERFORMANCE_LOGGER_NAME):
            with PerformanceLogger(logging.getLogger("shrdlite.test"), "unit of work") as perf:
                sum(range(1000))
        assert perf.duration_ms >= 0.0
        assert any(r.name == PERFORMANCE_LOGGER_NAME and "unit of work" in r.getMessage() for r in caplog.records)

    def test_failure_logged_and_reraised(self, caplog):
        with caplog.at_level(logging.INFO, logger="shrdlite.test"):
            try:
                with PerformanceLogger(logging.getLogger("shrdlite.test"), "doomed"):
                    raise KeyError("x")
            except KeyError:
                pass
        assert any(r.getMessage().startswith("FAILED: doomed") for r in caplog.records)


class TestComponentLogging:
    """Components log through the structured loggers."""

    def test_capped_enumeration_warns(self, caplog, small_world):
        compiler = GoalCompiler(max_combinations=1)
        with caplog.at_level(logging.WARNING):
            compiler.compile_relation(["e", "f"], "all", RelationKind.INSIDE, ["k", "l", "m"], "a", small_world)
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert warnings[0].getMessage() == "Goal enumeration capped"
        assert warnings[0].extra_info == {"objects": 2, "limit": 1}
