"""Tests for the uigraph logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from uigraph.logging import configure_logging, get_logger


@pytest.fixture
def restore_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("uigraph")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


def test_get_logger_nests_under_package() -> None:
    assert get_logger().name == "uigraph"
    assert get_logger("resolvers.module").name == "uigraph.resolvers.module"


def test_reconfiguring_replaces_handlers(
    restore_logger: logging.Logger, capsys: pytest.CaptureFixture[str]
) -> None:
    configure_logging()
    logger = configure_logging(verbose=True)

    assert logger is restore_logger
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert len(logger.handlers) == 1

    get_logger("engine").debug("graph built")

    assert capsys.readouterr().err == "[uigraph] DEBUG graph built\n"


def test_file_sink_receives_records(restore_logger: logging.Logger, tmp_path: Path) -> None:
    log_file = tmp_path / "uigraph.log"
    logger = configure_logging(log_file=log_file)

    get_logger("cache").info("cleared")
    get_logger("cache").debug("hidden")
    for handler in logger.handlers:
        handler.flush()

    contents = log_file.read_text(encoding="utf-8")
    assert "INFO uigraph.cache: cleared" in contents
    assert "hidden" not in contents
    assert len(logger.handlers) == 2
