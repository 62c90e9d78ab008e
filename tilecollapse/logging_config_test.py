import io
import logging

import pytest

from tilecollapse.logging_config import LOGGER_NAME, level_for, setup_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.mark.parametrize(
    "verbosity,level",
    [
        (-1, logging.WARNING),
        (0, logging.WARNING),
        (1, logging.INFO),
        (2, logging.DEBUG),
        (7, logging.DEBUG),
    ],
)
def test_level_for(verbosity, level):
    assert level_for(verbosity) == level


def test_module_loggers_write_to_stream():
    stream = io.StringIO()
    setup_logging(0, stream=stream)
    child = logging.getLogger(f"{LOGGER_NAME}.solver")
    child.info("hidden")
    child.warning("Contradiction at (1, 2)")
    text = stream.getvalue()
    assert "hidden" not in text
    assert "| WARNING  | tilecollapse.solver | Contradiction at (1, 2)" in text


def test_reinitialize_replaces_handler():
    setup_logging(0, stream=io.StringIO())
    logger = setup_logging(2, stream=io.StringIO())
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert not logger.propagate
