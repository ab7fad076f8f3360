import logging

import pytest

from marker_controls.utils.logging import BROADCASTER_LOGGER, setup_logging


@pytest.fixture(autouse=True)
def restore_levels():
    package = logging.getLogger("marker_controls")
    ticks = logging.getLogger(BROADCASTER_LOGGER)
    saved = (package.level, ticks.level)
    yield
    package.setLevel(saved[0])
    ticks.setLevel(saved[1])


def test_verbose_keeps_tick_lines_out_by_default(tmp_path) -> None:
    logger = setup_logging(verbose=True, log_file=str(tmp_path / "controls.log"))

    assert logger.name == "marker_controls"
    assert logger.level == logging.DEBUG
    assert logging.getLogger(BROADCASTER_LOGGER).level == logging.INFO


def test_log_ticks_enables_broadcaster_debug(tmp_path) -> None:
    setup_logging(verbose=True, log_file=str(tmp_path / "controls.log"), log_ticks=True)

    assert logging.getLogger(BROADCASTER_LOGGER).level == logging.DEBUG


def test_log_ticks_needs_verbose(tmp_path) -> None:
    logger = setup_logging(log_file=str(tmp_path / "controls.log"), log_ticks=True)

    assert logger.level == logging.INFO
    assert logging.getLogger(BROADCASTER_LOGGER).level == logging.INFO
