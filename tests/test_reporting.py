# tests/test_reporting.py

import logging

import pytest

from pointregrid.records import Coordinate, ObservationPoint
from pointregrid.reporting import (
    LOGGER_NAME,
    CollectingReporter,
    LoggingReporter,
    NullReporter,
    ensure_reporter,
    setup_logging,
)


@pytest.fixture
def clean_logger():
    logger = logging.getLogger(LOGGER_NAME)
    before = list(logger.handlers)
    level = logger.level
    yield logger
    for h in list(logger.handlers):
        if h not in before:
            logger.removeHandler(h)
            h.close()
    logger.setLevel(level)


def test_observation_point_normalizes_fields():
    p = ObservationPoint(Coordinate(1.0, 2.0), 2020.0, [1, 2, 3])
    assert p.time_step == 2020
    assert isinstance(p.time_step, int)
    assert p.values == (1.0, 2.0, 3.0)
    assert (p.longitude, p.latitude) == (1.0, 2.0)
    assert tuple(p.coordinate) == (1.0, 2.0)

    q = p.with_values([9.0])
    assert q.values == (9.0,)
    assert q.coordinate == p.coordinate
    assert p.values == (1.0, 2.0, 3.0)


def test_null_and_default_reporter():
    r = ensure_reporter(None)
    assert isinstance(r, NullReporter)
    r.warn("ignored")
    r.error("ignored")

    c = CollectingReporter()
    assert ensure_reporter(c) is c


def test_collecting_reporter_replays_in_order():
    c = CollectingReporter()
    c.warn("w1")
    c.error("e1")
    c.warn("w2")
    assert c.warnings == ["w1", "w2"]
    assert c.errors == ["e1"]

    sink = CollectingReporter()
    c.replay(sink)
    assert sink.messages == [("warning", "w1"), ("error", "e1"), ("warning", "w2")]


def test_logging_reporter_uses_package_logger(caplog):
    reporter = LoggingReporter()
    with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
        reporter.warn("too far")
        reporter.error("broken")

    levels = [(r.levelname, r.getMessage()) for r in caplog.records if r.name == LOGGER_NAME]
    assert ("WARNING", "too far") in levels
    assert ("ERROR", "broken") in levels


def test_setup_logging_creates_log_file(tmp_path, clean_logger):
    path = setup_logging(tmp_path)
    assert path.parent == tmp_path / "logs"
    assert path.name.startswith("pointregrid_")
    assert path.suffix == ".log"

    LoggingReporter().warn("something to log")
    for h in clean_logger.handlers:
        h.flush()

    text = path.read_text(encoding="utf-8")
    assert "[WARNING] something to log" in text


def test_setup_logging_replaces_previous_handler(tmp_path, clean_logger):
    setup_logging(tmp_path / "a")
    setup_logging(tmp_path / "b")
    run_handlers = [h for h in clean_logger.handlers if getattr(h, "_pointregrid_run_log", False)]
    assert len(run_handlers) == 1
