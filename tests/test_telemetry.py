import logging

import pytest

from app.core import telemetry
from app.core.config import get_settings


@pytest.fixture(autouse=True)
def _reset_telemetry():
    telemetry.shutdown_telemetry()
    yield
    telemetry.shutdown_telemetry()


def test_emit_before_init_is_noop(caplog):
    with caplog.at_level(logging.INFO, logger="telemetry"):
        telemetry.emit("task.created", task_id="t1")
    assert not caplog.records


def test_init_is_idempotent_and_emit_logs_event(caplog):
    first = telemetry.init_telemetry(get_settings())
    assert telemetry.init_telemetry(get_settings()) is first

    with caplog.at_level(logging.INFO, logger="telemetry"):
        telemetry.emit("task.created", task_id="t1")

    record = caplog.records[-1]
    assert record.event == "task.created"
    assert record.task_id == "t1"
    assert first.events_emitted == 1


def test_shutdown_stops_emitting(caplog):
    telemetry.init_telemetry(get_settings())
    telemetry.shutdown_telemetry()
    with caplog.at_level(logging.INFO, logger="telemetry"):
        telemetry.emit("task.created")
    assert not caplog.records
