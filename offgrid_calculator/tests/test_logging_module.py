import io
import json
import logging

from offgrid_calculator.logging import CalculationLogEntry, ConsoleLog, StructuredLog
from offgrid_calculator.models.sizing import BatteryParams


def test_structured_log_writes_json(tmp_path):
    log_path = tmp_path / "logs" / "calc.jsonl"
    entry = CalculationLogEntry(
        timestamp="2024-01-01T00:00:00Z",
        command="panels",
        inputs={"daily_usage_wh": 1000, "panel_wattage": 300},
        result={"panels": 1, "battery": BatteryParams()},
    )
    structured = StructuredLog(str(log_path), enabled=True)
    structured.write(entry)
    structured.write(entry)

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    payload = json.loads(lines[0])
    assert payload["command"] == "panels"
    assert payload["result"]["panels"] == 1
    assert payload["result"]["battery"]["depth_of_discharge"] == 0.8
    assert payload["error"] is None


def test_structured_log_disabled_without_path(tmp_path):
    structured = StructuredLog(None, enabled=True)
    assert structured.enabled is False
    structured.write(CalculationLogEntry("t", "load", None, None))


def test_console_log_quiet_skips_handlers():
    root = logging.getLogger()
    orig_handlers = list(root.handlers)
    orig_level = root.level
    try:
        log = ConsoleLog(level="INFO", quiet=True).setup()
        assert log.name == "offgrid"
        assert root.handlers == []
    finally:
        root.handlers.clear()
        root.handlers.extend(orig_handlers)
        root.setLevel(orig_level)


def test_console_log_debug_modules():
    root = logging.getLogger()
    orig_handlers = list(root.handlers)
    orig_level = root.level
    try:
        ConsoleLog(level="warning", debug_modules=["offgrid_calculator.services"]).setup()
        assert len(root.handlers) == 1
        assert root.handlers[0].level == logging.WARNING
        assert logging.getLogger("offgrid_calculator.services").level == logging.DEBUG
    finally:
        logging.getLogger("offgrid_calculator.services").setLevel(logging.NOTSET)
        root.handlers.clear()
        root.handlers.extend(orig_handlers)
        root.setLevel(orig_level)


def test_console_log_writes_to_given_stream():
    root = logging.getLogger()
    orig_handlers = list(root.handlers)
    orig_level = root.level
    stream = io.StringIO()
    try:
        log = ConsoleLog(level="info", stream=stream).setup()
        log.info("sized %d panels", 3)
        log.debug("hidden")
        text = stream.getvalue()
        assert "INFO [offgrid] sized 3 panels" in text
        assert "hidden" not in text
    finally:
        root.handlers.clear()
        root.handlers.extend(orig_handlers)
        root.setLevel(orig_level)
