"""
Ambient plumbing: the notification bus, its message-box binding, the
structured event log and the small helpers every controller leans on.
"""

from __future__ import annotations

import json
import logging
import math

import pytest
from PySide6.QtWidgets import QMessageBox

from erp_client.errors import ApiError
from erp_client.utils import ui_helpers
from erp_client.utils.helpers import error_message, floor_money, fmt_money, temp_key
from erp_client.utils.loggers import _JsonLineFormatter, get_event_logger, log_event
from erp_client.utils.notifications import Notifier
from erp_client.utils.validators import is_missing_id, is_non_negative_number, non_negative, to_number


# ---------------------------------------------------------------------------
# Suite A – Notifier
# ---------------------------------------------------------------------------

def test_a1_notify_emits_and_records(qtbot) -> None:
    """A1: every notification is emitted and kept in history."""
    n = Notifier()
    with qtbot.waitSignal(n.notified, timeout=1000) as blocker:
        n.success("Sale Created", "Sale INV-0001 saved")
    assert blocker.args == ["Sale Created", "Sale INV-0001 saved", "green"]
    n.error("Oops", "bad")
    assert [(x.title, x.color) for x in n.history] == [("Sale Created", "green"), ("Oops", "red")]
    assert n.last.message == "bad"
    n.clear()
    assert n.history == [] and n.last is None


def test_a2_history_is_bounded(qapp) -> None:
    """A2: history keeps only the most recent entries."""
    n = Notifier(history_limit=3)
    for i in range(5):
        n.info(f"t{i}", "m")
    assert [x.title for x in n.history] == ["t2", "t3", "t4"]


def test_a3_error_notifications_are_logged_as_errors(qapp, caplog) -> None:
    """A3: red notifications go to the log at ERROR, others at INFO."""
    n = Notifier()
    with caplog.at_level(logging.INFO, logger="erp_client.utils.notifications"):
        n.warning("Low stock", "Gadget")
        n.error("Delete Failed", "nope")
    levels = [(r.levelno, r.getMessage()) for r in caplog.records if r.name == "erp_client.utils.notifications"]
    assert levels == [(logging.INFO, "Low stock: Gadget"), (logging.ERROR, "Delete Failed: nope")]


# ---------------------------------------------------------------------------
# Suite B – message boxes
# ---------------------------------------------------------------------------

def test_b1_bind_message_boxes_routes_by_color(qapp, monkeypatch) -> None:
    """B1: error -> critical, warning -> warning, everything else -> information."""
    shown = []
    monkeypatch.setattr(QMessageBox, "critical", lambda p, t, m: shown.append(("critical", t)))
    monkeypatch.setattr(QMessageBox, "warning", lambda p, t, m: shown.append(("warning", t)))
    monkeypatch.setattr(QMessageBox, "information", lambda p, t, m: shown.append(("information", t)))

    n = Notifier()
    slot = ui_helpers.bind_message_boxes(n)
    n.error("E", "x")
    n.warning("W", "x")
    n.success("S", "x")
    n.info("I", "x")
    n.notified.disconnect(slot)
    n.error("after", "x")

    assert shown == [("critical", "E"), ("warning", "W"), ("information", "S"), ("information", "I")]


# ---------------------------------------------------------------------------
# Suite C – event log
# ---------------------------------------------------------------------------

def test_c1_log_event_attaches_payload(caplog) -> None:
    """C1: op/phase always win over keys passed in extra."""
    logger = get_event_logger()
    with caplog.at_level(logging.INFO, logger="erp_client.events"):
        log_event(logger, "sales.create", "success", "saved", {"number": "INV-0001", "op": "ignored"})
    rec = [r for r in caplog.records if r.name == "erp_client.events"][-1]
    assert rec.extra_payload == {"op": "sales.create", "phase": "success", "number": "INV-0001"}

    line = json.loads(_JsonLineFormatter().format(rec))
    assert line["msg"] == "saved"
    assert line["level"] == "INFO"
    assert line["extra"]["number"] == "INV-0001"
    assert line["ts"].endswith("Z")


def test_c2_event_logger_is_configured_once() -> None:
    """C2: repeated calls do not stack handlers."""
    a = get_event_logger()
    b = get_event_logger()
    assert a is b
    assert len(a.handlers) == 1


# ---------------------------------------------------------------------------
# Suite D – helpers
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("value, expected", [
    (10.99, 10), ("7.5", 7), (-1.5, -2), (None, 0), ("abc", 0), (math.inf, 0), (True, 0),
])
def test_d1_floor_money(value, expected) -> None:
    """D1: money is floored to an int; junk becomes 0."""
    assert floor_money(value) == expected


def test_d2_numbers_and_ids() -> None:
    """D2: lenient numeric coercion and missing-id detection."""
    assert to_number("3.5") == 3.5
    assert to_number(float("nan"), default=1.0) == 1.0
    assert non_negative(-4) == 0.0
    assert is_non_negative_number("0")
    assert not is_non_negative_number("-1")
    for bad in (None, "", "  ", "undefined", "NULL", "None"):
        assert is_missing_id(bad)
    assert not is_missing_id("0")
    assert not is_missing_id(0)


def test_d3_error_messages() -> None:
    """D3: messages come from the error itself, then the fallback."""
    assert error_message(ApiError("Not allowed", status=403)) == "Not allowed"
    assert error_message({"error": "bad input"}) == "bad input"
    assert error_message(RuntimeError(""), "Save failed") == "Save failed"
    assert error_message(None, "fallback") == "fallback"
    assert ApiError("gone", status=404).not_found
    assert not ApiError("boom", status=500).not_found


def test_d4_formatting_and_temp_keys() -> None:
    """D4: display formatting and temporary keys."""
    assert fmt_money(1234.5) == "1,234.50"
    assert fmt_money("x", sentinel="N/A") == "N/A"
    with pytest.raises(ValueError):
        fmt_money("x", strict=True)
    key = temp_key("exp")
    assert key.startswith("exp-") and key[4:].isdigit()
