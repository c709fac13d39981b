import pytest

from app.services import order_status
from app.services.order_status import InvalidTransition


def test_forward_path():
    assert order_status.next_status("new") == "preparing"
    assert order_status.next_status("preparing") == "ready"
    assert order_status.next_status("ready") == "delivered"


@pytest.mark.parametrize("status", ["delivered", "cancelled"])
def test_terminal_states_have_no_next(status):
    with pytest.raises(InvalidTransition):
        order_status.next_status(status)


@pytest.mark.parametrize("current,allowed", [
    ("new", True),
    ("preparing", True),
    ("ready", False),
    ("delivered", False),
    ("cancelled", False),
])
def test_cancel_only_before_ready(current, allowed):
    assert order_status.can_transition(current, "cancelled") is allowed


def test_no_skipping_or_going_back():
    assert not order_status.can_transition("new", "ready")
    assert not order_status.can_transition("ready", "preparing")
    with pytest.raises(InvalidTransition):
        order_status.ensure_transition("new", "delivered")
    with pytest.raises(InvalidTransition):
        order_status.ensure_transition("new", "bogus")


def test_describe_progress():
    info = order_status.describe("preparing")
    assert info["next"] == "ready"
    assert info["can_cancel"] is True
    assert info["terminal"] is False
    steps = {s["status"]: s for s in info["progress"]}
    assert steps["new"]["completed"] and not steps["new"]["active"]
    assert steps["preparing"]["active"]
    assert not steps["ready"]["completed"]
    assert order_status.describe("cancelled")["progress"] == []
    assert order_status.describe("delivered")["terminal"] is True
