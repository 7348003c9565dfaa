import logging

import pytest

from agencyhub.billing.lifecycle import (
    INVOICE_LIFECYCLE,
    QUOTE_LIFECYCLE,
    InvalidTransition,
    UnknownStatus,
)


# --- Transition tables ---

def test_quote_happy_path():
    assert QUOTE_LIFECYCLE.initial == "draft"
    assert QUOTE_LIFECYCLE.can_transition("draft", "sent")
    for target in ("accepted", "rejected", "expired"):
        assert QUOTE_LIFECYCLE.can_transition("sent", target)


def test_invoice_happy_path():
    assert INVOICE_LIFECYCLE.initial == "draft"
    assert INVOICE_LIFECYCLE.can_transition("draft", "sent")
    for target in ("paid", "overdue", "cancelled"):
        assert INVOICE_LIFECYCLE.can_transition("sent", target)


def test_skipping_sent_is_not_in_the_table():
    assert not INVOICE_LIFECYCLE.can_transition("draft", "paid")
    assert not QUOTE_LIFECYCLE.can_transition("draft", "accepted")


def test_terminal_states():
    assert QUOTE_LIFECYCLE.terminal == {"accepted", "rejected", "expired"}
    assert INVOICE_LIFECYCLE.terminal == {"paid", "overdue", "cancelled"}


def test_same_status_is_always_allowed():
    assert INVOICE_LIFECYCLE.can_transition("paid", "paid")
    assert INVOICE_LIFECYCLE.with_strict(True).validate("paid", "paid") == "paid"


# --- Policy ---

def test_permissive_mode_logs_and_allows(caplog):
    with caplog.at_level(logging.WARNING, logger="agencyhub.billing.lifecycle"):
        assert INVOICE_LIFECYCLE.validate("draft", "paid") == "paid"
    assert "draft -> paid" in caplog.text


def test_strict_mode_rejects():
    strict = INVOICE_LIFECYCLE.with_strict(True)
    with pytest.raises(InvalidTransition) as exc:
        strict.validate("draft", "paid")
    assert exc.value.current == "draft"
    assert exc.value.target == "paid"


def test_unknown_status_rejected_in_both_modes():
    with pytest.raises(UnknownStatus):
        QUOTE_LIFECYCLE.validate("draft", "approved")
    with pytest.raises(UnknownStatus):
        QUOTE_LIFECYCLE.with_strict(True).validate("draft", "approved")


def test_missing_current_status_means_initial():
    assert QUOTE_LIFECYCLE.with_strict(True).validate(None, "sent") == "sent"


def test_with_strict_returns_a_copy():
    strict = QUOTE_LIFECYCLE.with_strict(True)
    assert strict.strict
    assert not QUOTE_LIFECYCLE.strict


# --- Conversion ---

def test_accepted_quote_converts_silently(caplog):
    with caplog.at_level(logging.WARNING, logger="agencyhub.billing.lifecycle"):
        QUOTE_LIFECYCLE.with_strict(True).check_conversion("accepted")
    assert caplog.text == ""


def test_converting_a_draft_quote():
    QUOTE_LIFECYCLE.check_conversion("draft")
    with pytest.raises(InvalidTransition):
        QUOTE_LIFECYCLE.with_strict(True).check_conversion("draft")
