# agencyhub/billing/lifecycle.py
"""
Status state machines for quotes and invoices.

Status changes historically were plain field writes with no guard. The
transition tables below make the intended flow explicit; ``validate`` keeps
the old permissive behavior by default (illegal jumps are logged and let
through) and rejects them only when strict mode is switched on.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Mapping

logger = logging.getLogger(__name__)


class LifecycleError(ValueError):
    """Base class for status problems on a billing document."""


class UnknownStatus(LifecycleError):
    def __init__(self, document: str, status: str):
        super().__init__(f"Unknown {document} status: {status!r}")
        self.document = document
        self.status = status


class InvalidTransition(LifecycleError):
    def __init__(self, document: str, current: str, target: str):
        super().__init__(f"Cannot move {document} from {current} to {target}")
        self.document = document
        self.current = current
        self.target = target


@dataclass(frozen=True)
class DocumentLifecycle:
    name: str
    initial: str
    transitions: Mapping[str, frozenset[str]]
    strict: bool = False
    # Statuses a quote may be converted to an invoice from.
    convertible: frozenset[str] = field(default_factory=frozenset)

    @property
    def statuses(self) -> frozenset[str]:
        return frozenset(self.transitions)

    @property
    def terminal(self) -> frozenset[str]:
        return frozenset(s for s, nxt in self.transitions.items() if not nxt)

    def is_known(self, status: str | None) -> bool:
        return status in self.transitions

    def can_transition(self, current: str, target: str) -> bool:
        if current == target:
            return True
        return target in self.transitions.get(current, frozenset())

    def with_strict(self, strict: bool) -> "DocumentLifecycle":
        return replace(self, strict=bool(strict))

    def validate(self, current: str | None, target: str) -> str:
        """Return ``target`` if the move is acceptable under the current policy."""
        if not self.is_known(target):
            raise UnknownStatus(self.name, target)

        current = current or self.initial
        if self.can_transition(current, target):
            return target

        if self.strict:
            raise InvalidTransition(self.name, current, target)

        logger.warning(
            "Permissive %s status change %s -> %s (not in transition table)",
            self.name, current, target,
        )
        return target

    def check_conversion(self, current: str) -> None:
        if current in self.convertible:
            return
        if self.strict:
            raise InvalidTransition(self.name, current, "converted")
        logger.warning("Converting %s in status %s (expected one of %s)",
                       self.name, current, sorted(self.convertible))


# =========================================================
# Quote
# =========================================================
QUOTE_DRAFT = "draft"
QUOTE_SENT = "sent"
QUOTE_ACCEPTED = "accepted"
QUOTE_REJECTED = "rejected"
QUOTE_EXPIRED = "expired"

QUOTE_LIFECYCLE = DocumentLifecycle(
    name="quote",
    initial=QUOTE_DRAFT,
    transitions={
        QUOTE_DRAFT: frozenset({QUOTE_SENT}),
        QUOTE_SENT: frozenset({QUOTE_ACCEPTED, QUOTE_REJECTED, QUOTE_EXPIRED}),
        QUOTE_ACCEPTED: frozenset(),
        QUOTE_REJECTED: frozenset(),
        QUOTE_EXPIRED: frozenset(),
    },
    convertible=frozenset({QUOTE_ACCEPTED}),
)


# =========================================================
# Invoice
# =========================================================
INVOICE_DRAFT = "draft"
INVOICE_SENT = "sent"
INVOICE_PAID = "paid"
INVOICE_OVERDUE = "overdue"
INVOICE_CANCELLED = "cancelled"

INVOICE_LIFECYCLE = DocumentLifecycle(
    name="invoice",
    initial=INVOICE_DRAFT,
    transitions={
        INVOICE_DRAFT: frozenset({INVOICE_SENT}),
        INVOICE_SENT: frozenset({INVOICE_PAID, INVOICE_OVERDUE, INVOICE_CANCELLED}),
        INVOICE_PAID: frozenset(),
        INVOICE_OVERDUE: frozenset(),
        INVOICE_CANCELLED: frozenset(),
    },
)
