"""
Vendor account ledger types (``procure_kernel.domain.ledger``).

A vendor's account is a dated list of debits (what the company owes the
vendor) and credits (what has been settled or written back).  Pure value
objects, ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from procure_kernel.domain.values import ZERO, to_decimal
from procure_kernel.exceptions import InvalidLedgerEntryError


class LedgerEntryKind(str, Enum):
    """Kinds of ledger entry, valued as they are shown to users."""

    PO_ADD = "PO Add"
    PAYMENT = "Payment"
    CREDIT_NOTE = "Credit Note"
    OVERBILL_APPROVED = "Overbill Approved"
    ADJUSTMENT = "Adjustment"

    @property
    def side(self) -> str | None:
        """``"debit"``, ``"credit"``, or None when either side is allowed."""
        return _SIDES.get(self)


_SIDES = {
    LedgerEntryKind.PO_ADD: "debit",
    LedgerEntryKind.OVERBILL_APPROVED: "debit",
    LedgerEntryKind.PAYMENT: "credit",
    LedgerEntryKind.CREDIT_NOTE: "credit",
}


@dataclass(frozen=True)
class LedgerEntry:
    """
    One movement on a vendor's account.

    Exactly one of ``debit`` / ``credit`` is positive.  Purchase orders
    and approved overbills are debits, payments and credit notes are
    credits, adjustments may go either way.
    """

    vendor_name: str
    kind: LedgerEntryKind
    entry_date: date
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    ref_no: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        if not self.vendor_name or not self.vendor_name.strip():
            raise InvalidLedgerEntryError("vendor name is required", ref_no=self.ref_no)
        try:
            object.__setattr__(self, "kind", LedgerEntryKind(self.kind))
        except ValueError:
            raise InvalidLedgerEntryError(
                f"unknown entry kind {self.kind!r}", self.vendor_name, self.ref_no
            ) from None
        object.__setattr__(self, "debit", to_decimal(self.debit, "debit"))
        object.__setattr__(self, "credit", to_decimal(self.credit, "credit"))

        if self.debit < ZERO or self.credit < ZERO:
            raise InvalidLedgerEntryError(
                "debit and credit cannot be negative", self.vendor_name, self.ref_no
            )
        if (self.debit > ZERO) == (self.credit > ZERO):
            raise InvalidLedgerEntryError(
                "exactly one of debit or credit must be positive", self.vendor_name, self.ref_no
            )
        side = self.kind.side
        if side == "debit" and self.credit > ZERO:
            raise InvalidLedgerEntryError(
                f"{self.kind.value} is a debit entry", self.vendor_name, self.ref_no
            )
        if side == "credit" and self.debit > ZERO:
            raise InvalidLedgerEntryError(
                f"{self.kind.value} is a credit entry", self.vendor_name, self.ref_no
            )

    @property
    def net(self) -> Decimal:
        """Effect on the amount owed: debit minus credit."""
        return self.debit - self.credit


@dataclass(frozen=True)
class PostedLedgerEntry:
    """A ledger entry with the vendor's balance after it was applied."""

    entry: LedgerEntry
    balance_after: Decimal
