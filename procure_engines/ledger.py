"""
procure_engines.ledger -- Vendor account balances.

Responsibility:
    Post ledger entries in date order with a running balance per vendor,
    summarise each vendor's account (PO amounts, payments, credit notes,
    approved overbills, outstanding), total the outstanding amount across
    vendors, and turn approved purchase orders into "PO Add" entries.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Purchase orders are read through ``LedgerSource`` so this module does
    not depend on procure_modules.

Invariants enforced:
    - balance_after of an entry = balance_after of the vendor's previous
      entry + debit - credit; the first entry starts from zero.
    - Entries on the same date keep their input order.
    - outstanding = sum of (debit - credit) over the vendor's entries, which
      equals PO amounts + approved overbills - payments - credit notes
      + net adjustments.

Failure modes:
    - InvalidLedgerEntryError from ``LedgerEntry`` construction only; the
      functions here accept any sequence of valid entries.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Protocol

from procure_kernel.domain.ledger import LedgerEntry, LedgerEntryKind, PostedLedgerEntry
from procure_kernel.domain.values import ZERO
from procure_kernel.logging_config import get_logger
from procure_engines.tracer import traced_engine

logger = get_logger("engines.ledger")


class LedgerSource(Protocol):
    """An approved purchase order as the ledger sees it."""

    indent_id: str
    vendor_name: str

    @property
    def final_total(self) -> Decimal: ...


@dataclass(frozen=True)
class VendorLedgerSummary:
    """Totals for one vendor's account."""

    vendor_name: str
    total_po_amounts: Decimal = ZERO
    total_payments: Decimal = ZERO
    total_credit_notes: Decimal = ZERO
    approved_overbills: Decimal = ZERO
    adjustments: Decimal = ZERO
    po_count: int = 0
    last_activity: date | None = None

    @property
    def outstanding(self) -> Decimal:
        return (
            self.total_po_amounts
            + self.approved_overbills
            - self.total_payments
            - self.total_credit_notes
            + self.adjustments
        )

    @property
    def is_settled(self) -> bool:
        return self.outstanding == ZERO

    def to_dict(self) -> dict:
        return {
            "vendor_name": self.vendor_name,
            "total_po_amounts": str(self.total_po_amounts),
            "total_payments": str(self.total_payments),
            "total_credit_notes": str(self.total_credit_notes),
            "approved_overbills": str(self.approved_overbills),
            "adjustments": str(self.adjustments),
            "outstanding": str(self.outstanding),
            "po_count": self.po_count,
            "last_activity": self.last_activity.isoformat() if self.last_activity else None,
        }


def _in_date_order(entries: Iterable[LedgerEntry]) -> list[LedgerEntry]:
    # sorted() is stable, so same-day entries keep input order
    return sorted(entries, key=lambda e: e.entry_date)


@traced_engine("ledger", "1.0", fingerprint_fields=("entries",))
def post_ledger(entries: Sequence[LedgerEntry]) -> tuple[PostedLedgerEntry, ...]:
    """
    Apply ``entries`` oldest first and record each vendor's running balance.

    Postconditions:
        One PostedLedgerEntry per input entry, in date order.  Balances are
        kept per vendor, so entries for several vendors can be posted at once.
    """
    balances: dict[str, Decimal] = {}
    posted = []
    for entry in _in_date_order(entries):
        balance = balances.get(entry.vendor_name, ZERO) + entry.net
        balances[entry.vendor_name] = balance
        posted.append(PostedLedgerEntry(entry=entry, balance_after=balance))
    return tuple(posted)


def summarize_vendor(
    vendor_name: str,
    entries: Iterable[LedgerEntry],
    since: date | None = None,
) -> VendorLedgerSummary:
    """
    Totals for ``vendor_name``; entries for other vendors are ignored.

    With ``since``, only entries dated on or after it are counted.
    """
    totals = {kind: ZERO for kind in LedgerEntryKind}
    po_count = 0
    last: date | None = None

    for entry in entries:
        if entry.vendor_name != vendor_name:
            continue
        if since is not None and entry.entry_date < since:
            continue
        totals[entry.kind] += entry.net
        if entry.kind is LedgerEntryKind.PO_ADD:
            po_count += 1
        if last is None or entry.entry_date > last:
            last = entry.entry_date

    return VendorLedgerSummary(
        vendor_name=vendor_name,
        total_po_amounts=totals[LedgerEntryKind.PO_ADD],
        total_payments=-totals[LedgerEntryKind.PAYMENT],
        total_credit_notes=-totals[LedgerEntryKind.CREDIT_NOTE],
        approved_overbills=totals[LedgerEntryKind.OVERBILL_APPROVED],
        adjustments=totals[LedgerEntryKind.ADJUSTMENT],
        po_count=po_count,
        last_activity=last,
    )


@traced_engine("ledger_summary", "1.0", fingerprint_fields=("entries", "since"))
def summarize_vendors(
    entries: Sequence[LedgerEntry],
    since: date | None = None,
) -> tuple[VendorLedgerSummary, ...]:
    """One summary per vendor, in the order vendors first appear in ``entries``."""
    vendors = list(dict.fromkeys(e.vendor_name for e in entries))
    summaries = tuple(summarize_vendor(name, entries, since) for name in vendors)
    logger.info("vendor_ledgers_summarized", extra={
        "vendor_count": len(summaries),
        "entry_count": len(entries),
        "outstanding_total": str(portfolio_outstanding(summaries)),
    })
    return summaries


def portfolio_outstanding(summaries: Iterable[VendorLedgerSummary]) -> Decimal:
    """Outstanding amount across all ``summaries``."""
    return sum((s.outstanding for s in summaries), ZERO)


def po_ledger_entries(
    orders: Iterable[LedgerSource],
    entry_date: date,
) -> tuple[LedgerEntry, ...]:
    """
    A "PO Add" debit for each approved purchase order.

    Orders whose final total is zero add nothing to the account and are
    skipped.
    """
    entries = []
    for order in orders:
        amount = order.final_total
        if amount == ZERO:
            logger.warning("ledger_zero_po_skipped", extra={
                "indent_id": order.indent_id,
                "vendor_name": order.vendor_name,
            })
            continue
        entries.append(LedgerEntry(
            vendor_name=order.vendor_name,
            kind=LedgerEntryKind.PO_ADD,
            entry_date=entry_date,
            debit=amount,
            ref_no=order.indent_id,
            description=f"Purchase order for indent {order.indent_id}",
        ))
    return tuple(entries)
