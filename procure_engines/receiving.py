"""
procure_engines.receiving -- Goods receipt validation and PO status.

Responsibility:
    Validate a delivery against an open purchase order (quantities within
    what is still pending, invoice references present), compute the new
    received quantities, and derive the order's receiving status.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Works on any line satisfying ``ReceivableLine``.

Invariants enforced:
    - Received quantity never exceeds ordered quantity.
    - A receipt records at least one positive quantity.
    - Status is derived, never stored independently: OPEN when nothing is
      received, CLOSED when every line is fully received, PARTIAL otherwise.

Failure modes:
    - UnknownLineItemError for receipt lines not on the order.
    - InvalidReceiptError for negative, excessive or empty receipts,
      duplicate lines, and missing invoice numbers.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from procure_kernel.domain.receipt import InvoiceRef, POStatus, ReceiptLine, ReceivableLine
from procure_kernel.domain.values import ZERO
from procure_kernel.exceptions import InvalidReceiptError, UnknownLineItemError
from procure_kernel.logging_config import get_logger
from procure_engines.tracer import traced_engine

logger = get_logger("engines.receiving")


def pending_quantity(line: ReceivableLine) -> Decimal:
    """Quantity still to be delivered on ``line``."""
    return max(line.quantity - line.received_quantity, ZERO)


def derive_po_status(lines: Sequence[ReceivableLine]) -> POStatus:
    """Receiving status for an order made of ``lines``."""
    if all(ln.received_quantity <= ZERO for ln in lines):
        return POStatus.OPEN
    if all(pending_quantity(ln) == ZERO for ln in lines):
        return POStatus.CLOSED
    return POStatus.PARTIAL


def _validate_invoices(invoices: Sequence[InvoiceRef]) -> None:
    if not invoices:
        raise InvalidReceiptError("at least one invoice is required")
    for index, invoice in enumerate(invoices, start=1):
        if not invoice.number or not invoice.number.strip():
            raise InvalidReceiptError(f"invoice #{index} has no number")


@traced_engine("receiving", "1.0", fingerprint_fields=("lines", "receipt_lines"))
def validate_receipt(
    lines: Sequence[ReceivableLine],
    receipt_lines: Sequence[ReceiptLine],
    invoices: Sequence[InvoiceRef] = (),
    require_invoice_number: bool = True,
) -> tuple[ReceiptLine, ...]:
    """
    Check a receipt against the order's pending quantities.

    Preconditions:
        ``lines`` are the order's current lines (with received-to-date).

    Postconditions:
        Returns the receipt lines carrying a positive quantity, in input
        order.  Zero-quantity lines (items ticked but not delivered) are
        dropped.

    Raises:
        UnknownLineItemError, InvalidReceiptError.
    """
    by_id = {ln.line_item_id: ln for ln in lines}
    seen: set[str] = set()
    accepted: list[ReceiptLine] = []

    for rl in receipt_lines:
        line = by_id.get(rl.line_item_id)
        if line is None:
            logger.error("receipt_unknown_line", extra={"line_item_id": rl.line_item_id})
            raise UnknownLineItemError(rl.line_item_id)
        if rl.line_item_id in seen:
            raise InvalidReceiptError("line received twice in one receipt", rl.line_item_id)
        seen.add(rl.line_item_id)

        if rl.quantity < ZERO:
            raise InvalidReceiptError(
                f"received quantity cannot be negative, got {rl.quantity}", rl.line_item_id
            )
        pending = pending_quantity(line)
        if rl.quantity > pending:
            logger.warning("receipt_over_pending", extra={
                "line_item_id": rl.line_item_id,
                "received": str(rl.quantity),
                "pending": str(pending),
            })
            raise InvalidReceiptError(
                f"received quantity {rl.quantity} exceeds pending {pending}", rl.line_item_id
            )
        if rl.quantity > ZERO:
            accepted.append(rl)

    if not accepted:
        raise InvalidReceiptError("at least one line must have a received quantity")

    if require_invoice_number:
        _validate_invoices(invoices)

    logger.info("receipt_validated", extra={
        "accepted_line_count": len(accepted),
        "invoice_count": len(invoices),
    })
    return tuple(accepted)


def received_after(
    lines: Sequence[ReceivableLine],
    accepted: Sequence[ReceiptLine],
) -> dict[str, Decimal]:
    """New received-to-date quantity per line id after ``accepted`` is booked."""
    delivered = {rl.line_item_id: rl.quantity for rl in accepted}
    return {
        ln.line_item_id: ln.received_quantity + delivered.get(ln.line_item_id, ZERO)
        for ln in lines
    }
