"""
Purchase Order Service (``procure_modules.purchase_order.service``).

Responsibility
--------------
Turn the vendor groups of an approved indent into purchase-order drafts,
and record goods receipts against a draft.  Calculations are delegated to
``procure_engines``; this module only maps between engine results and
purchase-order records.

Invariants enforced
-------------------
* One draft per vendor group, in group order.
* Draft totals are derived from lines and fleet cost, never copied.
* Receipts go through ``procure_engines.receiving.validate_receipt``;
  status is re-derived after every receipt.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from procure_config.schema import ProcurementConfig
from procure_kernel.domain.indent import LineSelection, VendorGroup
from procure_kernel.domain.receipt import InvoiceRef, ReceiptLine
from procure_kernel.logging_config import get_logger
from procure_engines.receiving import derive_po_status, received_after, validate_receipt
from procure_modules.purchase_order.models import PurchaseOrderDraft, PurchaseOrderLine

logger = get_logger("modules.purchase_order.service")


def _justification(group: VendorGroup, selections: Sequence[LineSelection]) -> str:
    """Reasons given for non-lowest lines in ``group``, as "Item: reason; ..."."""
    by_line = {s.line_item_id: s for s in selections}
    parts = []
    for gl in group.lines:
        if gl.option.is_lowest:
            continue
        sel = by_line.get(gl.line_item.id)
        if sel is None:
            continue
        reason = sel.override_reason if sel.has_override_reason else sel.original_reason
        if reason and reason.strip():
            parts.append(f"{gl.line_item.name}: {reason.strip()}")
    return "; ".join(parts)


def draft_purchase_orders(
    indent_id: str,
    vendor_groups: Sequence[VendorGroup],
    selections: Sequence[LineSelection] = (),
    project: str = "",
) -> tuple[PurchaseOrderDraft, ...]:
    """Build one open purchase-order draft per vendor group."""
    drafts = []
    for group in vendor_groups:
        lines = tuple(
            PurchaseOrderLine(
                line_item_id=gl.line_item.id,
                description=gl.line_item.name,
                quantity=gl.line_item.quantity,
                unit=gl.line_item.unit,
                rate=gl.option.unit_price,
                gst=gl.option.unit_gst,
            )
            for gl in group.lines
        )
        drafts.append(PurchaseOrderDraft(
            indent_id=indent_id,
            vendor_name=group.vendor_name,
            project=project,
            lines=lines,
            fleet_cost=group.fleet_cost,
            fleet_gst=group.fleet_gst,
            purchaser_reason=_justification(group, selections),
        ))

    logger.info("purchase_orders_drafted", extra={
        "indent_id": indent_id,
        "po_count": len(drafts),
        "vendors": [d.vendor_name for d in drafts],
    })
    return tuple(drafts)


def record_receipt(
    po: PurchaseOrderDraft,
    receipt_lines: Sequence[ReceiptLine],
    invoices: Sequence[InvoiceRef] = (),
    config: ProcurementConfig | None = None,
) -> PurchaseOrderDraft:
    """
    Book a delivery against ``po`` and return the updated order.

    Raises:
        UnknownLineItemError, InvalidReceiptError from the receiving engine.
    """
    config = config or ProcurementConfig.with_defaults()
    accepted = validate_receipt(
        lines=po.lines,
        receipt_lines=receipt_lines,
        invoices=invoices,
        require_invoice_number=config.require_invoice_number,
    )
    received = received_after(po.lines, accepted)
    lines = tuple(replace(ln, received_quantity=received[ln.line_item_id]) for ln in po.lines)
    updated = replace(po, lines=lines, status=derive_po_status(lines))

    logger.info("purchase_order_receipt_recorded", extra={
        "indent_id": po.indent_id,
        "vendor_name": po.vendor_name,
        "received_line_count": len(accepted),
        "status_before": po.status.value,
        "status_after": updated.status.value,
    })
    return updated
