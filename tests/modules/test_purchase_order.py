"""
Tests for purchase-order drafting and goods receipt recording.

Tests cover:
- draft_purchase_orders: one draft per vendor group, totals, justification
- record_receipt: partial and full deliveries, status, validation
- PurchaseOrderLine: over-receipt guard
"""

from decimal import Decimal

import pytest

from procure_config.schema import ProcurementConfig
from procure_engines.aggregation import aggregate_purchase_orders
from procure_engines.pricing import derive_priced_lines
from procure_kernel.domain.indent import FleetCost, LineSelection
from procure_kernel.domain.receipt import InvoiceRef, POStatus, ReceiptLine
from procure_kernel.exceptions import InvalidReceiptError
from procure_modules.purchase_order import (
    PurchaseOrderLine,
    draft_purchase_orders,
    record_receipt,
)

INVOICE = (InvoiceRef("INV-77"),)


@pytest.fixture
def selections():
    return [
        LineSelection("L1", "D", override_reason="Only vendor with stock"),
        LineSelection("L2", "C"),
    ]


@pytest.fixture
def drafts(sample_indent, price_lookup, selections):
    priced = derive_priced_lines(sample_indent.items, price_lookup)
    aggregation = aggregate_purchase_orders(
        priced_lines=priced,
        selections=selections,
        fleet_costs={"C": FleetCost(cost=Decimal("250"), gst=Decimal("45"))},
    )
    return draft_purchase_orders(
        indent_id=sample_indent.id,
        vendor_groups=aggregation.vendor_groups,
        selections=selections,
        project=sample_indent.project,
    )


class TestDraftPurchaseOrders:

    def test_one_draft_per_vendor(self, drafts):
        assert [po.vendor_name for po in drafts] == ["D", "C"]
        assert all(po.status is POStatus.OPEN for po in drafts)

    def test_lines_copied_from_selection(self, drafts):
        line = drafts[0].lines[0]
        assert line.line_item_id == "L1"
        assert line.description == "Cement"
        assert line.unit == "bag"
        assert line.quantity == Decimal("10")
        assert line.rate == Decimal("110")
        assert line.received_quantity == Decimal("0")

    def test_totals(self, drafts):
        po_c = drafts[1]
        assert po_c.subtotal == Decimal("5500")
        assert po_c.gst_total == Decimal("0")
        assert po_c.final_total == Decimal("5795")

    def test_justification_only_for_non_lowest(self, drafts):
        assert drafts[0].purchaser_reason == "Cement: Only vendor with stock"
        assert drafts[1].purchaser_reason == ""

    def test_no_groups(self):
        assert draft_purchase_orders("IND-2", vendor_groups=()) == ()


class TestRecordReceipt:

    def test_partial_delivery(self, drafts):
        po = record_receipt(drafts[1], [ReceiptLine("L2", Decimal("40"))], INVOICE)
        assert po.status is POStatus.PARTIAL
        assert po.line_for("L2").received_quantity == Decimal("40")
        # Input draft is untouched
        assert drafts[1].line_for("L2").received_quantity == Decimal("0")

    def test_full_delivery_closes(self, drafts):
        po = record_receipt(drafts[1], [ReceiptLine("L2", Decimal("40"))], INVOICE)
        po = record_receipt(po, [ReceiptLine("L2", Decimal("60"))], INVOICE)
        assert po.status is POStatus.CLOSED

    def test_over_delivery_rejected(self, drafts):
        po = record_receipt(drafts[1], [ReceiptLine("L2", Decimal("90"))], INVOICE)
        with pytest.raises(InvalidReceiptError):
            record_receipt(po, [ReceiptLine("L2", Decimal("11"))], INVOICE)

    def test_invoice_required_by_default(self, drafts):
        with pytest.raises(InvalidReceiptError):
            record_receipt(drafts[0], [ReceiptLine("L1", Decimal("1"))])

    def test_invoice_optional_by_config(self, drafts):
        config = ProcurementConfig(require_invoice_number=False)
        po = record_receipt(drafts[0], [ReceiptLine("L1", Decimal("10"))], config=config)
        assert po.status is POStatus.CLOSED


def test_line_over_receipt_guard():
    with pytest.raises(ValueError):
        PurchaseOrderLine(
            line_item_id="L1",
            description="Cement",
            quantity=Decimal("5"),
            unit="bag",
            rate=Decimal("1"),
            received_quantity=Decimal("6"),
        )
