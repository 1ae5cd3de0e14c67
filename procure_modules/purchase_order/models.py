"""
Purchase Order Domain Models.

Purchase orders drafted from an approved indent, one per awarded vendor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from procure_kernel.domain.receipt import POStatus
from procure_kernel.domain.values import ZERO
from procure_kernel.logging_config import get_logger

logger = get_logger("modules.purchase_order.models")


@dataclass(frozen=True)
class PurchaseOrderLine:
    """A line item on a purchase order."""
    line_item_id: str
    description: str
    quantity: Decimal
    unit: str
    rate: Decimal
    gst: Decimal = ZERO
    received_quantity: Decimal = ZERO

    def __post_init__(self):
        if self.received_quantity > self.quantity:
            logger.warning(
                "po_line_over_receipt",
                extra={
                    "line_item_id": self.line_item_id,
                    "quantity": str(self.quantity),
                    "received_quantity": str(self.received_quantity),
                },
            )
            raise ValueError(
                f"received_quantity ({self.received_quantity}) "
                f"cannot exceed quantity ({self.quantity})"
            )

    @property
    def amount(self) -> Decimal:
        return self.quantity * self.rate

    @property
    def gst_amount(self) -> Decimal:
        return self.quantity * self.gst

    @property
    def total(self) -> Decimal:
        return self.amount + self.gst_amount


@dataclass(frozen=True)
class PurchaseOrderDraft:
    """A purchase order for one vendor, awaiting persistence by the caller."""
    indent_id: str
    vendor_name: str
    project: str = ""
    lines: tuple[PurchaseOrderLine, ...] = field(default_factory=tuple)
    fleet_cost: Decimal = ZERO
    fleet_gst: Decimal = ZERO
    purchaser_reason: str = ""
    status: POStatus = POStatus.OPEN

    @property
    def subtotal(self) -> Decimal:
        return sum((ln.amount for ln in self.lines), ZERO)

    @property
    def gst_total(self) -> Decimal:
        return sum((ln.gst_amount for ln in self.lines), ZERO)

    @property
    def final_total(self) -> Decimal:
        return self.subtotal + self.gst_total + self.fleet_cost + self.fleet_gst

    def line_for(self, line_item_id: str) -> PurchaseOrderLine | None:
        for ln in self.lines:
            if ln.line_item_id == line_item_id:
                return ln
        return None
