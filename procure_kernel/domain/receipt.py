"""
Goods-receipt domain types (``procure_kernel.domain.receipt``).

Pure value objects for recording deliveries against a purchase order.
ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Protocol

from procure_kernel.domain.values import to_decimal


class POStatus(str, Enum):
    """Purchase order receiving states."""

    OPEN = "open"          # nothing received yet
    PARTIAL = "partial"    # some quantity still pending
    CLOSED = "closed"      # every line fully received


class ReceivableLine(Protocol):
    """Anything with an ordered and a received quantity per line."""

    line_item_id: str
    quantity: Decimal
    received_quantity: Decimal


@dataclass(frozen=True)
class ReceiptLine:
    """Quantity delivered for one PO line in a single receipt."""

    line_item_id: str
    quantity: Decimal
    remark: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity, "received quantity"))


@dataclass(frozen=True)
class InvoiceRef:
    """Supplier invoice accompanying a delivery."""

    number: str
    invoice_date: date | None = None
