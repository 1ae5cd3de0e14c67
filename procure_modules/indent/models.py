"""
Indent Review Models.

What the purchaser submitted, and what the reviewer decided.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from procure_kernel.domain.values import ZERO
from procure_modules.purchase_order.models import PurchaseOrderDraft


@dataclass(frozen=True)
class PurchaserChoice:
    """The vendor a purchaser picked for a line, and why (if not lowest)."""
    vendor_name: str | None
    reason: str = ""


@dataclass(frozen=True)
class ReviewDecision:
    """Terminal outcome of a review session."""
    indent_id: str
    state: str
    actor_id: str | None = None
    comment: str = ""
    purchase_orders: tuple[PurchaseOrderDraft, ...] = field(default_factory=tuple)
    overall_total: Decimal = ZERO
