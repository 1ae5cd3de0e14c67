"""
Purchase Order Module (``procure_modules.purchase_order``).

Drafts purchase orders from an approved indent's vendor groups and records
goods receipts against them.  Persistence belongs to the caller.
"""

from procure_modules.purchase_order.models import PurchaseOrderDraft, PurchaseOrderLine
from procure_modules.purchase_order.service import draft_purchase_orders, record_receipt

__all__ = [
    "PurchaseOrderDraft",
    "PurchaseOrderLine",
    "draft_purchase_orders",
    "record_receipt",
]
