"""
Indent Review Module (``procure_modules.indent``).

An admin reviews a purchaser's vendor choices, adjusts them, sets fleet
costs per vendor and either approves (producing purchase-order drafts) or
sends the indent back with a comment.
"""

from procure_modules.indent.models import PurchaserChoice, ReviewDecision
from procure_modules.indent.service import IndentReviewSession
from procure_modules.indent.workflows import INDENT_REVIEW_WORKFLOW

__all__ = [
    "INDENT_REVIEW_WORKFLOW",
    "IndentReviewSession",
    "PurchaserChoice",
    "ReviewDecision",
]
