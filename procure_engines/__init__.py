"""
Module: procure_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the canonical import surface for
    ``procure_modules`` and ``scripts``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import procure_kernel (and sibling engine modules).
    MUST NOT import procure_modules or procure_config.

Invariants enforced:
    - Decimal-only arithmetic: amounts and quantities are ``Decimal``;
      floats are rejected at record construction.
    - Determinism: identical inputs always produce identical outputs.
    - No clock access, no I/O, no cached state between calls.

Audit relevance:
    Engine entry points are wrapped with ``@traced_engine``, emitting
    PROCURE_ENGINE_TRACE log records with an input fingerprint.

Usage:
    from procure_engines.comparison import ComparisonEngine
    from procure_engines.pricing import derive_priced_lines
    from procure_engines.selection import evaluate_blockers
    from procure_engines.aggregation import aggregate_purchase_orders
    from procure_engines.receiving import validate_receipt
    from procure_engines.ledger import post_ledger, summarize_vendors
"""

from procure_kernel.logging_config import get_logger

logger = get_logger("engines")

from procure_engines.aggregation import (
    AggregationResult,
    aggregate_purchase_orders,
)
from procure_engines.comparison import (
    ComparisonEngine,
    ComparisonResult,
)
from procure_engines.ledger import (
    VendorLedgerSummary,
    po_ledger_entries,
    portfolio_outstanding,
    post_ledger,
    summarize_vendor,
    summarize_vendors,
)
from procure_engines.pricing import (
    calculate_coverage,
    derive_priced_line,
    derive_priced_lines,
)
from procure_engines.receiving import (
    derive_po_status,
    pending_quantity,
    received_after,
    validate_receipt,
)
from procure_engines.selection import (
    auto_select_lowest,
    clear_selections,
    evaluate_blockers,
    override_reason_required,
)

__all__ = [
    # Pricing
    "derive_priced_line",
    "derive_priced_lines",
    "calculate_coverage",
    # Selection
    "evaluate_blockers",
    "override_reason_required",
    "auto_select_lowest",
    "clear_selections",
    # Aggregation
    "AggregationResult",
    "aggregate_purchase_orders",
    # Comparison
    "ComparisonEngine",
    "ComparisonResult",
    # Receiving
    "validate_receipt",
    "pending_quantity",
    "received_after",
    "derive_po_status",
    # Ledger
    "post_ledger",
    "summarize_vendor",
    "summarize_vendors",
    "portfolio_outstanding",
    "po_ledger_entries",
    "VendorLedgerSummary",
]
