"""
procure_engines.comparison -- One-call vendor comparison for an indent.

Responsibility:
    Run price derivation, blocker evaluation and purchase-order
    aggregation together for one indent and package the result in the
    shape the UI layer consumes: priced lines, blocker messages, vendor
    groups and the overall total.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Composes ``pricing``, ``selection`` and ``aggregation``.

Invariants enforced:
    - Every call recomputes everything from its inputs; nothing is cached
      between calls, so repeated calls with equal inputs give equal results.
    - Blocker evaluation runs before aggregation, so malformed selections
      fail before any totals are produced.

Failure modes:
    - InputValidationError subclasses from the composed engines.

Usage:
    engine = ComparisonEngine()
    result = engine.compare(indent, price_lookup, selections, fleet_costs)
    if result.is_approvable:
        ...
    payload = result.to_dict()
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from procure_kernel.domain.indent import (
    BoqCoverage,
    FleetCost,
    Indent,
    LineSelection,
    PricedLine,
    ReviewOutcome,
    VendorGroup,
    VendorPriceOption,
)
from procure_kernel.logging_config import get_logger
from procure_engines.aggregation import AggregationResult, aggregate_purchase_orders
from procure_engines.pricing import calculate_coverage, derive_priced_lines
from procure_engines.selection import evaluate_blockers

logger = get_logger("engines.comparison")


@dataclass(frozen=True)
class ComparisonResult:
    """Everything the review screen renders for one indent."""

    indent_id: str
    priced_lines: tuple[PricedLine, ...]
    outcome: ReviewOutcome
    aggregation: AggregationResult
    coverage: BoqCoverage

    @property
    def blockers(self) -> tuple[str, ...]:
        return self.outcome.messages

    @property
    def is_approvable(self) -> bool:
        return self.outcome.is_approvable

    @property
    def vendor_groups(self) -> tuple[VendorGroup, ...]:
        return self.aggregation.vendor_groups

    @property
    def overall_total(self) -> Decimal:
        return self.aggregation.overall_total

    def to_dict(self) -> dict[str, Any]:
        """Render the output contract; amounts are decimal strings."""
        return {
            "indent_id": self.indent_id,
            "priced_lines": [_line_to_dict(ln) for ln in self.priced_lines],
            "blockers": list(self.blockers),
            "vendor_groups": [_group_to_dict(g) for g in self.vendor_groups],
            "overall_total": str(self.overall_total),
            "coverage": {
                "covered": self.coverage.covered,
                "total": self.coverage.total,
                "percentage": self.coverage.percentage,
            },
        }


def _line_to_dict(line: PricedLine) -> dict[str, Any]:
    item = line.line_item
    return {
        "line_item_id": item.id,
        "name": item.name,
        "unit": item.unit,
        "quantity": str(item.quantity),
        "has_active_vendors": line.has_active_vendors,
        "options": [
            {
                "vendor_name": o.vendor_name,
                "unit_price": str(o.unit_price),
                "unit_gst": str(o.unit_gst),
                "unit_total": str(o.unit_total),
                "extended_cost": str(o.extended_cost),
                "extended_gst": str(o.extended_gst),
                "extended_total": str(o.extended_total),
                "is_lowest": o.is_lowest,
            }
            for o in line.options
        ],
    }


def _group_to_dict(group: VendorGroup) -> dict[str, Any]:
    return {
        "vendor_name": group.vendor_name,
        "lines": [
            {
                "line_item_id": ln.line_item.id,
                "name": ln.line_item.name,
                "unit": ln.line_item.unit,
                "quantity": str(ln.line_item.quantity),
                "unit_price": str(ln.option.unit_price),
                "unit_gst": str(ln.option.unit_gst),
                "extended_cost": str(ln.option.extended_cost),
                "extended_gst": str(ln.option.extended_gst),
                "extended_total": str(ln.option.extended_total),
            }
            for ln in group.lines
        ],
        "subtotal_cost": str(group.subtotal_cost),
        "subtotal_gst": str(group.subtotal_gst),
        "fleet_cost": str(group.fleet_cost),
        "fleet_gst": str(group.fleet_gst),
        "final_total": str(group.final_total),
    }


class ComparisonEngine:
    """
    Vendor comparison for indent review.

    Contract:
        No I/O, fully deterministic.  All reference data (line items,
        price lists, selections, fleet costs) passed as parameters.
    Guarantees:
        - ``carry_over_original_reason=True`` (admin review): keeping the
          submitter's justified non-lowest vendor needs no new reason.
        - ``carry_over_original_reason=False`` (purchaser compare): every
          non-lowest choice needs a reason.
    Non-goals:
        - Does not persist selections or purchase orders.
        - Does not check who is allowed to approve.
    """

    def __init__(self, carry_over_original_reason: bool = True):
        self.carry_over_original_reason = carry_over_original_reason

    def price(
        self,
        indent: Indent,
        price_lookup: Mapping[str, Sequence[VendorPriceOption]],
    ) -> tuple[PricedLine, ...]:
        return derive_priced_lines(indent.items, price_lookup)

    def compare(
        self,
        indent: Indent,
        price_lookup: Mapping[str, Sequence[VendorPriceOption]],
        selections: Sequence[LineSelection] = (),
        fleet_costs: Mapping[str, FleetCost] | None = None,
    ) -> ComparisonResult:
        """
        Price, validate and aggregate one indent.

        Args:
            indent: Submitted indent with its line items.
            price_lookup: Vendor price list per line item id.
            selections: Current per-line selections.
            fleet_costs: Fleet cost per vendor name.

        Returns:
            ComparisonResult for rendering and for gating approval.
        """
        logger.info("comparison_started", extra={
            "indent_id": indent.id,
            "line_count": len(indent.items),
            "selection_count": len(selections),
        })

        priced_lines = self.price(indent, price_lookup)
        outcome = evaluate_blockers(
            priced_lines=priced_lines,
            selections=selections,
            carry_over_original_reason=self.carry_over_original_reason,
        )
        aggregation = aggregate_purchase_orders(
            priced_lines=priced_lines,
            selections=selections,
            fleet_costs=fleet_costs,
        )
        coverage = calculate_coverage(indent.items, price_lookup)

        result = ComparisonResult(
            indent_id=indent.id,
            priced_lines=priced_lines,
            outcome=outcome,
            aggregation=aggregation,
            coverage=coverage,
        )
        logger.info("comparison_completed", extra={
            "indent_id": indent.id,
            "blocker_count": len(outcome.blockers),
            "vendor_count": len(aggregation.vendor_groups),
            "overall_total": str(result.overall_total),
        })
        return result
