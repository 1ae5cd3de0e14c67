"""
procure_engines.aggregation -- Purchase-order preview aggregation.

Responsibility:
    Group the selected lines of an indent by vendor, attach each vendor's
    fleet (delivery) cost, and total everything into per-vendor
    purchase-order previews and an overall indent total.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import procure_kernel and sibling engine modules.

Invariants enforced:
    - Vendor groups appear in first-selected order (BOQ line order).
    - ``VendorGroup.final_total`` = subtotal_cost + subtotal_gst +
      fleet_cost + fleet_gst, always derived from current inputs.
    - ``overall_total`` = sum of every group's ``final_total``.
    - No rounding: Decimal arithmetic is exact for these sums.
    - Lines without active vendors and lines with no vendor chosen do not
      participate.

Failure modes:
    - Selection resolution errors propagate from
      ``procure_engines.selection`` (unknown line, unknown vendor, ...).
    - Degenerate input (nothing selected) yields no groups and a zero total.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal

from procure_kernel.domain.indent import (
    NO_FLEET_COST,
    FleetCost,
    LineSelection,
    PricedLine,
    VendorGroup,
    VendorGroupLine,
)
from procure_kernel.domain.values import ZERO
from procure_kernel.logging_config import get_logger
from procure_engines.selection import index_selections, resolve_selected_option
from procure_engines.tracer import traced_engine

logger = get_logger("engines.aggregation")


@dataclass(frozen=True)
class AggregationResult:
    """Per-vendor purchase-order previews for an indent."""

    vendor_groups: tuple[VendorGroup, ...] = ()

    @property
    def overall_total(self) -> Decimal:
        return sum((g.final_total for g in self.vendor_groups), ZERO)

    @property
    def vendor_names(self) -> tuple[str, ...]:
        return tuple(g.vendor_name for g in self.vendor_groups)

    def group_for(self, vendor_name: str) -> VendorGroup | None:
        for group in self.vendor_groups:
            if group.vendor_name == vendor_name:
                return group
        return None


@traced_engine(
    "aggregation", "1.0",
    fingerprint_fields=("priced_lines", "selections", "fleet_costs"),
)
def aggregate_purchase_orders(
    priced_lines: Sequence[PricedLine],
    selections: Sequence[LineSelection],
    fleet_costs: Mapping[str, FleetCost] | None = None,
) -> AggregationResult:
    """
    Build vendor groups from the current selections.

    Args:
        priced_lines: Output of ``derive_priced_lines``.
        selections: Current per-line selections.
        fleet_costs: Fleet cost per vendor name; vendors not listed get 0/0.

    Returns:
        AggregationResult with groups in first-selected order.
    """
    fleet_costs = fleet_costs or {}
    by_line = index_selections(priced_lines, selections)

    grouped: dict[str, list[VendorGroupLine]] = {}
    for line in priced_lines:
        if not line.has_active_vendors:
            continue
        option = resolve_selected_option(line, by_line.get(line.line_item.id))
        if option is None:
            continue
        # dict preserves insertion order -> first-selected vendor order
        grouped.setdefault(option.vendor_name, []).append(
            VendorGroupLine(line_item=line.line_item, option=option)
        )

    groups = []
    for vendor_name, lines in grouped.items():
        fleet = fleet_costs.get(vendor_name, NO_FLEET_COST)
        groups.append(VendorGroup(
            vendor_name=vendor_name,
            lines=tuple(lines),
            fleet_cost=fleet.cost,
            fleet_gst=fleet.gst,
        ))

    unused_fleet = sorted(set(fleet_costs) - set(grouped))
    if unused_fleet:
        logger.debug("fleet_costs_without_group", extra={"vendors": unused_fleet})

    result = AggregationResult(vendor_groups=tuple(groups))
    logger.info("purchase_orders_aggregated", extra={
        "vendor_count": len(groups),
        "selected_line_count": sum(len(g.lines) for g in groups),
        "overall_total": str(result.overall_total),
    })
    return result
