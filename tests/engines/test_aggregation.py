"""
Tests for purchase-order preview aggregation.

Tests cover:
- Grouping by vendor in first-selected order
- Subtotals, fleet cost and final totals per vendor
- overall_total as the sum of group totals
- Unselected lines and lines without active vendors left out
"""

from decimal import Decimal

import pytest

from procure_engines.aggregation import aggregate_purchase_orders
from procure_engines.pricing import derive_priced_line, derive_priced_lines
from procure_kernel.domain.indent import FleetCost, LineItem, LineSelection, VendorPriceOption
from procure_kernel.exceptions import InvalidFleetCostError


@pytest.fixture
def priced(sample_indent, price_lookup):
    return derive_priced_lines(sample_indent.items, price_lookup)


def pick(*pairs: tuple[str, str]) -> list[LineSelection]:
    return [LineSelection(line_item_id=line, selected_vendor=vendor) for line, vendor in pairs]


class TestAggregatePurchaseOrders:

    def test_one_group_per_vendor(self, priced):
        result = aggregate_purchase_orders(
            priced_lines=priced,
            selections=pick(("L1", "B"), ("L2", "C")),
        )
        assert result.vendor_names == ("B", "C")
        assert result.group_for("B").final_total == Decimal("950")
        assert result.group_for("C").final_total == Decimal("5500")
        assert result.overall_total == Decimal("6450")

    def test_lines_merged_for_same_vendor(self, priced):
        result = aggregate_purchase_orders(
            priced_lines=priced,
            selections=pick(("L1", "A"), ("L2", "A")),
        )
        assert result.vendor_names == ("A",)
        group = result.group_for("A")
        assert [ln.line_item.id for ln in group.lines] == ["L1", "L2"]
        assert group.subtotal_cost == Decimal("6000")
        assert group.subtotal_gst == Decimal("950")
        assert group.final_total == Decimal("6950")

    def test_first_selected_order(self, priced):
        result = aggregate_purchase_orders(
            priced_lines=priced,
            selections=pick(("L2", "A"), ("L1", "B")),
        )
        # BOQ order decides, not the order selections were supplied in
        assert result.vendor_names == ("B", "A")

    def test_fleet_cost_added_to_vendor(self, priced):
        result = aggregate_purchase_orders(
            priced_lines=priced,
            selections=pick(("L1", "B")),
            fleet_costs={"B": FleetCost(cost=Decimal("100"), gst=Decimal("18"))},
        )
        group = result.group_for("B")
        assert group.subtotal_cost == Decimal("900")
        assert group.subtotal_gst == Decimal("50")
        assert group.items_total == Decimal("950")
        assert group.fleet_cost == Decimal("100")
        assert group.fleet_gst == Decimal("18")
        assert group.final_total == Decimal("1068")
        assert result.overall_total == Decimal("1068")

    def test_fleet_cost_on_gst_bearing_group(self):
        bricks = LineItem(id="B1", name="Bricks", unit="nos", quantity=Decimal("10"))
        line = derive_priced_line(
            line_item=bricks,
            options=[VendorPriceOption("B", Decimal("95"), Decimal("5"))],
        )
        result = aggregate_purchase_orders(
            priced_lines=[line],
            selections=pick(("B1", "B")),
            fleet_costs={"B": FleetCost(cost=Decimal("100"), gst=Decimal("18"))},
        )
        group = result.group_for("B")
        assert group.subtotal_cost == Decimal("950")
        assert group.subtotal_gst == Decimal("50")
        assert group.final_total == Decimal("1118")

    def test_fleet_cost_for_unselected_vendor_ignored(self, priced):
        result = aggregate_purchase_orders(
            priced_lines=priced,
            selections=pick(("L1", "B")),
            fleet_costs={"A": FleetCost(cost=Decimal("500"))},
        )
        assert result.vendor_names == ("B",)
        assert result.overall_total == Decimal("950")

    def test_unselected_lines_left_out(self, priced):
        result = aggregate_purchase_orders(
            priced_lines=priced,
            selections=pick(("L2", "C")) + [LineSelection(line_item_id="L1")],
        )
        assert result.vendor_names == ("C",)

    def test_nothing_selected(self, priced):
        result = aggregate_purchase_orders(priced_lines=priced, selections=[])
        assert result.vendor_groups == ()
        assert result.overall_total == Decimal("0")
        assert result.group_for("A") is None

    def test_stale_vendor_on_unpriced_line_left_out(self, priced):
        result = aggregate_purchase_orders(
            priced_lines=priced,
            selections=pick(("L1", "B"), ("L2", "C"), ("L3", "C")),
        )
        assert result.vendor_names == ("B", "C")
        assert [ln.line_item.id for g in result.vendor_groups for ln in g.lines] == ["L1", "L2"]

    def test_overall_total_is_sum_of_groups(self, priced):
        result = aggregate_purchase_orders(
            priced_lines=priced,
            selections=pick(("L1", "D"), ("L2", "A")),
            fleet_costs={
                "D": FleetCost(cost=Decimal("12.50"), gst=Decimal("2.25")),
                "A": FleetCost(cost=Decimal("40")),
            },
        )
        assert result.overall_total == sum(g.final_total for g in result.vendor_groups)
        assert result.overall_total == Decimal("1100") + Decimal("14.75") + Decimal("5900") + Decimal("40")


class TestFleetCost:

    def test_defaults_to_zero(self):
        assert FleetCost().total == Decimal("0")

    def test_negative_rejected(self):
        with pytest.raises(InvalidFleetCostError):
            FleetCost(cost=Decimal("-1"))
        with pytest.raises(InvalidFleetCostError):
            FleetCost(gst=Decimal("-1"))
