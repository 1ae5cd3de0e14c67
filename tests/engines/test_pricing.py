"""
Tests for vendor price derivation.

Tests cover:
- derive_priced_line: active filtering, ordering, lowest marker, ties
- derive_priced_lines: BOQ order, lines missing from the price list
- calculate_coverage: half-up percentage, empty BOQ
- Record validation: floats, negative prices, non-positive quantities
"""

from decimal import Decimal

import pytest

from procure_engines.pricing import (
    calculate_coverage,
    derive_priced_line,
    derive_priced_lines,
)
from procure_kernel.domain.indent import LineItem, VendorPriceOption
from procure_kernel.exceptions import (
    InvalidAmountError,
    InvalidLineItemError,
    InvalidPriceOptionError,
)


def make_option(vendor: str, price: str, gst: str = "0", active: bool = True) -> VendorPriceOption:
    return VendorPriceOption(vendor, Decimal(price), Decimal(gst), active=active)


def make_item(item_id: str = "X1", name: str = "Item", qty: str = "1") -> LineItem:
    return LineItem(id=item_id, name=name, unit="nos", quantity=Decimal(qty))


class TestDerivePricedLine:

    def test_cement_scenario_marks_b_lowest(self, cement, price_lookup):
        line = derive_priced_line(line_item=cement, options=price_lookup["L1"][:2])

        assert line.has_active_vendors
        assert line.lowest.vendor_name == "B"
        assert line.lowest.unit_total == Decimal("95")
        assert line.lowest.extended_total == Decimal("950")
        assert line.lowest.extended_cost == Decimal("900")
        assert line.lowest.extended_gst == Decimal("50")

        a = line.option_for("A")
        assert a.unit_total == Decimal("105")
        assert a.extended_total == Decimal("1050")
        assert not a.is_lowest

    def test_options_sorted_cheapest_first(self, cement, price_lookup):
        line = derive_priced_line(line_item=cement, options=price_lookup["L1"])
        assert line.vendor_names == ("B", "A", "D")

    def test_exactly_one_lowest(self, cement, price_lookup):
        line = derive_priced_line(line_item=cement, options=price_lookup["L1"])
        assert [o.is_lowest for o in line.options] == [True, False, False]

    def test_tie_keeps_list_order(self):
        item = make_item()
        line = derive_priced_line(
            line_item=item,
            options=[make_option("A", "90", "5"), make_option("B", "95", "0")],
        )
        assert line.lowest.vendor_name == "A"
        assert line.option_for("B").is_lowest is False

    def test_inactive_options_excluded(self):
        item = make_item()
        line = derive_priced_line(
            line_item=item,
            options=[make_option("A", "1", active=False), make_option("B", "50")],
        )
        assert line.vendor_names == ("B",)
        assert line.option_for("A") is None
        assert line.lowest.vendor_name == "B"

    def test_all_inactive_has_no_active_vendors(self, sand, price_lookup):
        line = derive_priced_line(line_item=sand, options=price_lookup["L3"])
        assert line.has_active_vendors is False
        assert line.options == ()
        assert line.lowest is None

    def test_no_options(self):
        line = derive_priced_line(line_item=make_item(), options=[])
        assert not line.has_active_vendors

    def test_fractional_quantity_exact(self):
        item = make_item(qty="2.5")
        line = derive_priced_line(line_item=item, options=[make_option("A", "10.10", "1.82")])
        assert line.lowest.extended_total == Decimal("29.800")


class TestDerivePricedLines:

    def test_boq_order_preserved(self, sample_indent, price_lookup):
        lines = derive_priced_lines(sample_indent.items, price_lookup)
        assert [ln.line_item.id for ln in lines] == ["L1", "L2", "L3"]

    def test_line_missing_from_lookup_has_no_vendors(self, cement, steel):
        lines = derive_priced_lines((cement, steel), {"L1": (make_option("A", "10"),)})
        assert lines[0].has_active_vendors
        assert not lines[1].has_active_vendors

    def test_steel_lowest_is_c(self, sample_indent, price_lookup):
        lines = derive_priced_lines(sample_indent.items, price_lookup)
        assert lines[1].lowest.vendor_name == "C"
        assert lines[1].lowest.extended_total == Decimal("5500")


class TestCalculateCoverage:

    def test_two_of_three_rounds_up(self, sample_indent, price_lookup):
        cov = calculate_coverage(sample_indent.items, price_lookup)
        assert (cov.covered, cov.total, cov.percentage) == (2, 3, 67)
        assert cov.missing == 1

    def test_half_rounds_up(self):
        items = [make_item(f"X{i}") for i in range(8)]
        lookup = {"X0": (make_option("A", "1"),)}
        assert calculate_coverage(items, lookup).percentage == 13

    def test_full_coverage(self, cement, price_lookup):
        assert calculate_coverage([cement], price_lookup).percentage == 100

    def test_empty_boq(self):
        cov = calculate_coverage([], {})
        assert (cov.covered, cov.total, cov.percentage) == (0, 0, 0)


class TestRecordValidation:

    def test_float_price_rejected(self):
        with pytest.raises(InvalidAmountError):
            VendorPriceOption("A", 1.5)

    def test_string_price_coerced(self):
        assert VendorPriceOption("A", "12.50").unit_price == Decimal("12.50")

    def test_negative_price_rejected(self):
        with pytest.raises(InvalidPriceOptionError):
            VendorPriceOption("A", Decimal("-1"))

    def test_negative_gst_rejected(self):
        with pytest.raises(InvalidPriceOptionError):
            VendorPriceOption("A", Decimal("1"), Decimal("-0.01"))

    def test_blank_vendor_rejected(self):
        with pytest.raises(InvalidPriceOptionError):
            VendorPriceOption("  ", Decimal("1"))

    @pytest.mark.parametrize("active", ["false", 0, None])
    def test_non_bool_active_flag_rejected(self, active):
        with pytest.raises(InvalidPriceOptionError) as exc_info:
            VendorPriceOption("A", Decimal("1"), active=active)
        assert exc_info.value.vendor_name == "A"

    @pytest.mark.parametrize("qty", ["0", "-3"])
    def test_non_positive_quantity_rejected(self, qty):
        with pytest.raises(InvalidLineItemError):
            make_item(qty=qty)

    def test_nan_quantity_rejected(self):
        with pytest.raises(InvalidAmountError):
            make_item(qty="NaN")
