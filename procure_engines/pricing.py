"""
procure_engines.pricing -- Vendor price derivation for BOQ lines.

Responsibility:
    Turn a line item and its vendor price list into priced options:
    filter to active vendors, compute unit and extended amounts, order
    cheapest first and flag exactly one option as lowest.  Also reports
    price coverage for a whole BOQ.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import procure_kernel.

Invariants enforced:
    - Exactly one option per priced line has ``is_lowest=True`` and its
      ``unit_total`` is <= every other option's.
    - Ties on ``unit_total`` keep vendor-list order (``sorted`` is stable),
      so the first listed vendor wins the lowest marker.
    - Inactive options never appear in the output.
    - Determinism: identical inputs produce identical outputs.

Failure modes:
    - Malformed line items and price options are rejected when those
      records are constructed (see ``procure_kernel.domain.indent``).
    - A line with no active options is not an error: it yields a
      ``PricedLine`` with ``has_active_vendors=False``.

Usage:
    from procure_engines.pricing import derive_priced_line

    line = derive_priced_line(
        line_item=LineItem("I-1", "Cement", "bag", Decimal("10")),
        options=[
            VendorPriceOption("A", Decimal("100"), Decimal("5")),
            VendorPriceOption("B", Decimal("90"), Decimal("5")),
        ],
    )
    line.lowest.vendor_name  # "B"
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal

from procure_kernel.domain.indent import (
    BoqCoverage,
    LineItem,
    PricedLine,
    PricedOption,
    VendorPriceOption,
)
from procure_kernel.logging_config import get_logger
from procure_engines.tracer import traced_engine

logger = get_logger("engines.pricing")


def _price(line_item: LineItem, option: VendorPriceOption) -> PricedOption:
    return PricedOption(
        vendor_name=option.vendor_name,
        unit_price=option.unit_price,
        unit_gst=option.unit_gst,
        quantity=line_item.quantity,
    )


@traced_engine("pricing", "1.0", fingerprint_fields=("line_item", "options"))
def derive_priced_line(
    line_item: LineItem,
    options: Iterable[VendorPriceOption],
) -> PricedLine:
    """
    Price every active vendor option for ``line_item``.

    Preconditions:
        line_item is a validated LineItem (positive quantity).

    Postconditions:
        Options are sorted ascending by unit_total (stable); index 0 is
        the only one marked lowest.  Empty when no option is active.
    """
    active = [o for o in options if o.active]
    priced = sorted((_price(line_item, o) for o in active), key=lambda p: p.unit_total)

    if not priced:
        logger.debug("line_has_no_active_vendors", extra={
            "line_item_id": line_item.id,
            "line_name": line_item.name,
        })
        return PricedLine(line_item=line_item)

    marked = (replace(priced[0], is_lowest=True), *priced[1:])
    return PricedLine(line_item=line_item, options=marked)


def derive_priced_lines(
    items: Sequence[LineItem],
    price_lookup: Mapping[str, Sequence[VendorPriceOption]],
) -> tuple[PricedLine, ...]:
    """Price every BOQ line in order. Lines missing from the lookup have no options."""
    logger.info("price_derivation_started", extra={
        "line_count": len(items),
        "priced_item_count": len(price_lookup),
    })

    lines = tuple(
        derive_priced_line(line_item=item, options=price_lookup.get(item.id, ()))
        for item in items
    )

    logger.info("price_derivation_completed", extra={
        "line_count": len(lines),
        "lines_without_vendors": sum(1 for ln in lines if not ln.has_active_vendors),
    })
    return lines


def calculate_coverage(
    items: Sequence[LineItem],
    price_lookup: Mapping[str, Sequence[VendorPriceOption]],
) -> BoqCoverage:
    """
    Count BOQ lines that have at least one active vendor price.

    ``percentage`` is rounded half-up to a whole number; an empty BOQ
    reports 0.
    """
    total = len(items)
    covered = sum(
        1 for item in items
        if any(o.active for o in price_lookup.get(item.id, ()))
    )
    percentage = 0
    if total:
        percentage = int(
            (Decimal(covered * 100) / Decimal(total)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        )
    return BoqCoverage(covered=covered, total=total, percentage=percentage)
