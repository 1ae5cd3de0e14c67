#!/usr/bin/env python3
"""
Compare vendor prices for an indent and preview its purchase orders.

Reads one JSON request describing the BOQ, vendor prices, the purchaser's
selections and per-vendor fleet costs, runs the comparison and prints the
result as JSON.  Exit status is 1 while blockers remain.

Request shape:
    {
      "indent": {"id": "IND-1", "project": "Tower A",
                 "items": [{"id": "L1", "name": "Cement", "unit": "bag",
                            "quantity": 10}]},
      "prices": {"L1": [{"vendor_name": "A", "unit_price": 100,
                         "unit_gst": 5, "active": true}]},
      "selections": {"L1": {"vendor": "A", "reason": "faster delivery"}},
      "fleet_costs": {"A": {"cost": 100, "gst": 18}}
    }

Usage:
    python3 scripts/review_indent.py request.json
    python3 scripts/review_indent.py request.json --compare-mode
    python3 scripts/review_indent.py request.json --xlsx po_preview.xlsx
    cat request.json | python3 scripts/review_indent.py -
"""

import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from procure_config import get_active_config  # noqa: E402
from procure_kernel.domain.indent import (  # noqa: E402
    FleetCost,
    Indent,
    LineItem,
    LineSelection,
    VendorPriceOption,
)
from procure_kernel.exceptions import ProcurementError  # noqa: E402
from procure_kernel.logging_config import configure_logging  # noqa: E402
from procure_engines.comparison import ComparisonEngine, ComparisonResult  # noqa: E402
from procure_modules.indent import IndentReviewSession, PurchaserChoice  # noqa: E402

PO_HEADERS = ("Item", "Unit", "Quantity", "Rate", "GST", "Amount", "Total")


# =============================================================================
# Request parsing
# =============================================================================


def load_request(source: str) -> dict:
    """Read the request JSON; numbers become Decimal so no float creeps in."""
    if source == "-":
        text = sys.stdin.read()
    else:
        text = Path(source).read_text(encoding="utf-8")
    return json.loads(text, parse_float=Decimal)


def parse_indent(data: dict) -> Indent:
    raw = data.get("indent") or {}
    items = tuple(
        LineItem(
            id=str(item["id"]),
            name=item.get("name", ""),
            unit=item.get("unit", ""),
            quantity=item["quantity"],
        )
        for item in raw.get("items", [])
    )
    return Indent(id=str(raw.get("id", "")), items=items, project=raw.get("project", ""))


def parse_prices(data: dict) -> dict[str, tuple[VendorPriceOption, ...]]:
    return {
        line_id: tuple(
            VendorPriceOption(
                vendor_name=opt["vendor_name"],
                unit_price=opt["unit_price"],
                unit_gst=opt.get("unit_gst", 0),
                active=opt.get("active", True),
            )
            for opt in options
        )
        for line_id, options in (data.get("prices") or {}).items()
    }


def parse_choices(data: dict) -> dict[str, PurchaserChoice]:
    return {
        line_id: PurchaserChoice(
            vendor_name=choice.get("vendor"),
            reason=choice.get("reason", ""),
        )
        for line_id, choice in (data.get("selections") or {}).items()
    }


def parse_fleet_costs(data: dict) -> dict[str, FleetCost]:
    return {
        vendor: FleetCost(cost=fc.get("cost", 0), gst=fc.get("gst", 0))
        for vendor, fc in (data.get("fleet_costs") or {}).items()
    }


# =============================================================================
# Modes
# =============================================================================


def run_review(data: dict, config) -> ComparisonResult:
    """Admin review: purchaser's choices seed the session and their reasons carry over."""
    session = IndentReviewSession.start(
        parse_indent(data), parse_prices(data), parse_choices(data), config,
    )
    for vendor, fleet in parse_fleet_costs(data).items():
        session.set_fleet_cost(vendor, fleet.cost, fleet.gst)
    return session.evaluate()


def run_compare(data: dict) -> ComparisonResult:
    """Purchaser compare: selections are the purchaser's own, nothing carries over."""
    selections = [
        LineSelection(
            line_item_id=line_id,
            selected_vendor=choice.vendor_name,
            override_reason=choice.reason,
        )
        for line_id, choice in parse_choices(data).items()
    ]
    engine = ComparisonEngine(carry_over_original_reason=False)
    return engine.compare(
        parse_indent(data), parse_prices(data), selections, parse_fleet_costs(data),
    )


# =============================================================================
# Excel export
# =============================================================================


def write_po_workbook(result: ComparisonResult, path: str) -> None:
    """One sheet per vendor group with line amounts, fleet cost and totals."""
    from openpyxl import Workbook
    from openpyxl.styles import Font

    wb = Workbook()
    wb.remove(wb.active)
    bold = Font(bold=True)

    for group in result.vendor_groups:
        # Sheet titles are capped at 31 chars and may not contain []:*?/\
        title = "".join(c for c in group.vendor_name if c not in "[]:*?/\\")[:31] or "Vendor"
        ws = wb.create_sheet(title=title)
        ws.append([f"Indent {result.indent_id}", group.vendor_name])
        ws.append([])
        ws.append(list(PO_HEADERS))
        for cell in ws[3]:
            cell.font = bold
        for gl in group.lines:
            opt = gl.option
            ws.append([
                gl.line_item.name,
                gl.line_item.unit,
                float(gl.line_item.quantity),
                float(opt.unit_price),
                float(opt.unit_gst),
                float(opt.extended_cost),
                float(opt.extended_total),
            ])
        ws.append([])
        for label, amount in (
            ("Subtotal", group.subtotal_cost),
            ("GST", group.subtotal_gst),
            ("Fleet cost", group.fleet_cost),
            ("Fleet GST", group.fleet_gst),
            ("Final total", group.final_total),
        ):
            ws.append([label, None, None, None, None, None, float(amount)])
        ws.cell(row=ws.max_row, column=1).font = bold

    if not result.vendor_groups:
        wb.create_sheet(title="No purchase orders")
    wb.save(path)


# =============================================================================
# Main
# =============================================================================


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Compare vendor prices for an indent and preview purchase orders.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  python3 scripts/review_indent.py request.json\n"
            "  python3 scripts/review_indent.py request.json --compare-mode\n"
            "  python3 scripts/review_indent.py request.json --xlsx preview.xlsx\n"
        ),
    )
    parser.add_argument("request", help="Request JSON file, or - for stdin")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--compare-mode", action="store_true",
        help="Purchaser compare mode: no carry-over of submitted reasons",
    )
    mode.add_argument("--config", type=str, default=None, help="Procurement config YAML (review mode only)")
    parser.add_argument("--xlsx", type=str, default=None, help="Write PO previews to this workbook")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Log level (default: WARNING)")

    args = parser.parse_args(argv)
    configure_logging(level=getattr(logging, args.log_level.upper(), logging.WARNING), stream=sys.stderr)

    try:
        data = load_request(args.request)
        if args.compare_mode:
            result = run_compare(data)
        else:
            result = run_review(data, get_active_config(args.config))
        if args.xlsx:
            write_po_workbook(result, args.xlsx)
    except (OSError, ValueError, KeyError, ProcurementError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(result.to_dict(), indent=2))

    return 0 if result.is_approvable else 1


if __name__ == "__main__":
    sys.exit(main())
