"""
procure_engines.selection -- Lowest-price rule and approval blockers.

Responsibility:
    Check the reviewer's per-line vendor selections against the priced
    lines and report, in line order, every line that prevents approval:
    lines with no vendor chosen, and non-lowest choices that lack a
    justification.  Also provides the bulk "select lowest" and "clear"
    helpers used when building a selection set.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import procure_kernel.

Invariants enforced:
    - Lines without active vendors never produce blockers.
    - Choosing the lowest option never produces a blocker, whatever the
      override reason says.
    - A non-lowest choice needs a reason unless the reviewer kept the
      submitter's vendor AND the submitter gave a reason (carry-over).
      With carry-over disabled (purchaser compare mode) every non-lowest
      choice needs a fresh reason.
    - Purity: re-evaluated from scratch on every call; no state kept.

Failure modes:
    - UnknownLineItemError if a selection names a line not on the BOQ.
    - DuplicateSelectionError if a line is selected twice.
    - UnknownVendorSelectionError if the chosen vendor is not an active
      option for that line.
    - LineNotSelectableError from ``resolve_selected_option`` if a vendor
      is chosen on a line with no active vendors.  ``evaluate_blockers``
      skips such lines instead, so a stale choice on a line whose vendors
      were all deactivated is simply ignored.
"""

from __future__ import annotations

from collections.abc import Sequence

from procure_kernel.domain.indent import (
    Blocker,
    BlockerKind,
    LineSelection,
    PricedLine,
    PricedOption,
    ReviewOutcome,
)
from procure_kernel.exceptions import (
    DuplicateSelectionError,
    LineNotSelectableError,
    UnknownLineItemError,
    UnknownVendorSelectionError,
)
from procure_kernel.logging_config import get_logger
from procure_engines.tracer import traced_engine

logger = get_logger("engines.selection")

NO_VENDOR_MESSAGE = "{name}: no vendor selected"
REASON_REQUIRED_MESSAGE = "{name}: reason required for not selecting lowest price"


def index_selections(
    priced_lines: Sequence[PricedLine],
    selections: Sequence[LineSelection],
) -> dict[str, LineSelection]:
    """
    Key selections by line id, rejecting unknown and duplicate lines.

    Lines with no selection record are simply absent from the result and
    behave as "no vendor selected".
    """
    known = {ln.line_item.id for ln in priced_lines}
    by_line: dict[str, LineSelection] = {}
    for sel in selections:
        if sel.line_item_id not in known:
            logger.error("selection_unknown_line", extra={"line_item_id": sel.line_item_id})
            raise UnknownLineItemError(sel.line_item_id)
        if sel.line_item_id in by_line:
            logger.error("selection_duplicate_line", extra={"line_item_id": sel.line_item_id})
            raise DuplicateSelectionError(sel.line_item_id)
        by_line[sel.line_item_id] = sel
    return by_line


def resolve_selected_option(
    line: PricedLine,
    selection: LineSelection | None,
) -> PricedOption | None:
    """
    Return the priced option the selection points at, or None if no
    vendor is selected.

    Raises:
        LineNotSelectableError: vendor chosen on a line with no active vendors.
        UnknownVendorSelectionError: vendor not among the line's options.
    """
    if selection is None or not selection.selected_vendor:
        return None

    line_id = line.line_item.id
    vendor = selection.selected_vendor
    if not line.has_active_vendors:
        logger.error("selection_on_unpriced_line", extra={
            "line_item_id": line_id,
            "vendor_name": vendor,
        })
        raise LineNotSelectableError(line_id, vendor)

    option = line.option_for(vendor)
    if option is None:
        logger.error("selection_unknown_vendor", extra={
            "line_item_id": line_id,
            "vendor_name": vendor,
            "available": list(line.vendor_names),
        })
        raise UnknownVendorSelectionError(line_id, vendor, line.vendor_names)
    return option


def override_reason_required(
    option: PricedOption,
    selection: LineSelection,
    carry_over_original_reason: bool = True,
) -> bool:
    """
    True when ``selection`` still needs a reviewer justification.

    Required only if the option is not lowest, the reviewer has not typed
    a reason, and the submitter's reason does not carry over (different
    vendor, or no submitter reason).
    """
    if option.is_lowest or selection.has_override_reason:
        return False
    if not carry_over_original_reason:
        return True
    kept_original = selection.selected_vendor == selection.original_vendor
    return not (kept_original and selection.has_original_reason)


@traced_engine("selection", "1.0", fingerprint_fields=("priced_lines", "selections"))
def evaluate_blockers(
    priced_lines: Sequence[PricedLine],
    selections: Sequence[LineSelection],
    carry_over_original_reason: bool = True,
) -> ReviewOutcome:
    """
    Evaluate the lowest-price rule for every line.

    Preconditions:
        priced_lines come from ``procure_engines.pricing``.

    Postconditions:
        Returns a ReviewOutcome whose blockers are in line order, at most
        one per line.  Empty blockers means the indent may be approved.

    Raises:
        See module "Failure modes".
    """
    by_line = index_selections(priced_lines, selections)
    blockers: list[Blocker] = []

    for line in priced_lines:
        item = line.line_item
        selection = by_line.get(item.id)
        if not line.has_active_vendors:
            continue
        option = resolve_selected_option(line, selection)

        if option is None:
            blockers.append(Blocker(
                kind=BlockerKind.NO_VENDOR_SELECTED,
                line_item_id=item.id,
                line_name=item.name,
                message=NO_VENDOR_MESSAGE.format(name=item.name),
            ))
            continue

        if override_reason_required(option, selection, carry_over_original_reason):
            blockers.append(Blocker(
                kind=BlockerKind.REASON_REQUIRED,
                line_item_id=item.id,
                line_name=item.name,
                message=REASON_REQUIRED_MESSAGE.format(name=item.name),
            ))

    logger.info("blockers_evaluated", extra={
        "line_count": len(priced_lines),
        "selection_count": len(by_line),
        "blocker_count": len(blockers),
        "carry_over_original_reason": carry_over_original_reason,
    })
    return ReviewOutcome(blockers=tuple(blockers))


def auto_select_lowest(
    priced_lines: Sequence[PricedLine],
    selections: Sequence[LineSelection] = (),
) -> tuple[LineSelection, ...]:
    """
    Select the lowest vendor on every line, clearing override reasons.

    Lines without active vendors end up with no vendor.  Submitter
    context (original vendor/reason) on existing selections is kept.
    """
    by_line = index_selections(priced_lines, selections)
    result = []
    for line in priced_lines:
        current = by_line.get(line.line_item.id) or LineSelection(line_item_id=line.line_item.id)
        lowest = line.lowest
        result.append(current.with_vendor(lowest.vendor_name if lowest else None))
    logger.info("auto_selected_lowest", extra={"line_count": len(result)})
    return tuple(result)


def clear_selections(
    priced_lines: Sequence[PricedLine],
    selections: Sequence[LineSelection] = (),
) -> tuple[LineSelection, ...]:
    """Drop every vendor choice and override reason, one selection per line."""
    by_line = index_selections(priced_lines, selections)
    return tuple(
        (by_line.get(ln.line_item.id) or LineSelection(line_item_id=ln.line_item.id)).with_vendor(None)
        for ln in priced_lines
    )
