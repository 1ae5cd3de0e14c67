"""
Indent Review Service (``procure_modules.indent.service``).

Responsibility
--------------
Holds the mutable working state of one admin review (per-line
selections and per-vendor fleet costs) and drives the review
workflow (``reviewing`` -> ``approved`` | ``sent_back``).  Every read of
the comparison is recomputed from scratch by ``ComparisonEngine``.

Architecture position
---------------------
**Modules layer** -- the caller of the pure engines.  Owns the selection
set and serialises edits to it; persistence of approvals and send-backs
is left to the caller of this service.

Invariants enforced
-------------------
* Selections start from the purchaser's submitted choices.
* Approval only when the blocker list is empty.
* Send-back only with a non-blank comment.
* After approval or send-back the session is closed to further edits.
* Role data is never consulted; ``actor_id`` is recorded and logged only.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal

from procure_config.schema import ProcurementConfig
from procure_kernel.domain.indent import (
    FleetCost,
    Indent,
    LineSelection,
    PricedLine,
    VendorPriceOption,
)
from procure_kernel.domain.values import ZERO
from procure_kernel.exceptions import (
    ApprovalBlockedError,
    ReviewSessionClosedError,
    SendBackCommentRequiredError,
    UnknownLineItemError,
)
from procure_kernel.logging_config import LogContext, get_logger
from procure_engines import selection as selection_engine
from procure_engines.comparison import ComparisonEngine, ComparisonResult
from procure_modules.indent.models import PurchaserChoice, ReviewDecision
from procure_modules.indent.workflows import INDENT_REVIEW_WORKFLOW
from procure_modules.purchase_order.service import draft_purchase_orders

logger = get_logger("modules.indent.service")


class IndentReviewSession:
    """
    One reviewer's pass over one submitted indent.

    Contract:
        Not thread-safe; a session belongs to a single editing surface.
    Guarantees:
        - ``evaluate()`` reflects every edit made so far.
        - ``approve()`` and ``send_back()`` are the only transitions, and
          each can happen at most once per session.
    """

    workflow = INDENT_REVIEW_WORKFLOW

    def __init__(
        self,
        indent: Indent,
        price_lookup: Mapping[str, Sequence[VendorPriceOption]],
        selections: Sequence[LineSelection] = (),
        config: ProcurementConfig | None = None,
    ):
        self.indent = indent
        self.price_lookup = price_lookup
        self.config = config or ProcurementConfig.with_defaults()
        self._engine = ComparisonEngine(
            carry_over_original_reason=self.config.carry_over_purchaser_reason,
        )
        self._state = self.workflow.initial_state
        self._fleet_costs: dict[str, FleetCost] = {}

        priced = self._priced_lines()
        given = selection_engine.index_selections(priced, selections)
        self._selections: dict[str, LineSelection] = {
            item.id: given.get(item.id) or LineSelection(line_item_id=item.id)
            for item in indent.items
        }

    @classmethod
    def start(
        cls,
        indent: Indent,
        price_lookup: Mapping[str, Sequence[VendorPriceOption]],
        submitted: Mapping[str, PurchaserChoice] | None = None,
        config: ProcurementConfig | None = None,
    ) -> IndentReviewSession:
        """Open a review pre-filled with the purchaser's choices."""
        submitted = submitted or {}
        selections = [
            LineSelection(
                line_item_id=line_id,
                selected_vendor=choice.vendor_name,
                original_vendor=choice.vendor_name,
                original_reason=choice.reason,
            )
            for line_id, choice in submitted.items()
        ]
        session = cls(indent, price_lookup, selections, config)
        logger.info("indent_review_started", extra={
            "indent_id": indent.id,
            "line_count": len(indent.items),
            "submitted_count": len(selections),
        })
        return session

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def state(self) -> str:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self.workflow.is_terminal(self._state)

    @property
    def selections(self) -> tuple[LineSelection, ...]:
        return tuple(self._selections[item.id] for item in self.indent.items)

    @property
    def fleet_costs(self) -> dict[str, FleetCost]:
        return dict(self._fleet_costs)

    def evaluate(self) -> ComparisonResult:
        """Recompute pricing, blockers and PO previews from current state."""
        return self._engine.compare(
            self.indent,
            self.price_lookup,
            self.selections,
            self._fleet_costs,
        )

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def select_vendor(self, line_item_id: str, vendor_name: str | None) -> LineSelection:
        """Choose a vendor for a line; the reviewer's reason is reset."""
        self._ensure_open()
        current = self._selection(line_item_id)
        updated = current.with_vendor(vendor_name)
        line = self._priced_line(line_item_id)
        selection_engine.resolve_selected_option(line, updated)
        self._selections[line_item_id] = updated
        logger.info("review_vendor_selected", extra={
            "indent_id": self.indent.id,
            "line_item_id": line_item_id,
            "vendor_name": vendor_name,
        })
        return updated

    def set_override_reason(self, line_item_id: str, reason: str) -> LineSelection:
        self._ensure_open()
        updated = self._selection(line_item_id).with_reason(reason)
        self._selections[line_item_id] = updated
        return updated

    def set_fleet_cost(
        self,
        vendor_name: str,
        cost: Decimal | int | str = ZERO,
        gst: Decimal | int | str = ZERO,
    ) -> FleetCost:
        """Set the delivery surcharge for a vendor's purchase order."""
        self._ensure_open()
        fleet = FleetCost(cost=cost, gst=gst)
        self._fleet_costs[vendor_name] = fleet
        logger.info("review_fleet_cost_set", extra={
            "indent_id": self.indent.id,
            "vendor_name": vendor_name,
            "fleet_cost": str(fleet.cost),
            "fleet_gst": str(fleet.gst),
        })
        return fleet

    def clear_fleet_cost(self, vendor_name: str) -> None:
        self._ensure_open()
        self._fleet_costs.pop(vendor_name, None)

    def auto_select_lowest(self) -> tuple[LineSelection, ...]:
        self._ensure_open()
        updated = selection_engine.auto_select_lowest(self._priced_lines(), self.selections)
        self._selections = {s.line_item_id: s for s in updated}
        return updated

    def clear_selections(self) -> tuple[LineSelection, ...]:
        self._ensure_open()
        updated = selection_engine.clear_selections(self._priced_lines(), self.selections)
        self._selections = {s.line_item_id: s for s in updated}
        return updated

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def approve(self, actor_id: str | None = None) -> ReviewDecision:
        """
        Approve the indent and draft one purchase order per vendor.

        Raises:
            ReviewSessionClosedError: session already decided.
            ApprovalBlockedError: blockers remain; carries the messages.
        """
        self._ensure_open()
        transition = self.workflow.find_transition(self._state, "approve")

        with LogContext.bind(indent_id=self.indent.id, actor_id=actor_id):
            result = self.evaluate()
            if not result.is_approvable:
                logger.warning("indent_approval_blocked", extra={
                    "blocker_count": len(result.blockers),
                    "blockers": list(result.blockers),
                })
                raise ApprovalBlockedError(self.indent.id, result.blockers)

            purchase_orders = draft_purchase_orders(
                indent_id=self.indent.id,
                vendor_groups=result.vendor_groups,
                selections=self.selections,
                project=self.indent.project,
            )
            self._state = transition.to_state
            logger.info("indent_approved", extra={
                "po_count": len(purchase_orders),
                "overall_total": str(result.overall_total),
            })

        return ReviewDecision(
            indent_id=self.indent.id,
            state=self._state,
            actor_id=actor_id,
            purchase_orders=purchase_orders,
            overall_total=result.overall_total,
        )

    def send_back(self, comment: str, actor_id: str | None = None) -> ReviewDecision:
        """
        Return the indent to the purchaser for rework.

        Raises:
            ReviewSessionClosedError: session already decided.
            SendBackCommentRequiredError: comment is blank.
        """
        self._ensure_open()
        transition = self.workflow.find_transition(self._state, "send_back")
        if not comment or not comment.strip():
            raise SendBackCommentRequiredError(self.indent.id)

        self._state = transition.to_state
        with LogContext.bind(indent_id=self.indent.id, actor_id=actor_id):
            logger.info("indent_sent_back", extra={"comment_length": len(comment.strip())})

        return ReviewDecision(
            indent_id=self.indent.id,
            state=self._state,
            actor_id=actor_id,
            comment=comment.strip(),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_open(self) -> None:
        if self.is_closed:
            raise ReviewSessionClosedError(self.indent.id, self._state)

    def _selection(self, line_item_id: str) -> LineSelection:
        try:
            return self._selections[line_item_id]
        except KeyError:
            raise UnknownLineItemError(line_item_id) from None

    def _priced_lines(self) -> tuple[PricedLine, ...]:
        return self._engine.price(self.indent, self.price_lookup)

    def _priced_line(self, line_item_id: str) -> PricedLine:
        for line in self._priced_lines():
            if line.line_item.id == line_item_id:
                return line
        raise UnknownLineItemError(line_item_id)
