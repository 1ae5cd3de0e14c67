"""
Indent domain types (``procure_kernel.domain.indent``).

Responsibility
--------------
Immutable records for reviewing a BOQ/indent: the submitted line items,
each vendor's price for an item, the priced options derived from them,
the reviewer's per-line selections, and the per-vendor purchase-order
previews built from those selections.

Architecture position
---------------------
**Kernel domain layer** -- pure value objects.  ZERO I/O.  Imported by
``procure_engines`` and ``procure_modules``.

Invariants enforced
-------------------
* Quantities are positive and prices, GST and fleet amounts are
  non-negative Decimals (checked in ``__post_init__``).
* Derived amounts (unit totals, extended amounts, group totals) are
  properties, so they are always computed from current fields and never
  stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum

from procure_kernel.domain.values import ZERO, to_decimal
from procure_kernel.exceptions import (
    InvalidFleetCostError,
    InvalidLineItemError,
    InvalidPriceOptionError,
)


# =========================================================================
# Submitted data
# =========================================================================


@dataclass(frozen=True)
class LineItem:
    """One BOQ row: an item and the quantity required."""

    id: str
    name: str
    unit: str
    quantity: Decimal

    def __post_init__(self) -> None:
        if not self.id or not str(self.id).strip():
            raise InvalidLineItemError(str(self.id), "id is required")
        object.__setattr__(self, "quantity", to_decimal(self.quantity, "quantity"))
        if self.quantity <= ZERO:
            raise InvalidLineItemError(
                self.id, f"quantity must be positive, got {self.quantity}"
            )


@dataclass(frozen=True)
class Indent:
    """A submitted BOQ/indent: its line items in display order."""

    id: str
    items: tuple[LineItem, ...] = ()
    project: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        seen: set[str] = set()
        for item in self.items:
            if item.id in seen:
                raise InvalidLineItemError(item.id, f"duplicate line on indent {self.id}")
            seen.add(item.id)


@dataclass(frozen=True)
class VendorPriceOption:
    """A vendor's per-unit price and per-unit GST for one item."""

    vendor_name: str
    unit_price: Decimal
    unit_gst: Decimal = ZERO
    active: bool = True

    def __post_init__(self) -> None:
        if not self.vendor_name or not self.vendor_name.strip():
            raise InvalidPriceOptionError(str(self.vendor_name), "vendor name is required")
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price, "unit_price"))
        object.__setattr__(self, "unit_gst", to_decimal(self.unit_gst, "unit_gst"))
        if self.unit_price < ZERO:
            raise InvalidPriceOptionError(
                self.vendor_name, f"unit price cannot be negative, got {self.unit_price}"
            )
        if self.unit_gst < ZERO:
            raise InvalidPriceOptionError(
                self.vendor_name, f"unit GST cannot be negative, got {self.unit_gst}"
            )
        if not isinstance(self.active, bool):
            raise InvalidPriceOptionError(
                self.vendor_name, f"active must be true or false, got {self.active!r}"
            )


# =========================================================================
# Derived pricing
# =========================================================================


@dataclass(frozen=True)
class PricedOption:
    """An active vendor option priced for a specific line quantity."""

    vendor_name: str
    unit_price: Decimal
    unit_gst: Decimal
    quantity: Decimal
    is_lowest: bool = False

    @property
    def unit_total(self) -> Decimal:
        return self.unit_price + self.unit_gst

    @property
    def extended_cost(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def extended_gst(self) -> Decimal:
        return self.quantity * self.unit_gst

    @property
    def extended_total(self) -> Decimal:
        return self.quantity * self.unit_total


@dataclass(frozen=True)
class PricedLine:
    """A BOQ line with its active options, cheapest first."""

    line_item: LineItem
    options: tuple[PricedOption, ...] = ()

    @property
    def has_active_vendors(self) -> bool:
        return bool(self.options)

    @property
    def lowest(self) -> PricedOption | None:
        return self.options[0] if self.options else None

    @property
    def vendor_names(self) -> tuple[str, ...]:
        return tuple(o.vendor_name for o in self.options)

    def option_for(self, vendor_name: str) -> PricedOption | None:
        """Return the option offered by ``vendor_name``, if any."""
        for option in self.options:
            if option.vendor_name == vendor_name:
                return option
        return None


@dataclass(frozen=True)
class BoqCoverage:
    """How many BOQ lines have at least one active vendor price."""

    covered: int
    total: int
    percentage: int

    @property
    def missing(self) -> int:
        return self.total - self.covered


# =========================================================================
# Review working state
# =========================================================================


@dataclass(frozen=True)
class LineSelection:
    """
    Reviewer's choice for one line.

    ``original_vendor`` and ``original_reason`` record what the submitter
    (purchaser) chose and why; ``override_reason`` is the reviewer's own
    justification for the current choice.
    """

    line_item_id: str
    selected_vendor: str | None = None
    override_reason: str = ""
    original_vendor: str | None = None
    original_reason: str = ""

    @property
    def has_override_reason(self) -> bool:
        return bool(self.override_reason and self.override_reason.strip())

    @property
    def has_original_reason(self) -> bool:
        return bool(self.original_reason and self.original_reason.strip())

    def with_vendor(self, vendor_name: str | None) -> LineSelection:
        """Select a vendor; a fresh choice starts with an empty reason."""
        return replace(self, selected_vendor=vendor_name, override_reason="")

    def with_reason(self, reason: str) -> LineSelection:
        return replace(self, override_reason=reason)


@dataclass(frozen=True)
class FleetCost:
    """Delivery/logistics surcharge for one vendor's purchase order."""

    cost: Decimal = ZERO
    gst: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "cost", to_decimal(self.cost, "fleet cost"))
        object.__setattr__(self, "gst", to_decimal(self.gst, "fleet gst"))
        if self.cost < ZERO:
            raise InvalidFleetCostError(f"cost cannot be negative, got {self.cost}")
        if self.gst < ZERO:
            raise InvalidFleetCostError(f"gst cannot be negative, got {self.gst}")

    @property
    def total(self) -> Decimal:
        return self.cost + self.gst


NO_FLEET_COST = FleetCost()


# =========================================================================
# Purchase-order previews
# =========================================================================


@dataclass(frozen=True)
class VendorGroupLine:
    """A selected line as it appears on a vendor's purchase-order preview."""

    line_item: LineItem
    option: PricedOption


@dataclass(frozen=True)
class VendorGroup:
    """All lines awarded to one vendor, plus that vendor's fleet cost."""

    vendor_name: str
    lines: tuple[VendorGroupLine, ...] = ()
    fleet_cost: Decimal = ZERO
    fleet_gst: Decimal = ZERO

    @property
    def subtotal_cost(self) -> Decimal:
        return sum((ln.option.extended_cost for ln in self.lines), ZERO)

    @property
    def subtotal_gst(self) -> Decimal:
        return sum((ln.option.extended_gst for ln in self.lines), ZERO)

    @property
    def items_total(self) -> Decimal:
        return self.subtotal_cost + self.subtotal_gst

    @property
    def final_total(self) -> Decimal:
        return self.subtotal_cost + self.subtotal_gst + self.fleet_cost + self.fleet_gst


# =========================================================================
# Review outcome
# =========================================================================


class BlockerKind(str, Enum):
    """Why a line prevents approval."""

    NO_VENDOR_SELECTED = "no_vendor_selected"
    REASON_REQUIRED = "reason_required"


@dataclass(frozen=True)
class Blocker:
    """A business-rule violation on one line."""

    kind: BlockerKind
    line_item_id: str
    line_name: str
    message: str


@dataclass(frozen=True)
class ReviewOutcome:
    """Blockers in line order. Empty means the indent can be approved."""

    blockers: tuple[Blocker, ...] = field(default_factory=tuple)

    @property
    def messages(self) -> tuple[str, ...]:
        return tuple(b.message for b in self.blockers)

    @property
    def is_approvable(self) -> bool:
        return not self.blockers
