"""
Typed Exception Hierarchy for indent review and purchase-order handling.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The UI layer has to tell a malformed request apart from a review that is
simply not ready yet. Catching by type (not by message) keeps that
distinction stable:

    try:
        result = engine.compare(boq, prices, selections, fleet_costs)
    except UnknownVendorSelectionError as e:
        show_error(f"{e.vendor_name} is not offered for {e.line_item_id}")

Every exception carries a ``code`` class attribute and its context as
attributes, so it survives logging and API serialisation.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ProcurementError (base)
    |
    +-- InputValidationError
    |   +-- InvalidAmountError
    |   +-- InvalidLineItemError
    |   +-- InvalidPriceOptionError
    |   +-- InvalidFleetCostError
    |   +-- UnknownLineItemError
    |   +-- UnknownVendorSelectionError
    |   +-- LineNotSelectableError
    |   +-- DuplicateSelectionError
    |   +-- InvalidReceiptError
    |   +-- InvalidLedgerEntryError
    |
    +-- ReviewError
        +-- ApprovalBlockedError
        +-- SendBackCommentRequiredError
        +-- ReviewSessionClosedError
        +-- InvalidTransitionError

Business-rule violations (missing override reason, no vendor selected)
are NOT exceptions. They are reported as blockers in ``ReviewOutcome``.

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category   | Code                          | When Raised
-----------|-------------------------------|-------------------------------------------
Input      | INVALID_AMOUNT                | Float, NaN or non-numeric amount
           | INVALID_LINE_ITEM             | Missing id, non-positive quantity
           | INVALID_PRICE_OPTION          | Missing vendor, negative price or GST
           | INVALID_FLEET_COST            | Negative fleet cost or fleet GST
           | UNKNOWN_LINE_ITEM             | Selection/receipt names a line not on the BOQ/PO
           | UNKNOWN_VENDOR_SELECTION      | Selected vendor not among the line's options
           | LINE_NOT_SELECTABLE           | Vendor selected on a line with no active vendors
           | DUPLICATE_SELECTION           | Two selections for the same line
           | INVALID_RECEIPT               | Receipt quantities or invoices invalid
           | INVALID_LEDGER_ENTRY          | Negative amount, or amount on the wrong side
-----------|-------------------------------|-------------------------------------------
Review     | APPROVAL_BLOCKED              | Approve attempted with open blockers
           | SEND_BACK_COMMENT_REQUIRED    | Send-back attempted with blank comment
           | REVIEW_SESSION_CLOSED         | Session already approved or sent back
           | INVALID_TRANSITION            | Action not allowed from the current state
"""

from __future__ import annotations


class ProcurementError(Exception):
    """
    Base exception for all procurement errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PROCUREMENT_ERROR"


# Input validation exceptions


class InputValidationError(ProcurementError):
    """Base exception for malformed engine input."""

    code: str = "INPUT_VALIDATION_ERROR"


class InvalidAmountError(InputValidationError):
    """A monetary amount or quantity could not be used as a Decimal."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field_name: str, value: object, reason: str):
        self.field_name = field_name
        self.value = repr(value)
        self.reason = reason
        super().__init__(f"Invalid {field_name} {value!r}: {reason}")


class InvalidLineItemError(InputValidationError):
    """BOQ line item is malformed."""

    code: str = "INVALID_LINE_ITEM"

    def __init__(self, line_item_id: str, reason: str):
        self.line_item_id = line_item_id
        self.reason = reason
        super().__init__(f"Invalid line item {line_item_id!r}: {reason}")


class InvalidPriceOptionError(InputValidationError):
    """Vendor price option is malformed."""

    code: str = "INVALID_PRICE_OPTION"

    def __init__(self, vendor_name: str, reason: str):
        self.vendor_name = vendor_name
        self.reason = reason
        super().__init__(f"Invalid price option for vendor {vendor_name!r}: {reason}")


class InvalidFleetCostError(InputValidationError):
    """Fleet (delivery) cost is negative."""

    code: str = "INVALID_FLEET_COST"

    def __init__(self, reason: str, vendor_name: str | None = None):
        self.vendor_name = vendor_name
        self.reason = reason
        where = f" for vendor {vendor_name!r}" if vendor_name else ""
        super().__init__(f"Invalid fleet cost{where}: {reason}")


class UnknownLineItemError(InputValidationError):
    """A selection or receipt refers to a line that does not exist."""

    code: str = "UNKNOWN_LINE_ITEM"

    def __init__(self, line_item_id: str):
        self.line_item_id = line_item_id
        super().__init__(f"Unknown line item: {line_item_id}")


class UnknownVendorSelectionError(InputValidationError):
    """
    Selected vendor is not among the line's active priced options.

    The selection UI should only offer valid vendors, so this indicates
    stale or tampered input.
    """

    code: str = "UNKNOWN_VENDOR_SELECTION"

    def __init__(self, line_item_id: str, vendor_name: str, available: tuple[str, ...]):
        self.line_item_id = line_item_id
        self.vendor_name = vendor_name
        self.available = available
        super().__init__(
            f"Vendor {vendor_name!r} is not an active option for line {line_item_id} "
            f"(available: {', '.join(available) or 'none'})"
        )


class LineNotSelectableError(InputValidationError):
    """A vendor was selected on a line that has no active vendor options."""

    code: str = "LINE_NOT_SELECTABLE"

    def __init__(self, line_item_id: str, vendor_name: str):
        self.line_item_id = line_item_id
        self.vendor_name = vendor_name
        super().__init__(
            f"Line {line_item_id} has no active vendors; "
            f"cannot select {vendor_name!r}"
        )


class DuplicateSelectionError(InputValidationError):
    """More than one selection was supplied for the same line."""

    code: str = "DUPLICATE_SELECTION"

    def __init__(self, line_item_id: str):
        self.line_item_id = line_item_id
        super().__init__(f"Duplicate selection for line {line_item_id}")


class InvalidReceiptError(InputValidationError):
    """Goods receipt cannot be recorded as entered."""

    code: str = "INVALID_RECEIPT"

    def __init__(self, reason: str, line_item_id: str | None = None):
        self.line_item_id = line_item_id
        self.reason = reason
        where = f" (line {line_item_id})" if line_item_id else ""
        super().__init__(f"Invalid receipt{where}: {reason}")


class InvalidLedgerEntryError(InputValidationError):
    """Vendor ledger entry is malformed."""

    code: str = "INVALID_LEDGER_ENTRY"

    def __init__(self, reason: str, vendor_name: str | None = None, ref_no: str = ""):
        self.vendor_name = vendor_name
        self.ref_no = ref_no
        self.reason = reason
        where = f" {ref_no!r}" if ref_no else ""
        super().__init__(f"Invalid ledger entry{where}: {reason}")


# Review session exceptions


class ReviewError(ProcurementError):
    """Base exception for review session errors."""

    code: str = "REVIEW_ERROR"


class ApprovalBlockedError(ReviewError):
    """Approval attempted while blockers remain."""

    code: str = "APPROVAL_BLOCKED"

    def __init__(self, indent_id: str, blockers: tuple[str, ...]):
        self.indent_id = indent_id
        self.blockers = blockers
        super().__init__(
            f"Cannot approve indent {indent_id}: "
            f"{len(blockers)} blocker(s) must be resolved first"
        )


class SendBackCommentRequiredError(ReviewError):
    """Send-back attempted without an overall comment."""

    code: str = "SEND_BACK_COMMENT_REQUIRED"

    def __init__(self, indent_id: str):
        self.indent_id = indent_id
        super().__init__(
            f"A comment is required to send indent {indent_id} back for rework"
        )


class ReviewSessionClosedError(ReviewError):
    """The review session already reached a terminal state."""

    code: str = "REVIEW_SESSION_CLOSED"

    def __init__(self, indent_id: str, state: str):
        self.indent_id = indent_id
        self.state = state
        super().__init__(f"Review of indent {indent_id} is closed ({state})")


class InvalidTransitionError(ReviewError):
    """No workflow transition matches the requested action."""

    code: str = "INVALID_TRANSITION"

    def __init__(self, workflow: str, from_state: str, action: str):
        self.workflow = workflow
        self.from_state = from_state
        self.action = action
        super().__init__(
            f"Workflow {workflow!r} has no '{action}' transition from '{from_state}'"
        )
