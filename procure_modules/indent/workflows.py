"""
Indent Review Workflow.

State machine for an admin's review of a submitted indent.
"""

from procure_kernel.domain.workflow import Guard, Transition, Workflow
from procure_kernel.logging_config import get_logger

logger = get_logger("modules.indent.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

NO_BLOCKERS = Guard(
    name="no_blockers",
    description="Every priced line has a vendor and every non-lowest choice is justified",
)

COMMENT_PROVIDED = Guard(
    name="comment_provided",
    description="Reviewer explained why the indent is sent back",
)


# -----------------------------------------------------------------------------
# Review Workflow
# -----------------------------------------------------------------------------

REVIEWING = "reviewing"
APPROVED = "approved"
SENT_BACK = "sent_back"

INDENT_REVIEW_WORKFLOW = Workflow(
    name="indent_review",
    description="Admin review of a submitted indent",
    initial_state=REVIEWING,
    states=(REVIEWING, APPROVED, SENT_BACK),
    transitions=(
        Transition(REVIEWING, APPROVED, action="approve", guard=NO_BLOCKERS),
        Transition(REVIEWING, SENT_BACK, action="send_back", guard=COMMENT_PROVIDED),
    ),
    terminal_states=(APPROVED, SENT_BACK),
)

logger.debug(
    "indent_review_workflow_registered",
    extra={
        "workflow_name": INDENT_REVIEW_WORKFLOW.name,
        "state_count": len(INDENT_REVIEW_WORKFLOW.states),
        "transition_count": len(INDENT_REVIEW_WORKFLOW.transitions),
        "initial_state": INDENT_REVIEW_WORKFLOW.initial_state,
    },
)
