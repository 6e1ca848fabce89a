"""
Quotation Workflows.

State machine for the quotation lifecycle.  An approved quotation is
closed by converting it into a draft invoice.
"""

from billing_kernel.domain.workflow import Transition, Workflow
from billing_kernel.logging_config import get_logger

logger = get_logger("modules.quotations.workflows")


QUOTATION_WORKFLOW = Workflow(
    name="quotation",
    description="Sales quotation lifecycle",
    initial_state="draft",
    states=(
        "draft",
        "sent",
        "approved",
        "rejected",
        "expired",
        "converted",
    ),
    transitions=(
        Transition("draft", "sent", action="send"),
        Transition("sent", "approved", action="approve"),
        Transition("sent", "rejected", action="reject"),
        Transition("draft", "expired", action="expire"),
        Transition("sent", "expired", action="expire"),
        Transition("approved", "converted", action="convert"),
    ),
    terminal_states=("rejected", "expired", "converted"),
)

# Lines and header may still change while the client has not answered
UPDATABLE_STATES = ("draft", "sent")
DELETABLE_STATES = ("draft",)

logger.info(
    "quotation_workflow_defined",
    extra={
        "workflow_name": QUOTATION_WORKFLOW.name,
        "state_count": len(QUOTATION_WORKFLOW.states),
        "transition_count": len(QUOTATION_WORKFLOW.transitions),
    },
)
