"""
Invoice Workflows.

State machine for the sales invoice lifecycle.
"""

from billing_kernel.domain.workflow import Guard, Transition, Workflow
from billing_kernel.logging_config import get_logger

logger = get_logger("modules.invoices.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

BALANCE_SETTLED = Guard(
    name="balance_settled",
    description="Payment brings the outstanding balance to zero",
)

logger.info(
    "invoice_workflow_guards_defined",
    extra={"guards": [BALANCE_SETTLED.name]},
)


# -----------------------------------------------------------------------------
# Invoice Workflow
# -----------------------------------------------------------------------------

INVOICE_WORKFLOW = Workflow(
    name="invoice",
    description="Sales invoice lifecycle",
    initial_state="draft",
    states=(
        "draft",
        "confirmed",
        "partial",
        "paid",
        "cancelled",
    ),
    transitions=(
        Transition("draft", "confirmed", action="confirm"),
        Transition("confirmed", "paid", action="record_payment", guard=BALANCE_SETTLED),
        Transition("confirmed", "partial", action="record_payment"),
        Transition("partial", "paid", action="record_payment", guard=BALANCE_SETTLED),
        Transition("partial", "partial", action="record_payment"),
        Transition("draft", "cancelled", action="cancel"),
        Transition("confirmed", "cancelled", action="cancel"),
        Transition("partial", "cancelled", action="cancel"),
    ),
    terminal_states=("paid", "cancelled"),
)

# Statuses outside the transition table
DELETABLE_STATES = ("draft",)
RECEIPT_STATES = ("confirmed", "partial", "paid")

logger.info(
    "invoice_workflow_defined",
    extra={
        "workflow_name": INVOICE_WORKFLOW.name,
        "state_count": len(INVOICE_WORKFLOW.states),
        "transition_count": len(INVOICE_WORKFLOW.transitions),
    },
)
