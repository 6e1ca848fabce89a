"""
Purchase Workflows.

State machine for the purchase order lifecycle: ordered from the
supplier, goods received into stock, then paid.
"""

from billing_kernel.domain.workflow import Guard, Transition, Workflow
from billing_kernel.logging_config import get_logger

logger = get_logger("modules.purchases.workflows")


BALANCE_SETTLED = Guard(
    name="balance_settled",
    description="Payment brings the amount owed to the supplier to zero",
)


PURCHASE_WORKFLOW = Workflow(
    name="purchase",
    description="Purchase order lifecycle",
    initial_state="draft",
    states=(
        "draft",
        "ordered",
        "received",
        "partial",
        "paid",
        "cancelled",
    ),
    transitions=(
        Transition("draft", "ordered", action="order"),
        Transition("draft", "received", action="receive"),
        Transition("ordered", "received", action="receive"),
        Transition("received", "paid", action="record_payment", guard=BALANCE_SETTLED),
        Transition("received", "partial", action="record_payment"),
        Transition("partial", "paid", action="record_payment", guard=BALANCE_SETTLED),
        Transition("partial", "partial", action="record_payment"),
        Transition("draft", "cancelled", action="cancel"),
        Transition("ordered", "cancelled", action="cancel"),
        Transition("received", "cancelled", action="cancel"),
        Transition("partial", "cancelled", action="cancel"),
    ),
    terminal_states=("paid", "cancelled"),
)

DELETABLE_STATES = ("draft",)

logger.info(
    "purchase_workflow_defined",
    extra={
        "workflow_name": PURCHASE_WORKFLOW.name,
        "state_count": len(PURCHASE_WORKFLOW.states),
        "transition_count": len(PURCHASE_WORKFLOW.transitions),
    },
)
