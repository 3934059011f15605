"""
Stage definitions for the workflow builder.

Replaces compile-time stage narrowing with a runtime-checked enum.
"""
from enum import Enum


class WorkflowStage(Enum):
    """Lifecycle stages of a WorkflowBuilder."""
    INITIAL = "initial"
    PARTS = "parts"
    ACTIONS = "actions"
    OUTPUT = "output"
    EXECUTED = "executed"

    def __str__(self) -> str:
        """Return string value of the stage."""
        return self.value


# Stages from which each kind of builder call is allowed
ALLOWED_STAGES = {
    "part": (WorkflowStage.INITIAL, WorkflowStage.PARTS),
    "action": (WorkflowStage.PARTS, WorkflowStage.ACTIONS),
    "output": (WorkflowStage.PARTS, WorkflowStage.ACTIONS, WorkflowStage.OUTPUT),
}

# Stage a builder moves to after each kind of call
NEXT_STAGE = {
    "part": WorkflowStage.PARTS,
    "action": WorkflowStage.ACTIONS,
    "output": WorkflowStage.OUTPUT,
}
