"""Core domain models and business logic."""

from flowstate.core.errors import (
    ErrorCode,
    ErrorKind,
    Result,
    WorkflowError,
    WorkflowOperationError,
)
from flowstate.core.lifecycle import InstanceLifecycleManager
from flowstate.core.models import (
    START_ACTION_ID,
    Action,
    HistoryEntry,
    State,
    WorkflowDefinition,
    WorkflowInstance,
)
from flowstate.core.state_machine import TransitionEngine, evaluate_action
from flowstate.core.validator import DefinitionValidator

__all__ = [
    "ErrorCode",
    "ErrorKind",
    "Result",
    "WorkflowError",
    "WorkflowOperationError",
    "InstanceLifecycleManager",
    "START_ACTION_ID",
    "Action",
    "HistoryEntry",
    "State",
    "WorkflowDefinition",
    "WorkflowInstance",
    "TransitionEngine",
    "evaluate_action",
    "DefinitionValidator",
]
