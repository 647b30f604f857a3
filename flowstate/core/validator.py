"""
Workflow definition validation.

Checks that a proposed definition is a well-formed state machine before it
is admitted. Checks run in a fixed order and the first violation is
reported.

Reachability of states and the presence of an enabled outgoing action from
every non-final state are intentionally not checked.
"""

from collections import Counter
from typing import Callable, Optional

from flowstate.core.errors import ErrorCode, Result, WorkflowError
from flowstate.core.models import WorkflowDefinition

# Returns True when a definition with the given ID is already registered
DefinitionExists = Callable[[str], bool]

DefinitionCheck = Callable[[WorkflowDefinition], Optional[WorkflowError]]


def _duplicates(ids: list[str]) -> list[str]:
    """IDs appearing more than once, in first-seen order."""
    counts = Counter(ids)
    return [item for item in counts if counts[item] > 1]


class DefinitionValidator:
    """
    Validates workflow definitions prior to registration.
    
    Validation order:
    1. ID is not empty or whitespace
    2. ID is not already registered
    3. Exactly one initial state
    4. State IDs are unique
    5. Action IDs are unique
    6. Every action's toState exists
    7. Every action's fromStates entries exist
    """
    
    def __init__(self, definition_exists: DefinitionExists):
        self._definition_exists = definition_exists
        self._checks: list[DefinitionCheck] = [
            self._check_id_present,
            self._check_id_unused,
            self._check_single_initial_state,
            self._check_unique_state_ids,
            self._check_unique_action_ids,
            self._check_to_state_references,
            self._check_from_state_references,
        ]
    
    def validate(self, definition: WorkflowDefinition) -> Result[WorkflowDefinition]:
        """
        Run all checks against the definition.
        
        Args:
            definition: Proposed workflow definition
            
        Returns:
            Result holding the definition, or the first violation found
        """
        for check in self._checks:
            error = check(definition)
            if error is not None:
                return Result.from_error(error)
        return Result.success(definition)
    
    def _check_id_present(self, definition: WorkflowDefinition) -> Optional[WorkflowError]:
        if not definition.id or not definition.id.strip():
            return WorkflowError(
                ErrorCode.EMPTY_DEFINITION_ID,
                "Workflow Definition ID cannot be empty.",
            )
        return None
    
    def _check_id_unused(self, definition: WorkflowDefinition) -> Optional[WorkflowError]:
        if self._definition_exists(definition.id):
            return WorkflowError(
                ErrorCode.DEFINITION_EXISTS,
                f"Workflow Definition with ID '{definition.id}' already exists.",
                {"definition_id": definition.id},
            )
        return None
    
    def _check_single_initial_state(self, definition: WorkflowDefinition) -> Optional[WorkflowError]:
        initial_states = [state.id for state in definition.states if state.is_initial]
        if len(initial_states) != 1:
            return WorkflowError(
                ErrorCode.INITIAL_STATE_COUNT,
                "A workflow definition must contain exactly one initial state.",
                {"initial_states": initial_states},
            )
        return None
    
    def _check_unique_state_ids(self, definition: WorkflowDefinition) -> Optional[WorkflowError]:
        duplicates = _duplicates([state.id for state in definition.states])
        if duplicates:
            return WorkflowError(
                ErrorCode.DUPLICATE_STATE_ID,
                "Workflow Definition contains duplicate state IDs.",
                {"state_ids": duplicates},
            )
        return None
    
    def _check_unique_action_ids(self, definition: WorkflowDefinition) -> Optional[WorkflowError]:
        duplicates = _duplicates([action.id for action in definition.actions])
        if duplicates:
            return WorkflowError(
                ErrorCode.DUPLICATE_ACTION_ID,
                "Workflow Definition contains duplicate action IDs.",
                {"action_ids": duplicates},
            )
        return None
    
    def _check_to_state_references(self, definition: WorkflowDefinition) -> Optional[WorkflowError]:
        state_ids = definition.state_ids
        for action in definition.actions:
            if action.to_state not in state_ids:
                return WorkflowError(
                    ErrorCode.UNKNOWN_TO_STATE,
                    f"Action '{action.id}' references an unknown 'ToState' ID: '{action.to_state}'.",
                    {"action_id": action.id, "state_id": action.to_state},
                )
        return None
    
    def _check_from_state_references(self, definition: WorkflowDefinition) -> Optional[WorkflowError]:
        state_ids = definition.state_ids
        for action in definition.actions:
            for from_state_id in action.from_states:
                if from_state_id not in state_ids:
                    return WorkflowError(
                        ErrorCode.UNKNOWN_FROM_STATE,
                        f"Action '{action.id}' references an unknown 'FromState' ID: '{from_state_id}'.",
                        {"action_id": action.id, "state_id": from_state_id},
                    )
        return None
