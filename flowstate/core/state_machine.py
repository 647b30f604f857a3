"""
Transition engine for workflow instances.

Each definition is a finite state machine schema (states are nodes, actions
are labelled multi-source single-target edges). Each instance is a single
token on that schema with a full traversal log.

Rules are evaluated in a fixed order and the first failing rule is
reported. ``State.enabled`` is not consulted by any rule.
"""

import logging
from typing import Optional

from flowstate.core.errors import ErrorCode, Result, WorkflowError
from flowstate.core.models import (
    Action,
    HistoryEntry,
    WorkflowDefinition,
    WorkflowInstance,
    next_timestamp,
)
from flowstate.storage.base import KeyedStore

logger = logging.getLogger(__name__)


def evaluate_action(
    definition: WorkflowDefinition,
    current_state_id: str,
    action_id: str,
) -> Result[Action]:
    """
    Decide whether an action may be taken from the current state.
    
    Rule order:
    1. The action belongs to the definition
    2. The action is enabled
    3. The current state is one of the action's source states
    4. The current state is not final
    
    A current state ID that the definition does not declare is not treated
    as final.
    
    Returns:
        Result holding the action, or the first rule violation
    """
    action = definition.get_action(action_id)
    if action is None:
        return Result.failure(
            ErrorCode.ACTION_NOT_IN_DEFINITION,
            f"Action '{action_id}' does not belong to workflow definition '{definition.id}'.",
            action_id=action_id,
            definition_id=definition.id,
        )
    
    if not action.enabled:
        return Result.failure(
            ErrorCode.ACTION_DISABLED,
            f"Action '{action_id}' is disabled.",
            action_id=action_id,
        )
    
    if not action.accepts(current_state_id):
        return Result.failure(
            ErrorCode.INVALID_SOURCE_STATE,
            f"Current state '{current_state_id}' is not a valid 'fromState' for action '{action_id}'.",
            action_id=action_id,
            state_id=current_state_id,
        )
    
    current_state = definition.get_state(current_state_id)
    if current_state is not None and current_state.is_final:
        return Result.failure(
            ErrorCode.FINAL_STATE,
            f"Cannot execute action '{action_id}' from a final state '{current_state_id}'.",
            action_id=action_id,
            state_id=current_state_id,
        )
    
    return Result.success(action)


class TransitionEngine:
    """
    Applies actions to instances.
    
    The instance lock is held from the first check until the history entry
    is appended, so a transition is applied as one indivisible unit and
    distinct instances never block each other.
    """
    
    def __init__(
        self,
        definitions: KeyedStore[WorkflowDefinition],
        instances: KeyedStore[WorkflowInstance],
    ):
        self.definitions = definitions
        self.instances = instances
    
    def execute(self, instance_id: str, action_id: str) -> Result[WorkflowInstance]:
        """
        Execute an action on an instance.
        
        Args:
            instance_id: Target instance
            action_id: Action to take
            
        Returns:
            Result holding a snapshot of the updated instance
        """
        with self.instances.exclusive(instance_id) as instance:
            if instance is None:
                return self._instance_not_found(instance_id)
            
            definition = self._resolve_definition(instance)
            if definition is None:
                return self._orphaned(instance)
            
            evaluation = evaluate_action(definition, instance.current_state_id, action_id)
            if not evaluation.ok:
                logger.warning(
                    f"Refused action {action_id} on instance {instance_id}: {evaluation.error}"
                )
                return Result.from_error(evaluation.error)
            
            entry = self._apply(instance, evaluation.value)
            snapshot = instance.snapshot()
        
        logger.info(
            f"Instance {instance_id}: {entry.action_id} "
            f"{entry.from_state_id} -> {entry.to_state_id}"
        )
        return Result.success(snapshot)
    
    def available_actions(self, instance_id: str) -> Result[list[Action]]:
        """
        Actions that ``execute`` would currently accept for an instance.
        
        Returns:
            Result holding the actions in definition order
        """
        with self.instances.exclusive(instance_id) as instance:
            if instance is None:
                return self._instance_not_found(instance_id)
            
            definition = self._resolve_definition(instance)
            if definition is None:
                return self._orphaned(instance)
            
            current_state_id = instance.current_state_id
        
        return Result.success([
            action
            for action in definition.actions
            if evaluate_action(definition, current_state_id, action.id).ok
        ])
    
    def _resolve_definition(self, instance: WorkflowInstance) -> Optional[WorkflowDefinition]:
        return self.definitions.get(instance.definition_id)
    
    def _apply(self, instance: WorkflowInstance, action: Action) -> HistoryEntry:
        """Move the instance to the action's target and record the traversal."""
        previous = instance.last_entry
        entry = HistoryEntry(
            action_id=action.id,
            timestamp=next_timestamp(previous.timestamp if previous else None),
            from_state_id=instance.current_state_id,
            to_state_id=action.to_state,
        )
        instance.current_state_id = action.to_state
        instance.history.append(entry)
        return entry
    
    @staticmethod
    def _instance_not_found(instance_id: str) -> Result:
        return Result.failure(
            ErrorCode.INSTANCE_NOT_FOUND,
            f"Workflow Instance with ID '{instance_id}' not found.",
            instance_id=instance_id,
        )
    
    @staticmethod
    def _orphaned(instance: WorkflowInstance) -> Result:
        # Instances only reference registered definitions, so this is data corruption
        logger.error(
            f"Instance {instance.id} references missing definition {instance.definition_id}"
        )
        return Result.from_error(WorkflowError(
            ErrorCode.ORPHANED_INSTANCE,
            f"Workflow Definition '{instance.definition_id}' for instance '{instance.id}' not found.",
            {"instance_id": instance.id, "definition_id": instance.definition_id},
        ))
