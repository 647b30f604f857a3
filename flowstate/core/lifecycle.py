"""
Instance lifecycle: creating instances and reading them back.
"""

import logging
from typing import Optional
from uuid import uuid4

from flowstate.core.errors import ErrorCode, Result
from flowstate.core.models import (
    START_ACTION_ID,
    HistoryEntry,
    WorkflowDefinition,
    WorkflowInstance,
    next_timestamp,
)
from flowstate.storage.base import KeyedStore

logger = logging.getLogger(__name__)


class InstanceLifecycleManager:
    """
    Starts new instances from a definition's initial state.
    
    Reads always hand out snapshots taken under the instance lock, so a
    caller never observes a state change without its history entry.
    """
    
    def __init__(
        self,
        definitions: KeyedStore[WorkflowDefinition],
        instances: KeyedStore[WorkflowInstance],
    ):
        self.definitions = definitions
        self.instances = instances
    
    def start(self, definition_id: str) -> Result[WorkflowInstance]:
        """
        Start a new instance of a definition.
        
        Args:
            definition_id: ID of a registered definition
            
        Returns:
            Result holding a snapshot of the new instance
        """
        definition = self.definitions.get(definition_id)
        if definition is None:
            return Result.failure(
                ErrorCode.DEFINITION_NOT_FOUND,
                f"Workflow Definition with ID '{definition_id}' not found.",
                definition_id=definition_id,
            )
        
        initial_state = definition.get_initial_state()
        if initial_state is None:
            # Validation should have excluded this
            logger.error(f"Registered definition {definition_id} has no initial state")
            return Result.failure(
                ErrorCode.NO_INITIAL_STATE,
                f"Workflow Definition '{definition_id}' has no initial state.",
                definition_id=definition_id,
            )
        
        instance = WorkflowInstance(
            id=str(uuid4()),
            definition_id=definition_id,
            current_state_id=initial_state.id,
            history=[
                HistoryEntry(
                    action_id=START_ACTION_ID,
                    timestamp=next_timestamp(),
                    from_state_id=None,
                    to_state_id=initial_state.id,
                )
            ],
        )
        
        snapshot = instance.snapshot()
        self.instances.add(instance.id, instance)
        
        logger.info(
            f"Instance {instance.id} started for definition {definition_id} "
            f"in state {initial_state.id}"
        )
        return Result.success(snapshot)
    
    def get(self, instance_id: str) -> Optional[WorkflowInstance]:
        """Get a snapshot of an instance, None when unknown."""
        with self.instances.exclusive(instance_id) as instance:
            return instance.snapshot() if instance is not None else None
    
    def list_all(self) -> list[WorkflowInstance]:
        """Snapshots of all instances."""
        snapshots = []
        for instance in self.instances.list_all():
            with self.instances.exclusive(instance.id) as current:
                if current is not None:
                    snapshots.append(current.snapshot())
        return snapshots
