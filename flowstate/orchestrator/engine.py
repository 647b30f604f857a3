"""
Workflow engine facade.

Ties the definition validator, the instance lifecycle manager and the
transition engine to their stores. Created once at process start and
handed to the boundary layer.
"""

import logging
from typing import Optional

from flowstate.core.errors import ErrorCode, Result
from flowstate.core.lifecycle import InstanceLifecycleManager
from flowstate.core.models import Action, WorkflowDefinition, WorkflowInstance
from flowstate.core.state_machine import TransitionEngine
from flowstate.core.validator import DefinitionValidator
from flowstate.storage.base import KeyAlreadyExistsError, KeyedStore
from flowstate.storage.memory import InMemoryStore

logger = logging.getLogger(__name__)


class WorkflowEngine:
    """
    Entry point for all workflow operations.
    
    Responsibilities:
    - Validate and register definitions
    - Start instances
    - Execute actions on instances
    - Read definitions and instance snapshots
    """
    
    def __init__(
        self,
        definitions: Optional[KeyedStore[WorkflowDefinition]] = None,
        instances: Optional[KeyedStore[WorkflowInstance]] = None,
    ):
        self.definitions = definitions if definitions is not None else InMemoryStore("definitions")
        self.instances = instances if instances is not None else InMemoryStore("instances")
        
        self.validator = DefinitionValidator(self.definitions.contains)
        self.lifecycle = InstanceLifecycleManager(self.definitions, self.instances)
        self.transitions = TransitionEngine(self.definitions, self.instances)
    
    # ==================== Definitions ====================
    
    def create_definition(self, definition: WorkflowDefinition) -> Result[WorkflowDefinition]:
        """
        Validate and register a workflow definition.
        
        Nothing is registered when validation fails.
        """
        result = self.validator.validate(definition)
        if not result.ok:
            logger.warning(f"Rejected workflow definition '{definition.id}': {result.error}")
            return result
        
        try:
            self.definitions.add(definition.id, definition)
        except KeyAlreadyExistsError:
            # Lost the race against a concurrent creation with the same ID
            logger.warning(f"Rejected workflow definition '{definition.id}': created concurrently")
            return Result.failure(
                ErrorCode.DEFINITION_EXISTS,
                f"Workflow Definition with ID '{definition.id}' already exists.",
                definition_id=definition.id,
            )
        
        logger.info(
            f"Workflow definition registered: {definition.id} "
            f"({len(definition.states)} states, {len(definition.actions)} actions)"
        )
        return Result.success(definition)
    
    def get_definition(self, definition_id: str) -> Optional[WorkflowDefinition]:
        """Get definition by ID."""
        return self.definitions.get(definition_id)
    
    def list_definitions(self) -> list[WorkflowDefinition]:
        """All registered definitions."""
        return self.definitions.list_all()
    
    # ==================== Instances ====================
    
    def start_instance(self, definition_id: str) -> Result[WorkflowInstance]:
        """Start a new instance in the definition's initial state."""
        return self.lifecycle.start(definition_id)
    
    def execute_action(self, instance_id: str, action_id: str) -> Result[WorkflowInstance]:
        """Execute an action on an instance."""
        return self.transitions.execute(instance_id, action_id)
    
    def available_actions(self, instance_id: str) -> Result[list[Action]]:
        """Actions currently executable on an instance."""
        return self.transitions.available_actions(instance_id)
    
    def get_instance(self, instance_id: str) -> Optional[WorkflowInstance]:
        """Get a snapshot of an instance."""
        return self.lifecycle.get(instance_id)
    
    def list_instances(self) -> list[WorkflowInstance]:
        """Snapshots of all instances."""
        return self.lifecycle.list_all()
