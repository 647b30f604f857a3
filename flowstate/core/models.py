"""
Domain models for workflow definitions and instances.

All models use Pydantic. Python attributes are snake_case while the JSON
representation uses camelCase (``isInitial``, ``fromStates``, ...).
Definitions and their parts are frozen; instances are mutated only by the
transition engine.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Action id recorded on the synthetic first history entry of every instance
START_ACTION_ID = "START"


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def next_timestamp(previous: Optional[datetime] = None) -> datetime:
    """
    Timestamp for a new history entry.
    
    History must be strictly ordered, so a clock reading that does not move
    past the previous entry is bumped by one microsecond.
    """
    now = utc_now()
    if previous is not None and now <= previous:
        return previous + timedelta(microseconds=1)
    return now


class CamelModel(BaseModel):
    """Base model serialized with camelCase field names."""
    
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    """Immutable camelCase model."""
    
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class State(FrozenCamelModel):
    """A single state (node) of a workflow definition."""
    
    id: str = Field(..., description="State identifier, unique within a definition")
    is_initial: bool = Field(default=False, description="Instances start in this state")
    is_final: bool = Field(default=False, description="No action may execute from this state")
    
    # Stored and returned, never enforced by any transition rule
    enabled: bool = Field(default=True, description="Informational flag")
    description: Optional[str] = Field(default=None, description="Optional state description")


class Action(FrozenCamelModel):
    """A named transition rule: one or more source states, one target state."""
    
    id: str = Field(..., description="Action identifier, unique within a definition")
    enabled: bool = Field(default=False, description="Disabled actions cannot be executed")
    from_states: tuple[str, ...] = Field(default=(), description="Legal source state IDs")
    to_state: str = Field(..., description="Target state ID")
    
    def accepts(self, state_id: str) -> bool:
        """Check if the action may be taken from the given state."""
        return state_id in self.from_states


class WorkflowDefinition(FrozenCamelModel):
    """Immutable workflow template: states plus the actions between them."""
    
    id: str = Field(..., description="Unique workflow definition ID")
    name: str = Field(default="", description="Human readable name")
    states: tuple[State, ...] = Field(default=(), description="Ordered states")
    actions: tuple[Action, ...] = Field(default=(), description="Ordered actions")
    
    @property
    def state_ids(self) -> set[str]:
        """All state IDs declared by the definition."""
        return {state.id for state in self.states}
    
    def get_state(self, state_id: str) -> Optional[State]:
        """Get state by ID."""
        for state in self.states:
            if state.id == state_id:
                return state
        return None
    
    def get_action(self, action_id: str) -> Optional[Action]:
        """Get action by ID."""
        for action in self.actions:
            if action.id == action_id:
                return action
        return None
    
    def get_initial_state(self) -> Optional[State]:
        """Get the first state flagged as initial."""
        for state in self.states:
            if state.is_initial:
                return state
        return None


class HistoryEntry(FrozenCamelModel):
    """One traversal recorded in an instance's history."""
    
    action_id: str = Field(..., description="Executed action, or START for the first entry")
    timestamp: datetime = Field(default_factory=utc_now)
    from_state_id: Optional[str] = Field(default=None, description="None only for the START entry")
    to_state_id: str = Field(...)
    
    @property
    def is_start(self) -> bool:
        """Check if this is the synthetic start entry."""
        return self.action_id == START_ACTION_ID and self.from_state_id is None


class WorkflowInstance(CamelModel):
    """A running execution of a workflow definition."""
    
    id: str = Field(default_factory=lambda: str(uuid4()), description="Unique instance ID")
    definition_id: str = Field(..., description="Reference to workflow definition")
    current_state_id: str = Field(..., description="Current state ID")
    history: list[HistoryEntry] = Field(default_factory=list)
    
    @property
    def last_entry(self) -> Optional[HistoryEntry]:
        """Most recent history entry."""
        return self.history[-1] if self.history else None
    
    def snapshot(self) -> "WorkflowInstance":
        """Detached copy safe to hand out to readers."""
        return self.model_copy(deep=True)
