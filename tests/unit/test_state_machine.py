"""
Unit tests for the transition engine.
"""

import pytest

from flowstate.core.errors import ErrorCode, ErrorKind
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
from flowstate.storage.memory import InMemoryStore


@pytest.fixture
def review_definition(review_workflow) -> WorkflowDefinition:
    return WorkflowDefinition.model_validate(review_workflow)


@pytest.fixture
def stores(review_definition):
    definitions = InMemoryStore("definitions")
    instances = InMemoryStore("instances")
    definitions.add(review_definition.id, review_definition)
    return definitions, instances


@pytest.fixture
def transitions(stores) -> TransitionEngine:
    return TransitionEngine(*stores)


@pytest.fixture
def instance_id(stores) -> str:
    return InstanceLifecycleManager(*stores).start("review").unwrap().id


class TestEvaluateAction:
    """Tests for the transition rules without any store involved."""

    def test_legal_action(self, review_definition):
        """Test that a legal action is returned."""
        result = evaluate_action(review_definition, "draft", "submit")

        assert result.ok
        assert result.value.id == "submit"

    def test_unknown_action(self, review_definition):
        """Test that an action outside the definition is rejected."""
        result = evaluate_action(review_definition, "draft", "publish")

        assert result.error.code == ErrorCode.ACTION_NOT_IN_DEFINITION
        assert result.error.kind == ErrorKind.NOT_FOUND

    def test_disabled_action(self, review_definition):
        """Test that a disabled action is rejected."""
        result = evaluate_action(review_definition, "review", "escalate")

        assert result.error.code == ErrorCode.ACTION_DISABLED
        assert result.error.kind == ErrorKind.RULE_VIOLATION

    def test_disabled_checked_before_source_state(self, review_definition):
        """Test that a disabled action is reported even from a wrong source state."""
        result = evaluate_action(review_definition, "draft", "escalate")

        assert result.error.code == ErrorCode.ACTION_DISABLED

    def test_wrong_source_state(self, review_definition):
        """Test that an action cannot be taken from a state outside fromStates."""
        result = evaluate_action(review_definition, "draft", "approve")

        assert result.error.code == ErrorCode.INVALID_SOURCE_STATE

    def test_multi_source_action(self, review_definition):
        """Test that an action with several source states works from each of them."""
        assert evaluate_action(review_definition, "draft", "withdraw").ok
        assert evaluate_action(review_definition, "review", "withdraw").ok

    def test_final_state_blocks_even_when_listed_as_source(self):
        """Test that a final state blocks an action that names it as a source."""
        definition = WorkflowDefinition(
            id="loop",
            states=[State(id="start", is_initial=True), State(id="end", is_final=True)],
            actions=[Action(id="reopen", enabled=True, from_states=("end",), to_state="start")],
        )

        result = evaluate_action(definition, "end", "reopen")

        assert result.error.code == ErrorCode.FINAL_STATE

    def test_undeclared_current_state_is_not_final(self):
        """Test that a current state missing from the definition does not block."""
        definition = WorkflowDefinition(
            id="odd",
            states=[State(id="start", is_initial=True)],
            actions=[Action(id="go", enabled=True, from_states=("ghost",), to_state="start")],
        )

        assert evaluate_action(definition, "ghost", "go").ok

    def test_disabled_state_is_not_enforced(self):
        """Test that State.enabled has no influence on transitions."""
        definition = WorkflowDefinition(
            id="inert",
            states=[
                State(id="start", is_initial=True, enabled=False),
                State(id="next", enabled=False),
            ],
            actions=[Action(id="go", enabled=True, from_states=("start",), to_state="next")],
        )

        assert evaluate_action(definition, "start", "go").ok


class TestTransitionEngine:
    """Tests for executing actions against stored instances."""

    def test_execute_moves_instance(self, transitions, instance_id):
        """Test that a legal action updates the state and history."""
        result = transitions.execute(instance_id, "submit")

        assert result.ok
        instance = result.value
        assert instance.current_state_id == "review"
        assert len(instance.history) == 2
        entry = instance.history[-1]
        assert entry.action_id == "submit"
        assert entry.from_state_id == "draft"
        assert entry.to_state_id == "review"

    def test_history_chain(self, transitions, instance_id):
        """Test that consecutive history entries connect and timestamps increase."""
        transitions.execute(instance_id, "submit").unwrap()
        transitions.execute(instance_id, "reject").unwrap()
        transitions.execute(instance_id, "submit").unwrap()
        instance = transitions.execute(instance_id, "approve").unwrap()

        history = instance.history
        assert [e.action_id for e in history] == [
            START_ACTION_ID, "submit", "reject", "submit", "approve",
        ]
        for previous, current in zip(history, history[1:]):
            assert previous.to_state_id == current.from_state_id
            assert previous.timestamp < current.timestamp
        assert instance.current_state_id == history[-1].to_state_id == "approved"

    def test_unknown_instance(self, transitions):
        """Test that an unknown instance is reported."""
        result = transitions.execute("missing", "submit")

        assert result.error.code == ErrorCode.INSTANCE_NOT_FOUND

    def test_unknown_instance_checked_first(self, transitions):
        """Test that instance lookup precedes action lookup."""
        result = transitions.execute("missing", "no-such-action")

        assert result.error.code == ErrorCode.INSTANCE_NOT_FOUND

    def test_orphaned_instance(self, stores, transitions):
        """Test that an instance pointing at a vanished definition is an internal error."""
        _, instances = stores
        orphan = WorkflowInstance(
            id="orphan",
            definition_id="deleted",
            current_state_id="draft",
            history=[HistoryEntry(action_id=START_ACTION_ID, to_state_id="draft")],
        )
        instances.add(orphan.id, orphan)

        result = transitions.execute("orphan", "submit")

        assert result.error.code == ErrorCode.ORPHANED_INSTANCE
        assert result.error.kind == ErrorKind.INTERNAL
        assert "not found" in result.error.message

    def test_refused_action_leaves_instance_unchanged(self, stores, transitions, instance_id):
        """Test that a rule violation performs no mutation."""
        _, instances = stores
        before = instances.get(instance_id).snapshot()

        result = transitions.execute(instance_id, "approve")

        assert result.error.code == ErrorCode.INVALID_SOURCE_STATE
        assert instances.get(instance_id) == before

    def test_final_state_locks_instance(self, transitions, instance_id):
        """Test that nothing executes once a final state is reached."""
        transitions.execute(instance_id, "withdraw").unwrap()

        for action_id in ("submit", "withdraw", "approve"):
            result = transitions.execute(instance_id, action_id)
            assert not result.ok

        result = transitions.execute(instance_id, "withdraw")
        assert result.error.code == ErrorCode.INVALID_SOURCE_STATE

    def test_returned_instance_is_detached(self, stores, transitions, instance_id):
        """Test that mutating a returned instance does not touch the stored one."""
        _, instances = stores
        returned = transitions.execute(instance_id, "submit").unwrap()

        returned.current_state_id = "approved"
        returned.history.clear()

        stored = instances.get(instance_id)
        assert stored.current_state_id == "review"
        assert len(stored.history) == 2


class TestAvailableActions:
    """Tests for listing executable actions."""

    def test_actions_from_initial_state(self, transitions, instance_id):
        """Test the actions offered in the initial state."""
        result = transitions.available_actions(instance_id)

        assert [a.id for a in result.value] == ["submit", "withdraw"]

    def test_disabled_actions_not_offered(self, transitions, instance_id):
        """Test that disabled actions are excluded."""
        transitions.execute(instance_id, "submit").unwrap()

        actions = transitions.available_actions(instance_id).unwrap()

        assert [a.id for a in actions] == ["approve", "reject", "withdraw"]

    def test_nothing_offered_from_final_state(self, transitions, instance_id):
        """Test that a final state offers no actions."""
        transitions.execute(instance_id, "withdraw").unwrap()

        assert transitions.available_actions(instance_id).unwrap() == []

    def test_unknown_instance(self, transitions):
        """Test that an unknown instance is reported."""
        result = transitions.available_actions("missing")

        assert result.error.code == ErrorCode.INSTANCE_NOT_FOUND
