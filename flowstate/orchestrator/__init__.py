"""Engine facade wiring the core to its stores."""

from flowstate.orchestrator.engine import WorkflowEngine

__all__ = ["WorkflowEngine"]
