"""
Error taxonomy and result type for core operations.

Expected failures are never raised. Every core operation returns a
``Result`` carrying either the value or a ``WorkflowError``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Broad category of a failure, used by the boundary layer for mapping."""
    
    VALIDATION = "validation"          # Malformed input, duplicates, dangling references
    NOT_FOUND = "not_found"            # Unknown definition, instance or action
    RULE_VIOLATION = "rule_violation"  # Disabled action, wrong source, final state
    INTERNAL = "internal"              # Data inconsistency, should be unreachable


class ErrorCode(str, Enum):
    """Specific failure reasons."""
    
    # Definition validation
    EMPTY_DEFINITION_ID = "EMPTY_DEFINITION_ID"
    DEFINITION_EXISTS = "DEFINITION_EXISTS"
    INITIAL_STATE_COUNT = "INITIAL_STATE_COUNT"
    DUPLICATE_STATE_ID = "DUPLICATE_STATE_ID"
    DUPLICATE_ACTION_ID = "DUPLICATE_ACTION_ID"
    UNKNOWN_TO_STATE = "UNKNOWN_TO_STATE"
    UNKNOWN_FROM_STATE = "UNKNOWN_FROM_STATE"
    
    # Lookups
    DEFINITION_NOT_FOUND = "DEFINITION_NOT_FOUND"
    INSTANCE_NOT_FOUND = "INSTANCE_NOT_FOUND"
    ACTION_NOT_IN_DEFINITION = "ACTION_NOT_IN_DEFINITION"
    
    # Transition rules
    ACTION_DISABLED = "ACTION_DISABLED"
    INVALID_SOURCE_STATE = "INVALID_SOURCE_STATE"
    FINAL_STATE = "FINAL_STATE"
    
    # Internal consistency
    NO_INITIAL_STATE = "NO_INITIAL_STATE"
    ORPHANED_INSTANCE = "ORPHANED_INSTANCE"


ERROR_KINDS: dict[ErrorCode, ErrorKind] = {
    ErrorCode.EMPTY_DEFINITION_ID: ErrorKind.VALIDATION,
    ErrorCode.DEFINITION_EXISTS: ErrorKind.VALIDATION,
    ErrorCode.INITIAL_STATE_COUNT: ErrorKind.VALIDATION,
    ErrorCode.DUPLICATE_STATE_ID: ErrorKind.VALIDATION,
    ErrorCode.DUPLICATE_ACTION_ID: ErrorKind.VALIDATION,
    ErrorCode.UNKNOWN_TO_STATE: ErrorKind.VALIDATION,
    ErrorCode.UNKNOWN_FROM_STATE: ErrorKind.VALIDATION,
    ErrorCode.DEFINITION_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.INSTANCE_NOT_FOUND: ErrorKind.NOT_FOUND,
    ErrorCode.ACTION_NOT_IN_DEFINITION: ErrorKind.NOT_FOUND,
    ErrorCode.ACTION_DISABLED: ErrorKind.RULE_VIOLATION,
    ErrorCode.INVALID_SOURCE_STATE: ErrorKind.RULE_VIOLATION,
    ErrorCode.FINAL_STATE: ErrorKind.RULE_VIOLATION,
    ErrorCode.NO_INITIAL_STATE: ErrorKind.INTERNAL,
    ErrorCode.ORPHANED_INSTANCE: ErrorKind.INTERNAL,
}


@dataclass(frozen=True)
class WorkflowError:
    """A structured, caller-facing failure reason."""
    
    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    
    @property
    def kind(self) -> ErrorKind:
        return ERROR_KINDS[self.code]
    
    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class WorkflowOperationError(Exception):
    """Raised by ``Result.unwrap`` when the result holds an error."""
    
    def __init__(self, error: WorkflowError):
        self.error = error
        super().__init__(str(error))


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a core operation: either a value or an error."""
    
    value: Optional[T] = None
    error: Optional[WorkflowError] = None
    
    @property
    def ok(self) -> bool:
        return self.error is None
    
    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)
    
    @classmethod
    def failure(cls, code: ErrorCode, message: str, **details: Any) -> "Result[T]":
        return cls(error=WorkflowError(code, message, details))
    
    @classmethod
    def from_error(cls, error: WorkflowError) -> "Result[T]":
        return cls(error=error)
    
    def unwrap(self) -> T:
        """
        Return the value or raise.
        
        Raises:
            WorkflowOperationError: If the result holds an error
        """
        if self.error is not None:
            raise WorkflowOperationError(self.error)
        return self.value  # type: ignore[return-value]
