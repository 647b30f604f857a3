"""
FastAPI routes for the workflow engine API.

Implements the endpoints:
- POST /workflows/definitions - Register a definition
- GET /workflows/definitions - List definitions
- GET /workflows/definitions/:id - Get a definition
- POST /workflows/instances?definitionId= - Start an instance
- GET /workflows/instances - List instances
- GET /workflows/instances/:id - Get instance state and history
- POST /workflows/instances/:id/execute/:action_id - Execute an action
- GET /workflows/instances/:id/actions - Actions executable right now
- GET /health - Health check

Failures reported by the engine are mapped to HTTP status codes here; the
engine itself knows nothing about HTTP.
"""

from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, ConfigDict

from flowstate import __version__
from flowstate.core.errors import ErrorCode, ErrorKind, WorkflowError
from flowstate.core.models import Action, WorkflowDefinition, WorkflowInstance
from flowstate.orchestrator.engine import WorkflowEngine

router = APIRouter(tags=["workflows"])


# ==================== Request/Response Models ====================

class DefinitionCreateRequest(WorkflowDefinition):
    """Request body for definition registration."""
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "order",
                "name": "Order fulfilment",
                "states": [
                    {"id": "new", "isInitial": True},
                    {"id": "shipped"},
                    {"id": "done", "isFinal": True},
                ],
                "actions": [
                    {"id": "ship", "enabled": True, "fromStates": ["new"], "toState": "shipped"},
                    {"id": "close", "enabled": True, "fromStates": ["shipped"], "toState": "done"},
                ],
            }
        }
    )


class HealthResponse(BaseModel):
    """Health check response."""
    
    status: str
    version: str
    definitions: int
    instances: int


# ==================== Error Mapping ====================

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.RULE_VIOLATION: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for_error(error: WorkflowError) -> int:
    """HTTP status code for an engine error."""
    if error.code == ErrorCode.DEFINITION_EXISTS:
        return status.HTTP_409_CONFLICT
    return _STATUS_BY_KIND[error.kind]


def raise_for_error(error: WorkflowError) -> NoReturn:
    raise HTTPException(
        status_code=status_for_error(error),
        detail={"code": error.code.value, "message": error.message},
    )


# ==================== Dependency Injection ====================

async def get_engine(request: Request) -> WorkflowEngine:
    """Get engine from app state."""
    return request.app.state.engine


# ==================== Definition Routes ====================

@router.post(
    "/workflows/definitions",
    response_model=WorkflowDefinition,
    status_code=status.HTTP_201_CREATED,
    summary="Register a workflow definition",
    description="Validate a definition and register it. Definitions are immutable once registered.",
)
async def create_definition(
    request: DefinitionCreateRequest,
    engine: WorkflowEngine = Depends(get_engine),
) -> WorkflowDefinition:
    """Register a new workflow definition."""
    definition = WorkflowDefinition(**request.model_dump())
    result = engine.create_definition(definition)
    if not result.ok:
        raise_for_error(result.error)
    return result.value


@router.get(
    "/workflows/definitions",
    response_model=list[WorkflowDefinition],
    summary="List workflow definitions",
)
async def list_definitions(
    engine: WorkflowEngine = Depends(get_engine),
) -> list[WorkflowDefinition]:
    return engine.list_definitions()


@router.get(
    "/workflows/definitions/{definition_id}",
    response_model=WorkflowDefinition,
    summary="Get a workflow definition",
)
async def get_definition(
    definition_id: str,
    engine: WorkflowEngine = Depends(get_engine),
) -> WorkflowDefinition:
    definition = engine.get_definition(definition_id)
    if definition is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "code": ErrorCode.DEFINITION_NOT_FOUND.value,
                "message": f"Workflow Definition with ID '{definition_id}' not found.",
            },
        )
    return definition


# ==================== Instance Routes ====================

@router.post(
    "/workflows/instances",
    response_model=WorkflowInstance,
    status_code=status.HTTP_201_CREATED,
    summary="Start a workflow instance",
    description="Create an instance of a registered definition in its initial state.",
)
async def start_instance(
    definition_id: str = Query(..., alias="definitionId"),
    engine: WorkflowEngine = Depends(get_engine),
) -> WorkflowInstance:
    result = engine.start_instance(definition_id)
    if not result.ok:
        raise_for_error(result.error)
    return result.value


@router.get(
    "/workflows/instances",
    response_model=list[WorkflowInstance],
    summary="List workflow instances",
)
async def list_instances(
    engine: WorkflowEngine = Depends(get_engine),
) -> list[WorkflowInstance]:
    return engine.list_instances()


@router.get(
    "/workflows/instances/{instance_id}",
    response_model=WorkflowInstance,
    summary="Get a workflow instance",
    description="Current state and full transition history of an instance.",
)
async def get_instance(
    instance_id: str,
    engine: WorkflowEngine = Depends(get_engine),
) -> WorkflowInstance:
    instance = engine.get_instance(instance_id)
    if instance is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={
                "code": ErrorCode.INSTANCE_NOT_FOUND.value,
                "message": f"Workflow Instance with ID '{instance_id}' not found.",
            },
        )
    return instance


@router.post(
    "/workflows/instances/{instance_id}/execute/{action_id}",
    response_model=WorkflowInstance,
    summary="Execute an action",
    description="Move an instance along an action if the transition rules allow it.",
)
async def execute_action(
    instance_id: str,
    action_id: str,
    engine: WorkflowEngine = Depends(get_engine),
) -> WorkflowInstance:
    result = engine.execute_action(instance_id, action_id)
    if not result.ok:
        raise_for_error(result.error)
    return result.value


@router.get(
    "/workflows/instances/{instance_id}/actions",
    response_model=list[Action],
    summary="List executable actions",
    description="Actions that can be executed from the instance's current state.",
)
async def available_actions(
    instance_id: str,
    engine: WorkflowEngine = Depends(get_engine),
) -> list[Action]:
    result = engine.available_actions(instance_id)
    if not result.ok:
        raise_for_error(result.error)
    return result.value


# ==================== Health Check Routes ====================

@router.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check(
    engine: WorkflowEngine = Depends(get_engine),
) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        definitions=len(engine.list_definitions()),
        instances=len(engine.instances.list_all()),
    )
