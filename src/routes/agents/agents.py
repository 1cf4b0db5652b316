from fastapi import Depends, HTTPException, status

from src.dependencies import get_clock, get_dispatcher, get_registry, get_resolver, get_router
from src.domains import DomainRegistry
from src.exceptions import InvalidActionParameters, UnknownAction, UnknownDomain
from src.interfaces.agent import (
    ActionOutcome,
    ActionRequest,
    DomainResponse,
    ModeRequest,
    ModeResponse,
    RouteRequest,
    RouteResult,
)
from src.routes.agents import router
from src.services.actions import ActionDispatcher
from src.services.auth import get_current_user_id
from src.services.autonomy import AutonomyResolver, requires_approval
from src.services.router import MessageRouter, default_context
from src.utils.clock import SystemClock
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


@router.get("/domains", description="List the capability domains messages can be routed to")  # type: ignore
async def list_domains(registry: DomainRegistry = Depends(get_registry)) -> list[DomainResponse]:
    return [
        DomainResponse(
            id=definition.id,
            name=definition.name,
            category=definition.category,
            description=definition.description,
            default_mode=definition.default_mode,
            keywords=list(definition.keywords),
            actions={kind: list(spec.required) for kind, spec in definition.actions.items()},
        )
        for definition in registry
    ]


@router.post("/route", dependencies=[Depends(get_current_user_id)])  # type: ignore
async def route_message(
    body: RouteRequest,
    message_router: MessageRouter = Depends(get_router),
    resolver: AutonomyResolver = Depends(get_resolver),
    clock: SystemClock = Depends(get_clock),
) -> RouteResult:
    """Classify a message into domains, each tagged with its effective autonomy mode."""
    context = body.context or default_context(clock.now())
    result = message_router.route(body.message, context)
    result.matches = [resolver.annotate(match, body.global_mode, context) for match in result.matches]
    return result


@router.post("/mode", dependencies=[Depends(get_current_user_id)])  # type: ignore
async def determine_mode(body: ModeRequest, resolver: AutonomyResolver = Depends(get_resolver)) -> ModeResponse:
    try:
        mode = resolver.determine_mode(body.domain_id, body.global_mode, body.context)
    except UnknownDomain as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return ModeResponse(domain_id=body.domain_id, mode=mode, requires_approval=requires_approval(mode))


@router.post("/actions", description="Validate and dispatch a domain action")  # type: ignore
async def execute_action(
    body: ActionRequest,
    user_id: str = Depends(get_current_user_id),
    dispatcher: ActionDispatcher = Depends(get_dispatcher),
) -> ActionOutcome:
    try:
        outcome = dispatcher.execute(body.domain_id, body.action, body.params, body.global_mode)
    except UnknownDomain as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (UnknownAction, InvalidActionParameters) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    logger.debug(f"Action {body.action.value} of {body.domain_id} dispatched for {user_id}")
    return outcome
