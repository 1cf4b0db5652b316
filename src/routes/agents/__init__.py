from fastapi import APIRouter

router = APIRouter(prefix="/agents", tags=["Agents"])

from src.routes.agents.agents import (  # noqa
    list_domains,
    route_message,
    determine_mode,
    execute_action,
)
