from fastapi import APIRouter

router = APIRouter(prefix="/credits", tags=["Credits"])

# Import routes
from src.routes.credits.general import get_credit_status, consume_credits, check_warning, update_tier  # noqa
from src.routes.credits.reset import reset_daily_credits  # noqa
