from fastapi import Depends, HTTPException, status

from src.dependencies import get_ledger
from src.exceptions import AccountUnavailable
from src.interfaces.credits import DailyResetResponse
from src.routes.credits import router
from src.services.auth import verify_cron_secret
from src.services.ledger import CreditLedger
from src.utils.cron import scheduler
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


@scheduler.scheduled_job("cron", hour=0, minute=5)
async def scheduled_daily_reset() -> None:
    try:
        get_ledger().reset_stale_accounts()
    except AccountUnavailable as e:
        # Accounts still reset lazily on their next read
        logger.warning(f"Scheduled daily credit reset failed: {str(e)}")


@router.post("/reset-daily", dependencies=[Depends(verify_cron_secret)])  # type: ignore
async def reset_daily_credits(ledger: CreditLedger = Depends(get_ledger)) -> DailyResetResponse:
    """Reset the daily counters of every account last reset on a previous day."""
    try:
        accounts_reset = ledger.reset_stale_accounts()
    except AccountUnavailable as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return DailyResetResponse(accounts_reset=accounts_reset, reset_date=ledger.today())
