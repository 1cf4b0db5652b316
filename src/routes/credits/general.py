from fastapi import Depends, HTTPException, status

from src.dependencies import get_credit_gate, get_ledger, get_warning_tracker
from src.exceptions import AccountUnavailable, QuotaExceeded
from src.interfaces.credits import (
    ConsumeRequest,
    ConsumeResponse,
    CreditAccountResponse,
    CreditVerdict,
    TierUpdateRequest,
    WarningCheckResponse,
)
from src.routes.credits import router
from src.services.auth import get_current_user_id, verify_admin_secret
from src.services.credit_gate import CreditGate
from src.services.credit_warnings import WarningTracker, warning_message
from src.services.ledger import CreditLedger
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


@router.get("/status", description="Get today's credit status of the authenticated user.")  # type: ignore
async def get_credit_status(
    user_id: str = Depends(get_current_user_id),
    gate: CreditGate = Depends(get_credit_gate),
) -> CreditVerdict:
    return gate.evaluate_user(user_id)


@router.post("/consume", description="Consume credits for one action of the authenticated user.")  # type: ignore
async def consume_credits(
    body: ConsumeRequest,
    user_id: str = Depends(get_current_user_id),
    gate: CreditGate = Depends(get_credit_gate),
) -> ConsumeResponse:
    """
    Record one use of an action if the user's tier and today's usage allow it.

    A refused action is not an error: the response says `allowed: false` with the current verdict.
    """
    try:
        verdict = gate.admit(user_id, body.action)
        return ConsumeResponse(allowed=True, verdict=verdict)
    except QuotaExceeded:
        return ConsumeResponse(allowed=False, verdict=gate.evaluate_user(user_id))
    except Exception as e:
        logger.error(f"Error consuming {body.action.value} for {user_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Error consuming credits: {str(e)}"
        )


@router.post("/warning", description="Check whether a credit warning should be shown to the user.")  # type: ignore
async def check_warning(
    user_id: str = Depends(get_current_user_id),
    tracker: WarningTracker = Depends(get_warning_tracker),
) -> WarningCheckResponse:
    warning, state = tracker.check_and_show_warning(user_id)
    consecutive_limit_days = state.consecutive_limit_days if state is not None else 0
    return WarningCheckResponse(
        warning=warning,
        message=warning_message(warning, consecutive_limit_days) if warning is not None else None,
        consecutive_limit_days=consecutive_limit_days,
    )


@router.put("/tier", dependencies=[Depends(verify_admin_secret)])  # type: ignore
async def update_tier(
    body: TierUpdateRequest,
    ledger: CreditLedger = Depends(get_ledger),
) -> CreditAccountResponse:
    """Change the subscription tier (and optionally the premium flag) of a user."""
    try:
        account = ledger.set_tier(body.user_id, body.tier, is_premium=body.is_premium)
    except AccountUnavailable as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except Exception as e:
        logger.error(f"Error in update_tier: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return CreditAccountResponse(**account.model_dump())
