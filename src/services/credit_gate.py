from src.exceptions import AccountUnavailable, QuotaExceeded
from src.interfaces.credits import (
    PRIMARY_ACTION,
    UNLIMITED,
    CreditAction,
    CreditVerdict,
    TierDefinition,
    UserCreditAccount,
)
from src.services.ledger import CreditLedger
from src.tiers import TierCatalog
from src.utils.logger import setup_logger

logger = setup_logger(__name__)

SOFT_WARNING_PERCENT = 80
LIMIT_PERCENT = 100


class CreditGate:
    """Admission control for metered actions, on top of the credit ledger."""

    def __init__(self, ledger: CreditLedger, catalog: TierCatalog):
        self.ledger = ledger
        self.catalog = catalog

    def _tier(self, account: UserCreditAccount) -> TierDefinition:
        return self.catalog.get(account.tier)

    def is_unbounded(self, account: UserCreditAccount) -> bool:
        return account.is_premium or self._tier(account).unlimited

    def is_action_allowed(self, account: UserCreditAccount, action: CreditAction) -> bool:
        quota = self._tier(account).quota_for(action)
        if quota == 0:
            return False
        if quota == UNLIMITED:
            return True
        return account.consumed_for(action) < quota

    def evaluate(self, account: UserCreditAccount) -> CreditVerdict:
        """Compute the credit status of an account against its primary conversational quota."""
        tier = self._tier(account)
        allowed_actions = [action for action in CreditAction if self.is_action_allowed(account, action)]

        if self.is_unbounded(account):
            return CreditVerdict(
                tier=tier.id,
                is_premium=account.is_premium,
                unbounded=True,
                usage_percent=0,
                can_proceed=True,
                allowed_actions=list(CreditAction),
            )

        quota = tier.quota_for(PRIMARY_ACTION)
        if quota == 0:
            # Conversation is forbidden outright, no grace reply either
            return CreditVerdict(
                tier=tier.id,
                usage_percent=LIMIT_PERCENT,
                is_limit_reached=True,
                can_proceed=False,
                allowed_actions=allowed_actions,
            )

        usage_percent = min(account.consumed_for(PRIMARY_ACTION) / quota * 100, LIMIT_PERCENT)
        is_limit_reached = usage_percent >= LIMIT_PERCENT
        allow_final_reply = is_limit_reached and not account.grace_used
        return CreditVerdict(
            tier=tier.id,
            usage_percent=usage_percent,
            is_limit_reached=is_limit_reached,
            show_soft_warning=SOFT_WARNING_PERCENT <= usage_percent < LIMIT_PERCENT,
            allow_final_reply=allow_final_reply,
            can_proceed=not is_limit_reached or allow_final_reply,
            allowed_actions=allowed_actions,
        )

    def consume(self, account: UserCreditAccount, action: CreditAction) -> None:
        """
        Record one use of an action on the account, in place.

        Args:
            account: A fresh (already reset) account held under the ledger's serialisation point
            action: The action being performed

        Raises:
            QuotaExceeded: If the tier forbids the action or the limit is reached with no grace left
        """
        if not self.is_unbounded(account) and not self.is_action_allowed(account, action):
            if action == PRIMARY_ACTION and self.evaluate(account).allow_final_reply:
                logger.info(f"Granting the grace reply of the day to {account.user_id}")
                account.grace_used = True
            else:
                raise QuotaExceeded(account.user_id, action.value)

        cost = self._tier(account).cost_for(action)
        account.consumed[action] = account.consumed_for(action) + cost

    def evaluate_user(self, user_id: str) -> CreditVerdict:
        try:
            return self.evaluate(self.ledger.load(user_id))
        except AccountUnavailable as e:
            logger.warning(f"Usage unknown for {user_id}, letting the request through: {str(e)}")
            return CreditVerdict(usage_unknown=True, can_proceed=True)

    def admit(self, user_id: str, action: CreditAction) -> CreditVerdict:
        """
        Consume one action for a user and return the verdict after consumption.

        The ledger being unreachable lets the action through unrecorded.

        Raises:
            QuotaExceeded: If the action is not permitted
        """
        try:
            with self.ledger.checkout(user_id) as account:
                self.consume(account, action)
        except AccountUnavailable as e:
            logger.warning(f"Admitting {action.value} for {user_id} without metering: {str(e)}")
            return CreditVerdict(usage_unknown=True, can_proceed=True)

        logger.debug(f"Consumed {action.value} for {user_id}, now {account.consumed_for(action)} units today")
        return self.evaluate(account)

    def try_consume(self, user_id: str, action: CreditAction) -> bool:
        try:
            self.admit(user_id, action)
            return True
        except QuotaExceeded as e:
            logger.info(str(e))
            return False
