from contextlib import contextmanager
from datetime import date
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from src.exceptions import AccountUnavailable
from src.interfaces.credits import CreditAction, TierId, UserCreditAccount
from src.models.credit_account import CreditAccount
from src.tiers import TierCatalog
from src.utils.clock import SystemClock
from src.utils.locks import UserLocks
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


_ACTION_VALUES = {action.value for action in CreditAction}
_TIER_VALUES = {tier.value for tier in TierId}


def _to_account(row: CreditAccount, entry_tier: TierId) -> UserCreditAccount:
    if row.tier in _TIER_VALUES:
        tier = TierId(row.tier)
    else:
        logger.warning(f"Unknown tier '{row.tier}' stored for {row.user_id}, using {entry_tier.value}")
        tier = entry_tier

    consumed = {CreditAction(key): units for key, units in (row.consumed or {}).items() if key in _ACTION_VALUES}
    return UserCreditAccount(
        user_id=row.user_id,
        tier=tier,
        consumed=consumed,
        last_reset_date=row.last_reset_date,
        is_premium=row.is_premium,
        premium_since=row.premium_since,
        grace_used=row.grace_used,
    )


def _apply(row: CreditAccount, account: UserCreditAccount) -> None:
    row.tier = account.tier.value
    # A fresh dict so the JSON column is flagged as modified
    row.consumed = {action.value: units for action, units in account.consumed.items()}
    row.last_reset_date = account.last_reset_date
    row.is_premium = account.is_premium
    row.premium_since = account.premium_since
    row.grace_used = account.grace_used


class CreditLedger:
    """Per-user daily counters backed by the `credit_accounts` table."""

    def __init__(self, session_factory: sessionmaker, catalog: TierCatalog, clock: SystemClock, locks: UserLocks):
        self.session_factory = session_factory
        self.catalog = catalog
        self.clock = clock
        self.locks = locks

    def today(self) -> date:
        return self.clock.today()

    def reset_if_stale(self, account: UserCreditAccount, today: date | None = None) -> bool:
        """
        Zero the daily counters if the account was last reset on another day.

        Args:
            account: The account to reset in place
            today: Calendar date in the reference timezone, defaults to the clock's

        Returns:
            True if a reset took place
        """
        today = today or self.today()
        if account.last_reset_date == today:
            return False

        logger.debug(f"Resetting daily credits of {account.user_id} (last reset {account.last_reset_date})")
        account.consumed = {}
        account.grace_used = False
        account.last_reset_date = today
        return True

    def _get_or_create_row(self, db: Session, user_id: str, for_update: bool = False) -> CreditAccount:
        query = db.query(CreditAccount).filter(CreditAccount.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        row = query.first()
        if row is None:
            logger.info(f"Creating credit account for {user_id} at tier {self.catalog.entry_tier.value}")
            row = CreditAccount(user_id=user_id, tier=self.catalog.entry_tier.value, last_reset_date=self.today())
            db.add(row)
            db.flush()
        return row

    def load(self, user_id: str) -> UserCreditAccount:
        """Get the account of a user, creating it at the entry tier and resetting it if stale."""
        with self.checkout(user_id) as account:
            return account

    @contextmanager
    def checkout(self, user_id: str) -> Iterator[UserCreditAccount]:
        """
        Hold the user's serialisation point and yield a fresh, reset account.

        Changes made to the yielded account are committed only if the block exits without raising,
        so the commit is always the last step of a read-modify-write cycle.
        """
        with self.locks.hold(user_id):
            db = self.session_factory()
            try:
                try:
                    row = self._get_or_create_row(db, user_id, for_update=True)
                    account = _to_account(row, self.catalog.entry_tier)
                except SQLAlchemyError as e:
                    logger.warning(f"Credit ledger unavailable for {user_id}: {str(e)}")
                    raise AccountUnavailable(f"Credit ledger unavailable for {user_id}") from e

                self.reset_if_stale(account)
                yield account

                try:
                    _apply(row, account)
                    db.commit()
                except SQLAlchemyError as e:
                    logger.warning(f"Could not persist credit account of {user_id}: {str(e)}")
                    raise AccountUnavailable(f"Credit ledger unavailable for {user_id}") from e
            finally:
                db.rollback()
                db.close()

    def get_tier(self, user_id: str) -> TierId:
        return self.load(user_id).tier

    def set_tier(self, user_id: str, tier: TierId, is_premium: bool | None = None) -> UserCreditAccount:
        logger.info(f"Setting tier of {user_id} to {tier.value}")
        with self.checkout(user_id) as account:
            account.tier = tier
            if is_premium is not None:
                self._set_premium(account, is_premium)
        return account

    def upgrade_to_premium(self, user_id: str) -> UserCreditAccount:
        with self.checkout(user_id) as account:
            self._set_premium(account, True)
        return account

    def _set_premium(self, account: UserCreditAccount, is_premium: bool) -> None:
        if is_premium and not account.is_premium:
            account.premium_since = self.clock.now()
        elif not is_premium:
            account.premium_since = None
        account.is_premium = is_premium

    def reset_stale_accounts(self) -> int:
        """
        Reset every account whose counters belong to a previous day.

        Returns:
            Number of accounts reset
        """
        today = self.today()
        try:
            with self.session_factory() as db:
                count = (
                    db.query(CreditAccount)
                    .filter(CreditAccount.last_reset_date != today)
                    .update(
                        {
                            CreditAccount.consumed: {},
                            CreditAccount.grace_used: False,
                            CreditAccount.last_reset_date: today,
                        },
                        synchronize_session=False,
                    )
                )
                db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error resetting stale credit accounts: {str(e)}", exc_info=True)
            raise AccountUnavailable("Credit ledger unavailable for the daily reset") from e

        logger.info(f"Reset daily credits of {count} accounts for {today}")
        return count
