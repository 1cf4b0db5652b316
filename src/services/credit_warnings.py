from datetime import date, timedelta
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from src.exceptions import AccountUnavailable
from src.interfaces.credits import CreditVerdict, WarningKind, WarningSessionState
from src.models.warning_state import WarningState
from src.services.credit_gate import CreditGate
from src.services.notifications import Notifier
from src.utils.clock import SystemClock
from src.utils.locks import UserLocks
from src.utils.logger import setup_logger

logger = setup_logger(__name__)

SOFT_WARNING_MESSAGE = "You're close to today's conversation limit. I'm still here, let's make the rest count."
LIMIT_WARNING_MESSAGE = "We've reached today's limit. Your credits refresh tomorrow, I'll be right here."
UPSELL_MESSAGE = (
    "You've hit the daily limit a few days in a row. "
    "If our chats help, a bigger plan lets us keep going without stopping."
)
UPSELL_AFTER_DAYS = 3


def roll_over(state: WarningSessionState, today: date) -> WarningSessionState:
    """
    Move a warning record to today.

    Both flags clear on a new day. The consecutive limit-day count survives only if
    the stored day hit the limit and was yesterday.
    """
    if state.date == today:
        return state

    hit_yesterday = state.hard_shown and state.date == today - timedelta(days=1)
    return WarningSessionState(
        user_id=state.user_id,
        date=today,
        consecutive_limit_days=state.consecutive_limit_days if hit_yesterday else 0,
    )


def next_warning(
    state: WarningSessionState, verdict: CreditVerdict, today: date
) -> tuple[WarningSessionState, WarningKind | None]:
    state = roll_over(state, today)
    if verdict.unbounded or verdict.usage_unknown:
        return state, None

    if verdict.is_limit_reached and not state.hard_shown:
        return (
            state.model_copy(update={"hard_shown": True, "consecutive_limit_days": state.consecutive_limit_days + 1}),
            WarningKind.limit,
        )

    if verdict.show_soft_warning and not state.soft_shown:
        return state.model_copy(update={"soft_shown": True}), WarningKind.soft

    return state, None


def warning_message(kind: WarningKind, consecutive_limit_days: int) -> str:
    match kind:
        case WarningKind.soft:
            return SOFT_WARNING_MESSAGE
        case WarningKind.limit:
            return UPSELL_MESSAGE if consecutive_limit_days >= UPSELL_AFTER_DAYS else LIMIT_WARNING_MESSAGE


WarningTransition = Callable[[WarningSessionState], tuple[WarningSessionState, WarningKind | None]]


class WarningStateStore:
    def __init__(self, session_factory: sessionmaker, locks: UserLocks):
        self.session_factory = session_factory
        self.locks = locks

    def update(
        self, user_id: str, today: date, transition: WarningTransition
    ) -> tuple[WarningSessionState, WarningKind | None]:
        """
        Apply a transition to the user's warning record and persist the result.

        The read, the transition and the write run under the user's serialisation point.
        """
        with self.locks.hold(user_id):
            try:
                with self.session_factory() as db:
                    row = db.query(WarningState).filter(WarningState.user_id == user_id).with_for_update().first()
                    if row is None:
                        row = WarningState(user_id=user_id, warning_date=today)
                        db.add(row)

                    state, kind = transition(
                        WarningSessionState(
                            user_id=user_id,
                            date=row.warning_date,
                            soft_shown=row.soft_shown,
                            hard_shown=row.hard_shown,
                            consecutive_limit_days=row.consecutive_limit_days,
                        )
                    )

                    row.warning_date = state.date
                    row.soft_shown = state.soft_shown
                    row.hard_shown = state.hard_shown
                    row.consecutive_limit_days = state.consecutive_limit_days
                    db.commit()
                    return state, kind
            except SQLAlchemyError as e:
                raise AccountUnavailable(f"Warning state unavailable for {user_id}") from e


class WarningTracker:
    """Surfaces the soft and hard credit warnings at most once per user per day."""

    def __init__(self, store: WarningStateStore, gate: CreditGate, clock: SystemClock, notifier: Notifier):
        self.store = store
        self.gate = gate
        self.clock = clock
        self.notifier = notifier

    def check_and_show_warning(
        self, user_id: str, verdict: CreditVerdict | None = None
    ) -> tuple[WarningKind | None, WarningSessionState | None]:
        """
        Decide whether a credit warning is due for the user and send it.

        Args:
            user_id: The user who just sent a message
            verdict: The gate's latest verdict, evaluated afresh when omitted

        Returns:
            The warning kind emitted (or None) and the user's warning record after the check
        """
        verdict = verdict or self.gate.evaluate_user(user_id)
        today = self.clock.today()

        try:
            state, kind = self.store.update(user_id, today, lambda current: next_warning(current, verdict, today))
        except AccountUnavailable as e:
            logger.warning(f"Skipping credit warning check for {user_id}: {str(e)}")
            return None, None

        if kind is not None:
            logger.info(f"Showing {kind.value} credit warning to {user_id}")
            self.notifier.notify(kind.value, warning_message(kind, state.consecutive_limit_days))
        return kind, state
