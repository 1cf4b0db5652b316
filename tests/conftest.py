import os
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

# Settings are read once at import time, so they must be in place before any src import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-jwt-secret-with-enough-length-for-hs256"
os.environ["ADMIN_SECRET"] = "test-admin-secret"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["NOTIFICATION_WEBHOOK_URL"] = ""

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.domains import DomainRegistry  # noqa: E402
from src.models import Base  # noqa: E402
from src.services.actions import ActionDispatcher  # noqa: E402
from src.services.autonomy import AutonomyResolver  # noqa: E402
from src.services.conversation import ConversationService  # noqa: E402
from src.services.credit_gate import CreditGate  # noqa: E402
from src.services.credit_warnings import WarningStateStore, WarningTracker  # noqa: E402
from src.services.ledger import CreditLedger  # noqa: E402
from src.services.router import MessageRouter  # noqa: E402
from src.tiers import TierCatalog  # noqa: E402
from src.utils.locks import UserLocks  # noqa: E402

UTC = ZoneInfo("UTC")


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.current = now
        self.timezone = now.tzinfo

    def now(self) -> datetime:
        return self.current

    def today(self):
        return self.current.date()

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.current += timedelta(days=days, hours=hours)


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def notify(self, kind: str, message: str) -> None:
        self.sent.append((kind, message))


class FakeGeneration:
    def __init__(self, reply: str = "Sure, let's do it.", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    async def generate(self, message, matches, context, mode, action) -> str:
        self.calls.append({"message": message, "matches": matches, "context": context, "mode": mode, "action": action})
        if self.error is not None:
            raise self.error
        return self.reply

    async def aclose(self) -> None:
        pass


def make_engine(url: str = "sqlite://"):
    return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)


def make_session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def clock() -> FrozenClock:
    # A Tuesday afternoon
    return FrozenClock(datetime(2026, 3, 10, 14, 30, tzinfo=UTC))


@pytest.fixture
def session_factory():
    engine = make_engine()
    Base.metadata.create_all(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def broken_session_factory(tmp_path):
    # The parent directory does not exist, so every connection attempt fails
    return make_session_factory(make_engine(f"sqlite:///{tmp_path / 'missing' / 'ledger.db'}"))


@pytest.fixture
def catalog() -> TierCatalog:
    return TierCatalog()


@pytest.fixture
def ledger(session_factory, catalog, clock) -> CreditLedger:
    return CreditLedger(session_factory, catalog, clock, UserLocks(timeout=5))


@pytest.fixture
def gate(ledger, catalog) -> CreditGate:
    return CreditGate(ledger, catalog)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def tracker(session_factory, gate, clock, notifier) -> WarningTracker:
    return WarningTracker(WarningStateStore(session_factory, UserLocks(timeout=5)), gate, clock, notifier)


@pytest.fixture
def registry() -> DomainRegistry:
    return DomainRegistry()


@pytest.fixture
def message_router(registry) -> MessageRouter:
    return MessageRouter(registry)


@pytest.fixture
def resolver(registry) -> AutonomyResolver:
    return AutonomyResolver(registry)


@pytest.fixture
def dispatcher(registry, resolver) -> ActionDispatcher:
    return ActionDispatcher(registry, resolver)


@pytest.fixture
def generation() -> FakeGeneration:
    return FakeGeneration()


@pytest.fixture
def conversation(message_router, gate, resolver, tracker, generation, clock) -> ConversationService:
    return ConversationService(message_router, gate, resolver, tracker, generation, clock)
