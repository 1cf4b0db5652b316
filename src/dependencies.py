from functools import lru_cache

from src.config import config
from src.domains import DomainRegistry
from src.models.base import SessionLocal
from src.services.actions import ActionDispatcher
from src.services.autonomy import AutonomyResolver
from src.services.conversation import ConversationService
from src.services.credit_gate import CreditGate
from src.services.credit_warnings import WarningStateStore, WarningTracker
from src.services.generation import GenerationClient
from src.services.ledger import CreditLedger
from src.services.notifications import WebhookNotifier
from src.services.router import MessageRouter
from src.tiers import TierCatalog
from src.utils.clock import SystemClock
from src.utils.locks import UserLocks

# Services are built once per process and injected with FastAPI's Depends, tests override them


@lru_cache
def get_clock() -> SystemClock:
    return SystemClock(config.CREDITS_TIMEZONE)


@lru_cache
def get_ledger() -> CreditLedger:
    return CreditLedger(
        session_factory=SessionLocal,
        catalog=TierCatalog(),
        clock=get_clock(),
        locks=UserLocks(timeout=config.LEDGER_TIMEOUT_SECONDS),
    )


@lru_cache
def get_credit_gate() -> CreditGate:
    ledger = get_ledger()
    return CreditGate(ledger, ledger.catalog)


@lru_cache
def get_notifier() -> WebhookNotifier:
    return WebhookNotifier(config.NOTIFICATION_WEBHOOK_URL)


@lru_cache
def get_warning_tracker() -> WarningTracker:
    store = WarningStateStore(SessionLocal, UserLocks(timeout=config.LEDGER_TIMEOUT_SECONDS))
    return WarningTracker(store, get_credit_gate(), get_clock(), get_notifier())


@lru_cache
def get_registry() -> DomainRegistry:
    return DomainRegistry()


@lru_cache
def get_router() -> MessageRouter:
    return MessageRouter(get_registry(), max_matches=config.ROUTER_MAX_MATCHES)


@lru_cache
def get_resolver() -> AutonomyResolver:
    return AutonomyResolver(get_registry())


@lru_cache
def get_dispatcher() -> ActionDispatcher:
    return ActionDispatcher(get_registry(), get_resolver())


@lru_cache
def get_generation_client() -> GenerationClient:
    return GenerationClient(
        base_url=config.GENERATION_API_BASE_URL,
        api_key=config.GENERATION_API_KEY,
        timeout=config.GENERATION_TIMEOUT_SECONDS,
    )


@lru_cache
def get_conversation_service() -> ConversationService:
    return ConversationService(
        router=get_router(),
        gate=get_credit_gate(),
        resolver=get_resolver(),
        tracker=get_warning_tracker(),
        generation=get_generation_client(),
        clock=get_clock(),
    )
