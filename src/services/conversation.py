from src.exceptions import GenerationFailed, QuotaExceeded, UpstreamPaymentRequired, UpstreamRateLimited
from src.interfaces.agent import AutonomyMode, ChatResponse, ConversationContext, Notice, NoticeKind
from src.interfaces.credits import CreditAction
from src.services.autonomy import AutonomyResolver
from src.services.credit_gate import CreditGate
from src.services.credit_warnings import WarningTracker, warning_message
from src.services.generation import GenerationClient
from src.services.router import MessageRouter, default_context
from src.utils.clock import SystemClock
from src.utils.logger import setup_logger

logger = setup_logger(__name__)

NOTICE_MESSAGES: dict[NoticeKind, str] = {
    NoticeKind.quota_exceeded: "That's all for today. Your credits refresh tomorrow, and I'll be here.",
    NoticeKind.account_unavailable: "I couldn't check your usage just now, but let's keep talking.",
    NoticeKind.upstream_rate_limited: "I'm getting a lot of messages right now. Give me a moment and try again.",
    NoticeKind.upstream_payment_required: "I can't reply right now because the service needs attention.",
    NoticeKind.generation_failed: "Something went wrong on my side. Please try again.",
}


def notice(kind: NoticeKind) -> Notice:
    return Notice(kind=kind, message=NOTICE_MESSAGES[kind])


class ConversationService:
    """Glues routing, metering, autonomy and generation together for one user message."""

    def __init__(
        self,
        router: MessageRouter,
        gate: CreditGate,
        resolver: AutonomyResolver,
        tracker: WarningTracker,
        generation: GenerationClient,
        clock: SystemClock,
    ):
        self.router = router
        self.gate = gate
        self.resolver = resolver
        self.tracker = tracker
        self.generation = generation
        self.clock = clock

    async def handle_message(
        self,
        user_id: str,
        text: str,
        action: CreditAction = CreditAction.normal_chat,
        global_mode: AutonomyMode = AutonomyMode.adaptive,
        context: ConversationContext | None = None,
    ) -> ChatResponse:
        context = context or default_context(self.clock.now())
        routed = self.router.route(text, context)

        try:
            verdict = self.gate.admit(user_id, action)
        except QuotaExceeded:
            logger.info(f"Refusing {action.value} for {user_id}, daily quota exceeded")
            result = ChatResponse(
                reply=None,
                matches=routed.matches,
                fallback=routed.fallback,
                verdict=self.gate.evaluate_user(user_id),
                notice=notice(NoticeKind.quota_exceeded),
            )
            return self._with_warning(user_id, result)

        matches = [self.resolver.annotate(match, global_mode, context) for match in routed.matches]
        result = ChatResponse(reply=None, matches=matches, fallback=routed.fallback, verdict=verdict)
        if verdict.usage_unknown:
            result.notice = notice(NoticeKind.account_unavailable)

        # The first match leads the exchange
        mode = matches[0].mode or global_mode
        try:
            result.reply = await self.generation.generate(text, matches, context, mode, action)
        except UpstreamRateLimited:
            result.notice = notice(NoticeKind.upstream_rate_limited)
        except UpstreamPaymentRequired:
            result.notice = notice(NoticeKind.upstream_payment_required)
        except GenerationFailed:
            result.notice = notice(NoticeKind.generation_failed)

        return self._with_warning(user_id, result)

    def _with_warning(self, user_id: str, result: ChatResponse) -> ChatResponse:
        warning, state = self.tracker.check_and_show_warning(user_id, result.verdict)
        if warning is not None and state is not None:
            result.warning = warning
            result.warning_message = warning_message(warning, state.consecutive_limit_days)
        return result
