from src.domains import DomainRegistry
from src.interfaces.agent import AutonomyMode, ConversationContext, DomainMatch
from src.utils.logger import setup_logger

logger = setup_logger(__name__)

BURNOUT_THRESHOLD = 70

# Ordered from least to most autonomous
_AUTONOMY_RANK = {
    AutonomyMode.do_as_told: 0,
    AutonomyMode.suggest_approve: 1,
    AutonomyMode.predict_confirm: 2,
    AutonomyMode.full_auto: 3,
}


def requires_approval(mode: AutonomyMode) -> bool:
    return mode in (AutonomyMode.suggest_approve, AutonomyMode.predict_confirm)


def is_strained(context: ConversationContext) -> bool:
    return context.burnout_score > BURNOUT_THRESHOLD or context.stress == "high"


def needs_simpler_interaction(context: ConversationContext) -> bool:
    return is_strained(context) or context.energy == "low"


class AutonomyResolver:
    def __init__(self, registry: DomainRegistry):
        self.registry = registry

    def determine_mode(
        self, domain_id: str, global_mode: AutonomyMode, context: ConversationContext | None = None
    ) -> AutonomyMode:
        """
        Resolve the effective autonomy mode of one domain for one exchange.

        An explicit global mode wins everywhere. Under `adaptive` the domain's default applies,
        capped to `suggest_approve` when a context shows the user is strained or low on energy.

        Raises:
            UnknownDomain: If the domain is not in the registry
        """
        if global_mode != AutonomyMode.adaptive:
            return global_mode

        mode = self.registry.get(domain_id).default_mode
        if (
            context is not None
            and needs_simpler_interaction(context)
            and _AUTONOMY_RANK[mode] > _AUTONOMY_RANK[AutonomyMode.suggest_approve]
        ):
            logger.debug(f"User is strained or tired, keeping {domain_id} at suggest_approve instead of {mode.value}")
            return AutonomyMode.suggest_approve
        return mode

    def annotate(
        self, match: DomainMatch, global_mode: AutonomyMode, context: ConversationContext | None = None
    ) -> DomainMatch:
        mode = self.determine_mode(match.domain_id, global_mode, context)
        return match.model_copy(
            update={
                "mode": mode,
                "requires_approval": requires_approval(mode),
                # Nothing to pick from when the domain acts on its own
                "actions": None if mode == AutonomyMode.full_auto else match.actions,
            }
        )
