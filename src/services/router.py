from datetime import datetime

from src.domains import DomainDefinition, DomainRegistry
from src.interfaces.agent import ConversationContext, DomainMatch, RouteResult, SuggestedAction
from src.utils.logger import setup_logger

logger = setup_logger(__name__)

WEEKEND = ("Saturday", "Sunday")


def default_context(now: datetime) -> ConversationContext:
    """Neutral ambient context derived from the local time only."""
    hour = now.hour
    day_of_week = now.strftime("%A")
    if hour < 12:
        time_of_day = "morning"
    elif hour < 17:
        time_of_day = "afternoon"
    elif hour < 21:
        time_of_day = "evening"
    else:
        time_of_day = "night"

    return ConversationContext(
        time_of_day=time_of_day,
        day_of_week=day_of_week,
        is_work_hours=9 <= hour <= 17 and day_of_week not in WEEKEND,
    )


def describe_match(definition: DomainDefinition) -> DomainMatch:
    actions = [
        SuggestedAction(label=spec.label, action=kind, data=spec.defaults) for kind, spec in definition.actions.items()
    ]
    return DomainMatch(
        domain_id=definition.id,
        name=definition.name,
        category=definition.category,
        reply_skeleton=definition.reply_skeleton,
        actions=actions or None,
        stat_labels=list(definition.stat_labels) or None,
    )


class MessageRouter:
    """Classifies free-form messages into the capability domains of a registry."""

    def __init__(self, registry: DomainRegistry, max_matches: int = 0):
        self.registry = registry
        self.max_matches = max_matches

    def route_message(self, text: str) -> list[DomainMatch]:
        """
        Match a message against every domain of the registry.

        Domains are not exclusive: all matches are returned in registry order, possibly capped
        to `max_matches`. An empty list means nothing matched.
        """
        matched = [definition for definition in self.registry if definition.matches(text)]
        if self.max_matches > 0:
            matched = matched[: self.max_matches]

        logger.debug(f"Routed message to {[definition.id for definition in matched]}")
        return [describe_match(definition) for definition in matched]

    def route(self, text: str, context: ConversationContext) -> RouteResult:
        matches = self.route_message(text)
        if matches:
            return RouteResult(matches=matches, context=context)

        logger.debug(f"No domain matched, falling back to {self.registry.fallback_id}")
        return RouteResult(matches=[describe_match(self.registry.fallback)], context=context, fallback=True)
