from typing import Any, assert_never

from src.domains import DomainRegistry
from src.exceptions import InvalidActionParameters, UnknownAction
from src.interfaces.agent import ActionOutcome, AgentActionKind, AutonomyMode, ConversationContext
from src.services.autonomy import AutonomyResolver, requires_approval
from src.utils.logger import setup_logger

logger = setup_logger(__name__)


def acknowledgement(kind: AgentActionKind, params: dict[str, Any]) -> str:
    match kind:
        case AgentActionKind.create_plan:
            return f"Plan created for '{params['title']}'. I've broken your goal into steps."
        case AgentActionKind.view_goals:
            return "Loading your goals..."
        case AgentActionKind.add_focus_block:
            return f"Focus block '{params['title']}' added for {params['duration']} minutes."
        case AgentActionKind.create_habit:
            return f"Habit '{params['name']}' added. I'll keep track of your streak."
        case AgentActionKind.log_mood:
            return f"Logged mood {params['mood']}, energy {params['energy']}, stress {params['stress']}."
        case AgentActionKind.start_session:
            return f"{params['duration']} minute {params['type']} session started. I'll track your progress."
        case AgentActionKind.log_workout:
            return f"Workout logged: {params['duration']} minutes of {params['type']}. Great job staying active."
        case AgentActionKind.view_fitness:
            return "Loading fitness progress..."
        case AgentActionKind.log_expense:
            return f"Expense logged: {params['category']} {params['amount']}. I'm tracking your spending."
        case AgentActionKind.view_budget:
            return "Loading budget overview..."
        case AgentActionKind.draft_message:
            return "Message draft ready. Would you like to review it?"
        case AgentActionKind.schedule_followup:
            return f"Follow-up with {params['contact_name']} scheduled on {params['platform']}."
        case AgentActionKind.save_memory:
            return "Saved. I'll remember this."
        case AgentActionKind.log_water:
            return f"Logged {params['amount']} ml of water."
        case AgentActionKind.set_reminder:
            return f"Reminder '{params['title']}' set for {params['time']}."
        case _:
            assert_never(kind)


class ActionDispatcher:
    """Validates domain actions against the registry catalog and resolves how they may run."""

    def __init__(self, registry: DomainRegistry, resolver: AutonomyResolver):
        self.registry = registry
        self.resolver = resolver

    def execute(
        self,
        domain_id: str,
        kind: AgentActionKind,
        params: dict[str, Any],
        global_mode: AutonomyMode,
        context: ConversationContext | None = None,
    ) -> ActionOutcome:
        """
        Check an action request and build its outcome.

        Raises:
            UnknownDomain: If the domain is not in the registry
            UnknownAction: If the domain does not offer the action
            InvalidActionParameters: If required parameters are missing
        """
        definition = self.registry.get(domain_id)
        spec = definition.actions.get(kind)
        if spec is None:
            raise UnknownAction(domain_id, kind.value)

        merged = {**(spec.defaults or {}), **params}
        missing = [name for name in spec.required if merged.get(name) in (None, "")]
        if missing:
            raise InvalidActionParameters(kind.value, missing)

        mode = self.resolver.determine_mode(domain_id, global_mode, context)
        logger.debug(f"Dispatching {kind.value} for {domain_id} in mode {mode.value}")
        return ActionOutcome(
            domain_id=domain_id,
            action=kind,
            mode=mode,
            requires_approval=requires_approval(mode),
            message=acknowledgement(kind, merged),
            params=merged,
        )
