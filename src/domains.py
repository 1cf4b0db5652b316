import re
from functools import lru_cache
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict

from src.exceptions import UnknownDomain
from src.interfaces.agent import AgentActionKind, AutonomyMode, DomainCategory


_INFLECTIONS = "(?:s|es|d|ed|ing)?"


def _inflected(keyword: str) -> str:
    """Regex alternatives for a keyword and its plural, past and -ing forms ("goals", "planning", "saving")."""
    escaped = re.escape(keyword)
    if not keyword[-1].isalpha():
        return escaped

    forms = [escaped + _INFLECTIONS, re.escape(keyword + keyword[-1]) + "(?:ed|ing)"]
    if keyword.endswith("e"):
        forms.append(re.escape(keyword[:-1]) + "ing")
    return "(?:" + "|".join(forms) + ")"


@lru_cache(maxsize=None)
def _keyword_pattern(keyword: str) -> re.Pattern:
    # Word boundaries only make sense around word characters, symbols like "$" match anywhere
    prefix = r"\b" if re.match(r"\w", keyword) else ""
    suffix = r"\b" if re.search(r"\w$", keyword) else ""
    return re.compile(prefix + _inflected(keyword) + suffix, re.IGNORECASE)


class ActionSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    required: tuple[str, ...] = ()
    defaults: dict[str, Any] | None = None


class DomainDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: DomainCategory
    description: str
    keywords: tuple[str, ...]
    default_mode: AutonomyMode
    reply_skeleton: str
    stat_labels: tuple[str, ...] = ()
    actions: dict[AgentActionKind, ActionSpec] = {}

    def matches(self, text: str) -> bool:
        return any(_keyword_pattern(keyword).search(text) for keyword in self.keywords)


DOMAIN_DEFINITIONS: tuple[DomainDefinition, ...] = (
    # Core planning
    DomainDefinition(
        id="planner",
        name="Planner Agent",
        category=DomainCategory.routine,
        description="Creates multi-step plans from user goals",
        keywords=("plan", "goal", "achieve", "want to", "need to"),
        default_mode=AutonomyMode.predict_confirm,
        reply_skeleton="I can help break this down into actionable steps.",
        actions={
            AgentActionKind.create_plan: ActionSpec(
                label="Create Goal", required=("title",), defaults={"title": "New Goal"}
            ),
            AgentActionKind.view_goals: ActionSpec(label="View Goals"),
        },
    ),
    DomainDefinition(
        id="scheduler",
        name="Scheduler Agent",
        category=DomainCategory.routine,
        description="Maps plans to optimal time windows",
        keywords=("schedule", "calendar", "time slot", "slot", "tomorrow", "when"),
        default_mode=AutonomyMode.predict_confirm,
        reply_skeleton="Let me find the optimal time for this.",
        actions={
            AgentActionKind.add_focus_block: ActionSpec(
                label="Add Task", required=("title", "duration"), defaults={"title": "Scheduled Task", "duration": 30}
            ),
        },
    ),
    DomainDefinition(
        id="routine",
        name="Routine Agent",
        category=DomainCategory.routine,
        description="Manages habits and consistency tracking",
        keywords=("habit", "routine", "daily", "streak"),
        default_mode=AutonomyMode.full_auto,
        reply_skeleton="Tracking your consistency on this habit.",
        stat_labels=("Streak", "Completion"),
        actions={
            AgentActionKind.create_habit: ActionSpec(
                label="Add Habit", required=("name",), defaults={"name": "New Habit"}
            ),
            AgentActionKind.log_mood: ActionSpec(
                label="Log Mood",
                required=("mood", "energy", "stress"),
                defaults={"mood": "neutral", "energy": "medium", "stress": "low"},
            ),
        },
    ),
    DomainDefinition(
        id="task",
        name="Task Agent",
        category=DomainCategory.work,
        description="Manages to-dos and deadlines",
        keywords=("task", "todo", "to-do", "deadline", "finish", "complete"),
        default_mode=AutonomyMode.predict_confirm,
        reply_skeleton="I've added this to your task list.",
        actions={
            AgentActionKind.add_focus_block: ActionSpec(
                label="Add Focus Block",
                required=("title", "duration"),
                defaults={"title": "Focus Time", "duration": 25},
            ),
        },
    ),
    # Lifestyle
    DomainDefinition(
        id="study",
        name="Study Agent",
        category=DomainCategory.study,
        description="Manages study sessions, memory, and spaced repetition",
        keywords=("study", "learn", "exam", "read", "course", "book", "notes"),
        default_mode=AutonomyMode.predict_confirm,
        reply_skeleton="Ready to start a focused study session.",
        stat_labels=("Session", "Cards Due"),
        actions={
            AgentActionKind.start_session: ActionSpec(
                label="Start 25min", required=("type", "duration"), defaults={"type": "study", "duration": 25}
            ),
        },
    ),
    DomainDefinition(
        id="fitness",
        name="Fitness Agent",
        category=DomainCategory.fitness,
        description="Manages workouts and energy cycles",
        keywords=("gym", "workout", "exercise", "run", "running", "fitness", "health", "weight"),
        default_mode=AutonomyMode.predict_confirm,
        reply_skeleton="Let's plan your workout based on your energy.",
        stat_labels=("This Week", "Streak"),
        actions={
            AgentActionKind.log_workout: ActionSpec(
                label="Log 30min", required=("type", "duration"), defaults={"type": "general", "duration": 30}
            ),
            AgentActionKind.view_fitness: ActionSpec(label="View Progress"),
        },
    ),
    DomainDefinition(
        id="finance",
        name="Finance Agent",
        category=DomainCategory.finance,
        description="Manages expenses, investments, and financial logs",
        keywords=("money", "spend", "spent", "expense", "budget", "save", "invest", "cost", "₹", "$"),
        default_mode=AutonomyMode.suggest_approve,
        reply_skeleton="I'll log this and track your spending.",
        stat_labels=("Today", "Budget Left"),
        actions={
            AgentActionKind.log_expense: ActionSpec(
                label="Log Expense", required=("amount", "category"), defaults={"amount": 100, "category": "other"}
            ),
            AgentActionKind.view_budget: ActionSpec(label="View Budget"),
        },
    ),
    DomainDefinition(
        id="social",
        name="Social Agent",
        category=DomainCategory.social,
        description="Handles outreach, follow-ups, and networking",
        keywords=("message", "follow up", "follow-up", "network", "reach out", "contact", "call", "meet"),
        default_mode=AutonomyMode.suggest_approve,
        reply_skeleton="I can help draft a follow-up message.",
        actions={
            AgentActionKind.draft_message: ActionSpec(label="Draft Message"),
            AgentActionKind.schedule_followup: ActionSpec(
                label="Schedule Follow-up",
                required=("contact_name", "platform"),
                defaults={"contact_name": "Contact", "platform": "email"},
            ),
        },
    ),
    # Intelligence
    DomainDefinition(
        id="memory",
        name="Memory Agent",
        category=DomainCategory.reflection,
        description="Stores, compresses, and correlates experiences",
        keywords=("remember", "recall", "forget", "last time", "previously"),
        default_mode=AutonomyMode.predict_confirm,
        reply_skeleton="I've noted this for future reference.",
        actions={
            AgentActionKind.save_memory: ActionSpec(
                label="Save Memory", required=("content", "category"), defaults={"category": "general"}
            ),
        },
    ),
    DomainDefinition(
        id="insight",
        name="Insight Agent",
        category=DomainCategory.reflection,
        description="Produces weekly and monthly insights",
        keywords=("insight", "pattern", "trend", "analysis", "review"),
        default_mode=AutonomyMode.predict_confirm,
        reply_skeleton="Analyzing patterns from your recent activity.",
    ),
    DomainDefinition(
        id="identity",
        name="Identity Agent",
        category=DomainCategory.reflection,
        description="Tracks identity-level progress and growth",
        keywords=("who am i", "growth", "values", "becoming", "identity"),
        default_mode=AutonomyMode.suggest_approve,
        reply_skeleton="Reflecting on your growth journey.",
    ),
    DomainDefinition(
        id="reflection",
        name="Reflection Agent",
        category=DomainCategory.reflection,
        description="Handles journaling and self-reflection",
        keywords=("journal", "reflect", "grateful", "feel", "think about"),
        default_mode=AutonomyMode.suggest_approve,
        reply_skeleton="Let's take a moment to process this.",
    ),
    # Execution
    DomainDefinition(
        id="notification",
        name="Notification Agent",
        category=DomainCategory.routine,
        description="Schedules nudges, alarms, and reminders",
        keywords=("remind", "reminder", "alarm", "nudge", "wake me"),
        default_mode=AutonomyMode.predict_confirm,
        reply_skeleton="I'll make sure you get a nudge at the right moment.",
        actions={
            AgentActionKind.set_reminder: ActionSpec(label="Set Reminder", required=("title", "time")),
        },
    ),
    # State
    DomainDefinition(
        id="mood",
        name="Mood Agent",
        category=DomainCategory.recovery,
        description="Tracks mood-energy-performance loops",
        keywords=("mood", "feeling", "happy", "sad", "anxious", "stressed"),
        default_mode=AutonomyMode.suggest_approve,
        reply_skeleton="Thank you for sharing how you're feeling.",
        actions={
            AgentActionKind.log_mood: ActionSpec(
                label="Log Mood",
                required=("mood", "energy", "stress"),
                defaults={"mood": "neutral", "energy": "medium", "stress": "low"},
            ),
        },
    ),
    DomainDefinition(
        id="energy",
        name="Energy Agent",
        category=DomainCategory.recovery,
        description="Optimizes scheduling against energy levels",
        keywords=("tired", "energy", "exhausted", "awake", "sleepy"),
        default_mode=AutonomyMode.predict_confirm,
        reply_skeleton="Adjusting recommendations for your energy level.",
        actions={
            AgentActionKind.log_water: ActionSpec(label="Log Water", required=("amount",), defaults={"amount": 250}),
        },
    ),
    DomainDefinition(
        id="recovery",
        name="Recovery Agent",
        category=DomainCategory.recovery,
        description="Handles rest and burnout prevention",
        keywords=("rest", "break", "burnout", "overwhelmed", "relax"),
        default_mode=AutonomyMode.suggest_approve,
        reply_skeleton="Remember to take care of yourself.",
        actions={
            AgentActionKind.log_mood: ActionSpec(
                label="Log Rest",
                required=("mood", "energy", "stress"),
                defaults={"mood": "neutral", "energy": "low", "stress": "low", "notes": "Taking a break"},
            ),
        },
    ),
    # Device control
    DomainDefinition(
        id="execution",
        name="Execution Agent",
        category=DomainCategory.routine,
        description="Performs device actions such as opening apps or navigating",
        keywords=("open app", "launch", "navigate to", "turn on", "turn off"),
        default_mode=AutonomyMode.predict_confirm,
        reply_skeleton="I can do that on your device once you confirm.",
    ),
)

FALLBACK_DOMAIN_ID = "planner"


class DomainRegistry:
    """Ordered, read-only catalog of capability domains."""

    def __init__(
        self,
        definitions: tuple[DomainDefinition, ...] = DOMAIN_DEFINITIONS,
        fallback_id: str = FALLBACK_DOMAIN_ID,
    ):
        self.definitions = definitions
        self._by_id = {definition.id: definition for definition in definitions}
        if fallback_id not in self._by_id:
            raise UnknownDomain(fallback_id)
        self.fallback_id = fallback_id

    def __iter__(self) -> Iterator[DomainDefinition]:
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self.definitions)

    def get(self, domain_id: str) -> DomainDefinition:
        try:
            return self._by_id[domain_id]
        except KeyError:
            raise UnknownDomain(domain_id)

    @property
    def fallback(self) -> DomainDefinition:
        return self._by_id[self.fallback_id]

    def by_category(self, category: DomainCategory) -> list[DomainDefinition]:
        return [definition for definition in self.definitions if definition.category == category]
