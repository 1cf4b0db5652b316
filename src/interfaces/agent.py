from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from src.interfaces.credits import PRIMARY_ACTION, CreditAction, CreditVerdict, WarningKind


class AutonomyMode(str, Enum):
    do_as_told = "do_as_told"  # User commands, agent executes
    suggest_approve = "suggest_approve"  # Agent offers options, user picks
    predict_confirm = "predict_confirm"  # Agent predicts, user confirms
    full_auto = "full_auto"  # Agent executes within constraints
    adaptive = "adaptive"  # Let the system decide per domain and context


class DomainCategory(str, Enum):
    study = "study"
    fitness = "fitness"
    finance = "finance"
    social = "social"
    work = "work"
    skill = "skill"
    routine = "routine"
    reflection = "reflection"
    recovery = "recovery"


class AgentActionKind(str, Enum):
    create_plan = "create_plan"
    view_goals = "view_goals"
    add_focus_block = "add_focus_block"
    create_habit = "create_habit"
    log_mood = "log_mood"
    start_session = "start_session"
    log_workout = "log_workout"
    view_fitness = "view_fitness"
    log_expense = "log_expense"
    view_budget = "view_budget"
    draft_message = "draft_message"
    schedule_followup = "schedule_followup"
    save_memory = "save_memory"
    log_water = "log_water"
    set_reminder = "set_reminder"


Level = Literal["low", "medium", "high"]


class ConversationContext(BaseModel):
    mood: Literal["low", "neutral", "high"] = "neutral"
    energy: Level = "medium"
    stress: Level = "low"
    motivation: Level = "medium"
    time_of_day: Literal["morning", "afternoon", "evening", "night"] = "morning"
    day_of_week: str = "Monday"
    is_work_hours: bool = False
    active_focus_session: bool = False
    burnout_score: int = Field(default=0, ge=0, le=100)


class SuggestedAction(BaseModel):
    label: str
    action: AgentActionKind
    data: dict[str, Any] | None = None


class DomainMatch(BaseModel):
    domain_id: str
    name: str
    category: DomainCategory
    reply_skeleton: str
    actions: list[SuggestedAction] | None = None
    stat_labels: list[str] | None = None
    mode: AutonomyMode | None = None
    requires_approval: bool | None = None


class RouteResult(BaseModel):
    matches: list[DomainMatch]
    context: ConversationContext
    fallback: bool = False


class DomainResponse(BaseModel):
    id: str
    name: str
    category: DomainCategory
    description: str
    default_mode: AutonomyMode
    keywords: list[str]
    actions: dict[AgentActionKind, list[str]]


class RouteRequest(BaseModel):
    message: str
    global_mode: AutonomyMode = AutonomyMode.adaptive
    context: ConversationContext | None = None


class ModeRequest(BaseModel):
    domain_id: str
    global_mode: AutonomyMode
    context: ConversationContext | None = None


class ModeResponse(BaseModel):
    domain_id: str
    mode: AutonomyMode
    requires_approval: bool


class ActionRequest(BaseModel):
    domain_id: str
    action: AgentActionKind
    params: dict[str, Any] = Field(default_factory=dict)
    global_mode: AutonomyMode = AutonomyMode.adaptive


class ActionOutcome(BaseModel):
    domain_id: str
    action: AgentActionKind
    mode: AutonomyMode
    requires_approval: bool
    message: str
    params: dict[str, Any]


class NoticeKind(str, Enum):
    quota_exceeded = "quota_exceeded"
    account_unavailable = "account_unavailable"
    upstream_rate_limited = "upstream_rate_limited"
    upstream_payment_required = "upstream_payment_required"
    generation_failed = "generation_failed"


class Notice(BaseModel):
    kind: NoticeKind
    message: str


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    action: CreditAction = PRIMARY_ACTION
    global_mode: AutonomyMode = AutonomyMode.adaptive
    context: ConversationContext | None = None


class ChatResponse(BaseModel):
    reply: str | None
    matches: list[DomainMatch]
    fallback: bool
    verdict: CreditVerdict | None
    warning: WarningKind | None = None
    warning_message: str | None = None
    notice: Notice | None = None
