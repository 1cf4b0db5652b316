from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

UNLIMITED = -1  # Quota sentinel for the top tier


class TierId(str, Enum):
    core = "core"
    plus = "plus"
    pro = "pro"


class CreditAction(str, Enum):
    normal_chat = "normal_chat"  # Primary conversational action, usage percent is computed against it
    long_reasoning = "long_reasoning"
    voice_reply = "voice_reply"
    skill_session = "skill_session"
    image_generation = "image_generation"
    memory_save = "memory_save"


PRIMARY_ACTION = CreditAction.normal_chat


class TierDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: TierId
    quotas: dict[CreditAction, int]
    costs: dict[CreditAction, int]
    unlimited: bool = False

    def quota_for(self, action: CreditAction) -> int:
        # Actions absent from the table are forbidden
        return self.quotas.get(action, 0)

    def cost_for(self, action: CreditAction) -> int:
        return self.costs.get(action, 1)


class UserCreditAccount(BaseModel):
    user_id: str
    tier: TierId = TierId.core
    consumed: dict[CreditAction, int] = Field(default_factory=dict)
    last_reset_date: date
    is_premium: bool = False
    premium_since: datetime | None = None
    grace_used: bool = False

    def consumed_for(self, action: CreditAction) -> int:
        return self.consumed.get(action, 0)


class CreditVerdict(BaseModel):
    tier: TierId | None = None
    is_premium: bool = False
    unbounded: bool = False  # Premium account or unlimited tier, never blocked
    usage_percent: float = 0
    is_limit_reached: bool = False
    show_soft_warning: bool = False
    allow_final_reply: bool = False
    can_proceed: bool = True
    usage_unknown: bool = False
    allowed_actions: list[CreditAction] = Field(default_factory=list)


class ConsumeRequest(BaseModel):
    action: CreditAction = PRIMARY_ACTION


class ConsumeResponse(BaseModel):
    allowed: bool
    verdict: CreditVerdict


class WarningKind(str, Enum):
    soft = "soft"
    limit = "limit"


class WarningSessionState(BaseModel):
    user_id: str
    date: date
    soft_shown: bool = False
    hard_shown: bool = False
    consecutive_limit_days: int = 0


class WarningCheckResponse(BaseModel):
    warning: WarningKind | None
    message: str | None = None
    consecutive_limit_days: int = 0


class TierUpdateRequest(BaseModel):
    user_id: str
    tier: TierId
    is_premium: bool | None = None


class CreditAccountResponse(BaseModel):
    user_id: str
    tier: TierId
    is_premium: bool
    premium_since: datetime | None
    consumed: dict[CreditAction, int]
    last_reset_date: date
    grace_used: bool


class DailyResetResponse(BaseModel):
    accounts_reset: int
    reset_date: date
