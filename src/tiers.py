from src.interfaces.credits import UNLIMITED, CreditAction, TierDefinition, TierId

# Internal costs, never shown to the user
CREDIT_COSTS: dict[CreditAction, int] = {
    CreditAction.normal_chat: 1,
    CreditAction.long_reasoning: 2,
    CreditAction.voice_reply: 2,
    CreditAction.skill_session: 3,
    CreditAction.image_generation: 5,
    CreditAction.memory_save: 1,
}

ENTRY_TIER = TierId.core

TIER_DEFINITIONS: dict[TierId, TierDefinition] = {
    TierId.core: TierDefinition(
        id=TierId.core,
        quotas={
            CreditAction.normal_chat: 50,
            CreditAction.long_reasoning: 10,
            CreditAction.voice_reply: 10,
            CreditAction.skill_session: 0,
            CreditAction.image_generation: 0,
            CreditAction.memory_save: 20,
        },
        costs=CREDIT_COSTS,
    ),
    TierId.plus: TierDefinition(
        id=TierId.plus,
        quotas={
            CreditAction.normal_chat: 200,
            CreditAction.long_reasoning: 60,
            CreditAction.voice_reply: 60,
            CreditAction.skill_session: 30,
            CreditAction.image_generation: 25,
            CreditAction.memory_save: 100,
        },
        costs=CREDIT_COSTS,
    ),
    TierId.pro: TierDefinition(
        id=TierId.pro,
        quotas={action: UNLIMITED for action in CreditAction},
        costs=CREDIT_COSTS,
        unlimited=True,
    ),
}


class TierCatalog:
    def __init__(self, definitions: dict[TierId, TierDefinition] | None = None, entry_tier: TierId = ENTRY_TIER):
        self.definitions = TIER_DEFINITIONS if definitions is None else definitions
        self.entry_tier = entry_tier

    def get(self, tier_id: TierId | str) -> TierDefinition:
        """Return a tier definition, falling back to the entry tier for unknown ids."""
        try:
            return self.definitions[TierId(tier_id)]
        except (KeyError, ValueError):
            return self.definitions[self.entry_tier]
