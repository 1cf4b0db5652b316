from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from src.domains import DomainDefinition, DomainRegistry
from src.exceptions import UnknownDomain
from src.interfaces.agent import AgentActionKind, AutonomyMode, ConversationContext, DomainCategory
from src.services.router import MessageRouter, default_context


def definition(domain_id: str, keywords: tuple[str, ...]) -> DomainDefinition:
    return DomainDefinition(
        id=domain_id,
        name=domain_id.title(),
        category=DomainCategory.routine,
        description=domain_id,
        keywords=keywords,
        default_mode=AutonomyMode.predict_confirm,
        reply_skeleton=f"{domain_id} reply",
    )


def ids(matches) -> list[str]:
    return [match.domain_id for match in matches]


def test_only_the_matching_domain_is_returned():
    registry = DomainRegistry(
        (definition("planner", ("plan",)), definition("reminder", ("remind me",)), definition("fitness", ("gym",))),
        fallback_id="planner",
    )

    assert ids(MessageRouter(registry).route_message("remind me to call mom at 5pm")) == ["reminder"]


def test_matches_are_not_exclusive_and_keep_registry_order(message_router):
    assert ids(message_router.route_message("Remind me to call mom at 5pm")) == ["social", "notification"]


def test_nothing_matched(message_router):
    assert message_router.route_message("hello there") == []


@pytest.mark.parametrize("text", ["the planet is round", "spread the word", "a runaway train", "water the plants"])
def test_keywords_respect_word_boundaries(message_router, text):
    assert message_router.route_message(text) == []


@pytest.mark.parametrize(
    "text, expected",
    [
        ("I have three tasks and two workouts", ["task", "fitness"]),
        ("my goals and habits", ["planner", "routine"]),
        ("deadlines for my exams", ["task", "study"]),
        ("planning my spending", ["planner", "finance"]),
        ("I was running then studying", ["study", "fitness"]),
        ("exercising and saving", ["fitness", "finance"]),
    ],
)
def test_inflected_keywords(message_router, text, expected):
    assert ids(message_router.route_message(text)) == expected


@pytest.mark.parametrize("text", ["I spent $20 on lunch", "paid ₹500 for it"])
def test_currency_symbols_match_anywhere(message_router, text):
    assert "finance" in ids(message_router.route_message(text))


def test_max_matches(registry):
    router = MessageRouter(registry, max_matches=1)

    assert ids(router.route_message("remind me to call mom")) == ["social"]


def test_route_falls_back(message_router):
    context = ConversationContext()
    result = message_router.route("hello there", context)

    assert result.fallback
    assert ids(result.matches) == ["planner"]
    assert result.context == context


def test_match_carries_actions_and_stats(message_router):
    (match,) = message_router.route_message("keep my habit streak going")

    assert match.domain_id == "routine"
    assert match.stat_labels == ["Streak", "Completion"]
    assert [action.action for action in match.actions] == [AgentActionKind.create_habit, AgentActionKind.log_mood]


def test_registry_lookup(registry):
    assert len(registry) == 17
    assert registry.fallback.id == "planner"
    assert [d.id for d in registry.by_category(DomainCategory.finance)] == ["finance"]
    with pytest.raises(UnknownDomain):
        registry.get("teleport")


def test_registry_requires_known_fallback():
    with pytest.raises(UnknownDomain):
        DomainRegistry((definition("planner", ("plan",)),), fallback_id="missing")


@pytest.mark.parametrize(
    "now, time_of_day, is_work_hours",
    [
        (datetime(2026, 3, 10, 8, 0), "morning", False),
        (datetime(2026, 3, 10, 10, 0), "morning", True),
        (datetime(2026, 3, 10, 15, 0), "afternoon", True),
        (datetime(2026, 3, 10, 19, 0), "evening", False),
        (datetime(2026, 3, 10, 23, 0), "night", False),
        (datetime(2026, 3, 14, 10, 0), "morning", False),
    ],
)
def test_default_context(now, time_of_day, is_work_hours):
    context = default_context(now.replace(tzinfo=ZoneInfo("UTC")))

    assert context.time_of_day == time_of_day
    assert context.is_work_hours is is_work_hours
