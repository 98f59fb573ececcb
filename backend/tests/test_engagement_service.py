from datetime import date, timedelta
from decimal import Decimal

import pytest

from engagement.core.exceptions import ValidationError
from engagement.models.content import Post, McqQuestion
from engagement.models.engagement import CardType, EngagementType
from engagement.repositories.engagement_repository import EngagementRepository
from engagement.services.card_types import default_resolver
from engagement.services.engagement_service import EngagementService

DAY = date(2026, 10, 19)


async def _view(service, user_id, seconds, card_id="card-1", day=DAY):
    return await service.track_engagement(
        user_id, card_id, EngagementType.CARD_VIEW, is_complete=True, duration=seconds, day=day,
    )


async def _attempt(service, user_id, correct, card_id="q-1", day=DAY):
    return await service.track_engagement(
        user_id, card_id, EngagementType.MCQ_ATTEMPT, is_complete=correct, day=day,
    )


async def test_long_view_marks_day_present(session, make_user):
    user = await make_user()
    rollup = await _view(EngagementService(session), user.id, 25)

    assert rollup.is_present
    assert rollup.card_view_count == 1
    assert rollup.total_engagement_duration == 25

    status = await EngagementRepository(session).get_daily_status(user.id, DAY)
    assert status.is_present
    assert status.card_view_count == 1


async def test_short_view_does_not_count(session, make_user):
    user = await make_user()
    rollup = await _view(EngagementService(session), user.id, 19)

    assert not rollup.is_present
    assert rollup.card_view_count == 0
    assert rollup.total_engagement_duration == 19


async def test_low_accuracy_is_not_presence(session, make_user):
    user = await make_user()
    service = EngagementService(session)

    await _attempt(service, user.id, True, card_id="q-1")
    await _attempt(service, user.id, False, card_id="q-2")
    rollup = await _attempt(service, user.id, False, card_id="q-3")

    assert rollup.mcq_attempt_count == 3
    assert rollup.mcq_correct_count == 1
    assert rollup.mcq_accuracy == Decimal("33.33")
    assert not rollup.is_present


async def test_half_correct_is_presence(session, make_user):
    user = await make_user()
    service = EngagementService(session)

    await _attempt(service, user.id, True, card_id="q-1")
    rollup = await _attempt(service, user.id, False, card_id="q-2")

    assert rollup.mcq_accuracy == Decimal("50.00")
    assert rollup.is_present


async def test_duplicate_view_is_recounted_from_rows(session, make_user):
    user = await make_user()
    service = EngagementService(session)

    first = await _view(service, user.id, 25)
    second = await _view(service, user.id, 25)

    assert first.is_present and second.is_present
    assert second.card_view_count == 2
    assert second.total_engagement_duration == 50

    status = await EngagementRepository(session).get_daily_status(user.id, DAY)
    assert status.card_view_count == 2


async def test_days_are_independent(session, make_user):
    user = await make_user()
    service = EngagementService(session)

    await _view(service, user.id, 30, day=DAY)
    rollup = await _view(service, user.id, 5, day=DAY + timedelta(days=1))

    assert not rollup.is_present
    repository = EngagementRepository(session)
    assert (await repository.get_daily_status(user.id, DAY)).is_present


async def test_negative_duration_rejected_before_write(session, make_user):
    user = await make_user()
    with pytest.raises(ValidationError):
        await _view(EngagementService(session), user.id, -1)
    assert await EngagementRepository(session).get_daily_status(user.id, DAY) is None


async def test_card_type_is_inferred(session, make_user):
    user = await make_user()
    session.add_all([
        Post(id="gk-1", title="Capitals", post_type=CardType.GENERAL_KNOWLEDGE.value),
        Post(id="ca-1", title="Budget", post_type=CardType.CURRENT_AFFAIRS.value),
        McqQuestion(id="q-7", question="2 + 2?"),
    ])
    await session.commit()

    resolver = default_resolver(session)
    assert await resolver.resolve("gk-1") == CardType.GENERAL_KNOWLEDGE
    assert await resolver.resolve("ca-1") == CardType.CURRENT_AFFAIRS
    assert await resolver.resolve("q-7") == CardType.MCQ
    assert await resolver.resolve("nobody-knows") == CardType.CURRENT_AFFAIRS

    await _view(EngagementService(session), user.id, 25, card_id="gk-1")
    rows = await EngagementRepository(session).get_engagements_for_day(user.id, DAY)
    assert rows[0].card_type == CardType.GENERAL_KNOWLEDGE.value


async def test_explicit_card_type_skips_lookup(session, make_user):
    user = await make_user()
    await EngagementService(session).track_engagement(
        user.id, "skill-3", EngagementType.CARD_VIEW, is_complete=True, duration=40,
        day=DAY, card_type=CardType.SKILL_TRAINING,
    )
    rows = await EngagementRepository(session).get_engagements_for_day(user.id, DAY)
    assert rows[0].card_type == CardType.SKILL_TRAINING.value
    assert rows[0].is_correct is None


async def test_weekly_meter_for_new_user(session, make_user):
    user = await make_user()
    meter = await EngagementService(session).get_weekly_meter(user.id, today=DAY)

    assert meter["days_completed"] == 0
    assert [entry["date"] for entry in meter["days"]] == [
        (DAY - timedelta(days=offset)).isoformat() for offset in range(6, -1, -1)
    ]
    assert not any(entry["is_present"] for entry in meter["days"])


async def test_weekly_meter_marks_present_days(session, make_user):
    user = await make_user()
    service = EngagementService(session)

    await _view(service, user.id, 30, day=DAY - timedelta(days=2))
    await _view(service, user.id, 5, day=DAY)
    await _view(service, user.id, 30, day=DAY - timedelta(days=7))  # вне окна

    meter = await service.get_weekly_meter(user.id, today=DAY)
    assert meter["days_completed"] == 1
    assert [entry["completed"] for entry in meter["days"]] == [False, False, False, False, True, False, False]
    assert meter["days"][-1]["card_view_count"] == 0
