from datetime import date, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from engagement.core.dates import utc_now
from engagement.core.exceptions import NotFoundError
from engagement.models.system import Notification
from engagement.models.engagement import UserBadgeStatus
from engagement.repositories.badge_repository import BadgeRepository
from engagement.repositories.engagement_repository import EngagementRepository
from engagement.repositories.event_repository import EventRepository
from engagement.core.schemas.badges import BadgeCriteria
from engagement.services.badge_service import BadgeService, UserMetrics, classify_tier, is_eligible, login_streak
from engagement.services.event_service import EventService

TODAY = date(2026, 10, 19)


@pytest.mark.parametrize(
    "days_active, tier",
    [
        (0, None),
        (29, None),
        (30, "rookie"),
        (59, "rookie"),
        (60, "explorer"),
        (90, "adventurer"),
        (120, "elite"),
        (150, "champion"),
        (179, "champion"),
        (180, "legend"),
    ],
)
def test_classify_tier(days_active, tier):
    assert classify_tier(days_active) == tier


def test_login_streak():
    days = [TODAY, TODAY - timedelta(days=1), TODAY - timedelta(days=2), TODAY - timedelta(days=4)]
    assert login_streak(days, TODAY) == 3
    # серия, закончившаяся вчера, еще не прервана
    assert login_streak(days[1:], TODAY) == 2
    assert login_streak([TODAY - timedelta(days=2)], TODAY) == 0
    assert login_streak([], TODAY) == 0


def test_any_single_criterion_is_enough():
    metrics = UserMetrics(total_score=40, streak=0, event_counts={"community_post": 3})
    criteria = BadgeCriteria.model_validate({"score": 1000, "engagement": {"posts": 3}})
    assert is_eligible(criteria, metrics)

    criteria = BadgeCriteria.model_validate({"score": 1000, "streak": 5, "engagement": {"mcqAttempts": 1}})
    assert not is_eligible(criteria, metrics)


def test_empty_criteria_never_eligible():
    metrics = UserMetrics(total_score=10_000, streak=100, event_counts={})
    assert not is_eligible(BadgeCriteria(), metrics)


async def _mark_present(session, user_id: int, days):
    repository = EngagementRepository(session)
    for day in days:
        await repository.upsert_daily_status(user_id, day, {"is_present": True, "card_view_count": 1}, utc_now())
    await session.commit()


async def test_badge_status_counts_trailing_window(session, make_user):
    user = await make_user()
    in_window = [TODAY - timedelta(days=offset) for offset in range(0, 180, 6)]  # 30 дней
    await _mark_present(session, user.id, in_window + [TODAY - timedelta(days=180)])
    await EngagementRepository(session).upsert_daily_status(
        user.id, TODAY - timedelta(days=1), {"is_present": False}, utc_now()
    )
    await session.commit()

    status = await BadgeService(session).get_badge_status(user.id, today=TODAY)
    assert status == {"current_badge": "rookie", "days_active": 30}

    stored = (await session.execute(
        select(UserBadgeStatus).where(UserBadgeStatus.user_id == user.id)
    )).scalar_one()
    assert stored.current_badge == "rookie"
    assert stored.days_active == 30


async def test_badge_status_below_first_tier(session, make_user):
    user = await make_user()
    await _mark_present(session, user.id, [TODAY - timedelta(days=offset) for offset in range(29)])

    status = await BadgeService(session).get_badge_status(user.id, today=TODAY)
    assert status == {"current_badge": None, "days_active": 29}


async def test_seed_default_badges_is_idempotent(session):
    service = BadgeService(session)
    assert await service.seed_default_badges() == 3
    assert await service.seed_default_badges() == 0

    badges = await service.get_all_badges()
    assert [badge.name for badge in badges] == ["First Steps", "Rising Star", "Champion"]


async def test_eligibility_grants_once(session, make_user):
    user = await make_user()
    service = BadgeService(session)
    await service.seed_default_badges()
    events = EventService(session)
    for _ in range(4):
        await events.track_event(user.id, "community_post")

    granted = await service.check_badge_eligibility(user.id)
    assert [user_badge.badge.name for user_badge in granted] == ["First Steps"]

    assert await service.check_badge_eligibility(user.id) == []
    assert len(await service.get_user_badges(user.id)) == 1

    notifications = (await session.execute(
        select(Notification).where(Notification.user_id == user.id)
    )).scalars().all()
    assert len(notifications) == 1
    assert "First Steps" in notifications[0].body


async def test_engagement_criterion_grants_badge(session, make_user):
    user = await make_user()
    await BadgeRepository(session).create(
        name="Networker", description="Send 2 connection requests", tier="SILVER",
        icon="🤝", criteria={"score": 100000, "engagement": {"connections": 2}},
    )
    await session.commit()
    events = EventService(session)
    await events.track_event(user.id, "connection_request")

    service = BadgeService(session)
    assert await service.check_badge_eligibility(user.id) == []

    await events.track_event(user.id, "connection_request")
    granted = await service.check_badge_eligibility(user.id)
    assert [user_badge.badge.name for user_badge in granted] == ["Networker"]


async def test_streak_criterion(session, make_user):
    user = await make_user()
    await BadgeRepository(session).create(
        name="Regular", description="Log in 3 days in a row", tier="BRONZE", icon="🔥", criteria={"streak": 3},
    )
    await session.commit()
    events = EventService(session)
    now = utc_now()
    for offset in range(3):
        await events.track_event(user.id, "login", created_at=now - timedelta(days=offset))

    granted = await BadgeService(session).check_badge_eligibility(user.id)
    assert [user_badge.badge.name for user_badge in granted] == ["Regular"]


async def test_malformed_criteria_is_skipped(session, make_user):
    user = await make_user()
    await BadgeRepository(session).create(
        name="Broken", description=None, tier="GOLD", icon=None, criteria={"score": -5},
    )
    await session.commit()
    await EventService(session).track_event(user.id, "login")

    assert await BadgeService(session).check_badge_eligibility(user.id) == []


async def test_notification_failure_keeps_grant(session, make_user, monkeypatch):
    user = await make_user()
    # откат в сервисе уведомлений экспайрит объекты сессии
    user_id = user.id
    service = BadgeService(session)
    await service.seed_default_badges()
    for _ in range(4):
        await EventService(session).track_event(user.id, "community_post")

    def unavailable(**kwargs):
        raise SQLAlchemyError("notifications table is unavailable")

    monkeypatch.setattr("engagement.services.notification_service.Notification", unavailable)

    granted = await service.check_badge_eligibility(user_id)
    assert [user_badge.badge.name for user_badge in granted] == ["First Steps"]
    assert len(await service.get_user_badges(user_id)) == 1


async def test_grant_conflict_reports_already_granted(session, make_user):
    user = await make_user()
    badge = await BadgeRepository(session).create(
        name="Once", description=None, tier="BRONZE", icon=None, criteria={"score": 0},
    )
    repository = BadgeRepository(session)
    assert await repository.grant(user.id, badge.id) is True
    assert await repository.grant(user.id, badge.id) is False
    await session.commit()


async def test_badge_progress(session, make_user):
    user = await make_user()
    service = BadgeService(session)
    await service.seed_default_badges()
    for _ in range(4):
        await EventService(session).track_event(user.id, "community_post")

    rising_star = await BadgeRepository(session).get_by_name("Rising Star")
    progress = await service.get_badge_progress(user.id, rising_star.id)
    assert progress["earned"] is False
    assert (progress["current"], progress["target"], progress["progress"]) == (120, 500, 24)

    await service.check_badge_eligibility(user.id)
    first_steps = await BadgeRepository(session).get_by_name("First Steps")
    progress = await service.get_badge_progress(user.id, first_steps.id)
    assert progress["earned"] is True
    assert progress["progress"] == 100


async def test_badge_progress_unknown_badge(session, make_user):
    user = await make_user()
    with pytest.raises(NotFoundError):
        await BadgeService(session).get_badge_progress(user.id, 404)


async def test_event_type_case_is_ignored_for_criteria(session, make_user):
    user = await make_user()
    await BadgeRepository(session).create(
        name="Regular", description="Log in 2 days in a row", tier="BRONZE", icon="🔥", criteria={"streak": 2},
    )
    await BadgeRepository(session).create(
        name="Author", description="Publish a post", tier="BRONZE", icon="✍️",
        criteria={"engagement": {"posts": 2}},
    )
    # модуль-источник пишет в журнал напрямую, минуя нормализацию EventService
    events = EventRepository(session)
    now = utc_now()
    await events.add(user.id, "LOGIN", created_at=now)
    await events.add(user.id, "Login", created_at=now - timedelta(days=1))
    await events.add(user.id, "COMMUNITY_POST")
    await events.add(user.id, "community_post")
    await session.commit()

    assert await events.count_by_type(user.id) == {"login": 2, "community_post": 2}
    assert len(await events.get_event_times(user.id, "login")) == 2

    granted = await BadgeService(session).check_badge_eligibility(user.id)
    assert sorted(user_badge.badge.name for user_badge in granted) == ["Author", "Regular"]
