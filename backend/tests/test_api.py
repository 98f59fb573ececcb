from fastapi import FastAPI

from engagement.core.admin import setup_admin
from engagement.core.database import db_helper
from engagement.models.user import UserRole
from engagement.services.badge_service import BadgeService

from conftest import auth_headers, service_headers

API = "/api/v1"


async def emit(client, user, event_type: str, **fields):
    """Событие от модуля-источника по сервисному токену"""
    payload = {"userId": user.id, "eventType": event_type, **fields}
    return await client.post(f"{API}/events/", json=payload, headers=service_headers())


async def test_root_and_health(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert "Engagement Engine" in response.json()["message"]

    response = await client.get("/health")
    assert response.json()["status"] == "healthy"


async def test_requires_bearer_token(client):
    response = await client.get(f"{API}/performance/score")
    assert response.status_code == 401

    response = await client.get(
        f"{API}/performance/score", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "AuthenticationError"
    assert response.headers["www-authenticate"] == "Bearer"


async def test_score_for_new_user(client, make_user):
    user = await make_user()
    response = await client.get(f"{API}/performance/score", headers=auth_headers(user))

    assert response.status_code == 200
    body = response.json()
    assert body["userId"] == user.id
    assert body["totalScore"] == 0
    assert body["weeklyScore"] == 0


async def test_track_event_and_list(client, make_user):
    user = await make_user()
    headers = auth_headers(user)

    response = await emit(client, user, "login")
    assert response.status_code == 200
    assert response.json() == {"eventRecorded": True, "totalScore": 10}

    response = await emit(
        client, user, "feed_apply", entityType="job", entityId="job-42", metadata={"source": "feed"}
    )
    assert response.json()["totalScore"] == 30

    response = await client.get(f"{API}/events/", headers=headers)
    events = response.json()
    assert [event["eventType"] for event in events] == ["feed_apply", "login"]
    assert events[0]["entityId"] == "job-42"
    assert events[0]["metadata"] == {"source": "feed"}

    response = await client.get(f"{API}/events/", params={"eventType": "login"}, headers=headers)
    assert len(response.json()) == 1


async def test_period_scores(client, make_user):
    user = await make_user()
    headers = auth_headers(user)
    await emit(client, user, "mcq_correct")

    for period in ("daily", "weekly", "monthly"):
        response = await client.get(f"{API}/performance/score/{period}", headers=headers)
        assert response.status_code == 200
        assert response.json() == {f"{period}Score": 25}

    response = await client.get(f"{API}/performance/score/history", params={"period": "weekly"}, headers=headers)
    history = response.json()
    assert len(history) == 1
    assert history[0]["score"] == 25
    assert "periodDate" in history[0]


async def test_history_unknown_period(client, make_user):
    user = await make_user()
    response = await client.get(
        f"{API}/performance/score/history", params={"period": "yearly"}, headers=auth_headers(user)
    )
    assert response.status_code == 422
    assert response.json()["error"] == "InvalidPeriodError"


async def test_leaderboard(client, make_user):
    leader = await make_user()
    runner_up = await make_user()
    await emit(client, leader, "community_post")
    await emit(client, runner_up, "login")

    response = await client.get(f"{API}/performance/leaderboard", headers=auth_headers(runner_up))
    board = response.json()
    assert [entry["userId"] for entry in board] == [leader.id, runner_up.id]
    assert board[0]["rank"] == 1
    assert board[0]["user"]["email"] == leader.email

    response = await client.get(
        f"{API}/performance/leaderboard", params={"limit": 0}, headers=auth_headers(leader)
    )
    assert response.status_code == 422


async def test_daily_digest_engagement(client, make_user):
    user = await make_user()
    headers = auth_headers(user)

    response = await client.post(
        f"{API}/performance/daily-digest/engagement",
        json={"cardId": "card-1", "type": "CARD_VIEW", "duration": 30, "isComplete": True},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json() == {"engagementRecorded": True, "isPresent": True}

    response = await client.get(f"{API}/performance/weekly-meter", headers=headers)
    meter = response.json()
    assert meter["daysCompleted"] == 1
    assert len(meter["days"]) == 7
    assert meter["days"][-1]["isPresent"] is True
    assert meter["days"][-1]["cardViewCount"] == 1


async def test_daily_digest_for_given_date(client, make_user):
    user = await make_user()
    response = await client.post(
        f"{API}/performance/daily-digest/engagement",
        json={"cardId": "q-1", "type": "MCQ_ATTEMPT", "isComplete": False, "date": "2026-01-05"},
        headers=auth_headers(user),
    )
    assert response.status_code == 200
    assert response.json()["isPresent"] is False


async def test_daily_digest_validation(client, make_user):
    user = await make_user()
    headers = auth_headers(user)
    url = f"{API}/performance/daily-digest/engagement"

    response = await client.post(
        url, json={"cardId": "card-1", "type": "CARD_VIEW", "duration": -5, "isComplete": True}, headers=headers
    )
    assert response.status_code == 422

    response = await client.post(
        url, json={"cardId": "card-1", "type": "CARD_VIEW", "date": "19-10-2026", "isComplete": True}, headers=headers
    )
    assert response.status_code == 422

    response = await client.post(
        url, json={"cardId": "card-1", "type": "LIKE", "isComplete": True}, headers=headers
    )
    assert response.status_code == 422


async def test_badge_status_for_new_user(client, make_user):
    user = await make_user()
    response = await client.get(f"{API}/performance/badge-status", headers=auth_headers(user))
    assert response.json() == {"currentBadge": None, "daysActive": 0}


async def test_badge_endpoints(client, session, make_user):
    user = await make_user()
    headers = auth_headers(user)
    await BadgeService(session).seed_default_badges()

    response = await client.get(f"{API}/badges/")
    catalogue = response.json()
    assert [badge["tier"] for badge in catalogue] == ["BRONZE", "SILVER", "GOLD"]

    for _ in range(4):
        await emit(client, user, "community_post")

    response = await client.get(f"{API}/badges/check-eligibility", headers=headers)
    granted = response.json()
    assert [item["badge"]["name"] for item in granted] == ["First Steps"]
    assert "earnedAt" in granted[0]

    response = await client.get(f"{API}/badges/check-eligibility", headers=headers)
    assert response.json() == []

    response = await client.get(f"{API}/badges/my-badges", headers=headers)
    assert len(response.json()) == 1

    rising_star = next(badge for badge in catalogue if badge["name"] == "Rising Star")
    response = await client.get(f"{API}/badges/{rising_star['id']}/progress", headers=headers)
    assert response.json()["progress"] == 24
    assert response.json()["earned"] is False

    response = await client.get(f"{API}/badges/9999/progress", headers=headers)
    assert response.status_code == 404


async def test_scorecard_is_admin_only(client, make_user):
    user = await make_user()
    admin = await make_user(role=UserRole.ADMIN.value)
    await emit(client, user, "login")

    response = await client.get(f"{API}/performance/scorecard", headers=auth_headers(user))
    assert response.status_code == 403
    assert response.json()["error"] == "AuthorizationError"

    response = await client.get(f"{API}/performance/scorecard", headers=auth_headers(admin))
    assert response.status_code == 200
    body = response.json()
    assert body["totalUsers"] == 2
    assert body["usersWithScore"] == 1
    assert body["distribution"]["0-100"] == 1


def test_admin_registers_engagement_views():
    admin = setup_admin(FastAPI(), db_helper.engine)
    assert len(admin.views) == 6


async def test_users_cannot_emit_their_own_events(client, make_user):
    user = await make_user()
    headers = auth_headers(user)

    response = await client.post(
        f"{API}/events/", json={"userId": user.id, "eventType": "community_post"}, headers=headers
    )
    assert response.status_code == 403
    assert response.json()["error"] == "AuthorizationError"

    response = await client.get(f"{API}/performance/score", headers=headers)
    assert response.json()["totalScore"] == 0
    response = await client.get(f"{API}/events/", headers=headers)
    assert response.json() == []


async def test_admin_can_emit_events(client, make_user):
    user = await make_user()
    admin = await make_user(role=UserRole.ADMIN.value)

    response = await client.post(
        f"{API}/events/", json={"userId": user.id, "eventType": "profile_view"}, headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert response.json()["totalScore"] == 5


async def test_event_for_unknown_user(client):
    response = await client.post(
        f"{API}/events/", json={"userId": 999, "eventType": "login"}, headers=service_headers()
    )
    assert response.status_code == 404

    response = await client.post(
        f"{API}/events/", json={"userId": 1, "eventType": "login"}, headers={"Authorization": "Bearer broken"}
    )
    assert response.status_code == 401
