from datetime import datetime, timezone

import pytest

from prepdeck.errors import BadRequest
from prepdeck.repos import UserProfileRepo
from prepdeck.services import subscription
from prepdeck.services.subscription import LIFETIME_DAYS_REMAINING, plan_expiry


def ms(year, month, day):
    return int(datetime(year, month, day, tzinfo=timezone.utc).timestamp() * 1000)


def test_monthly_plan_clamps_to_month_end():
    assert plan_expiry("monthly", ms(2024, 1, 31)) == ("premium", ms(2024, 2, 29))


def test_yearly_and_lifetime_plans():
    assert plan_expiry("yearly", ms(2024, 5, 1)) == ("premium", ms(2025, 5, 1))
    assert plan_expiry("lifetime", ms(2024, 5, 1)) == ("lifetime", None)


def test_unknown_plan():
    with pytest.raises(BadRequest):
        plan_expiry("weekly", ms(2024, 5, 1))


def test_evaluate_flags_lapsed_premium(store):
    profile = UserProfileRepo(store).create(
        "alice", is_premium=True, subscription_status="premium", subscription_expires_at=ms(2024, 1, 1)
    )
    state = subscription.evaluate(profile, ms(2024, 1, 2))
    assert state.expired_now is True
    assert state.to_dict() == {"subscriptionStatus": "expired", "isPremium": False, "daysRemaining": -1}


def test_evaluate_lifetime(store):
    profile = UserProfileRepo(store).create("alice", is_premium=True, subscription_status="lifetime")
    state = subscription.evaluate(profile, ms(2030, 1, 1))
    assert state.days_remaining == LIFETIME_DAYS_REMAINING
    assert state.is_premium is True


def test_activate_then_status(client, auth_headers):
    headers = auth_headers("alice")
    activated = client.post(
        "/api/subscription/activate",
        json={"planId": "monthly", "paymentId": "pay_1", "amount": 9.99},
        headers=headers,
    )
    assert activated.status_code == 200
    assert activated.json()["subscription"]["status"] == "premium"

    status = client.get("/api/subscription/status", headers=headers).json()
    assert status["isPremium"] is True
    assert status["subscriptionStatus"] == "premium"
    assert status["planId"] == "monthly"
    assert 27 <= status["daysRemaining"] <= 32


def test_status_persists_expiry(client, auth_headers, store):
    UserProfileRepo(store).create(
        "alice", is_premium=True, subscription_status="premium", subscription_expires_at=ms(2020, 1, 1)
    )
    status = client.get("/api/subscription/status", headers=auth_headers("alice")).json()
    assert status["subscriptionStatus"] == "expired"

    stored = UserProfileRepo(store).get_by_id("alice")
    assert stored.subscription_status == "expired"
    assert stored.is_premium is False


def test_activate_rejects_bad_plan(client, auth_headers):
    response = client.post(
        "/api/subscription/activate",
        json={"planId": "weekly", "paymentId": "pay_1", "amount": 1},
        headers=auth_headers("alice"),
    )
    assert response.status_code == 400
