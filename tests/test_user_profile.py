from datetime import datetime, timezone

import pytest

from prepdeck.errors import Forbidden
from prepdeck.repos import UserProfileRepo
from prepdeck.repos.user_profile import next_streak


def ms(year, month, day, hour=12):
    return int(datetime(year, month, day, hour, tzinfo=timezone.utc).timestamp() * 1000)


def test_streak_counts_consecutive_utc_days(store):
    profiles = UserProfileRepo(store)
    assert profiles.record_activity("alice", now=ms(2024, 3, 1)).streak == 1
    assert profiles.record_activity("alice", now=ms(2024, 3, 1, 23)).streak == 1
    assert profiles.record_activity("alice", now=ms(2024, 3, 2, 0)).streak == 2
    profile = profiles.record_activity("alice", now=ms(2024, 3, 3))
    assert (profile.streak, profile.longest_streak) == (3, 3)

    profile = profiles.record_activity("alice", now=ms(2024, 3, 6))
    assert (profile.streak, profile.longest_streak) == (1, 3)


def test_next_streak_on_fresh_profile(store):
    profile = UserProfileRepo(store).create("bob")
    assert next_streak(profile, ms(2024, 1, 1)) == (1, 1)


def test_get_or_create_is_idempotent(store):
    profiles = UserProfileRepo(store)
    first, created = profiles.get_or_create("alice", email="alice@example.com")
    again, created_again = profiles.get_or_create("alice", email="other@example.com")
    assert created is True
    assert created_again is False
    assert again.email == "alice@example.com"
    assert again.created_at == first.created_at


def test_patch_cannot_move_profile(store):
    profiles = UserProfileRepo(store)
    profiles.create("alice")
    patched = profiles.patch("alice", {"uid": "mallory", "id": "mallory", "displayName": "Alice"})
    assert patched.uid == "alice"
    assert patched.display_name == "Alice"


def test_patch_other_users_profile_is_forbidden(store):
    profiles = UserProfileRepo(store)
    profiles.create("alice")
    # Stored document claims a different owner
    store.set("user_profiles", "bob", {**profiles.get_by_id("alice").to_document(), "id": "bob"})
    with pytest.raises(Forbidden):
        profiles.patch("bob", {"displayName": "x"})


def test_users_create_endpoint(client, auth_headers):
    headers = auth_headers("alice")
    first = client.post("/api/users/create", headers=headers)
    assert first.status_code == 201
    second = client.post("/api/users/create", headers=headers)
    assert second.status_code == 200
    assert second.json() == {"message": "User already exists", "userId": "alice"}


def test_profile_update_and_onboarding(client, auth_headers):
    headers = auth_headers("alice")
    assert client.get("/api/user-profile/get", headers=headers).json()["profile"]["uid"] == "alice"

    updated = client.post(
        "/api/user-profile/update",
        json={"displayName": "Alice", "photoURL": "https://img.example.com/a.png"},
        headers=headers,
    ).json()["profile"]
    assert updated["displayName"] == "Alice"
    assert updated["photoURL"] == "https://img.example.com/a.png"

    bad = client.post("/api/user-profile/update", json={"email": "not-an-email"}, headers=headers)
    assert bad.status_code == 400

    onboarded = client.post(
        "/api/user-profile/complete-onboarding", json={"onboardingData": {"goal": "faang"}}, headers=headers
    ).json()["profile"]
    assert onboarded["onboardingCompleted"] is True
    assert onboarded["onboardingData"] == {"goal": "faang"}


def test_update_streak_endpoint(client, auth_headers):
    body = client.post("/api/user-profile/update-streak", headers=auth_headers("alice")).json()
    assert body["streak"] == 1
    assert body["longestStreak"] == 1
