import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from prepdeck.repos.base import Repository
from prepdeck.schemas.documents import UserProfile
from prepdeck.utils import now_ms

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("id", "uid", "createdAt")


def _utc_date(ms: int) -> date:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).date()


def next_streak(profile: UserProfile, now: int) -> tuple[int, int]:
    """Return (streak, longest streak) after activity at ``now``.

    Activity on the same UTC day as the last one leaves the streak alone, the
    following day extends it, and any longer gap starts over at 1.
    """
    streak = profile.streak
    if profile.last_active_date is None:
        streak = 1
    else:
        gap = _utc_date(now) - _utc_date(profile.last_active_date)
        if gap == timedelta(0):
            streak = max(streak, 1)
        elif gap == timedelta(days=1):
            streak += 1
        else:
            streak = 1
    return streak, max(profile.longest_streak, streak)


class UserProfileRepo(Repository[UserProfile]):
    collection = "user_profiles"
    model = UserProfile
    label = "User profile"
    owner_field = "uid"

    def _new_profile(self, uid: str, fields: Optional[dict] = None) -> UserProfile:
        now = now_ms()
        return self._parse({
            **{k: v for k, v in (fields or {}).items() if v is not None},
            "id": uid,
            "uid": uid,
            "createdAt": now,
            "updatedAt": now,
        })

    def get(self, uid: str) -> Optional[UserProfile]:
        return self._find(uid)

    def get_by_id(self, uid: str) -> UserProfile:
        return self._load(uid)

    def create(self, uid: str, **fields: Any) -> UserProfile:
        return self._save(self._new_profile(uid, fields))

    def get_or_create(self, uid: str, **fields: Any) -> tuple[UserProfile, bool]:
        """Return the profile and whether this call created it."""
        created = []

        def mutate(current: Optional[dict]) -> dict:
            created.clear()
            if current is not None:
                return self._parse(current).to_document()
            created.append(True)
            return self._new_profile(uid, fields).to_document()

        profile = self._parse(self.store.transaction(self.collection, uid, mutate))
        if created:
            logger.info("created user profile %s", uid)
        return profile, bool(created)

    def patch(self, uid: str, patch: dict) -> UserProfile:
        changes = {k: v for k, v in patch.items() if k not in IMMUTABLE_FIELDS}
        return self._mutate_owned(uid, uid, lambda _: {**changes, "updatedAt": now_ms()})

    def record_activity(self, uid: str, now: Optional[int] = None) -> UserProfile:
        """Update the activity streak, creating the profile on first touch."""
        now = now if now is not None else now_ms()

        def mutate(current: Optional[dict]) -> dict:
            profile = self._parse(current) if current is not None else self._new_profile(uid)
            streak, longest = next_streak(profile, now)
            return self._parse({
                **profile.to_document(),
                "streak": streak,
                "longestStreak": longest,
                "lastActiveDate": now,
                "updatedAt": now,
            }).to_document()

        return self._parse(self.store.transaction(self.collection, uid, mutate))

    def complete_onboarding(self, uid: str, data: Optional[dict] = None) -> UserProfile:
        patch = {"onboardingCompleted": True}
        if data is not None:
            patch["onboardingData"] = data
        return self.patch(uid, patch)
