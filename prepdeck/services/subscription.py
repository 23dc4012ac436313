"""Subscription plan rules. Payment capture happens upstream of this service."""

import calendar
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from prepdeck.errors import BadRequest
from prepdeck.schemas.documents import UserProfile

PLANS = ("monthly", "yearly", "lifetime")
LIFETIME_DAYS_REMAINING = 999999
DAY_MS = 24 * 60 * 60 * 1000


def _add_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _to_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def plan_expiry(plan_id: str, now_ms: int) -> tuple[str, Optional[int]]:
    """Return (subscription status, expiry in unix ms or None) for a new purchase."""
    now = datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc)
    if plan_id == "monthly":
        return "premium", _to_ms(_add_months(now, 1))
    if plan_id == "yearly":
        return "premium", _to_ms(_add_months(now, 12))
    if plan_id == "lifetime":
        return "lifetime", None
    raise BadRequest("Invalid plan ID", details={"planId": plan_id, "allowed": list(PLANS)})


@dataclass
class SubscriptionState:
    status: str
    is_premium: bool
    days_remaining: int
    expired_now: bool

    def to_dict(self) -> dict:
        return {
            "subscriptionStatus": self.status,
            "isPremium": self.is_premium,
            "daysRemaining": self.days_remaining,
        }


def evaluate(profile: UserProfile, now_ms: int) -> SubscriptionState:
    """Work out the current subscription state.

    ``expired_now`` is set when a premium plan has passed its expiry and the
    stored profile still says premium; the caller persists the flip.
    """
    status = profile.subscription_status
    days_remaining = 0
    expired_now = False

    if profile.subscription_expires_at is not None:
        days_remaining = math.ceil((profile.subscription_expires_at - now_ms) / DAY_MS)
        if days_remaining <= 0 and status == "premium":
            status = "expired"
            expired_now = True

    if status == "lifetime":
        days_remaining = LIFETIME_DAYS_REMAINING

    return SubscriptionState(
        status=status,
        is_premium=profile.is_premium and status != "expired",
        days_remaining=days_remaining,
        expired_now=expired_now,
    )
