import logging

from fastapi import APIRouter, Depends

from prepdeck.dependencies import get_current_identity, get_profile_repo
from prepdeck.repos import UserProfileRepo
from prepdeck.schemas.requests import SubscriptionActivateRequest
from prepdeck.services import subscription
from prepdeck.services.auth import Identity
from prepdeck.utils import now_ms

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscription", tags=["subscription"])


@router.post("/activate")
def activate_subscription(
    request: SubscriptionActivateRequest,
    identity: Identity = Depends(get_current_identity),
    profiles: UserProfileRepo = Depends(get_profile_repo),
):
    """Record a paid plan on the caller's profile."""
    now = now_ms()
    status, expires_at = subscription.plan_expiry(request.plan_id, now)

    profiles.get_or_create(identity.uid)
    profiles.patch(identity.uid, {
        "isPremium": True,
        "subscriptionStatus": status,
        "subscriptionExpiresAt": expires_at,
        "subscription": {
            "planId": request.plan_id,
            "paymentId": request.payment_id,
            "amount": request.amount,
            "activatedAt": now,
        },
    })
    logger.info("activated %s plan for %s (payment %s)", request.plan_id, identity.uid, request.payment_id)
    return {
        "success": True,
        "message": "Subscription activated successfully",
        "subscription": {"planId": request.plan_id, "status": status, "expiresAt": expires_at},
    }


@router.get("/status")
def subscription_status(
    identity: Identity = Depends(get_current_identity),
    profiles: UserProfileRepo = Depends(get_profile_repo),
):
    profile = profiles.get_by_id(identity.uid)
    state = subscription.evaluate(profile, now_ms())
    if state.expired_now:
        profile = profiles.patch(identity.uid, {"isPremium": False, "subscriptionStatus": "expired"})
        logger.info("subscription of %s expired", identity.uid)

    return {
        "success": True,
        **state.to_dict(),
        "subscriptionExpiresAt": profile.subscription_expires_at,
        "planId": profile.subscription.plan_id if profile.subscription else None,
        "subscription": profile.subscription.to_document() if profile.subscription else None,
    }
