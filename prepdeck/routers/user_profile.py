from fastapi import APIRouter, Depends

from prepdeck.dependencies import get_current_identity, get_profile_repo, get_progress_repo
from prepdeck.repos import UserProfileRepo, UserProgressRepo
from prepdeck.schemas.requests import OnboardingRequest, ProfileUpdateRequest
from prepdeck.services.auth import Identity

router = APIRouter(prefix="/api/user-profile", tags=["user-profile"])


@router.get("/get")
def get_profile(
    identity: Identity = Depends(get_current_identity),
    profiles: UserProfileRepo = Depends(get_profile_repo),
):
    """Get current user's profile, creating it on first visit."""
    profile, _ = profiles.get_or_create(identity.uid)
    return {"success": True, "profile": profile.to_document()}


@router.post("/update")
def update_profile(
    update_data: ProfileUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    profiles: UserProfileRepo = Depends(get_profile_repo),
):
    """Apply a partial update to the current user's profile."""
    profiles.get_or_create(identity.uid)
    patch = update_data.model_dump(by_alias=True, exclude_unset=True)
    profile = profiles.patch(identity.uid, patch)
    return {"success": True, "profile": profile.to_document()}


@router.post("/update-streak")
def update_streak(
    identity: Identity = Depends(get_current_identity),
    profiles: UserProfileRepo = Depends(get_profile_repo),
):
    profile = profiles.record_activity(identity.uid)
    return {
        "success": True,
        "streak": profile.streak,
        "longestStreak": profile.longest_streak,
        "message": "User streak updated successfully",
    }


@router.post("/complete-onboarding")
def complete_onboarding(
    request: OnboardingRequest,
    identity: Identity = Depends(get_current_identity),
    profiles: UserProfileRepo = Depends(get_profile_repo),
):
    profiles.get_or_create(identity.uid)
    profile = profiles.complete_onboarding(identity.uid, request.onboarding_data)
    return {"success": True, "profile": profile.to_document()}


@router.get("/progress")
def get_progress(
    identity: Identity = Depends(get_current_identity),
    progress: UserProgressRepo = Depends(get_progress_repo),
):
    """Get the current user's per-problem attempt history."""
    attempts = progress.list_attempts(identity.uid)
    return {"success": True, "progress": [a.to_document() for a in attempts]}
