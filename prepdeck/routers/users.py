from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from prepdeck.dependencies import get_current_identity, get_profile_repo
from prepdeck.repos import UserProfileRepo
from prepdeck.services.auth import Identity

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/create")
def create_user(
    identity: Identity = Depends(get_current_identity),
    profiles: UserProfileRepo = Depends(get_profile_repo),
):
    """Create the caller's profile on first sign-in; 200 when it already exists."""
    profile, created = profiles.get_or_create(identity.uid)
    if not created:
        return {"message": "User already exists", "userId": identity.uid}
    return JSONResponse(
        status_code=201,
        content={"message": "User created", "userId": identity.uid, "profile": profile.to_document()},
    )
