import logging

from fastapi import APIRouter, Depends, Query

from prepdeck.dependencies import get_current_identity, get_roadmap_repo
from prepdeck.repos import RoadmapRepo
from prepdeck.schemas.requests import RoadmapGenerateRequest, RoadmapProgressRequest
from prepdeck.services.auth import Identity
from prepdeck.services.roadmap_builder import build_fallback_roadmap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/roadmap", tags=["roadmap"])


@router.post("/generate")
def generate_roadmap(
    request: RoadmapGenerateRequest,
    identity: Identity = Depends(get_current_identity),
    roadmaps: RoadmapRepo = Depends(get_roadmap_repo),
):
    """Build a study roadmap for the requested companies and role, and save it."""
    body = build_fallback_roadmap(request.companies, request.designation, request.duration)
    roadmap = roadmaps.create(identity.uid, body)
    logger.info("saved %d-day roadmap %s for %s", request.duration, roadmap.id, identity.uid)
    return {
        "success": True,
        "roadmap": roadmap.to_document(),
        "message": "Roadmap generated and saved successfully",
    }


@router.get("/get-by-id")
def get_roadmap(
    id: str = Query(..., min_length=1),
    identity: Identity = Depends(get_current_identity),
    roadmaps: RoadmapRepo = Depends(get_roadmap_repo),
):
    return {"success": True, "roadmap": roadmaps.get_by_id(identity.uid, id).to_document()}


@router.get("/get-user-roadmaps")
def get_user_roadmaps(
    identity: Identity = Depends(get_current_identity),
    roadmaps: RoadmapRepo = Depends(get_roadmap_repo),
):
    items = roadmaps.list_for_user(identity.uid)
    return {"success": True, "roadmaps": [r.to_document() for r in items]}


@router.post("/update-progress")
def update_progress(
    request: RoadmapProgressRequest,
    identity: Identity = Depends(get_current_identity),
    roadmaps: RoadmapRepo = Depends(get_roadmap_repo),
):
    roadmap = roadmaps.update_progress(
        identity.uid,
        request.roadmap_id,
        completed_days=request.completed_days,
        completed_problems=request.completed_problems,
        completed_problems_count=request.completed_problems_count,
    )
    return {
        "success": True,
        "roadmap": roadmap.to_document(),
        "message": "Roadmap progress updated successfully",
    }
