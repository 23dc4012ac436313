import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status
from starlette.concurrency import run_in_threadpool

from prepdeck.dependencies import (
    get_current_identity,
    get_current_identity_optional,
    get_generator,
    get_problem_repo,
    get_progress_repo,
    get_simulation_repo,
    get_submission_repo,
)
from prepdeck.errors import BadRequest, Unauthenticated
from prepdeck.repos import ProblemRepo, SimulationRepo, SubmissionRepo, UserProgressRepo
from prepdeck.schemas.problem import SCHEMA_VERSION, problem_to_document
from prepdeck.schemas.requests import (
    GenerateProblemRequest,
    MarkAttemptedRequest,
    MarkCompletedRequest,
    SaveFeedbackRequest,
    SaveInterviewProblemRequest,
    SaveSubmissionRequest,
)
from prepdeck.services.auth import Identity
from prepdeck.services.problem_generator import ProblemGenerator
from prepdeck.utils import create_id, now_ms

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/problems", tags=["problems"])


def stamp_problem(candidate: dict, *, owner_id: Optional[str] = None, source: Optional[str] = None,
                  visibility: Optional[str] = None, keep_identity: bool = False) -> dict:
    """Fill in server-owned fields; owner/source/visibility override the client when given.

    ``id`` and ``createdAt`` are always minted here unless ``keep_identity`` is
    set, which only admin imports do.
    """
    now = now_ms()
    stamped = {
        **candidate,
        "id": create_id(),
        "schemaVersion": SCHEMA_VERSION,
        "createdAt": now,
        "updatedAt": now,
    }
    if keep_identity:
        stamped["id"] = candidate.get("id") or stamped["id"]
        stamped["createdAt"] = candidate.get("createdAt", now)
    if owner_id is not None:
        stamped["ownerId"] = owner_id
    if source is not None:
        stamped["source"] = source
    if visibility is not None:
        stamped["visibility"] = visibility
    return stamped


# Legacy endpoints, declared before /{problem_id} so their paths win
@router.get("/get-by-id")
def legacy_get_by_id(
    id: str = Query(..., min_length=1),
    identity: Optional[Identity] = Depends(get_current_identity_optional),
    repo: ProblemRepo = Depends(get_problem_repo),
):
    uid = identity.uid if identity else None
    return problem_to_document(repo.get_by_id(uid, id))


@router.get("/get-all")
def legacy_get_all(
    response: Response,
    page: int = 1,
    limit: int = 12,
    repo: ProblemRepo = Depends(get_problem_repo),
):
    if page < 1 or limit < 1 or limit > 50:
        raise BadRequest("Page must be >= 1 and limit must be between 1 and 50")

    # One extra row tells us whether a next page exists
    fetched = repo.list_admin_public(limit=page * limit + 1)
    start = (page - 1) * limit
    problems = fetched[start : start + limit]
    has_next = len(fetched) > start + limit

    response.headers["Cache-Control"] = "public, max-age=60, s-maxage=300, stale-while-revalidate=300"
    return {
        "problems": [problem_to_document(p) for p in problems],
        "pagination": {
            "currentPage": page,
            "itemsPerPage": limit,
            "itemsOnPage": len(problems),
            "hasNextPage": has_next,
            "hasPrevPage": page > 1,
        },
    }


@router.get("/get-by-user-id")
def legacy_get_by_user(
    limit: int = Query(20, ge=1, le=100),
    cursor: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    repo: ProblemRepo = Depends(get_problem_repo),
):
    problems = repo.list_for_user(identity.uid, limit=limit, cursor=cursor)
    return {"success": True, "problems": [problem_to_document(p) for p in problems]}


@router.get("/get-submissions-by-user")
def legacy_get_submissions(
    identity: Identity = Depends(get_current_identity),
    submissions: SubmissionRepo = Depends(get_submission_repo),
):
    return {
        "success": True,
        "submissions": [s.to_document() for s in submissions.list_for_user(identity.uid)],
    }


@router.get("/get-stats")
def legacy_get_stats(response: Response, repo: ProblemRepo = Depends(get_problem_repo)):
    response.headers["Cache-Control"] = "public, max-age=300, s-maxage=600, stale-while-revalidate=600"
    return repo.stats()


@router.post("/create")
async def legacy_create(
    request: GenerateProblemRequest,
    identity: Identity = Depends(get_current_identity),
    repo: ProblemRepo = Depends(get_problem_repo),
    generator: ProblemGenerator = Depends(get_generator),
):
    """Store an explicit problem, or generate one with AI when none is given."""
    output = request.problem
    if output is None:
        output = await generator.generate_async(
            request.kind,
            role=request.designation,
            company=request.companies,
            difficulty=request.difficulty,
            context=request.context or request.round,
        )
    candidate = stamp_problem(output, owner_id=identity.uid, source="simulation", visibility="private")
    problem = await run_in_threadpool(repo.create, candidate)
    logger.info("user %s created %s problem %s", identity.uid, problem.kind, problem.id)
    return {"success": True, "problem": problem_to_document(problem)}


@router.post("/save-interview-problem")
def legacy_save_interview_problem(
    request: SaveInterviewProblemRequest,
    identity: Identity = Depends(get_current_identity),
    repo: ProblemRepo = Depends(get_problem_repo),
    simulations: SimulationRepo = Depends(get_simulation_repo),
):
    candidate = stamp_problem(request.problem_data, owner_id=identity.uid, source="direct", visibility="private")
    problem = repo.create(candidate)
    if request.simulation_id:
        simulations.append_problems(identity.uid, request.simulation_id, [problem.id])
    return {"success": True, "data": problem_to_document(problem)}


@router.post("/mark-attempted")
def legacy_mark_attempted(
    request: MarkAttemptedRequest,
    identity: Identity = Depends(get_current_identity),
    progress: UserProgressRepo = Depends(get_progress_repo),
):
    attempt = progress.mark_attempted(
        identity.uid,
        request.problem_id,
        attempt_data=request.attempt_data,
        problem_type=request.problem_type,
        difficulty=request.difficulty,
    )
    return {"success": True, "attempt": attempt.to_document()}


@router.post("/mark-completed")
def legacy_mark_completed(
    request: MarkCompletedRequest,
    identity: Identity = Depends(get_current_identity),
    progress: UserProgressRepo = Depends(get_progress_repo),
):
    attempt = progress.mark_completed(identity.uid, request.problem_id, request.score, request.time_spent)
    return {"success": True, "attempt": attempt.to_document()}


@router.post("/save-feedback")
def legacy_save_feedback(
    request: SaveFeedbackRequest,
    identity: Identity = Depends(get_current_identity),
    progress: UserProgressRepo = Depends(get_progress_repo),
):
    feedback = progress.save_feedback(identity.uid, request.problem_id, request.feedback_data)
    return {"success": True, "feedback": feedback.to_document()}


@router.post("/save-submission")
def legacy_save_submission(
    request: SaveSubmissionRequest,
    identity: Identity = Depends(get_current_identity),
    submissions: SubmissionRepo = Depends(get_submission_repo),
):
    submission = submissions.save(identity.uid, request.problem_id, request.data)
    return {"success": True, "submission": submission.to_document()}


# Resource endpoints
@router.get("")
def list_problems(
    mine: bool = False,
    visibility: Optional[str] = Query(None, pattern="^(admin|public)$"),
    limit: int = Query(20, ge=1, le=100),
    cursor: Optional[str] = None,
    identity: Optional[Identity] = Depends(get_current_identity_optional),
    repo: ProblemRepo = Depends(get_problem_repo),
):
    """List the caller's own problems (``mine=true``) or the shared catalogue."""
    if mine:
        if identity is None:
            raise Unauthenticated("Authentication required to list your problems")
        problems = repo.list_for_user(identity.uid, limit=limit, cursor=cursor)
    else:
        problems = repo.list_admin_public(limit=limit, cursor=cursor, visibility=visibility)
    return [problem_to_document(p) for p in problems]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_problem(
    payload: dict[str, Any] = Body(...),
    identity: Identity = Depends(get_current_identity),
    repo: ProblemRepo = Depends(get_problem_repo),
):
    if identity.is_admin:
        candidate = stamp_problem({
            **payload,
            "ownerId": payload.get("ownerId") or identity.uid,
            "source": payload.get("source") or "admin",
        }, keep_identity=True)
    else:
        candidate = stamp_problem(payload, owner_id=identity.uid, source="direct", visibility="private")
    problem = repo.create(candidate)
    return problem_to_document(problem)


@router.get("/{problem_id}")
def get_problem(
    problem_id: str,
    identity: Optional[Identity] = Depends(get_current_identity_optional),
    repo: ProblemRepo = Depends(get_problem_repo),
):
    uid = identity.uid if identity else None
    return problem_to_document(repo.get_by_id(uid, problem_id))


@router.patch("/{problem_id}")
def update_problem(
    problem_id: str,
    patch: dict[str, Any] = Body(...),
    identity: Identity = Depends(get_current_identity),
    repo: ProblemRepo = Depends(get_problem_repo),
):
    return problem_to_document(repo.update(identity.uid, problem_id, patch, is_admin=identity.is_admin))


@router.delete("/{problem_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_problem(
    problem_id: str,
    identity: Identity = Depends(get_current_identity),
    repo: ProblemRepo = Depends(get_problem_repo),
):
    repo.remove(identity.uid, problem_id, is_admin=identity.is_admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
