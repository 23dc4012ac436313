import logging

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from prepdeck.dependencies import get_current_identity, get_evaluator, get_progress_repo
from prepdeck.repos import UserProgressRepo
from prepdeck.schemas.requests import EvaluateCodeRequest
from prepdeck.services.auth import Identity
from prepdeck.services.evaluator import SubmissionEvaluator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/evaluation", tags=["evaluation"])


@router.post("/evaluate-submission")
async def evaluate_submission(
    request: EvaluateCodeRequest,
    identity: Identity = Depends(get_current_identity),
    evaluator: SubmissionEvaluator = Depends(get_evaluator),
    progress: UserProgressRepo = Depends(get_progress_repo),
):
    """Free-text AI review of code and/or a design drawing."""
    feedback = await evaluator.review_async(request.designation, request.code, request.drawing_image)
    if request.problem_id:
        await run_in_threadpool(progress.save_feedback, identity.uid, request.problem_id, {"feedback": feedback})
    logger.info("reviewed submission for user %s", identity.uid)
    return {"feedback": feedback}
