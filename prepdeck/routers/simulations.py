import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from starlette.concurrency import run_in_threadpool

from prepdeck.dependencies import (
    get_current_identity,
    get_evaluator,
    get_generator,
    get_problem_repo,
    get_progress_repo,
    get_session_repo,
    get_simulation_repo,
)
from prepdeck.errors import InternalError, NotFound, SchemaViolation
from prepdeck.repos import InterviewSessionRepo, ProblemRepo, SimulationRepo, UserProgressRepo
from prepdeck.routers.problems import stamp_problem
from prepdeck.schemas.problem import ProblemEnvelope, problem_to_document
from prepdeck.schemas.requests import (
    AppendProblemsRequest,
    CompleteSimulationRequest,
    EvaluateMockSubmissionRequest,
    InterviewSessionCreateRequest,
    SimulationCreateRequest,
)
from prepdeck.services.auth import Identity
from prepdeck.services.evaluator import SubmissionEvaluator
from prepdeck.services.problem_generator import ProblemGenerator
from prepdeck.utils import now_ms

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interview-simulation", tags=["interview-simulation"])

DEFAULT_ROUND_PROBLEMS = 3
MAX_ROUND_PROBLEMS = 5

# Round categories used by the interview planner, mapped to problem kinds
ROUND_KINDS = {
    "dsa": "dsa",
    "machine_coding": "machine_coding",
    "system_design": "system_design",
    "theory": "theory",
    "theory_and_debugging": "theory",
    "js_fundamentals": "theory",
    "html_css": "theory",
    "behavioral": "theory",
}


def round_kind(category: Optional[str]) -> str:
    return ROUND_KINDS.get(category or "", "machine_coding")


def round_problems(problems: ProblemRepo, uid: str, simulation, round_number: int) -> list[ProblemEnvelope]:
    found = [
        p for p in problems.get_many(uid, simulation.problem_ids)
        if p.round is not None and p.round.index == round_number
    ]
    return sorted(found, key=lambda p: p.created_at)


@router.post("/create", status_code=status.HTTP_201_CREATED)
def create_simulation(
    request: SimulationCreateRequest,
    identity: Identity = Depends(get_current_identity),
    simulations: SimulationRepo = Depends(get_simulation_repo),
):
    simulation = simulations.create(
        owner_id=identity.uid,
        company_name=request.company_name,
        role_level=request.role_level,
        company_id=request.company_id,
    )
    return {
        "success": True,
        "simulationId": simulation.id,
        "simulation": simulation.to_document(),
        "message": "Interview simulation created successfully",
    }


@router.get("/get-active")
def get_active_simulation(
    identity: Identity = Depends(get_current_identity),
    simulations: SimulationRepo = Depends(get_simulation_repo),
):
    simulation = simulations.get_active(identity.uid)
    return {"success": True, "simulation": simulation.to_document() if simulation else None}


@router.get("/get-simulation")
def get_simulation(
    id: str = Query(..., min_length=1),
    identity: Identity = Depends(get_current_identity),
    simulations: SimulationRepo = Depends(get_simulation_repo),
):
    return simulations.get_by_id(identity.uid, id).to_document()


@router.get("/list")
def list_simulations(
    status: Optional[Literal["active", "completed"]] = None,
    limit: Optional[int] = Query(None, ge=1, le=100),
    identity: Identity = Depends(get_current_identity),
    simulations: SimulationRepo = Depends(get_simulation_repo),
):
    items = simulations.list_for_user(identity.uid, limit=limit, status=status)
    return [s.to_document() for s in items]


@router.post("/append-problems")
def append_problems(
    request: AppendProblemsRequest,
    identity: Identity = Depends(get_current_identity),
    simulations: SimulationRepo = Depends(get_simulation_repo),
):
    simulation = simulations.append_problems(identity.uid, request.simulation_id, request.problem_ids)
    return simulation.to_document()


@router.post("/complete")
def complete_simulation(
    request: CompleteSimulationRequest,
    identity: Identity = Depends(get_current_identity),
    simulations: SimulationRepo = Depends(get_simulation_repo),
):
    simulation = simulations.set_status(identity.uid, request.simulation_id, "completed")
    return simulation.to_document()


@router.get("/get-round-problems")
def get_round_problems(
    simulation_id: str = Query(..., alias="simulationId", min_length=1),
    round_number: int = Query(..., alias="roundNumber", ge=1),
    identity: Identity = Depends(get_current_identity),
    simulations: SimulationRepo = Depends(get_simulation_repo),
    problems: ProblemRepo = Depends(get_problem_repo),
):
    simulation = simulations.get_by_id(identity.uid, simulation_id)
    found = round_problems(problems, identity.uid, simulation, round_number)
    return {
        "success": True,
        "problems": [problem_to_document(p) for p in found],
        "count": len(found),
    }


@router.post("/start-interview")
async def start_interview(
    simulation_id: str = Query(..., alias="simulationId", min_length=1),
    identity: Identity = Depends(get_current_identity),
    simulations: SimulationRepo = Depends(get_simulation_repo),
    sessions: InterviewSessionRepo = Depends(get_session_repo),
    problems: ProblemRepo = Depends(get_problem_repo),
    generator: ProblemGenerator = Depends(get_generator),
):
    """Return the current round's problems, generating and storing them on first start."""
    uid = identity.uid
    simulation = await run_in_threadpool(simulations.get_by_id, uid, simulation_id)
    session = await run_in_threadpool(sessions.find, uid, simulation_id)
    if session is None:
        raise NotFound("Interview session not found")

    round_number = session.current_round + 1
    existing = await run_in_threadpool(round_problems, problems, uid, simulation, round_number)
    if existing:
        return {
            "success": True,
            "generated": False,
            "roundNumber": round_number,
            "problems": [problem_to_document(p) for p in existing],
        }

    round_info = session.rounds[session.current_round] if session.current_round < len(session.rounds) else {}
    kind = round_kind(round_info.get("type") or round_info.get("category"))
    count = min(len(round_info.get("sampleProblems") or []) or DEFAULT_ROUND_PROBLEMS, MAX_ROUND_PROBLEMS)

    created = []
    for _ in range(count):
        output = await generator.generate_async(
            kind,
            role=simulation.role_level,
            company=simulation.company_name,
            difficulty=round_info.get("difficulty"),
            context=round_info.get("name") or session.round_name,
        )
        candidate = stamp_problem(
            {
                **output,
                "company": {"id": simulation.company_id, "name": simulation.company_name},
                "role": simulation.role_level,
                "round": {"index": round_number, "type": kind},
            },
            owner_id=uid,
            source="simulation",
            visibility="private",
        )
        try:
            created.append(await run_in_threadpool(problems.create, candidate))
        except SchemaViolation as e:
            logger.warning("Dropping generated %s problem that failed validation: %s", kind, e.details)

    if not created:
        raise InternalError("Failed to generate problems")

    await run_in_threadpool(simulations.append_problems, uid, simulation_id, [p.id for p in created])
    logger.info("generated %d problems for simulation %s round %d", len(created), simulation_id, round_number)
    return {
        "success": True,
        "generated": True,
        "roundNumber": round_number,
        "problems": [problem_to_document(p) for p in created],
    }


@router.post("/evaluate-submission")
async def evaluate_submission(
    request: EvaluateMockSubmissionRequest,
    identity: Identity = Depends(get_current_identity),
    evaluator: SubmissionEvaluator = Depends(get_evaluator),
    progress: UserProgressRepo = Depends(get_progress_repo),
):
    """Score a round submission; the result is kept as feedback when the problem has an id."""
    result = await evaluator.evaluate_async(request.problem, request.submission)
    body = {**result.to_document(), "timestamp": now_ms()}
    problem_id = request.problem.get("id")
    if isinstance(problem_id, str) and problem_id:
        await run_in_threadpool(progress.save_feedback, identity.uid, problem_id, body)
    logger.info("evaluated %s submission for user %s: %s", request.problem.get("kind"), identity.uid, result.score)
    return body


@router.post("/session/create", status_code=status.HTTP_201_CREATED)
def create_session(
    request: InterviewSessionCreateRequest,
    identity: Identity = Depends(get_current_identity),
    simulations: SimulationRepo = Depends(get_simulation_repo),
    sessions: InterviewSessionRepo = Depends(get_session_repo),
):
    if request.simulation_id:
        simulations.get_by_id(identity.uid, request.simulation_id)
    session = sessions.create(identity.uid, request.model_dump(by_alias=True))
    return {"success": True, "sessionId": session.id, "session": session.to_document()}


@router.get("/session/get-by-id")
def get_session(
    id: str = Query(..., min_length=1),
    identity: Identity = Depends(get_current_identity),
    sessions: InterviewSessionRepo = Depends(get_session_repo),
):
    return sessions.get_by_id(identity.uid, id).to_document()


@router.get("/session/get-by-simulation")
def get_session_by_simulation(
    simulation_id: str = Query(..., alias="simulationId", min_length=1),
    round_name: Optional[str] = Query(None, alias="roundName"),
    identity: Identity = Depends(get_current_identity),
    sessions: InterviewSessionRepo = Depends(get_session_repo),
):
    session = sessions.find(identity.uid, simulation_id, round_name)
    if session is None:
        raise NotFound("Interview session not found")
    return session.to_document()
