import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from prepdeck.config import (
    DATABASE_URL,
    DOCUMENT_STORE,
    EDGE_AUTH_ENABLED,
    FRONTEND_URL,
    IDENTITY_PROVIDER,
    LOG_LEVEL,
    TRANSACTION_MAX_ATTEMPTS,
)
from prepdeck.errors import AppError
from prepdeck.middleware import session_gate
from prepdeck.routers import (
    auth_router,
    companies_router,
    dashboard_router,
    evaluation_router,
    problems_router,
    roadmap_router,
    simulations_router,
    subscription_router,
    user_profile_router,
    users_router,
)
from prepdeck.services.auth import AuthResolver
from prepdeck.services.evaluator import SubmissionEvaluator
from prepdeck.services.identity import IdentityProvider, build_identity_provider
from prepdeck.services.problem_generator import ProblemGenerator
from prepdeck.store import DocumentStore, build_store

logger = logging.getLogger(__name__)


def _strip_trailing_slash(value: str) -> str:
    return value[:-1] if value.endswith("/") else value


allowed_origins = [
    _strip_trailing_slash(FRONTEND_URL),
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "BAD_REQUEST", "message": "Invalid request", "details": details},
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "INTERNAL", "message": "Unexpected error"})


def create_app(
    store: Optional[DocumentStore] = None,
    identity_provider: Optional[IdentityProvider] = None,
    generator: Optional[ProblemGenerator] = None,
    evaluator: Optional[SubmissionEvaluator] = None,
    edge_auth_enabled: bool = EDGE_AUTH_ENABLED,
) -> FastAPI:
    """Build the API; collaborators default to the ones named in the environment."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if store is None:
        store = build_store(DOCUMENT_STORE, DATABASE_URL, TRANSACTION_MAX_ATTEMPTS)
    if identity_provider is None:
        identity_provider = build_identity_provider(IDENTITY_PROVIDER)
    if generator is None:
        generator = ProblemGenerator()
    if not generator.configured:
        logger.warning("GEMINI_API_KEY not set; problem generation is disabled")
    if evaluator is None:
        evaluator = SubmissionEvaluator()

    app = FastAPI(title="PrepDeck API")
    app.state.store = store
    app.state.identity_provider = identity_provider
    app.state.auth_resolver = AuthResolver.default(identity_provider)
    app.state.generator = generator
    app.state.evaluator = evaluator
    app.state.edge_auth_enabled = edge_auth_enabled

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(user_profile_router)
    app.include_router(problems_router)
    app.include_router(simulations_router)
    app.include_router(evaluation_router)
    app.include_router(companies_router)
    app.include_router(roadmap_router)
    app.include_router(subscription_router)
    app.include_router(dashboard_router)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Registered before CORS so preflight answers are not gated
    app.middleware("http")(session_gate)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {"message": "PrepDeck API is running"}

    return app
