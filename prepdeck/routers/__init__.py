from prepdeck.routers.auth import router as auth_router
from prepdeck.routers.companies import router as companies_router
from prepdeck.routers.dashboard import router as dashboard_router
from prepdeck.routers.evaluation import router as evaluation_router
from prepdeck.routers.problems import router as problems_router
from prepdeck.routers.roadmap import router as roadmap_router
from prepdeck.routers.simulations import router as simulations_router
from prepdeck.routers.subscription import router as subscription_router
from prepdeck.routers.user_profile import router as user_profile_router
from prepdeck.routers.users import router as users_router

__all__ = [
    "auth_router",
    "companies_router",
    "dashboard_router",
    "evaluation_router",
    "problems_router",
    "roadmap_router",
    "simulations_router",
    "subscription_router",
    "user_profile_router",
    "users_router",
]
