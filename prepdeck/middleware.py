"""Edge gate in front of ``/api/*``.

Requests outside the public allow-list must carry a credential or are turned
away with 401 before any handler runs. The gate only checks presence; the
handlers verify signatures through ``AuthResolver``.
"""

import logging
import re

from fastapi import Request
from fastapi.responses import JSONResponse

from prepdeck.config import SESSION_COOKIE_NAME, TRUST_USER_HEADER, TRUSTED_USER_HEADER

logger = logging.getLogger(__name__)

# Reachable without any credential, any method
PUBLIC_ROUTES = ("/api/auth/session",)

# Reachable without any credential for GET/HEAD
PUBLIC_READS = [
    re.compile(r"^/api/problems/?$"),
    re.compile(r"^/api/problems/(get-by-id|get-all|get-stats)$"),
    re.compile(r"^/api/problems/[0-9a-fA-F-]{36}$"),
    re.compile(r"^/api/companies(/.*)?$"),
]


def is_public(method: str, path: str) -> bool:
    if any(path == route or path.startswith(route + "/") for route in PUBLIC_ROUTES):
        return True
    if method in ("GET", "HEAD"):
        return any(pattern.match(path) for pattern in PUBLIC_READS)
    return False


def has_credential(request: Request) -> bool:
    if request.cookies.get(SESSION_COOKIE_NAME):
        return True
    if request.headers.get("authorization"):
        return True
    return TRUST_USER_HEADER and bool(request.headers.get(TRUSTED_USER_HEADER))


async def session_gate(request: Request, call_next):
    path = request.url.path
    if not path.startswith("/api/"):
        return await call_next(request)

    enabled = getattr(request.app.state, "edge_auth_enabled", True)
    if (
        enabled
        and request.method != "OPTIONS"
        and not is_public(request.method, path)
        and not has_credential(request)
    ):
        logger.info("Rejected %s %s: no credential", request.method, path)
        return JSONResponse(
            status_code=401,
            content={"error": "Authentication required"},
            headers={"Cache-Control": "no-store"},
        )

    response = await call_next(request)
    response.headers.setdefault("Cache-Control", "no-store")
    return response
