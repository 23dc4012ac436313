"""Resolve the caller's identity from an incoming request.

Credentials are tried in order: a user-id header set by a trusted edge layer,
an ``Authorization: Bearer`` ID token, then the session cookie. Each source
returns an ``Identity``, declines with ``None`` when its credential is absent,
or raises ``Unauthenticated`` when the credential is present but invalid.
"""

import logging
import re
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from starlette.requests import HTTPConnection

from prepdeck.config import SESSION_COOKIE_NAME, TRUST_USER_HEADER, TRUSTED_USER_HEADER
from prepdeck.errors import Forbidden, Unauthenticated
from prepdeck.services.identity import IdentityProvider, InvalidCredential

logger = logging.getLogger(__name__)

Role = Literal["user", "admin"]

_BEARER = re.compile(r"^Bearer\s+(\S+)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class Identity:
    uid: str
    role: Role = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def _role_from_claims(claims: dict) -> Role:
    return "admin" if claims.get("role") == "admin" else "user"


class CredentialSource:
    async def resolve(self, request: HTTPConnection) -> Optional[Identity]:
        raise NotImplementedError


class TrustedHeaderCredential(CredentialSource):
    """User id attached by an edge layer that already verified the session."""

    def __init__(self, header: str = TRUSTED_USER_HEADER):
        self.header = header

    async def resolve(self, request):
        uid = (request.headers.get(self.header) or "").strip()
        if not uid:
            return None
        return Identity(uid=uid)


class BearerTokenCredential(CredentialSource):
    def __init__(self, provider: IdentityProvider):
        self.provider = provider

    async def resolve(self, request):
        authorization = request.headers.get("authorization")
        if authorization is None:
            return None
        match = _BEARER.match(authorization)
        if not match:
            raise Unauthenticated("Malformed Authorization header")
        try:
            claims = await self.provider.verify_id_token(match.group(1))
        except InvalidCredential as e:
            logger.info("Rejected bearer token: %s", e)
            raise Unauthenticated("Invalid or expired ID token") from e
        return Identity(uid=claims["uid"], role=_role_from_claims(claims))


class SessionCookieCredential(CredentialSource):
    def __init__(self, provider: IdentityProvider, cookie_name: str = SESSION_COOKIE_NAME):
        self.provider = provider
        self.cookie_name = cookie_name

    async def resolve(self, request):
        cookie = request.cookies.get(self.cookie_name)
        if not cookie:
            return None
        try:
            claims = await self.provider.verify_session_cookie(cookie)
        except InvalidCredential as e:
            logger.info("Rejected session cookie: %s", e)
            raise Unauthenticated("Invalid or expired session") from e
        return Identity(uid=claims["uid"])


class AuthResolver:
    def __init__(self, sources: Sequence[CredentialSource]):
        self.sources = list(sources)

    @classmethod
    def default(cls, provider: IdentityProvider, trust_user_header: bool = TRUST_USER_HEADER) -> "AuthResolver":
        sources: list[CredentialSource] = []
        if trust_user_header:
            sources.append(TrustedHeaderCredential())
        sources.append(BearerTokenCredential(provider))
        sources.append(SessionCookieCredential(provider))
        return cls(sources)

    async def resolve(self, request: HTTPConnection) -> Identity:
        for source in self.sources:
            identity = await source.resolve(request)
            if identity is not None:
                return identity
        raise Unauthenticated("No valid authentication found")


def require_admin(identity: Identity) -> Identity:
    if not identity.is_admin:
        raise Forbidden("Admin privileges required")
    return identity
