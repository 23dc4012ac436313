"""Identity providers: verify ID tokens and session cookies, mint session cookies.

Both providers return a claims dict carrying at least ``uid`` and, when the
token has one, a ``role`` custom claim.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions
from jose import JWTError, jwt

from prepdeck.config import (
    FIREBASE_CLIENT_EMAIL,
    FIREBASE_PRIVATE_KEY,
    FIREBASE_PROJECT_ID,
    ID_TOKEN_EXPIRE_MINUTES,
    JWT_ALGORITHM,
    JWT_SECRET_KEY,
)

logger = logging.getLogger(__name__)


class InvalidCredential(Exception):
    """A token or cookie failed verification."""


class IdentityProvider:
    async def verify_id_token(self, token: str) -> dict:
        raise NotImplementedError

    async def verify_session_cookie(self, cookie: str) -> dict:
        raise NotImplementedError

    async def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        raise NotImplementedError


def init_firebase_app() -> firebase_admin.App:
    """Return the default firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if FIREBASE_CLIENT_EMAIL and FIREBASE_PRIVATE_KEY:
        cred = credentials.Certificate({
            "type": "service_account",
            "project_id": FIREBASE_PROJECT_ID,
            "client_email": FIREBASE_CLIENT_EMAIL,
            "private_key": FIREBASE_PRIVATE_KEY,
            "token_uri": "https://oauth2.googleapis.com/token",
        })
        app = firebase_admin.initialize_app(cred)
    else:
        # Application default credentials (e.g. on Cloud Run)
        options = {"projectId": FIREBASE_PROJECT_ID} if FIREBASE_PROJECT_ID else None
        app = firebase_admin.initialize_app(options=options)
    logger.info("Firebase admin initialized (project=%s)", FIREBASE_PROJECT_ID or "default")
    return app


class FirebaseIdentityProvider(IdentityProvider):
    """Firebase Auth via the admin SDK; blocking calls run in a worker thread."""

    def __init__(self, app: Optional[firebase_admin.App] = None):
        self._app = app or init_firebase_app()

    async def _call(self, func, *args, **kwargs):
        try:
            return await asyncio.to_thread(func, *args, app=self._app, **kwargs)
        except firebase_auth.CertificateFetchError:
            raise
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise InvalidCredential(str(e)) from e

    async def verify_id_token(self, token: str) -> dict:
        return await self._call(firebase_auth.verify_id_token, token)

    async def verify_session_cookie(self, cookie: str) -> dict:
        return await self._call(firebase_auth.verify_session_cookie, cookie, check_revoked=True)

    async def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        cookie = await self._call(firebase_auth.create_session_cookie, id_token, expires_in)
        return cookie.decode() if isinstance(cookie, bytes) else cookie


class JwtIdentityProvider(IdentityProvider):
    """HS256 tokens signed with a shared secret, for local development and tests."""

    def __init__(self, secret_key: str = JWT_SECRET_KEY, algorithm: str = JWT_ALGORITHM):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def _encode(self, uid: str, token_type: str, expires_delta: timedelta, role: Optional[str] = None) -> str:
        now = datetime.now(timezone.utc)
        to_encode = {"sub": uid, "type": token_type, "iat": now, "exp": now + expires_delta}
        if role:
            to_encode["role"] = role
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def _decode(self, token: str, token_type: str) -> dict:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidCredential(str(e)) from e
        if payload.get("type") != token_type or not payload.get("sub"):
            raise InvalidCredential(f"Not a valid {token_type} token")
        claims = {"uid": payload["sub"]}
        if payload.get("role"):
            claims["role"] = payload["role"]
        return claims

    def create_id_token(self, uid: str, role: Optional[str] = None, expires_delta: Optional[timedelta] = None) -> str:
        expires_delta = expires_delta or timedelta(minutes=ID_TOKEN_EXPIRE_MINUTES)
        return self._encode(uid, "id", expires_delta, role)

    async def verify_id_token(self, token: str) -> dict:
        return self._decode(token, "id")

    async def verify_session_cookie(self, cookie: str) -> dict:
        return self._decode(cookie, "session")

    async def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        claims = self._decode(id_token, "id")
        return self._encode(claims["uid"], "session", expires_in, claims.get("role"))


def build_identity_provider(kind: str) -> IdentityProvider:
    if kind == "firebase":
        return FirebaseIdentityProvider()
    return JwtIdentityProvider()
