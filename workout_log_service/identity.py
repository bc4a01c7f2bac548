"""Identity oracle: turns an incoming request into an opaque user id, or ``None``.

Token and session handling belong to the identity provider. This module only
asks it who the caller is.
"""

from __future__ import annotations

import base64
import json
from typing import Protocol

import firebase_admin
import structlog
from fastapi import HTTPException, Request, status
from firebase_admin import auth, credentials
from firebase_admin import exceptions as firebase_exceptions
from starlette.concurrency import run_in_threadpool

from .config import Settings

logger = structlog.get_logger(__name__)

FIREBASE_APP_NAME = "workout-log-service"


class IdentityOracle(Protocol):
    async def resolve(self, request: Request) -> str | None: ...


class HeaderIdentityOracle:
    """Trusts a user id header injected by an authenticating gateway in front of the service."""

    def __init__(self, header_name: str = "X-User-Id"):
        self.header_name = header_name

    async def resolve(self, request: Request) -> str | None:
        user_id = (request.headers.get(self.header_name) or "").strip()
        return user_id or None


class FirebaseIdentityOracle:
    """
    Verifies Firebase ID tokens with firebase-admin.

    The token is read from ``Authorization: Bearer <token>`` or, for browser
    page loads, from the session cookie. Invalid, expired and revoked tokens
    resolve to ``None``.
    """

    def __init__(
        self,
        credentials_base64: str | None,
        *,
        project_id: str | None = None,
        check_revoked: bool = False,
        cookie_name: str = "session",
    ):
        self._credentials_base64 = credentials_base64
        self._project_id = project_id
        self.check_revoked = check_revoked
        self.cookie_name = cookie_name
        self._app: firebase_admin.App | None = None

    def _ensure_app(self) -> firebase_admin.App:
        if self._app is not None:
            return self._app
        if not self._credentials_base64:
            raise RuntimeError("FIREBASE_CREDENTIALS_BASE64 must be set when AUTH_MODE=firebase")
        try:
            credential_data = json.loads(base64.b64decode(self._credentials_base64).decode("utf-8"))
        except (ValueError, TypeError) as exc:
            raise RuntimeError("FIREBASE_CREDENTIALS_BASE64 is invalid") from exc
        if self._project_id:
            credential_data["project_id"] = self._project_id

        try:
            self._app = firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            self._app = firebase_admin.initialize_app(credentials.Certificate(credential_data), name=FIREBASE_APP_NAME)
        return self._app

    def _extract_token(self, request: Request) -> str | None:
        authorization = request.headers.get("authorization") or ""
        if authorization.lower().startswith("bearer "):
            token = authorization.split(" ", 1)[1].strip()
            if token:
                return token
        return request.cookies.get(self.cookie_name) or None

    async def resolve(self, request: Request) -> str | None:
        token = self._extract_token(request)
        if not token:
            return None
        app = self._ensure_app()
        try:
            decoded = await run_in_threadpool(auth.verify_id_token, token, app=app, check_revoked=self.check_revoked)
        except auth.RevokedIdTokenError:
            logger.info("firebase_token_revoked", path=request.url.path)
            return None
        except (auth.InvalidIdTokenError, ValueError):
            logger.info("invalid_firebase_token", path=request.url.path)
            return None
        except firebase_exceptions.FirebaseError:
            logger.error("firebase_verification_error", path=request.url.path, exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication service unavailable",
            )
        return decoded.get("uid") or None


def build_identity_oracle(settings: Settings) -> IdentityOracle:
    if settings.AUTH_MODE == "firebase":
        return FirebaseIdentityOracle(
            settings.FIREBASE_CREDENTIALS_BASE64,
            project_id=settings.FIREBASE_PROJECT_ID,
            check_revoked=settings.FIREBASE_CHECK_REVOKED,
            cookie_name=settings.SESSION_COOKIE_NAME,
        )
    return HeaderIdentityOracle(settings.USER_ID_HEADER)
