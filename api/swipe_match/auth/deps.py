"""
Authentication dependencies for FastAPI.

Supports two auth modes:
1. Cookie-based session: httpOnly cookie contains the access token
2. Bearer token: Authorization header with Bearer token

The swiper identity always comes from the token subject, never from the body.
"""

import logging
import uuid
from typing import Any

from fastapi import Cookie, Depends, Header, HTTPException
from pydantic import BaseModel

from .. import config
from ..deps import get_user_directory
from ..errors import StorageError
from .security import decode_access_token

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "swipe_session"


class AuthErrorDetail(BaseModel):
    message: str = "unauthorized"
    reason: str
    trace_id: str


class AuthError(Exception):
    """Raised when authentication fails with detailed reason."""

    def __init__(self, reason: str, detail: str = "unauthorized"):
        self.reason = reason
        self.detail = detail
        self.trace_id = str(uuid.uuid4())
        super().__init__(detail)


def _unauthorized(message: str, reason: str, trace_id: str, status_code: int = 401) -> HTTPException:
    if config.DEV_MODE:
        detail: Any = AuthErrorDetail(message=message, reason=reason, trace_id=trace_id).model_dump()
    else:
        detail = {"message": message, "trace_id": trace_id}
    return HTTPException(status_code=status_code, detail=detail)


def _log_auth_failure(reason: str, trace_id: str, auth_source: str | None = None, user_id: str | None = None) -> None:
    logger.warning(f"[AUTH_FAILURE] reason={reason} trace_id={trace_id} source={auth_source} user_id={user_id}")


def _extract_bearer(authorization: str | None) -> str:
    if not authorization:
        raise AuthError(reason="missing_token", detail="Missing Authorization header")
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise AuthError(reason="malformed_token", detail="Invalid Authorization header")
    return parts[1].strip()


def _validate_token_and_get_user(token: str, trace_id: str, auth_source: str, users) -> dict[str, Any]:
    try:
        payload = decode_access_token(token)
    except HTTPException as e:
        reason = "token_expired" if "expired" in str(e.detail).lower() else "signature_invalid"
        _log_auth_failure(reason, trace_id, auth_source)
        raise _unauthorized("unauthorized", reason, trace_id)

    user_id = str(payload.get("sub") or "")
    if not user_id:
        _log_auth_failure("token_missing_subject", trace_id, auth_source)
        raise _unauthorized("unauthorized", "token_missing_subject", trace_id)

    try:
        user = users.get_user(user_id)
    except StorageError:
        raise HTTPException(status_code=503, detail="User store unavailable")
    if not user:
        _log_auth_failure("token_user_not_found", trace_id, auth_source, user_id)
        raise _unauthorized("unauthorized", "token_user_not_found", trace_id)

    logger.debug(f"[auth] SUCCESS user_id={user_id} source={auth_source}")
    return {
        "id": str(user["id"]),
        "display_name": user.get("display_name"),
        "is_premium": bool(user.get("is_premium")),
    }


def get_current_user(
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
    authorization: str | None = Header(default=None, alias="Authorization"),
    users=Depends(get_user_directory),
) -> dict[str, Any]:
    """Cookie session first, bearer token second."""
    trace_id = str(uuid.uuid4())

    if session_token:
        return _validate_token_and_get_user(session_token, trace_id, "cookie", users)

    if authorization:
        try:
            token = _extract_bearer(authorization)
        except AuthError as e:
            _log_auth_failure(e.reason, e.trace_id, auth_source="bearer")
            raise _unauthorized(e.detail, e.reason, e.trace_id)
        return _validate_token_and_get_user(token, trace_id, "bearer", users)

    _log_auth_failure("missing_token", trace_id, auth_source="none")
    raise _unauthorized("Authentication required", "missing_token", trace_id)
