"""Signed-cookie session middleware"""

import json
from typing import Any, Dict

from fastapi import Request, Response
from itsdangerous import BadSignature, TimestampSigner
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

SESSION_COOKIE_NAME = "integration_guard_session"


def sign_session(data: Dict[str, Any], secret: str) -> str:
    """Serialize and sign session data into a cookie value"""
    return TimestampSigner(secret).sign(json.dumps(data, separators=(",", ":")).encode()).decode()


class SessionMiddleware(BaseHTTPMiddleware):
    """Loads the signed session cookie into request.state.session.

    Sessions are issued by the platform's login flow; this service only
    reads them.
    """

    def __init__(self, app: ASGIApp, secret: str, max_age: int):
        super().__init__(app)
        self.signer = TimestampSigner(secret)
        self.max_age = max_age

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        session_data: Dict[str, Any] = {}

        if cookie := request.cookies.get(SESSION_COOKIE_NAME):
            try:
                unsigned = self.signer.unsign(cookie, max_age=self.max_age)
                loaded = json.loads(unsigned.decode())
                if isinstance(loaded, dict):
                    session_data = loaded
            except (BadSignature, UnicodeDecodeError, json.JSONDecodeError):
                # Invalid or expired session, treat as anonymous
                session_data = {}

        request.state.session = session_data
        return await call_next(request)


def get_session(request: Request) -> Dict[str, Any]:
    """Get the current session from request."""
    return getattr(request.state, "session", {})
