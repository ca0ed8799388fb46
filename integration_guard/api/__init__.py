"""
HTTP surface of integration-guard
"""
from .app import create_app
from .errors import register_error_handlers
from .session import SESSION_COOKIE_NAME, SessionMiddleware, get_session, sign_session

__all__ = [
    "create_app",
    "register_error_handlers",
    "SESSION_COOKIE_NAME",
    "SessionMiddleware",
    "get_session",
    "sign_session",
]
