"""Request guards: session, owner role and per-identity rate limit"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict

from fastapi import Depends, Request, Response

from ..engine import IntegrationSecurityEngine
from ..errors import AuthenticationError, AuthorizationError, RateLimitError, ValidationError
from ..rate_limit import RateLimiter
from .session import get_session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller"""
    user_id: str
    role: str


def get_engine(request: Request) -> IntegrationSecurityEngine:
    return request.app.state.engine


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def require_session(request: Request) -> Identity:
    """The session identity, or 401"""
    session = get_session(request)
    user_id = session.get("user_id")
    if not user_id:
        raise AuthenticationError()
    return Identity(user_id=str(user_id), role=str(session.get("role", "")))


def require_owner(request: Request, identity: Identity = Depends(require_session)) -> Identity:
    """The session identity if it holds an owner role, or 403"""
    owner_roles = request.app.state.config.server.owner_roles
    if identity.role not in owner_roles:
        logger.warning(f"Non-owner {identity.user_id} ({identity.role or 'no role'}) denied")
        raise AuthorizationError()
    return identity


def guarded_identity(
    response: Response,
    identity: Identity = Depends(require_owner),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> Identity:
    """Owner identity that is still within its request quota, or 429"""
    decision = limiter.hit(identity.user_id)
    if not decision.allowed:
        raise RateLimitError(retry_after=decision.retry_after)

    response.headers["X-RateLimit-Limit"] = str(decision.limit)
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
    return identity


async def read_json_body(request: Request) -> Dict[str, Any]:
    """Decode the request body as a JSON object, or 400"""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError("Request body must be valid JSON", "يجب أن يكون نص الطلب JSON صالحًا") from e

    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object", "يجب أن يكون نص الطلب كائن JSON")
    return body
