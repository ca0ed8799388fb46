"""
FastAPI application factory
"""
import logging
from typing import Optional

from fastapi import FastAPI

from ..analyzer import ArchitectureAnalyzer, create_analyzer
from ..config import AppConfig
from ..engine import IntegrationSecurityEngine
from ..rate_limit import InMemoryRateLimiter, RateLimiter
from .errors import register_error_handlers
from .routes import router
from .session import SessionMiddleware

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[AppConfig] = None,
    analyzer: Optional[ArchitectureAnalyzer] = None,
    rate_limiter: Optional[RateLimiter] = None,
) -> FastAPI:
    """
    Build the integration-guard application

    Args:
        config: Application configuration, defaults when omitted
        analyzer: Architecture analyzer, built from config.analyzer when omitted
        rate_limiter: Per-identity limiter, in-memory from config.rate_limit when omitted
    """
    config = config or AppConfig()

    if config.server.session_secret == "change-me":
        logger.warning("Using the default session secret; set server.session_secret in production")

    app = FastAPI(title="Integration Guard", version="1.0.0")

    app.state.config = config
    app.state.engine = IntegrationSecurityEngine(analyzer or create_analyzer(config.analyzer), config)
    app.state.rate_limiter = rate_limiter or InMemoryRateLimiter(
        limit=config.rate_limit.requests,
        window_seconds=config.rate_limit.window_seconds,
    )

    app.add_middleware(
        SessionMiddleware,
        secret=config.server.session_secret,
        max_age=config.server.session_max_age,
    )
    register_error_handlers(app)
    app.include_router(router, prefix=config.server.base_path)

    logger.info(f"Integration endpoints mounted at {config.server.base_path}")
    return app
