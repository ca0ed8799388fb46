"""Pytest configuration and shared fixtures"""
from typing import Any, AsyncGenerator, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from integration_guard.analyzer import ArchitectureAnalyzer, DetectionCandidate, OperationCandidate
from integration_guard.api import SESSION_COOKIE_NAME, create_app, sign_session
from integration_guard.config import AppConfig
from integration_guard.errors import AnalyzerUnavailable
from integration_guard.models import Category, IntegrationDetection
from integration_guard.rate_limit import InMemoryRateLimiter
from integration_guard.security import classify_data_types, determine_security_level

SESSION_SECRET = "test-secret"


class StubAnalyzer(ArchitectureAnalyzer):
    """Analyzer returning canned candidates, or failing when none are given"""

    def __init__(self, detections: Optional[List[dict]] = None,
                 operations: Optional[List[dict]] = None):
        self.detections = detections
        self.operations = operations
        self.calls: List[Any] = []

    async def analyze(self, description: Any) -> List[DetectionCandidate]:
        self.calls.append(description)
        if self.detections is None:
            raise AnalyzerUnavailable("stub analyzer has no answer")
        return [DetectionCandidate.model_validate(item) for item in self.detections]

    async def propose_operations(self, integration: IntegrationDetection,
                                 architecture: Any = None) -> List[OperationCandidate]:
        self.calls.append((integration.id, architecture))
        if self.operations is None:
            raise AnalyzerUnavailable("stub analyzer has no answer")
        return [OperationCandidate.model_validate(item) for item in self.operations]


def make_integration(fields, category=Category.CUSTOM, integration_id="int_1",
                     name="Test Integration") -> IntegrationDetection:
    data_types = tuple(classify_data_types(fields))
    return IntegrationDetection(
        id=integration_id,
        name=name,
        name_ar=name,
        category=category,
        provider="Test",
        confidence=90,
        data_types=data_types,
        security_level=determine_security_level(data_types),
    )


def session_cookie(user_id: str = "user-1", role: str = "owner") -> dict:
    return {SESSION_COOKIE_NAME: sign_session({"user_id": user_id, "role": role}, SESSION_SECRET)}


@pytest.fixture
def app_config():
    """Default configuration with a known session secret"""
    config = AppConfig()
    config.server.session_secret = SESSION_SECRET
    return config


@pytest.fixture
def stub_analyzer():
    return StubAnalyzer(
        detections=[{
            "integrationKey": "stripe",
            "reason": "Card payments at checkout",
            "reasonAr": "المدفوعات بالبطاقة",
            "dataFlows": ["credit_card", "email"],
            "confidence": 95,
        }],
        operations=None,
    )


@pytest.fixture
def rate_limiter():
    return InMemoryRateLimiter(limit=20, window_seconds=60)


@pytest.fixture
def app(app_config, stub_analyzer, rate_limiter):
    return create_app(app_config, analyzer=stub_analyzer, rate_limiter=rate_limiter)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client without a session"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def owner_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client carrying an owner session"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test",
                           cookies=session_cookie()) as ac:
        yield ac
