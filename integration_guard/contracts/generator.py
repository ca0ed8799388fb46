"""
API contract generation
Builds per-operation contracts (auth, rate limit, validation, headers)
from an integration's category and security level
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from ..models import (
    AuthConfig,
    AuthType,
    Category,
    GeneratedAPI,
    HttpMethod,
    IntegrationDetection,
    OperationProposal,
    RateLimitConfig,
    SecurityLevel,
)
from ..security.payload_validator import derive_validation_rules

logger = logging.getLogger(__name__)

AUTH_CONFIGS: Dict[AuthType, AuthConfig] = {
    AuthType.API_KEY: AuthConfig(type=AuthType.API_KEY, location="header", key_name="X-API-Key"),
    AuthType.BEARER: AuthConfig(type=AuthType.BEARER, location="header"),
    AuthType.OAUTH2: AuthConfig(type=AuthType.OAUTH2, scopes=("read", "write")),
    AuthType.HMAC: AuthConfig(type=AuthType.HMAC, location="header", key_name="X-Signature"),
    AuthType.MTLS: AuthConfig(type=AuthType.MTLS),
}

# Only these may protect a restricted integration
RESTRICTED_AUTH = (AuthType.MTLS, AuthType.HMAC)

DEFAULT_RATE_LIMITS: Dict[Category, RateLimitConfig] = {
    Category.PAYMENT: RateLimitConfig(requests=50, window="1m", burst=10),
    Category.AUTH: RateLimitConfig(requests=20, window="1m", burst=5),
    Category.COMMUNICATION: RateLimitConfig(requests=100, window="1m", burst=20),
    Category.STORAGE: RateLimitConfig(requests=200, window="1m", burst=50),
    Category.ANALYTICS: RateLimitConfig(requests=500, window="1m", burst=100),
    Category.AI: RateLimitConfig(requests=30, window="1m", burst=5),
    Category.CRM: RateLimitConfig(requests=100, window="1m", burst=20),
    Category.ERP: RateLimitConfig(requests=50, window="1m", burst=10),
    Category.CUSTOM: RateLimitConfig(requests=100, window="1m", burst=20),
}

RATE_WINDOW_PATTERN = re.compile(r'\d+[smhd]')

BASELINE_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}

STRICT_HEADERS: Dict[str, str] = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": "default-src 'self'",
    "Cache-Control": "no-store, no-cache, must-revalidate",
}

# JSON schema hints for scaffolded request bodies
FIELD_FORMATS: Dict[str, Dict[str, Any]] = {
    "email": {"type": "string", "format": "email"},
    "ip_address": {"type": "string", "format": "ipv4"},
    "date_of_birth": {"type": "string", "format": "date"},
    "password": {"type": "string", "format": "password", "writeOnly": True},
}


def build_auth_config(suggested: Optional[str], security_level: SecurityLevel,
                      restricted_auth: AuthType = AuthType.MTLS) -> AuthConfig:
    """
    Pick the authentication scheme of an operation

    A restricted integration always gets mTLS (or HMAC when configured),
    whatever was suggested. Otherwise the suggestion selects one of the fixed
    configs, and anything unrecognized becomes bearer.
    """
    if security_level == SecurityLevel.RESTRICTED:
        if restricted_auth not in RESTRICTED_AUTH:
            restricted_auth = AuthType.MTLS
        return AUTH_CONFIGS[restricted_auth]

    try:
        auth_type = AuthType(str(suggested).strip().lower())
    except ValueError:
        return AUTH_CONFIGS[AuthType.BEARER]

    return AUTH_CONFIGS.get(auth_type, AUTH_CONFIGS[AuthType.BEARER])


def default_rate_limit(category: Category) -> RateLimitConfig:
    return DEFAULT_RATE_LIMITS.get(category, DEFAULT_RATE_LIMITS[Category.CUSTOM])


def resolve_rate_limit(suggested: Optional[RateLimitConfig], category: Category) -> RateLimitConfig:
    """Honor a well-formed suggestion, otherwise the category default"""
    if suggested is None:
        return default_rate_limit(category)

    well_formed = (
        suggested.requests > 0
        and RATE_WINDOW_PATTERN.fullmatch(suggested.window or "") is not None
        and (suggested.burst is None or 0 < suggested.burst <= suggested.requests)
    )
    if not well_formed:
        logger.info(f"Ignoring malformed rate limit suggestion {suggested}, using {category.value} default")
        return default_rate_limit(category)

    return suggested


def security_headers(security_level: SecurityLevel) -> Dict[str, str]:
    if security_level >= SecurityLevel.CONFIDENTIAL:
        return {**BASELINE_HEADERS, **STRICT_HEADERS}
    return dict(BASELINE_HEADERS)


class ApiContractGenerator:
    """Turns operation proposals into security-escalated API contracts"""

    def __init__(self, base_path: str = "/api/integrations",
                 restricted_auth: str = "mtls"):
        self.base_path = base_path.rstrip("/")
        self.restricted_auth = AuthType(restricted_auth)

    def generate(self, integration: IntegrationDetection,
                 proposals: Iterable[OperationProposal]) -> List[GeneratedAPI]:
        """
        Build contracts for every proposed operation

        Args:
            integration: The (normalized) integration the operations belong to
            proposals: Proposed operations; an empty sequence yields the CRUD scaffold

        Returns:
            One GeneratedAPI per operation
        """
        proposals = list(proposals)
        if not proposals:
            logger.info(f"No operations proposed for {integration.id}, using default scaffold")
            proposals = self.default_operations(integration)

        return [
            self._build(integration, proposal, idx)
            for idx, proposal in enumerate(proposals)
        ]

    def _build(self, integration: IntegrationDetection, proposal: OperationProposal,
               idx: int) -> GeneratedAPI:
        validation = list(proposal.validation)
        if proposal.method != HttpMethod.GET:
            validation = derive_validation_rules(integration.data_types, validation)

        return GeneratedAPI(
            id=f"api_{integration.id}_{idx}",
            integration_id=integration.id,
            method=proposal.method,
            endpoint=proposal.endpoint,
            description=proposal.description,
            description_ar=proposal.description_ar,
            request_schema=proposal.request_schema,
            response_schema=proposal.response_schema,
            authentication=build_auth_config(
                proposal.auth_type, integration.security_level, self.restricted_auth
            ),
            rate_limit=resolve_rate_limit(proposal.rate_limit, integration.category),
            validation=tuple(validation),
            security_headers=security_headers(integration.security_level),
        )

    def default_operations(self, integration: IntegrationDetection) -> List[OperationProposal]:
        """CRUD scaffold over the integration's classified fields"""
        collection = f"{self.base_path}/{integration.id}/records"
        item = f"{collection}/{{recordId}}"

        properties = {
            dt.field: dict(FIELD_FORMATS.get(dt.field, {"type": "string"}))
            for dt in integration.data_types
        }
        request_schema = {"type": "object", "properties": properties}
        record_schema = {
            "type": "object",
            "properties": {"id": {"type": "string"}, **{
                name: schema for name, schema in properties.items()
                if not schema.get("writeOnly")
            }},
        }
        list_schema = {"type": "array", "items": record_schema}
        name = integration.name

        return [
            OperationProposal(HttpMethod.GET, collection, f"List {name} records",
                              f"عرض سجلات {name}", response_schema=list_schema),
            OperationProposal(HttpMethod.GET, item, f"Get a {name} record",
                              f"عرض سجل {name}", response_schema=record_schema),
            OperationProposal(HttpMethod.POST, collection, f"Create a {name} record",
                              f"إنشاء سجل {name}", request_schema=request_schema,
                              response_schema=record_schema),
            OperationProposal(HttpMethod.PUT, item, f"Update a {name} record",
                              f"تحديث سجل {name}", request_schema=request_schema,
                              response_schema=record_schema),
            OperationProposal(HttpMethod.DELETE, item, f"Delete a {name} record",
                              f"حذف سجل {name}",
                              response_schema={"type": "object",
                                               "properties": {"deleted": {"type": "boolean"}}}),
        ]
