"""
Data models for the integration security engine
Every record here is an immutable value object that serializes to camelCase JSON
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Category(str, Enum):
    """Integration category"""
    PAYMENT = "payment"
    AUTH = "auth"
    COMMUNICATION = "communication"
    STORAGE = "storage"
    ANALYTICS = "analytics"
    CRM = "crm"
    ERP = "erp"
    AI = "ai"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Any) -> "Category":
        """Parse a category, falling back to CUSTOM for anything unknown"""
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.CUSTOM


class DataType(str, Enum):
    PII = "pii"
    FINANCIAL = "financial"
    HEALTH = "health"
    AUTH = "auth"
    PUBLIC = "public"
    INTERNAL = "internal"


class Sensitivity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def ordinal(self) -> int:
        return _SENSITIVITY_ORDINALS[self]


_SENSITIVITY_ORDINALS = {
    Sensitivity.LOW: 1,
    Sensitivity.MEDIUM: 2,
    Sensitivity.HIGH: 3,
    Sensitivity.CRITICAL: 4,
}


class EncryptionMode(str, Enum):
    NONE = "none"
    TRANSIT = "transit"
    REST = "rest"
    BOTH = "both"


class SecurityLevel(str, Enum):
    """Coarse security level, totally ordered public < internal < confidential < restricted"""
    PUBLIC = "public"
    INTERNAL = "internal"
    CONFIDENTIAL = "confidential"
    RESTRICTED = "restricted"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)

    def __lt__(self, other: "SecurityLevel") -> bool:
        if not isinstance(other, SecurityLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: "SecurityLevel") -> bool:
        if not isinstance(other, SecurityLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: "SecurityLevel") -> bool:
        if not isinstance(other, SecurityLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: "SecurityLevel") -> bool:
        if not isinstance(other, SecurityLevel):
            return NotImplemented
        return self.rank >= other.rank


_LEVEL_ORDER = (
    SecurityLevel.PUBLIC,
    SecurityLevel.INTERNAL,
    SecurityLevel.CONFIDENTIAL,
    SecurityLevel.RESTRICTED,
)


class AuthType(str, Enum):
    NONE = "none"
    API_KEY = "api_key"
    BEARER = "bearer"
    OAUTH2 = "oauth2"
    HMAC = "hmac"
    MTLS = "mtls"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(frozen=True)
class DataClassification:
    """Sensitivity and handling requirements of a single data field"""
    field: str
    type: DataType
    sensitivity: Sensitivity
    encryption: EncryptionMode
    retention: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "type": self.type.value,
            "sensitivity": self.sensitivity.value,
            "encryption": self.encryption.value,
            "retention": self.retention,
        }


@dataclass(frozen=True)
class IntegrationDetection:
    """A candidate third-party integration together with its classified data"""
    id: str
    name: str
    category: Category
    provider: str
    confidence: float
    security_level: SecurityLevel
    required_credentials: Tuple[str, ...] = ()
    data_types: Tuple[DataClassification, ...] = ()
    name_ar: str = ""
    reason: str = ""
    reason_ar: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "nameAr": self.name_ar,
            "category": self.category.value,
            "provider": self.provider,
            "confidence": self.confidence,
            "reason": self.reason,
            "reasonAr": self.reason_ar,
            "requiredCredentials": list(self.required_credentials),
            "dataTypes": [dt.to_dict() for dt in self.data_types],
            "securityLevel": self.security_level.value,
        }


@dataclass(frozen=True)
class AuthConfig:
    type: AuthType
    location: Optional[str] = None
    key_name: Optional[str] = None
    scopes: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"type": self.type.value}
        if self.location:
            result["location"] = self.location
        if self.key_name:
            result["keyName"] = self.key_name
        if self.scopes is not None:
            result["scopes"] = list(self.scopes)
        return result


@dataclass(frozen=True)
class RateLimitConfig:
    requests: int
    window: str
    burst: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"requests": self.requests, "window": self.window}
        if self.burst is not None:
            result["burst"] = self.burst
        return result


@dataclass(frozen=True)
class ValidationRule:
    """Input validation rule attached to a generated operation"""
    field: str
    type: str
    required: bool = False
    pattern: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    sanitize: bool = True

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "field": self.field,
            "type": self.type,
            "required": self.required,
            "sanitize": self.sanitize,
        }
        if self.pattern is not None:
            result["pattern"] = self.pattern
        if self.min is not None:
            result["min"] = self.min
        if self.max is not None:
            result["max"] = self.max
        return result


@dataclass(frozen=True)
class GeneratedAPI:
    """Contract of one generated API operation"""
    id: str
    integration_id: str
    method: HttpMethod
    endpoint: str
    authentication: AuthConfig
    rate_limit: RateLimitConfig
    description: str = ""
    description_ar: str = ""
    request_schema: Dict[str, Any] = field(default_factory=dict)
    response_schema: Dict[str, Any] = field(default_factory=dict)
    validation: Tuple[ValidationRule, ...] = ()
    security_headers: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "integrationId": self.integration_id,
            "method": self.method.value,
            "endpoint": self.endpoint,
            "description": self.description,
            "descriptionAr": self.description_ar,
            "requestSchema": self.request_schema,
            "responseSchema": self.response_schema,
            "authentication": self.authentication.to_dict(),
            "rateLimit": self.rate_limit.to_dict(),
            "validation": [rule.to_dict() for rule in self.validation],
            "securityHeaders": dict(self.security_headers),
        }


@dataclass(frozen=True)
class TimeWindow:
    start: str
    end: str


@dataclass(frozen=True)
class AccessControl:
    required_roles: Tuple[str, ...]
    mfa_required: bool
    ip_whitelist: Optional[Tuple[str, ...]] = None
    time_restrictions: Optional[Tuple[TimeWindow, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "requiredRoles": list(self.required_roles),
            "mfaRequired": self.mfa_required,
        }
        if self.ip_whitelist is not None:
            result["ipWhitelist"] = list(self.ip_whitelist)
        if self.time_restrictions is not None:
            result["timeRestrictions"] = [
                {"start": window.start, "end": window.end}
                for window in self.time_restrictions
            ]
        return result


@dataclass(frozen=True)
class EncryptionPolicy:
    at_rest: bool
    in_transit: bool
    algorithm: str
    key_rotation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "atRest": self.at_rest,
            "inTransit": self.in_transit,
            "algorithm": self.algorithm,
            "keyRotation": self.key_rotation,
        }


@dataclass(frozen=True)
class AlertThreshold:
    metric: str
    threshold: float


@dataclass(frozen=True)
class AuditPolicy:
    log_requests: bool
    log_responses: bool
    retention_days: int
    alert_thresholds: Tuple[AlertThreshold, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logRequests": self.log_requests,
            "logResponses": self.log_responses,
            "retentionDays": self.retention_days,
            "alertThresholds": [
                {"metric": alert.metric, "threshold": alert.threshold}
                for alert in self.alert_thresholds
            ],
        }


@dataclass(frozen=True)
class SecurityPolicy:
    """Security artifacts derived for one integration"""
    integration_id: str
    data_classifications: Tuple[DataClassification, ...]
    access_control: AccessControl
    encryption: EncryptionPolicy
    audit: AuditPolicy
    compliance: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "integrationId": self.integration_id,
            "dataClassifications": [dc.to_dict() for dc in self.data_classifications],
            "accessControl": self.access_control.to_dict(),
            "encryption": self.encryption.to_dict(),
            "audit": self.audit.to_dict(),
            "compliance": list(self.compliance),
        }


@dataclass(frozen=True)
class OperationProposal:
    """An operation proposed for an integration, before security escalation"""
    method: HttpMethod
    endpoint: str
    description: str = ""
    description_ar: str = ""
    request_schema: Dict[str, Any] = field(default_factory=dict)
    response_schema: Dict[str, Any] = field(default_factory=dict)
    auth_type: Optional[str] = None
    rate_limit: Optional[RateLimitConfig] = None
    validation: Tuple[ValidationRule, ...] = ()


@dataclass
class ApiGenerationResult:
    """Everything /generate-api returns for one integration"""
    integration: IntegrationDetection
    apis: List[GeneratedAPI]
    security_policy: SecurityPolicy
    openapi_spec: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "integration": self.integration.to_dict(),
            "apis": [api.to_dict() for api in self.apis],
            "securityPolicy": self.security_policy.to_dict(),
            "openApiSpec": self.openapi_spec,
        }
