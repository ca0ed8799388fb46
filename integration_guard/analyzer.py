"""
Architecture analyzer interface
The analyzer is an untrusted oracle: everything it returns goes through a
schema-validating adapter, and any failure degrades to "no candidates".
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import catalog
from .config import AnalyzerConfig
from .errors import AnalyzerUnavailable
from .models import HttpMethod, IntegrationDetection, OperationProposal, RateLimitConfig, ValidationRule
from .security.payload_validator import MAX_PATTERN_LENGTH
from .utils import extract_json_array

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class DetectionCandidate(BaseModel):
    """One integration the analyzer believes the architecture needs"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    integration_key: str = Field(alias="integrationKey", min_length=1)
    custom_name: Optional[str] = Field(default=None, alias="customName")
    reason: str = ""
    reason_ar: str = Field(default="", alias="reasonAr")
    data_flows: List[str] = Field(default_factory=list, alias="dataFlows")
    confidence: float = 50.0

    @field_validator("reason", "reason_ar", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("custom_name", mode="before")
    @classmethod
    def _name_or_none(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) and value.strip() else None

    @field_validator("data_flows", mode="before")
    @classmethod
    def _flows_as_strings(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(item) for item in value if isinstance(item, (str, int, float)) and str(item).strip()]

    @field_validator("confidence", mode="before")
    @classmethod
    def _default_confidence(cls, value: Any) -> Any:
        return 50.0 if value is None else value

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        return min(100.0, max(0.0, value))


class ValidationRuleCandidate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    field: str = Field(min_length=1)
    type: str = Field(min_length=1)
    required: bool = False
    pattern: Optional[str] = Field(default=None, max_length=MAX_PATTERN_LENGTH)
    min: Optional[float] = None
    max: Optional[float] = None
    sanitize: bool = True

    def to_rule(self) -> ValidationRule:
        return ValidationRule(
            field=self.field,
            type=self.type.lower(),
            required=self.required,
            pattern=self.pattern,
            min=self.min,
            max=self.max,
            sanitize=self.sanitize,
        )


class OperationCandidate(BaseModel):
    """One API operation the analyzer proposes for an integration"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    method: HttpMethod
    endpoint: str = Field(pattern=r"^/\S*$")
    description: str = ""
    description_ar: str = Field(default="", alias="descriptionAr")
    request_schema: Dict[str, Any] = Field(default_factory=dict, alias="requestSchema")
    response_schema: Dict[str, Any] = Field(default_factory=dict, alias="responseSchema")
    auth_type: Optional[str] = Field(default=None, alias="authType")
    rate_limit: Optional[Dict[str, Any]] = Field(default=None, alias="rateLimit")
    validation_rules: List[Any] = Field(default_factory=list, alias="validationRules")

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @field_validator("description", "description_ar", mode="before")
    @classmethod
    def _text_or_empty(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("request_schema", "response_schema", "rate_limit", mode="before")
    @classmethod
    def _object_or_empty(cls, value: Any) -> Dict[str, Any]:
        return value if isinstance(value, dict) else {}

    @field_validator("auth_type", mode="before")
    @classmethod
    def _auth_type_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("validation_rules", mode="before")
    @classmethod
    def _rules_list(cls, value: Any) -> List[Any]:
        return value if isinstance(value, list) else []

    def to_proposal(self) -> OperationProposal:
        return OperationProposal(
            method=self.method,
            endpoint=self.endpoint,
            description=self.description,
            description_ar=self.description_ar,
            request_schema=self.request_schema,
            response_schema=self.response_schema,
            auth_type=self.auth_type,
            rate_limit=self._rate_limit(),
            validation=tuple(self._rules()),
        )

    def _rate_limit(self) -> Optional[RateLimitConfig]:
        if not self.rate_limit:
            return None
        try:
            burst = self.rate_limit.get("burst")
            return RateLimitConfig(
                requests=int(self.rate_limit["requests"]),
                window=str(self.rate_limit.get("window", "")),
                burst=int(burst) if burst is not None else None,
            )
        except (KeyError, TypeError, ValueError, OverflowError):
            return None

    def _rules(self) -> List[ValidationRule]:
        rules = []
        for raw in self.validation_rules:
            try:
                rules.append(ValidationRuleCandidate.model_validate(raw).to_rule())
            except ValidationError:
                logger.debug(f"Dropping malformed validation rule: {raw!r}")
        return rules


def _parse_array(text: str, model: Type[T]) -> List[T]:
    """Extract the first JSON array from free text and validate each element"""
    if not (array_text := extract_json_array(text)):
        logger.warning("Analyzer output contains no JSON array")
        return []

    try:
        items = json.loads(array_text)
    except (json.JSONDecodeError, RecursionError) as e:
        logger.warning(f"Analyzer output is not valid JSON: {e}")
        return []

    if not isinstance(items, list):
        return []

    candidates = []
    for idx, item in enumerate(items):
        try:
            candidates.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Dropping invalid {model.__name__} #{idx}: {e.error_count()} error(s)")

    return candidates


def parse_detection_candidates(text: str) -> List[DetectionCandidate]:
    return _parse_array(text, DetectionCandidate)


def parse_operation_candidates(text: str) -> List[OperationCandidate]:
    return _parse_array(text, OperationCandidate)


class ArchitectureAnalyzer(ABC):
    """Interface of the external architecture analyzer"""

    @abstractmethod
    async def analyze(self, description: Any) -> List[DetectionCandidate]:
        """
        Detect the integrations an architecture needs

        Raises:
            AnalyzerUnavailable: If the analyzer cannot answer
        """
        pass

    @abstractmethod
    async def propose_operations(self, integration: IntegrationDetection,
                                 architecture: Any = None) -> List[OperationCandidate]:
        """
        Propose API operations for an integration

        Raises:
            AnalyzerUnavailable: If the analyzer cannot answer
        """
        pass


class LLMArchitectureAnalyzer(ArchitectureAnalyzer):
    """Analyzer backed by a text-completion model"""

    def __init__(self, max_tokens: int = 2000):
        self.max_tokens = max_tokens

    @abstractmethod
    async def complete(self, prompt: str, max_tokens: int) -> str:
        """Return the model's raw text answer to a prompt"""
        pass

    async def analyze(self, description: Any) -> List[DetectionCandidate]:
        text = await self.complete(self.detection_prompt(description), self.max_tokens)
        return parse_detection_candidates(text)

    async def propose_operations(self, integration: IntegrationDetection,
                                 architecture: Any = None) -> List[OperationCandidate]:
        text = await self.complete(
            self.operations_prompt(integration, architecture),
            int(self.max_tokens * 1.5),
        )
        return parse_operation_candidates(text)

    @staticmethod
    def detection_prompt(description: Any) -> str:
        known_keys = ", ".join(catalog.keys())
        architecture = json.dumps(description, indent=2, ensure_ascii=False, default=str)
        return f"""Analyze this system architecture and detect the external integrations it requires.

Architecture:
{architecture}

Known integration keys: {known_keys}

For each integration give the matching key (or "custom"), why it is needed,
which data fields flow through it and a confidence between 0 and 100.

Return only a JSON array:
[{{
  "integrationKey": "stripe|paypal|...|custom",
  "customName": "name when custom",
  "reason": "why it is needed",
  "reasonAr": "السبب بالعربية",
  "dataFlows": ["email", "credit_card"],
  "confidence": 85
}}]"""

    @staticmethod
    def operations_prompt(integration: IntegrationDetection, architecture: Any) -> str:
        fields = ", ".join(dt.field for dt in integration.data_types) or "none"
        context = json.dumps(architecture, indent=2, ensure_ascii=False, default=str)
        return f"""Propose REST API operations for integrating with {integration.name}.

Integration:
- Id: {integration.id}
- Category: {integration.category.value}
- Security level: {integration.security_level.value}
- Data fields: {fields}

Architecture context:
{context}

Return only a JSON array:
[{{
  "method": "GET|POST|PUT|PATCH|DELETE",
  "endpoint": "/api/integrations/{integration.id}/...",
  "description": "what the operation does",
  "descriptionAr": "الوصف بالعربية",
  "requestSchema": {{"type": "object", "properties": {{}}}},
  "responseSchema": {{"type": "object", "properties": {{}}}},
  "authType": "api_key|bearer|oauth2|hmac|mtls",
  "rateLimit": {{"requests": 100, "window": "1m"}},
  "validationRules": [{{"field": "email", "type": "email", "required": true}}]
}}]"""


class AnthropicArchitectureAnalyzer(LLMArchitectureAnalyzer):
    """Analyzer calling the Anthropic Messages API"""

    def __init__(self, api_key: str, model: str, max_tokens: int = 2000, client: Any = None):
        super().__init__(max_tokens)
        self.model = model
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            import anthropic

            self._client = anthropic.AsyncAnthropic(api_key=self._api_key)
        return self._client

    async def complete(self, prompt: str, max_tokens: int) -> str:
        import anthropic

        try:
            response = await self._get_client().messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            logger.error(f"Architecture analyzer request failed: {e}")
            raise AnalyzerUnavailable(str(e)) from e

        return "".join(block.text for block in response.content if block.type == "text")


class UnconfiguredArchitectureAnalyzer(ArchitectureAnalyzer):
    """Stand-in used when no analyzer credentials are configured"""

    async def analyze(self, description: Any) -> List[DetectionCandidate]:
        raise AnalyzerUnavailable("No architecture analyzer is configured")

    async def propose_operations(self, integration: IntegrationDetection,
                                 architecture: Any = None) -> List[OperationCandidate]:
        raise AnalyzerUnavailable("No architecture analyzer is configured")


def create_analyzer(config: AnalyzerConfig) -> ArchitectureAnalyzer:
    """Build the analyzer described by configuration"""
    if config.provider == "anthropic" and config.api_key:
        logger.info(f"Using Anthropic architecture analyzer ({config.model})")
        return AnthropicArchitectureAnalyzer(config.api_key, config.model, config.max_tokens)

    logger.warning("Architecture analyzer not configured; detection will return no integrations")
    return UnconfiguredArchitectureAnalyzer()
