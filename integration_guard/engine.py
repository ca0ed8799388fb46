"""
Integration security engine
Orchestrates detection, classification, aggregation, policy synthesis,
contract generation and OpenAPI assembly
"""
import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from . import catalog
from .analyzer import ArchitectureAnalyzer, DetectionCandidate, OperationCandidate
from .config import AppConfig
from .contracts import ApiContractGenerator, OpenAPIAssembler
from .errors import UpstreamAnalyzerError, ValidationError
from .models import (
    ApiGenerationResult,
    Category,
    DataClassification,
    DataType,
    EncryptionMode,
    IntegrationDetection,
    SecurityLevel,
    SecurityPolicy,
    Sensitivity,
    ValidationRule,
)
from .security import (
    DataSensitivityClassifier,
    PayloadValidator,
    PolicySynthesizer,
    SensitiveDataRedactor,
    determine_security_level,
)

logger = logging.getLogger(__name__)


class IntegrationSecurityEngine:
    """Runs the classification -> aggregation -> synthesis -> assembly pipeline"""

    def __init__(
        self,
        analyzer: ArchitectureAnalyzer,
        config: Optional[AppConfig] = None,
        classifier: Optional[DataSensitivityClassifier] = None,
        synthesizer: Optional[PolicySynthesizer] = None,
        redactor: Optional[SensitiveDataRedactor] = None,
        payload_validator: Optional[PayloadValidator] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.analyzer = analyzer
        self.config = config or AppConfig()
        self.classifier = classifier or DataSensitivityClassifier()
        self.synthesizer = synthesizer or PolicySynthesizer()
        self.redactor = redactor or SensitiveDataRedactor()
        self.payload_validator = payload_validator or PayloadValidator()
        self.generator = ApiContractGenerator(
            base_path=self.config.server.base_path,
            restricted_auth=self.config.contracts.restricted_auth,
        )
        self.assembler = OpenAPIAssembler(base_path=self.config.server.base_path)
        self.clock = clock

    async def detect(self, architecture: Any) -> List[IntegrationDetection]:
        """
        Detect and classify the integrations an architecture needs

        The analyzer is the only awaited step. If it is unavailable or times
        out the result is empty; nothing is synthesized from partial output.
        """
        try:
            candidates = await asyncio.wait_for(
                self.analyzer.analyze(architecture),
                timeout=self.config.analyzer.timeout_seconds,
            )
        except UpstreamAnalyzerError as e:
            logger.warning(f"Architecture analyzer unavailable, no detections: {e}")
            return []
        except asyncio.TimeoutError:
            logger.warning(
                f"Architecture analyzer timed out after {self.config.analyzer.timeout_seconds}s, no detections"
            )
            return []

        stamp = int(self.clock() * 1000)
        detections = [
            self.build_detection(candidate, f"int_{stamp}_{idx}")
            for idx, candidate in enumerate(candidates)
        ]
        logger.info(f"Detected {len(detections)} integration(s)")
        return detections

    def build_detection(self, candidate: DetectionCandidate, detection_id: str) -> IntegrationDetection:
        """Turn a validated analyzer candidate into a classified detection"""
        entry = catalog.lookup(candidate.integration_key)

        custom_name, _ = self.redactor.redact(candidate.custom_name)
        reason, _ = self.redactor.redact(candidate.reason)
        reason_ar, _ = self.redactor.redact(candidate.reason_ar)

        data_types = self.classifier.classify_all(candidate.data_flows)
        name = entry.name if entry else (custom_name or candidate.integration_key)

        return IntegrationDetection(
            id=detection_id,
            name=name,
            name_ar=entry.name_ar if entry else name,
            category=entry.category if entry else Category.CUSTOM,
            provider=entry.provider if entry else catalog.CUSTOM_PROVIDER,
            confidence=candidate.confidence,
            reason=reason,
            reason_ar=reason_ar,
            required_credentials=entry.required_credentials if entry else (),
            data_types=tuple(data_types),
            security_level=determine_security_level(data_types),
        )

    def integration_from_payload(self, payload: Any) -> IntegrationDetection:
        """
        Rebuild a client-supplied integration without trusting its security claims

        Every data type is re-classified from its field name and the stricter
        record wins; the level is never below what the data demands nor below
        what the client declared.

        Raises:
            ValidationError: If the payload is not an object with a non-empty id
        """
        if not isinstance(payload, dict):
            raise ValidationError("integration must be an object", "يجب أن يكون التكامل كائنًا")

        integration_id = payload.get("id")
        if not isinstance(integration_id, str) or not integration_id.strip():
            raise ValidationError("integration.id is required", "معرف التكامل مطلوب")

        data_types = tuple(
            classification
            for item in _as_list(payload.get("dataTypes"))
            if (classification := self._reclassify(item)) is not None
        )

        level = determine_security_level(data_types)
        declared = _parse_enum(SecurityLevel, payload.get("securityLevel"))
        if declared is not None and declared > level:
            level = declared

        name = _text(payload.get("name")) or integration_id
        credentials = tuple(c for c in _as_list(payload.get("requiredCredentials")) if isinstance(c, str))

        return IntegrationDetection(
            id=integration_id,
            name=name,
            name_ar=_text(payload.get("nameAr")) or name,
            category=Category.parse(payload.get("category", Category.CUSTOM.value)),
            provider=_text(payload.get("provider")) or catalog.CUSTOM_PROVIDER,
            confidence=_confidence(payload.get("confidence")),
            reason=_text(payload.get("reason")),
            reason_ar=_text(payload.get("reasonAr")),
            required_credentials=credentials,
            data_types=data_types,
            security_level=level,
        )

    def _reclassify(self, item: Any) -> Optional[DataClassification]:
        """Classification of one supplied data type, never weaker than the taxonomy's"""
        if isinstance(item, str):
            return self.classifier.classify(item) if item.strip() else None
        if not isinstance(item, dict) or not isinstance(item.get("field"), str):
            return None

        derived = self.classifier.classify(item["field"])
        sensitivity = _parse_enum(Sensitivity, item.get("sensitivity"))
        if sensitivity is None or sensitivity.ordinal <= derived.sensitivity.ordinal:
            return derived

        data_type = _parse_enum(DataType, item.get("type")) or derived.type
        encryption = _parse_enum(EncryptionMode, item.get("encryption")) or derived.encryption
        if sensitivity == Sensitivity.CRITICAL:
            encryption = EncryptionMode.BOTH

        return DataClassification(
            field=derived.field,
            type=data_type,
            sensitivity=sensitivity,
            encryption=encryption,
            retention=_text(item.get("retention")) or derived.retention,
        )

    def security_policy(self, integration: IntegrationDetection) -> SecurityPolicy:
        return self.synthesizer.for_integration(integration)

    async def generate_api(self, integration: IntegrationDetection,
                           architecture: Any = None) -> ApiGenerationResult:
        """
        Generate contracts, security policy and OpenAPI document for an integration

        Operation proposals come from the analyzer; when it cannot answer the
        default CRUD scaffold is used instead.
        """
        proposals = await self._propose_operations(integration, architecture)

        apis = self.generator.generate(integration, [candidate.to_proposal() for candidate in proposals])
        policy = self.security_policy(integration)
        openapi_spec = self.assembler.assemble(integration, apis)

        logger.info(
            f"Generated {len(apis)} operation(s) for {integration.id} "
            f"at level {integration.security_level.value}"
        )
        return ApiGenerationResult(
            integration=integration,
            apis=apis,
            security_policy=policy,
            openapi_spec=openapi_spec,
        )

    async def _propose_operations(self, integration: IntegrationDetection,
                                  architecture: Any) -> List[OperationCandidate]:
        try:
            return await asyncio.wait_for(
                self.analyzer.propose_operations(integration, architecture),
                timeout=self.config.analyzer.timeout_seconds,
            )
        except UpstreamAnalyzerError as e:
            logger.warning(f"Analyzer unavailable for {integration.id}, using default operations: {e}")
        except asyncio.TimeoutError:
            logger.warning(f"Analyzer timed out for {integration.id}, using default operations")
        return []

    @staticmethod
    def catalog() -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in catalog.entries()]

    def validate_payload(self, payload: Dict[str, Any], rules: List[ValidationRule]) -> List[str]:
        return self.payload_validator.validate(payload, rules)


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _parse_enum(enum_cls, value: Any):
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        return None


def _confidence(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 50.0
    return min(100.0, max(0.0, float(value)))
