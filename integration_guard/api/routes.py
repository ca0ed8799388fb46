"""
Integration endpoints
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as SchemaError

from ..analyzer import ValidationRuleCandidate
from ..engine import IntegrationSecurityEngine
from ..errors import IntegrationGuardError, SynthesisFailure, ValidationError
from .dependencies import Identity, get_engine, guarded_identity, read_json_body

logger = logging.getLogger(__name__)

router = APIRouter()


@contextmanager
def synthesis_guard(operation: str) -> Iterator[None]:
    """Re-raise boundary errors as-is and turn anything else into a generic 500"""
    try:
        yield
    except IntegrationGuardError:
        raise
    except Exception as e:
        logger.error(f"{operation} failed: {e}", exc_info=True)
        raise SynthesisFailure() from e


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (dict, list)):
        return not value
    return False


@router.post("/detect")
async def detect(
    request: Request,
    identity: Identity = Depends(guarded_identity),
    engine: IntegrationSecurityEngine = Depends(get_engine),
) -> Dict[str, Any]:
    body = await read_json_body(request)
    architecture = body.get("architecture")
    if _is_blank(architecture):
        raise ValidationError("architecture is required", "وصف البنية مطلوب")

    with synthesis_guard("Integration detection"):
        detections = await engine.detect(architecture)

    logger.info(f"{identity.user_id} detected {len(detections)} integration(s)")
    return {
        "detections": [detection.to_dict() for detection in detections],
        "count": len(detections),
        "message": f"Detected {len(detections)} integration(s)",
        "messageAr": f"تم اكتشاف {len(detections)} تكامل",
    }


@router.post("/generate-api")
async def generate_api(
    request: Request,
    identity: Identity = Depends(guarded_identity),
    engine: IntegrationSecurityEngine = Depends(get_engine),
) -> Dict[str, Any]:
    body = await read_json_body(request)
    integration = engine.integration_from_payload(body.get("integration"))

    with synthesis_guard(f"API generation for {integration.id}"):
        result = await engine.generate_api(integration, body.get("architecture"))
        payload = result.to_dict()

    return {
        "apis": payload["apis"],
        "securityPolicy": payload["securityPolicy"],
        "openApiSpec": payload["openApiSpec"],
        "message": f"Generated {len(result.apis)} API endpoint(s)",
        "messageAr": f"تم توليد {len(result.apis)} واجهة برمجية",
    }


@router.post("/security-policy")
async def security_policy(
    request: Request,
    identity: Identity = Depends(guarded_identity),
    engine: IntegrationSecurityEngine = Depends(get_engine),
) -> Dict[str, Any]:
    body = await read_json_body(request)
    integration = engine.integration_from_payload(body.get("integration"))

    with synthesis_guard(f"Security policy for {integration.id}"):
        policy = engine.security_policy(integration).to_dict()

    return {
        "securityPolicy": policy,
        "message": "Security policy generated",
        "messageAr": "تم إنشاء سياسة الأمان",
    }


@router.get("/catalog")
async def get_catalog(
    identity: Identity = Depends(guarded_identity),
    engine: IntegrationSecurityEngine = Depends(get_engine),
) -> Dict[str, Any]:
    with synthesis_guard("Catalog listing"):
        return {"catalog": engine.catalog()}


@router.post("/validate-payload")
async def validate_payload(
    request: Request,
    identity: Identity = Depends(guarded_identity),
    engine: IntegrationSecurityEngine = Depends(get_engine),
) -> Dict[str, Any]:
    body = await read_json_body(request)

    raw_rules = body.get("rules")
    payload = body.get("payload")
    if not isinstance(raw_rules, list):
        raise ValidationError("rules must be a list", "يجب أن تكون القواعد قائمة")
    if not isinstance(payload, dict):
        raise ValidationError("payload must be an object", "يجب أن تكون البيانات كائنًا")

    try:
        rules = [ValidationRuleCandidate.model_validate(raw).to_rule() for raw in raw_rules]
    except SchemaError as e:
        raise ValidationError(
            f"Invalid validation rule: {e.error_count()} error(s)",
            "قاعدة تحقق غير صالحة",
        ) from e

    with synthesis_guard("Payload validation"):
        violations = engine.validate_payload(payload, rules)

    return {"valid": not violations, "violations": violations}
