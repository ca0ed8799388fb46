"""Tests for the integration security engine"""
import asyncio

import pytest

from integration_guard.config import AppConfig
from integration_guard.engine import IntegrationSecurityEngine
from integration_guard.errors import ValidationError
from integration_guard.models import AuthType, Category, EncryptionMode, SecurityLevel, Sensitivity

from conftest import StubAnalyzer


class SlowAnalyzer(StubAnalyzer):
    async def analyze(self, description):
        await asyncio.sleep(5)
        return []

    async def propose_operations(self, integration, architecture=None):
        await asyncio.sleep(5)
        return []


def make_engine(analyzer, timeout=30.0):
    config = AppConfig()
    config.analyzer.timeout_seconds = timeout
    return IntegrationSecurityEngine(analyzer, config, clock=lambda: 1700000000.5)


class TestDetect:
    """Test cases for IntegrationSecurityEngine.detect"""

    @pytest.mark.asyncio
    async def test_payment_detection(self):
        """Test a card-handling payment integration is restricted with full metadata"""
        engine = make_engine(StubAnalyzer(detections=[{
            "integrationKey": "stripe",
            "reason": "Card payments",
            "dataFlows": ["credit_card", "email"],
            "confidence": 95,
        }]))

        detections = await engine.detect("An e-commerce shop taking card payments")

        assert len(detections) == 1
        detection = detections[0]
        assert detection.id == "int_1700000000500_0"
        assert detection.name == "Stripe"
        assert detection.name_ar == "سترايب"
        assert detection.category == Category.PAYMENT
        assert detection.provider == "Stripe Inc."
        assert "STRIPE_SECRET_KEY" in detection.required_credentials
        assert detection.security_level == SecurityLevel.RESTRICTED
        assert [dt.field for dt in detection.data_types] == ["credit_card", "email"]

    @pytest.mark.asyncio
    async def test_public_analytics_detection(self):
        engine = make_engine(StubAnalyzer(detections=[{
            "integrationKey": "google_analytics",
            "dataFlows": ["ip_address"],
        }]))
        detection = (await engine.detect({"frontend": "spa"}))[0]

        assert detection.category == Category.ANALYTICS
        assert detection.security_level == SecurityLevel.PUBLIC
        assert detection.confidence == 50

    @pytest.mark.asyncio
    async def test_unknown_integration_is_custom(self):
        engine = make_engine(StubAnalyzer(detections=[{
            "integrationKey": "my_custom_crm",
            "customName": "Acme CRM",
            "dataFlows": ["name", "favourite_colour"],
        }]))
        detection = (await engine.detect("crm"))[0]

        assert detection.name == "Acme CRM"
        assert detection.category == Category.CUSTOM
        assert detection.provider == "Custom"
        assert detection.required_credentials == ()
        assert detection.security_level == SecurityLevel.PUBLIC

    @pytest.mark.asyncio
    async def test_unknown_integration_without_name(self):
        engine = make_engine(StubAnalyzer(detections=[{"integrationKey": "my_custom_crm"}]))
        detection = (await engine.detect("crm"))[0]
        assert detection.name == "my_custom_crm"

    @pytest.mark.asyncio
    async def test_analyzer_unavailable(self):
        engine = make_engine(StubAnalyzer(detections=None))
        assert await engine.detect("anything") == []

    @pytest.mark.asyncio
    async def test_analyzer_timeout(self):
        engine = make_engine(SlowAnalyzer(), timeout=0.01)
        assert await engine.detect("anything") == []

    @pytest.mark.asyncio
    async def test_sensitive_reason_redacted(self):
        engine = make_engine(StubAnalyzer(detections=[{
            "integrationKey": "sendgrid",
            "reason": "Send mail to jane.doe@company.org",
        }]))
        detection = (await engine.detect("mailer"))[0]
        assert "jane.doe@company.org" not in detection.reason

    @pytest.mark.asyncio
    async def test_ids_are_unique(self):
        engine = make_engine(StubAnalyzer(detections=[
            {"integrationKey": "stripe"}, {"integrationKey": "twilio"}, {"integrationKey": "stripe"},
        ]))
        ids = [d.id for d in await engine.detect("x")]
        assert len(set(ids)) == 3


class TestIntegrationFromPayload:
    """Test cases for re-normalizing client-supplied integrations"""

    @pytest.fixture
    def engine(self):
        return make_engine(StubAnalyzer())

    @pytest.mark.parametrize("payload", [None, "stripe", {}, {"id": ""}, {"id": "   "}, {"id": 5}])
    def test_requires_id(self, engine, payload):
        with pytest.raises(ValidationError):
            engine.integration_from_payload(payload)

    def test_missing_id_message(self, engine):
        with pytest.raises(ValidationError) as exc_info:
            engine.integration_from_payload({"name": "x"})
        assert exc_info.value.to_dict() == {"error": "integration.id is required", "errorAr": "معرف التكامل مطلوب"}

    def test_understated_level_is_raised(self, engine):
        """Test a client cannot lower the level below what its data demands"""
        integration = engine.integration_from_payload({
            "id": "int_1",
            "category": "payment",
            "securityLevel": "public",
            "dataTypes": [{"field": "credit_card", "sensitivity": "low", "encryption": "none"}],
        })

        assert integration.security_level == SecurityLevel.RESTRICTED
        assert integration.data_types[0].sensitivity == Sensitivity.CRITICAL
        assert integration.data_types[0].encryption == EncryptionMode.BOTH

    def test_declared_level_kept_when_higher(self, engine):
        integration = engine.integration_from_payload({
            "id": "int_1", "securityLevel": "confidential", "dataTypes": ["name"],
        })
        assert integration.security_level == SecurityLevel.CONFIDENTIAL

    def test_stricter_supplied_record_wins(self, engine):
        integration = engine.integration_from_payload({
            "id": "int_1",
            "dataTypes": [{"field": "loyalty_id", "type": "pii", "sensitivity": "critical",
                           "encryption": "rest", "retention": "1_year"}],
        })
        record = integration.data_types[0]

        assert record.sensitivity == Sensitivity.CRITICAL
        assert record.encryption == EncryptionMode.BOTH
        assert record.retention == "1_year"
        assert integration.security_level == SecurityLevel.RESTRICTED

    def test_invalid_category_is_custom(self, engine):
        integration = engine.integration_from_payload({"id": "int_1", "category": "blockchain"})
        assert integration.category == Category.CUSTOM
        assert integration.provider == "Custom"
        assert integration.security_level == SecurityLevel.PUBLIC

    def test_junk_data_types_skipped(self, engine):
        integration = engine.integration_from_payload({
            "id": "int_1", "dataTypes": ["email", 42, None, {"no_field": True}, "  "],
        })
        assert [dt.field for dt in integration.data_types] == ["email"]


class TestGenerateApi:
    """Test cases for IntegrationSecurityEngine.generate_api"""

    @pytest.mark.asyncio
    async def test_scaffold_when_analyzer_unavailable(self):
        engine = make_engine(StubAnalyzer(operations=None))
        integration = engine.integration_from_payload({
            "id": "int_1", "name": "Acme CRM", "category": "my_custom_crm", "dataTypes": ["name"],
        })

        result = await engine.generate_api(integration)

        assert len(result.apis) == 5
        assert result.security_policy.integration_id == "int_1"
        assert result.openapi_spec["info"]["title"] == "Acme CRM Integration API"
        assert result.openapi_spec["security"] == []

    @pytest.mark.asyncio
    async def test_scaffold_when_analyzer_times_out(self):
        engine = make_engine(SlowAnalyzer(), timeout=0.01)
        integration = engine.integration_from_payload({"id": "int_1"})
        assert len((await engine.generate_api(integration)).apis) == 5

    @pytest.mark.asyncio
    async def test_proposed_operations_escalated(self):
        analyzer = StubAnalyzer(operations=[{
            "method": "POST",
            "endpoint": "/api/integrations/int_1/charge",
            "authType": "api_key",
        }])
        engine = make_engine(analyzer)
        integration = engine.integration_from_payload({
            "id": "int_1", "category": "payment", "dataTypes": ["credit_card", "email"],
        })

        result = await engine.generate_api(integration, {"shop": "web"})

        assert len(result.apis) == 1
        api = result.apis[0]
        assert api.authentication.type == AuthType.MTLS
        assert len(api.security_headers) == 6
        assert [rule.field for rule in api.validation] == ["credit_card", "email"]
        assert set(result.security_policy.compliance) == {"PCI-DSS", "GDPR", "CCPA", "SOC2", "ISO27001"}
        assert result.openapi_spec["security"] == [{"bearerAuth": [], "apiKey": []}]
        assert analyzer.calls == [("int_1", {"shop": "web"})]

    @pytest.mark.asyncio
    async def test_result_to_dict(self):
        engine = make_engine(StubAnalyzer())
        integration = engine.integration_from_payload({"id": "int_1", "dataTypes": ["email"]})
        data = (await engine.generate_api(integration)).to_dict()

        assert set(data) == {"integration", "apis", "securityPolicy", "openApiSpec"}
        assert data["securityPolicy"]["compliance"] == ["GDPR", "CCPA"]


class TestEngineHelpers:
    """Test cases for catalog listing and payload validation"""

    def test_catalog(self):
        catalog = IntegrationSecurityEngine.catalog()
        keys = [entry["key"] for entry in catalog]

        assert len(catalog) == 10
        assert "stripe" in keys
        assert set(catalog[0]) >= {"key", "name", "nameAr", "category", "requiredCredentials"}

    def test_validate_payload(self):
        from integration_guard.models import ValidationRule

        engine = make_engine(StubAnalyzer())
        rules = [ValidationRule(field="email", type="email", required=True)]
        assert engine.validate_payload({}, rules) == ["email: is required"]
