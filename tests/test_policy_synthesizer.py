"""Tests for security policy synthesis"""
import pytest

from integration_guard.models import Category, SecurityLevel
from integration_guard.security import PolicySynthesizer, classify_data_types, generate_security_policy

from conftest import make_integration


class TestPolicySynthesizer:
    """Test cases for PolicySynthesizer"""

    @pytest.fixture
    def synthesizer(self):
        return PolicySynthesizer()

    def test_payment_with_card_and_email(self, synthesizer):
        """Test a restricted payment integration gets the full compliance set"""
        integration = make_integration(["credit_card", "email"], category=Category.PAYMENT)
        policy = synthesizer.for_integration(integration)

        assert integration.security_level == SecurityLevel.RESTRICTED
        assert set(policy.compliance) == {"PCI-DSS", "GDPR", "CCPA", "SOC2", "ISO27001"}
        assert policy.access_control.required_roles == ("root_owner", "security_admin")
        assert policy.access_control.mfa_required is True
        assert policy.access_control.ip_whitelist == ()
        assert policy.access_control.time_restrictions[0].start == "06:00"
        assert policy.access_control.time_restrictions[0].end == "22:00"
        assert policy.encryption.algorithm == "AES-256-GCM"
        assert policy.encryption.key_rotation == "30d"
        assert policy.encryption.at_rest is True
        assert policy.audit.retention_days == 2555
        assert policy.audit.log_responses is True

    def test_public_analytics(self, synthesizer):
        """Test a public integration has no compliance tags and minimal controls"""
        integration = make_integration(["ip_address"], category=Category.ANALYTICS)
        policy = synthesizer.for_integration(integration)

        assert integration.security_level == SecurityLevel.PUBLIC
        assert policy.compliance == ()
        assert policy.access_control.required_roles == ("user",)
        assert policy.access_control.mfa_required is False
        assert policy.access_control.ip_whitelist is None
        assert policy.access_control.time_restrictions is None
        assert policy.encryption.at_rest is False
        assert policy.encryption.in_transit is True
        assert policy.encryption.algorithm == "AES-128-GCM"
        assert policy.audit.retention_days == 30
        assert policy.audit.log_responses is False

    @pytest.mark.parametrize("level,roles,retention", [
        (SecurityLevel.INTERNAL, ("user", "staff"), 90),
        (SecurityLevel.CONFIDENTIAL, ("admin", "manager"), 365),
    ])
    def test_intermediate_levels(self, synthesizer, level, roles, retention):
        policy = synthesizer.synthesize(Category.CRM, level, [])
        assert policy.access_control.required_roles == roles
        assert policy.audit.retention_days == retention
        assert policy.encryption.at_rest is True
        assert policy.audit.log_requests is True

    def test_health_data_adds_hipaa(self, synthesizer):
        classifications = classify_data_types(["health_record"])
        tags = synthesizer.compliance(Category.CUSTOM, SecurityLevel.RESTRICTED, classifications)
        assert tags == ["HIPAA", "SOC2", "ISO27001"]

    def test_pci_from_category_alone(self, synthesizer):
        """Test PCI-DSS follows the payment category, not the data"""
        assert synthesizer.compliance(Category.PAYMENT, SecurityLevel.PUBLIC, []) == ["PCI-DSS"]

    def test_no_duplicate_tags(self, synthesizer):
        classifications = classify_data_types(["email", "phone", "address"])
        tags = synthesizer.compliance(Category.COMMUNICATION, SecurityLevel.INTERNAL, classifications)
        assert tags == ["GDPR", "CCPA"]

    def test_alert_thresholds(self, synthesizer):
        policy = synthesizer.synthesize(Category.AI, SecurityLevel.PUBLIC, [])
        thresholds = {a.metric: a.threshold for a in policy.audit.alert_thresholds}
        assert thresholds == {"error_rate": 5, "latency_p99": 2000}

    def test_policy_echoes_inputs(self):
        integration = make_integration(["email"], integration_id="int_42")
        policy = generate_security_policy(integration)
        assert policy.integration_id == "int_42"
        assert policy.data_classifications == integration.data_types

    def test_to_dict_shape(self, synthesizer):
        """Test serialized policy uses camelCase keys and omits unset controls"""
        public = synthesizer.synthesize(Category.ANALYTICS, SecurityLevel.PUBLIC, []).to_dict()
        restricted = synthesizer.synthesize(Category.PAYMENT, SecurityLevel.RESTRICTED, []).to_dict()

        assert "ipWhitelist" not in public["accessControl"]
        assert restricted["accessControl"]["ipWhitelist"] == []
        assert restricted["accessControl"]["timeRestrictions"] == [{"start": "06:00", "end": "22:00"}]
        assert restricted["encryption"]["keyRotation"] == "30d"
        assert restricted["audit"]["retentionDays"] == 2555
