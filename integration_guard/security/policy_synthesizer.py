"""
Security policy synthesis
Derives access control, encryption, audit and compliance from
(category, security level, data classifications)
"""
import logging
from typing import Dict, Iterable, List, Tuple

from ..models import (
    AccessControl,
    AlertThreshold,
    AuditPolicy,
    Category,
    DataClassification,
    DataType,
    EncryptionPolicy,
    IntegrationDetection,
    SecurityLevel,
    SecurityPolicy,
    TimeWindow,
)

logger = logging.getLogger(__name__)

REQUIRED_ROLES: Dict[SecurityLevel, Tuple[str, ...]] = {
    SecurityLevel.PUBLIC: ("user",),
    SecurityLevel.INTERNAL: ("user", "staff"),
    SecurityLevel.CONFIDENTIAL: ("admin", "manager"),
    SecurityLevel.RESTRICTED: ("root_owner", "security_admin"),
}

AUDIT_RETENTION_DAYS: Dict[SecurityLevel, int] = {
    SecurityLevel.PUBLIC: 30,
    SecurityLevel.INTERNAL: 90,
    SecurityLevel.CONFIDENTIAL: 365,
    SecurityLevel.RESTRICTED: 2555,  # ~7 years
}

ALERT_THRESHOLDS: Tuple[AlertThreshold, ...] = (
    AlertThreshold(metric="error_rate", threshold=5),  # percent
    AlertThreshold(metric="latency_p99", threshold=2000),  # ms
)

BUSINESS_HOURS = TimeWindow(start="06:00", end="22:00")


class PolicySynthesizer:
    """Builds the SecurityPolicy bundle for an integration"""

    def synthesize(self, category: Category, security_level: SecurityLevel,
                   data_classifications: Iterable[DataClassification],
                   integration_id: str = "") -> SecurityPolicy:
        """
        Synthesize a security policy

        Args:
            category: Integration category
            security_level: Aggregated security level
            data_classifications: Classified data flowing through the integration
            integration_id: Identifier echoed into the policy

        Returns:
            The derived SecurityPolicy
        """
        classifications = tuple(data_classifications)

        policy = SecurityPolicy(
            integration_id=integration_id,
            data_classifications=classifications,
            access_control=self.access_control(security_level),
            encryption=self.encryption(security_level),
            audit=self.audit(security_level),
            compliance=tuple(self.compliance(category, security_level, classifications)),
        )

        logger.debug(
            f"Synthesized policy for {integration_id or 'integration'}: "
            f"level={security_level.value} compliance={list(policy.compliance)}"
        )
        return policy

    def for_integration(self, integration: IntegrationDetection) -> SecurityPolicy:
        return self.synthesize(
            integration.category,
            integration.security_level,
            integration.data_types,
            integration_id=integration.id,
        )

    @staticmethod
    def access_control(security_level: SecurityLevel) -> AccessControl:
        restricted = security_level == SecurityLevel.RESTRICTED
        return AccessControl(
            required_roles=REQUIRED_ROLES[security_level],
            mfa_required=restricted,
            # Operators fill the whitelist in; only restricted gets one
            ip_whitelist=() if restricted else None,
            time_restrictions=(BUSINESS_HOURS,) if restricted else None,
        )

    @staticmethod
    def encryption(security_level: SecurityLevel) -> EncryptionPolicy:
        restricted = security_level == SecurityLevel.RESTRICTED
        return EncryptionPolicy(
            at_rest=security_level != SecurityLevel.PUBLIC,
            in_transit=True,
            algorithm="AES-256-GCM" if restricted else "AES-128-GCM",
            key_rotation="30d" if restricted else "90d",
        )

    @staticmethod
    def audit(security_level: SecurityLevel) -> AuditPolicy:
        return AuditPolicy(
            log_requests=True,
            log_responses=security_level != SecurityLevel.PUBLIC,
            retention_days=AUDIT_RETENTION_DAYS[security_level],
            alert_thresholds=ALERT_THRESHOLDS,
        )

    @staticmethod
    def compliance(category: Category, security_level: SecurityLevel,
                   data_classifications: Iterable[DataClassification]) -> List[str]:
        """Compliance tags; each rule is independent and additive"""
        data_types = {dc.type for dc in data_classifications}
        tags: List[str] = []

        if category == Category.PAYMENT:
            tags.append("PCI-DSS")

        if DataType.HEALTH in data_types:
            tags.append("HIPAA")

        if DataType.PII in data_types:
            tags.extend(["GDPR", "CCPA"])

        if security_level == SecurityLevel.RESTRICTED:
            tags.extend(["SOC2", "ISO27001"])

        # Preserve rule order while dropping duplicates
        return list(dict.fromkeys(tags))


def generate_security_policy(integration: IntegrationDetection) -> SecurityPolicy:
    """Security policy of an integration with the default synthesizer"""
    return PolicySynthesizer().for_integration(integration)
