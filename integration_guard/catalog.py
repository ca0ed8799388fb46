"""
Integration catalog
Static metadata for well-known third-party providers
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .models import Category, SecurityLevel


@dataclass(frozen=True)
class CatalogEntry:
    """Metadata of a well-known integration"""
    key: str
    name: str
    name_ar: str
    category: Category
    provider: str
    required_credentials: Tuple[str, ...]
    baseline_security_level: SecurityLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "nameAr": self.name_ar,
            "category": self.category.value,
            "provider": self.provider,
            "requiredCredentials": list(self.required_credentials),
            "baselineSecurityLevel": self.baseline_security_level.value,
        }


CUSTOM_PROVIDER = "Custom"

_ENTRIES = (
    CatalogEntry(
        "stripe", "Stripe", "سترايب", Category.PAYMENT, "Stripe Inc.",
        ("STRIPE_SECRET_KEY", "STRIPE_PUBLISHABLE_KEY", "STRIPE_WEBHOOK_SECRET"),
        SecurityLevel.RESTRICTED,
    ),
    CatalogEntry(
        "paypal", "PayPal", "باي بال", Category.PAYMENT, "PayPal Holdings",
        ("PAYPAL_CLIENT_ID", "PAYPAL_CLIENT_SECRET"),
        SecurityLevel.RESTRICTED,
    ),
    CatalogEntry(
        "twilio", "Twilio", "تويليو", Category.COMMUNICATION, "Twilio Inc.",
        ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN"),
        SecurityLevel.CONFIDENTIAL,
    ),
    CatalogEntry(
        "sendgrid", "SendGrid", "سيند جريد", Category.COMMUNICATION, "Twilio Inc.",
        ("SENDGRID_API_KEY",),
        SecurityLevel.INTERNAL,
    ),
    CatalogEntry(
        "firebase", "Firebase", "فايربيس", Category.AUTH, "Google",
        ("FIREBASE_PROJECT_ID", "FIREBASE_PRIVATE_KEY"),
        SecurityLevel.CONFIDENTIAL,
    ),
    CatalogEntry(
        "aws_s3", "AWS S3", "تخزين أمازون", Category.STORAGE, "Amazon Web Services",
        ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_REGION"),
        SecurityLevel.CONFIDENTIAL,
    ),
    CatalogEntry(
        "openai", "OpenAI", "أوبن إيه آي", Category.AI, "OpenAI",
        ("OPENAI_API_KEY",),
        SecurityLevel.INTERNAL,
    ),
    CatalogEntry(
        "google_analytics", "Google Analytics", "تحليلات جوجل", Category.ANALYTICS, "Google",
        ("GA_MEASUREMENT_ID",),
        SecurityLevel.PUBLIC,
    ),
    CatalogEntry(
        "salesforce", "Salesforce", "سيلز فورس", Category.CRM, "Salesforce Inc.",
        ("SF_CLIENT_ID", "SF_CLIENT_SECRET", "SF_USERNAME", "SF_PASSWORD"),
        SecurityLevel.CONFIDENTIAL,
    ),
    CatalogEntry(
        "sap", "SAP", "ساب", Category.ERP, "SAP SE",
        ("SAP_HOST", "SAP_CLIENT", "SAP_USER", "SAP_PASSWORD"),
        SecurityLevel.RESTRICTED,
    ),
)

INTEGRATION_CATALOG: Dict[str, CatalogEntry] = {entry.key: entry for entry in _ENTRIES}


def lookup(key: Optional[str]) -> Optional[CatalogEntry]:
    """Find a catalog entry by integration key (case-insensitive)"""
    if not key:
        return None
    return INTEGRATION_CATALOG.get(key.strip().lower())


def entries() -> List[CatalogEntry]:
    """All catalog entries in declaration order"""
    return list(_ENTRIES)


def keys() -> List[str]:
    return [entry.key for entry in _ENTRIES]
