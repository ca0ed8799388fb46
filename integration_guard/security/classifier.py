"""
Data sensitivity classifier
Maps free-text field names to canonical classification records
"""
import logging
from typing import Dict, Iterable, List

from ..models import DataClassification, DataType, EncryptionMode, Sensitivity
from ..utils import normalize_field_name

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = "default"


def _entry(field: str, data_type: DataType, sensitivity: Sensitivity,
           encryption: EncryptionMode, retention: str) -> DataClassification:
    return DataClassification(field, data_type, sensitivity, encryption, retention)


# Canonical taxonomy, keyed by normalized field token
TAXONOMY: Dict[str, DataClassification] = {
    entry.field: entry
    for entry in (
        _entry("email", DataType.PII, Sensitivity.MEDIUM, EncryptionMode.BOTH, "account_lifetime"),
        _entry("phone", DataType.PII, Sensitivity.MEDIUM, EncryptionMode.BOTH, "account_lifetime"),
        _entry("password", DataType.AUTH, Sensitivity.CRITICAL, EncryptionMode.BOTH, "never_store_plain"),
        _entry("ssn", DataType.PII, Sensitivity.CRITICAL, EncryptionMode.BOTH, "minimum_required"),
        _entry("credit_card", DataType.FINANCIAL, Sensitivity.CRITICAL, EncryptionMode.BOTH, "tokenize_only"),
        _entry("bank_account", DataType.FINANCIAL, Sensitivity.CRITICAL, EncryptionMode.BOTH, "minimum_required"),
        _entry("health_record", DataType.HEALTH, Sensitivity.CRITICAL, EncryptionMode.BOTH, "hipaa_compliant"),
        _entry("address", DataType.PII, Sensitivity.MEDIUM, EncryptionMode.REST, "account_lifetime"),
        _entry("name", DataType.PII, Sensitivity.LOW, EncryptionMode.TRANSIT, "account_lifetime"),
        _entry("ip_address", DataType.INTERNAL, Sensitivity.LOW, EncryptionMode.NONE, "30_days"),
        _entry("date_of_birth", DataType.PII, Sensitivity.HIGH, EncryptionMode.BOTH, "account_lifetime"),
        _entry("passport_number", DataType.PII, Sensitivity.CRITICAL, EncryptionMode.BOTH, "minimum_required"),
        _entry("iban", DataType.FINANCIAL, Sensitivity.CRITICAL, EncryptionMode.BOTH, "minimum_required"),
        _entry("api_key", DataType.AUTH, Sensitivity.CRITICAL, EncryptionMode.BOTH, "vault_only"),
    )
}

# Alternate spellings seen in analyzer output
ALIASES: Dict[str, str] = {
    "e_mail": "email",
    "email_address": "email",
    "phone_number": "phone",
    "mobile": "phone",
    "mobile_number": "phone",
    "passwd": "password",
    "social_security_number": "ssn",
    "card_number": "credit_card",
    "credit_card_number": "credit_card",
    "payment_card": "credit_card",
    "bank_account_number": "bank_account",
    "medical_record": "health_record",
    "health_records": "health_record",
    "postal_address": "address",
    "full_name": "name",
    "ip": "ip_address",
    "dob": "date_of_birth",
    "birth_date": "date_of_birth",
    "passport": "passport_number",
    "apikey": "api_key",
}


class DataSensitivityClassifier:
    """Classifies field names against the fixed taxonomy.

    Total over arbitrary input: an unknown name yields the low-sensitivity
    internal fallback instead of an error.
    """

    def __init__(self, taxonomy: Dict[str, DataClassification] = None,
                 aliases: Dict[str, str] = None):
        self.taxonomy = taxonomy if taxonomy is not None else TAXONOMY
        self.aliases = aliases if aliases is not None else ALIASES

    def classify(self, field_name: str) -> DataClassification:
        """Classify a single field name"""
        raw = field_name if isinstance(field_name, str) else str(field_name)
        token = normalize_field_name(raw)
        token = self.aliases.get(token, token)

        if classification := self.taxonomy.get(token):
            return classification

        logger.debug(f"Unrecognized field '{raw}', using internal/low fallback")
        return self.fallback(raw)

    def classify_all(self, field_names: Iterable[str]) -> List[DataClassification]:
        """Classify field names, preserving order"""
        return [self.classify(name) for name in field_names]

    @staticmethod
    def fallback(field_name: str) -> DataClassification:
        return DataClassification(
            field=field_name,
            type=DataType.INTERNAL,
            sensitivity=Sensitivity.LOW,
            encryption=EncryptionMode.TRANSIT,
            retention=DEFAULT_RETENTION,
        )

    def is_known(self, field_name: str) -> bool:
        token = normalize_field_name(field_name)
        return self.aliases.get(token, token) in self.taxonomy


def classify_data_types(field_names: Iterable[str]) -> List[DataClassification]:
    """Classify field names with the default taxonomy"""
    return DataSensitivityClassifier().classify_all(field_names)
