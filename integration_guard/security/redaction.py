"""
Sensitive data redaction
Masks sensitive values that the architecture analyzer echoes back in free text
"""
import logging
from typing import List, Optional, Tuple

from .validators import (
    ApiKeyValidator,
    CreditCardValidator,
    EmailValidator,
    PasswordValidator,
    PhoneValidator,
    SensitiveDataValidator,
)

logger = logging.getLogger(__name__)


class SensitiveDataRedactor:
    """Scans text with every validator and masks what they find"""

    def __init__(self, validators: Optional[List[SensitiveDataValidator]] = None):
        # Credentials first: their matches span the widest text
        self.validators: List[SensitiveDataValidator] = validators if validators is not None else [
            ApiKeyValidator(),
            PasswordValidator(),
            CreditCardValidator(),
            EmailValidator(),
            PhoneValidator(),
        ]
        self.validator_map = {v.name: v for v in self.validators}

    def scan(self, text: str) -> List[str]:
        """Names of the sensitive value kinds present in text"""
        if not text:
            return []
        return [v.name for v in self.validators if v.contains_sensitive_data(text)]

    def redact(self, text: Optional[str]) -> Tuple[str, List[str]]:
        """
        Mask sensitive values in text

        Returns:
            Tuple of (redacted_text, detected_kinds)
        """
        if not text:
            return text or "", []

        detected = []
        result = text
        for validator in self.validators:
            masked = validator.mask_sensitive_data(result)
            if masked != result:
                detected.append(validator.name)
                result = masked

        if detected:
            logger.warning(f"Redacted sensitive data from analyzer output: {detected}")

        return result, detected

    def add_validator(self, validator: SensitiveDataValidator) -> None:
        self.validators.append(validator)
        self.validator_map[validator.name] = validator
