"""Email address validator"""
import re
from typing import List, Tuple

from email_validator import EmailNotValidError, validate_email

from .base import SensitiveDataValidator


class EmailValidator(SensitiveDataValidator):
    """Validator for email addresses backed by email-validator"""

    # Loose pattern to locate candidates before the strict check
    EMAIL_REGEX = re.compile(
        r'\b[A-Za-z0-9][A-Za-z0-9._%+-]*@[A-Za-z0-9][A-Za-z0-9.-]*\.[A-Za-z]{2,}\b'
    )

    def __init__(self, check_deliverability: bool = False):
        """
        Initialize email validator.

        Args:
            check_deliverability: Whether to check if the domain has MX records
        """
        super().__init__('email')
        self.check_deliverability = check_deliverability

    def is_valid(self, value: str) -> bool:
        try:
            validate_email(value, check_deliverability=self.check_deliverability)
        except EmailNotValidError:
            return False
        return True

    def find_matches(self, text: str) -> List[Tuple[str, int, int]]:
        return [
            (match.group(0), match.start(), match.end())
            for match in self.EMAIL_REGEX.finditer(text)
            if self.is_valid(match.group(0))
        ]
