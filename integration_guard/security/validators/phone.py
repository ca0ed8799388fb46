"""Phone number validator using phonenumbers library"""
import logging
from typing import List, Optional, Tuple

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberMatcher

from .base import SensitiveDataValidator

logger = logging.getLogger(__name__)


class PhoneValidator(SensitiveDataValidator):
    """Validator for phone numbers using Google's libphonenumber"""

    # Words right before a digit run that mean it is not a phone number
    NON_PHONE_CONTEXT = ('key', 'token', 'secret', 'id', 'hash')

    def __init__(self, default_region: Optional[str] = None):
        """
        Initialize phone validator.

        Args:
            default_region: Region used for numbers without a country code;
                None requires an international (+CC) number
        """
        super().__init__('phone')
        self.default_region = default_region

    def is_valid(self, value: str) -> bool:
        try:
            number = phonenumbers.parse(value, self.default_region)
        except NumberParseException:
            return False
        return phonenumbers.is_possible_number(number)

    def find_matches(self, text: str) -> List[Tuple[str, int, int]]:
        matches = []
        seen_numbers = set()

        for match in PhoneNumberMatcher(text, self.default_region):
            context = text[max(0, match.start - 20):match.start].lower()
            if any(keyword in context for keyword in self.NON_PHONE_CONTEXT):
                continue

            number_key = phonenumbers.format_number(match.number, phonenumbers.PhoneNumberFormat.E164)
            if number_key in seen_numbers:
                continue

            seen_numbers.add(number_key)
            matches.append((match.raw_string, match.start, match.end))

        return matches
