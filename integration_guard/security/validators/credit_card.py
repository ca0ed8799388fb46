"""Credit card number validator"""
import re
from typing import List, Tuple

from luhnchecker.luhn import Luhn

from .base import SensitiveDataValidator


class CreditCardValidator(SensitiveDataValidator):
    """Validator for payment card numbers using LuhnChecker"""

    CARD_PATTERNS = [
        re.compile(r'\b(?:\d{4}[\s\-]?){3}\d{4}\b'),  # 16 digits with optional separators
        re.compile(r'\b\d{13,19}\b'),
    ]
    SEPARATORS = re.compile(r'[\s\-]')

    def __init__(self):
        super().__init__('credit_card')
        self.checker = Luhn()

    def _digits(self, value: str) -> str:
        return self.SEPARATORS.sub('', value)

    def is_valid(self, value: str) -> bool:
        """Luhn-valid number of a recognized issuer"""
        digits = self._digits(value)
        if not digits.isdigit() or not 13 <= len(digits) <= 19:
            return False

        if not self.checker.check_luhn(digits):
            return False

        return self.checker.credit_card_issuer(digits) != "invalid card number"

    def find_matches(self, text: str) -> List[Tuple[str, int, int]]:
        """Card numbers in text, well-known test numbers included"""
        matches = []
        seen_cards = set()

        for pattern in self.CARD_PATTERNS:
            for match in pattern.finditer(text):
                card_match = match.group(0)
                digits = self._digits(card_match)

                if digits in seen_cards or not self.is_valid(card_match):
                    continue

                seen_cards.add(digits)
                matches.append((card_match, match.start(), match.end()))

        return matches
