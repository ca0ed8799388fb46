"""Password strength and exposure validator using zxcvbn and entropy analysis"""
import math
import re
from typing import List, Tuple

import zxcvbn

from .base import SensitiveDataValidator

SPECIAL_CHARACTERS = "!@#$%^&*()-=+[]{};:'\",.<>?/\\|_~`"


class PasswordValidator(SensitiveDataValidator):
    """Validator for passwords.

    ``is_valid`` enforces a minimum strength for passwords submitted to a
    generated API; ``find_matches`` locates passwords exposed in free text.
    """

    PASSWORD_PATTERNS = [
        # Key-value patterns with various separators
        re.compile(r'(?i)(?:password|passwd|pwd|pass|secret)\s*[:=]\s*[\'"]?([^\s\'"]+)[\'"]?'),

        # Database connection strings
        re.compile(r'(?i)(?:mysql|postgres|postgresql|mongodb|redis)://[^:\s]+:([^@\s]+)@'),

        # Basic auth in URLs
        re.compile(r'(?i)https?://[^:\s]+:([^@\s]+)@'),
    ]

    PLACEHOLDER_PASSWORDS = {
        'xxx', '***', '...', 'null', 'none', 'undefined', 'empty',
        'test', 'demo', 'example', 'sample', 'placeholder',
        'changeme', 'password', 'pass', 'pwd', 'secret',
        '123', '1234', '12345', '123456', 'admin', 'root'
    }

    def __init__(self, min_length: int = 8, min_score: int = 2, min_entropy: float = 40.0):
        """
        Initialize password validator.

        Args:
            min_length: Minimum accepted password length
            min_score: Minimum zxcvbn score (0-4) for a password to be accepted
            min_entropy: Entropy (bits) above which an exposed string is treated as a real password
        """
        super().__init__('password')
        self.min_length = min_length
        self.min_score = min_score
        self.min_entropy = min_entropy

    @staticmethod
    def entropy(password: str) -> float:
        """Character-set entropy of a password in bits"""
        charset = 0
        if any(c.islower() for c in password):
            charset += 26
        if any(c.isupper() for c in password):
            charset += 26
        if any(c.isdigit() for c in password):
            charset += 10
        if any(c in SPECIAL_CHARACTERS for c in password):
            charset += 32

        if charset == 0:
            return 0.0
        return len(password) * math.log2(charset)

    def is_valid(self, value: str) -> bool:
        """Strong enough to be accepted as a new password"""
        if len(value) < self.min_length:
            return False
        if value.lower() in self.PLACEHOLDER_PASSWORDS:
            return False
        return zxcvbn.zxcvbn(value)['score'] >= self.min_score

    def _looks_real(self, password: str) -> bool:
        """Heuristic for an exposed string being an actual credential"""
        if len(password) < 8 or len(password) > 64:
            return False
        if password.lower() in self.PLACEHOLDER_PASSWORDS:
            return False
        if password.startswith(('$', '%')):  # variable reference
            return False
        if re.fullmatch(r'[a-zA-Z]+', password):
            return False

        if zxcvbn.zxcvbn(password)['score'] >= 2:
            return True
        return self.entropy(password) >= self.min_entropy

    def find_matches(self, text: str) -> List[Tuple[str, int, int]]:
        matches = []
        seen_passwords = set()

        for pattern in self.PASSWORD_PATTERNS:
            for match in pattern.finditer(text):
                password = match.group(1)
                if password in seen_passwords or not self._looks_real(password):
                    continue

                seen_passwords.add(password)
                matches.append((match.group(0), match.start(), match.end()))

        return matches
