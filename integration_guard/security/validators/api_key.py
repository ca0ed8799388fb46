"""API key validator for various services"""
import re
from typing import Dict, List, Optional, Tuple

from .base import SensitiveDataValidator


class ApiKeyValidator(SensitiveDataValidator):
    """Validator for API keys and tokens of well-known services"""

    API_KEY_PATTERNS: Dict[str, re.Pattern] = {
        'generic': re.compile(r'(?i)(?:api[_-]?key|apikey|api[_-]?token|access[_-]?token)\s*[:=]\s*[\'"]?([a-zA-Z0-9_\-]{10,})[\'"]?'),
        'aws_access_key': re.compile(r'\bAKIA[A-Z0-9]{16}\b'),
        'aws_secret_key': re.compile(r'(?i)aws[_-]?secret[_-]?access[_-]?key\s*[:=]\s*[\'"]?([a-zA-Z0-9/+=]{40})[\'"]?'),
        'github_pat': re.compile(r'ghp_[a-zA-Z0-9]{36}'),
        'github_oauth': re.compile(r'gho_[a-zA-Z0-9]{36}'),
        'slack_token': re.compile(r'xox[baprs]-[0-9]{10,13}-[0-9]{10,13}-[a-zA-Z0-9]{24,34}'),
        'stripe_live': re.compile(r'sk_live_[a-zA-Z0-9]{24,}'),
        'stripe_test': re.compile(r'sk_test_[a-zA-Z0-9]{24,}'),
        'sendgrid': re.compile(r'SG\.[a-zA-Z0-9_\-]{22}\.[a-zA-Z0-9_\-]{43}'),
        'twilio': re.compile(r'SK[a-f0-9]{32}'),
        'google_api': re.compile(r'AIza[0-9A-Za-z_\-]{35}'),
        'anthropic': re.compile(r'sk-ant-[a-zA-Z0-9_\-]{20,}'),
        'bearer': re.compile(r'(?i)bearer\s+([a-zA-Z0-9_\-\.]{20,})'),
    }

    # Shape a submitted key must have when no service pattern matches it
    KEY_SHAPE = re.compile(r'[A-Za-z0-9_\-\.]{16,256}')

    PLACEHOLDERS = {'xxxxxxxxxxxxxxxxxxxx', 'your-api-key-here', 'your_api_key', 'changeme'}

    def __init__(self, service_patterns: Optional[Dict[str, re.Pattern]] = None):
        """
        Initialize API key validator.

        Args:
            service_patterns: Optional custom patterns to use instead of defaults
        """
        super().__init__('api_key')
        self.patterns = service_patterns or self.API_KEY_PATTERNS

    def is_valid(self, value: str) -> bool:
        """Looks like a real credential rather than a placeholder"""
        if self._is_placeholder(value):
            return False
        if any(pattern.fullmatch(value) for pattern in self.patterns.values()):
            return True
        return self.KEY_SHAPE.fullmatch(value) is not None

    def find_matches(self, text: str) -> List[Tuple[str, int, int]]:
        matches = []
        seen_keys = set()

        for pattern in self.patterns.values():
            for match in pattern.finditer(text):
                key = match.group(0)
                if key in seen_keys or self._is_placeholder(key):
                    continue

                seen_keys.add(key)
                matches.append((key, match.start(), match.end()))

        return matches

    def _is_placeholder(self, key: str) -> bool:
        lowered = key.lower()
        if 'example' in lowered or 'sample' in lowered:
            return True
        if lowered in self.PLACEHOLDERS:
            return True
        # All (or nearly all) the same character
        return len(set(key.replace('-', '').replace('_', ''))) <= 2
