"""
Validation rules for generated API operations
Derives rules from classified data and checks payloads against them
"""
import ipaddress
import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..models import DataClassification, ValidationRule
from .validators import (
    ApiKeyValidator,
    CreditCardValidator,
    EmailValidator,
    PasswordValidator,
    PhoneValidator,
    SensitiveDataValidator,
)

logger = logging.getLogger(__name__)

# Caller-supplied patterns run on the request path
MAX_PATTERN_LENGTH = 256
MAX_PATTERN_INPUT_LENGTH = 1024
# A quantified group that is itself quantified, e.g. (a+)+ or (\w*){2,}
NESTED_QUANTIFIER_PATTERN = re.compile(r"\([^()]*[+*}][^()]*\)[+*{]")

# Rules attached to fields whose format is known from the taxonomy
FIELD_RULES: Dict[str, ValidationRule] = {
    rule.field: rule
    for rule in (
        ValidationRule(field="email", type="email", max=254),
        ValidationRule(field="phone", type="phone", max=32),
        ValidationRule(field="credit_card", type="credit_card"),
        ValidationRule(field="password", type="password", min=8, max=128),
        ValidationRule(field="ssn", type="string", pattern=r"\d{3}-?\d{2}-?\d{4}"),
        ValidationRule(field="ip_address", type="ip_address"),
        ValidationRule(field="iban", type="string", pattern=r"[A-Z]{2}\d{2}[A-Z0-9]{11,30}"),
        ValidationRule(field="api_key", type="api_key"),
        ValidationRule(field="date_of_birth", type="string", pattern=r"\d{4}-\d{2}-\d{2}"),
        ValidationRule(field="name", type="string", min=1, max=200),
        ValidationRule(field="address", type="string", max=500),
    )
}


def _is_string(value: Any) -> bool:
    return isinstance(value, str)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


JSON_TYPE_CHECKS: Dict[str, Callable[[Any], bool]] = {
    "string": _is_string,
    "number": _is_number,
    "integer": _is_integer,
    "boolean": lambda value: isinstance(value, bool),
    "array": lambda value: isinstance(value, list),
    "object": lambda value: isinstance(value, dict),
}


def derive_validation_rules(data_types: Iterable[DataClassification],
                            existing: Iterable[ValidationRule] = ()) -> List[ValidationRule]:
    """
    Rules for the classified fields, skipping fields that already have one

    Args:
        data_types: Classified data flowing through the integration
        existing: Rules already attached to the operation

    Returns:
        The existing rules followed by the derived ones
    """
    rules = list(existing)
    covered = {rule.field for rule in rules}

    for data_type in data_types:
        if data_type.field in covered:
            continue
        if rule := FIELD_RULES.get(data_type.field):
            rules.append(rule)
            covered.add(rule.field)

    return rules


def _is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


class PayloadValidator:
    """Checks a JSON payload against a list of ValidationRules"""

    def __init__(self, validators: Optional[List[SensitiveDataValidator]] = None):
        validators = validators if validators is not None else [
            EmailValidator(),
            PhoneValidator(),
            CreditCardValidator(),
            PasswordValidator(),
            ApiKeyValidator(),
        ]
        self.format_checks: Dict[str, Callable[[str], bool]] = {
            v.name: v.is_valid for v in validators
        }
        self.format_checks["ip_address"] = _is_ip_address

    def validate(self, payload: Dict[str, Any], rules: Iterable[ValidationRule]) -> List[str]:
        """
        Validate a payload

        Args:
            payload: Decoded JSON object
            rules: Rules to enforce

        Returns:
            List of violation messages, empty when the payload is valid
        """
        violations: List[str] = []

        for rule in rules:
            if rule.field not in payload or payload[rule.field] is None:
                if rule.required:
                    violations.append(f"{rule.field}: is required")
                continue

            if error := self._check(rule, payload[rule.field]):
                violations.append(f"{rule.field}: {error}")

        if violations:
            logger.info(f"Payload failed validation with {len(violations)} violation(s)")

        return violations

    def _check(self, rule: ValidationRule, value: Any) -> Optional[str]:
        """Return the first violated constraint of a single value"""
        if type_check := JSON_TYPE_CHECKS.get(rule.type):
            if not type_check(value):
                return f"expected {rule.type}"
        elif format_check := self.format_checks.get(rule.type):
            if not isinstance(value, str) or not format_check(value):
                return f"invalid {rule.type}"
        else:
            logger.debug(f"Unknown rule type '{rule.type}' for field '{rule.field}', checking bounds only")

        if rule.pattern is not None and isinstance(value, str):
            if len(rule.pattern) > MAX_PATTERN_LENGTH or NESTED_QUANTIFIER_PATTERN.search(rule.pattern):
                return "rule has an unsafe pattern"
            if len(value) > MAX_PATTERN_INPUT_LENGTH:
                return "is too long to match the required pattern"
            try:
                if re.fullmatch(rule.pattern, value) is None:
                    return "does not match the required pattern"
            except re.error:
                return "rule has an invalid pattern"

        size = self._size(value)
        if size is not None:
            if rule.min is not None and size < rule.min:
                return f"must be at least {rule.min:g}"
            if rule.max is not None and size > rule.max:
                return f"must be at most {rule.max:g}"

        return None

    @staticmethod
    def _size(value: Any) -> Optional[float]:
        """Length for strings and arrays, the value itself for numbers"""
        if isinstance(value, (str, list)):
            return len(value)
        if _is_number(value):
            return value
        return None
