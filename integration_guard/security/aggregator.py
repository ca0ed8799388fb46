"""
Security level aggregation
Reduces a set of data classifications to one ordinal security level
"""
from typing import Iterable

from ..models import DataClassification, SecurityLevel


def max_sensitivity_ordinal(data_types: Iterable[DataClassification]) -> int:
    """Highest sensitivity ordinal in the set, 0 when empty"""
    return max((dt.sensitivity.ordinal for dt in data_types), default=0)


def level_for_ordinal(ordinal: int) -> SecurityLevel:
    """Map a sensitivity ordinal to a security level.

    Note the thresholds are asymmetric: medium (2) lands on internal while
    high (3) already lands on confidential.
    """
    if ordinal >= 4:
        return SecurityLevel.RESTRICTED
    if ordinal >= 3:
        return SecurityLevel.CONFIDENTIAL
    if ordinal >= 2:
        return SecurityLevel.INTERNAL
    return SecurityLevel.PUBLIC


def determine_security_level(data_types: Iterable[DataClassification]) -> SecurityLevel:
    """Security level of an integration from its classified data"""
    return level_for_ordinal(max_sensitivity_ordinal(data_types))
