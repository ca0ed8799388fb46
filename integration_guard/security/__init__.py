"""
Data classification and security policy synthesis
"""
from .classifier import DataSensitivityClassifier, classify_data_types, TAXONOMY
from .aggregator import determine_security_level, level_for_ordinal, max_sensitivity_ordinal
from .policy_synthesizer import PolicySynthesizer, generate_security_policy
from .payload_validator import PayloadValidator, derive_validation_rules
from .redaction import SensitiveDataRedactor

__all__ = [
    'DataSensitivityClassifier',
    'classify_data_types',
    'TAXONOMY',
    'determine_security_level',
    'level_for_ordinal',
    'max_sensitivity_ordinal',
    'PolicySynthesizer',
    'generate_security_policy',
    'PayloadValidator',
    'derive_validation_rules',
    'SensitiveDataRedactor'
]
