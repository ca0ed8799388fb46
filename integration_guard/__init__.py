"""
integration-guard Package
Integration detection, data classification and security policy synthesis
"""
from .config import AppConfig, ConfigurationManager, ConfigurationError, SecurityPolicyError
from .utils import substitute_env_vars
from .analyzer import ArchitectureAnalyzer, AnthropicArchitectureAnalyzer, create_analyzer
from .engine import IntegrationSecurityEngine
from .rate_limit import InMemoryRateLimiter, RateLimiter

__all__ = [
    'AppConfig',
    'ConfigurationManager',
    'ConfigurationError',
    'SecurityPolicyError',
    'substitute_env_vars',
    'ArchitectureAnalyzer',
    'AnthropicArchitectureAnalyzer',
    'create_analyzer',
    'IntegrationSecurityEngine',
    'InMemoryRateLimiter',
    'RateLimiter'
]
