"""
API contract scaffolding
"""
from .generator import (
    ApiContractGenerator,
    build_auth_config,
    default_rate_limit,
    resolve_rate_limit,
    security_headers,
)
from .openapi import OpenAPIAssembler, document_security

__all__ = [
    'ApiContractGenerator',
    'build_auth_config',
    'default_rate_limit',
    'resolve_rate_limit',
    'security_headers',
    'OpenAPIAssembler',
    'document_security'
]
