"""
OpenAPI assembly
Folds generated operation contracts into one OpenAPI 3.0 document
"""
from typing import Any, Dict, Iterable, List

from ..models import GeneratedAPI, HttpMethod, IntegrationDetection, SecurityLevel

OPENAPI_VERSION = "3.0.3"

SECURITY_SCHEMES: Dict[str, Dict[str, str]] = {
    "bearerAuth": {"type": "http", "scheme": "bearer"},
    "apiKey": {"type": "apiKey", "in": "header", "name": "X-API-Key"},
}

ERROR_RESPONSES: Dict[str, Dict[str, str]] = {
    "400": {"description": "Bad Request"},
    "401": {"description": "Unauthorized"},
    "403": {"description": "Forbidden"},
    "429": {"description": "Rate Limited"},
    "500": {"description": "Server Error"},
}


def document_security(security_level: SecurityLevel) -> List[Dict[str, List[str]]]:
    """Top-level security requirement, empty only for public integrations"""
    if security_level == SecurityLevel.PUBLIC:
        return []
    if security_level == SecurityLevel.RESTRICTED:
        return [{"bearerAuth": [], "apiKey": []}]
    return [{"bearerAuth": []}]


class OpenAPIAssembler:
    """Builds the OpenAPI document of an integration's generated API"""

    def __init__(self, base_path: str = "/api/integrations"):
        self.base_path = base_path.rstrip("/")

    def assemble(self, integration: IntegrationDetection,
                 apis: Iterable[GeneratedAPI]) -> Dict[str, Any]:
        """
        Assemble the document

        Args:
            integration: Integration the operations belong to
            apis: Generated operation contracts

        Returns:
            OpenAPI document as a JSON-compatible dict
        """
        paths: Dict[str, Dict[str, Any]] = {}
        for api in apis:
            path = self._relative_path(api.endpoint)
            paths.setdefault(path, {})[api.method.value.lower()] = self._operation(api)

        return {
            "openapi": OPENAPI_VERSION,
            "info": {
                "title": f"{integration.name} Integration API",
                "description": f"Auto-generated API for {integration.name} integration",
                "version": "1.0.0",
            },
            "servers": [{"url": self.base_path or "/", "description": "Integration API Server"}],
            "security": document_security(integration.security_level),
            "paths": paths,
            "components": {
                "securitySchemes": {name: dict(scheme) for name, scheme in SECURITY_SCHEMES.items()},
            },
        }

    def _relative_path(self, endpoint: str) -> str:
        if self.base_path and endpoint.startswith(self.base_path):
            endpoint = endpoint[len(self.base_path):]
        if not endpoint.startswith("/"):
            endpoint = "/" + endpoint
        return endpoint

    @staticmethod
    def _operation(api: GeneratedAPI) -> Dict[str, Any]:
        operation: Dict[str, Any] = {
            "operationId": api.id,
            "summary": api.description,
            "description": api.description_ar,
            "responses": {
                "200": {
                    "description": "Success",
                    "content": {"application/json": {"schema": api.response_schema}},
                },
                **{code: dict(response) for code, response in ERROR_RESPONSES.items()},
            },
        }

        if api.method != HttpMethod.GET:
            operation["requestBody"] = {
                "required": True,
                "content": {"application/json": {"schema": api.request_schema}},
            }

        return operation
