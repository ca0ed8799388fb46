"""
Configuration module for integration-guard
"""
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .utils import substitute_env_vars

logger = logging.getLogger(__name__)

RESTRICTED_AUTH_TYPES = ("mtls", "hmac")


class ConfigurationError(Exception):
    """Base exception for configuration errors"""
    pass


class SecurityPolicyError(ConfigurationError):
    """Exception for security policy configuration errors"""
    pass


@dataclass
class ServerConfig:
    """HTTP surface settings"""
    host: str = "127.0.0.1"
    port: int = 8000
    base_path: str = "/api/integrations"
    session_secret: str = "change-me"
    session_max_age: int = 60 * 60 * 24 * 7  # 7 days
    owner_roles: List[str] = field(default_factory=lambda: ["owner", "sovereign"])


@dataclass
class RateLimitSettings:
    """Per-identity quota guarding the HTTP endpoints"""
    requests: int = 20
    window_seconds: int = 60


@dataclass
class AnalyzerConfig:
    """Settings of the external architecture analyzer"""
    provider: str = "anthropic"
    model: str = "claude-sonnet-4-20250514"
    api_key: Optional[str] = None
    max_tokens: int = 2000
    timeout_seconds: float = 30.0


@dataclass
class ContractSettings:
    """Knobs of the API contract generator"""
    restricted_auth: str = "mtls"


@dataclass
class AppConfig:
    """Complete configuration of integration-guard"""
    server: ServerConfig = field(default_factory=ServerConfig)
    rate_limit: RateLimitSettings = field(default_factory=RateLimitSettings)
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    contracts: ContractSettings = field(default_factory=ContractSettings)


class ConfigurationManager:
    """Loads and validates the integration-guard configuration file"""

    def __init__(self, config_file: Union[str, Path]):
        self.config_file = Path(config_file)
        self.config: Dict = {}  # Store raw configuration
        self.app_config: Optional[AppConfig] = None

    def load(self) -> AppConfig:
        """Load configuration from JSON file"""
        if not self.config_file.exists():
            error_msg = f"Configuration file not found: {self.config_file}"
            logger.error(error_msg)
            raise FileNotFoundError(error_msg)

        try:
            with self.config_file.open('r') as f:
                config_data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in configuration file: {e}")
            raise ConfigurationError(f"Invalid JSON: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigurationError("Configuration root must be a JSON object")

        self.config = config_data

        try:
            app_config = self.from_dict(config_data)
        except (TypeError, ValueError) as e:
            logger.error(f"Configuration error: {e}")
            raise ConfigurationError(str(e)) from e

        self.app_config = app_config
        logger.info(f"Loaded configuration from {self.config_file}")
        return app_config

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> AppConfig:
        """Build and validate an AppConfig from raw configuration data"""
        server_data = cls._section(config_data, "server")
        rate_data = cls._section(config_data, "rate_limit")
        analyzer_data = cls._section(config_data, "analyzer")
        contract_data = cls._section(config_data, "contracts")

        server = ServerConfig(**server_data)
        server.session_secret = substitute_env_vars(server.session_secret)

        analyzer = AnalyzerConfig(**analyzer_data)
        if analyzer.api_key:
            analyzer.api_key = substitute_env_vars(analyzer.api_key)
            # An unresolved placeholder means no key at all
            if analyzer.api_key.startswith("${"):
                analyzer.api_key = None

        app_config = AppConfig(
            server=server,
            rate_limit=RateLimitSettings(**rate_data),
            analyzer=analyzer,
            contracts=ContractSettings(**contract_data),
        )
        cls._validate(app_config)
        return app_config

    @staticmethod
    def _section(config_data: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = config_data.get(name, {})
        if not isinstance(section, dict):
            raise ConfigurationError(f"'{name}' must be a JSON object")
        return section

    @staticmethod
    def _validate(app_config: AppConfig) -> None:
        """Reject configurations that would weaken the security floor"""
        if app_config.contracts.restricted_auth not in RESTRICTED_AUTH_TYPES:
            raise SecurityPolicyError(
                f"contracts.restricted_auth must be one of {', '.join(RESTRICTED_AUTH_TYPES)}, "
                f"got '{app_config.contracts.restricted_auth}'"
            )

        if app_config.rate_limit.requests <= 0 or app_config.rate_limit.window_seconds <= 0:
            raise ConfigurationError("rate_limit.requests and rate_limit.window_seconds must be positive")

        base_path = app_config.server.base_path
        if not base_path.startswith("/") or base_path.endswith("/"):
            raise ConfigurationError("server.base_path must start with '/' and must not end with '/'")

        if app_config.analyzer.timeout_seconds <= 0:
            raise ConfigurationError("analyzer.timeout_seconds must be positive")
