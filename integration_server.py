#!/usr/bin/env python3
"""
integration-guard
Detects the integrations an architecture needs and synthesizes their
security policies and API contracts
"""
import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from integration_guard.api import create_app
from integration_guard.config import AppConfig, ConfigurationError, ConfigurationManager

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def load_config(config_path: Path) -> AppConfig:
    """Load configuration, falling back to defaults when the default file is absent"""
    if not config_path.exists() and config_path == Path("config.json"):
        logger.warning("config.json not found, using default configuration")
        return AppConfig()
    return ConfigurationManager(config_path).load()


def main() -> None:
    """Main entry point"""
    parser = argparse.ArgumentParser(description="integration-guard")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.json"),
        help="Configuration file path (default: config.json)"
    )
    parser.add_argument("--host", help="Bind host (overrides server.host)")
    parser.add_argument("--port", type=int, help="Bind port (overrides server.port)")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    args = parser.parse_args()

    # Set logging level
    logging.getLogger().setLevel(getattr(logging, args.log_level))

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ConfigurationError) as e:
        logger.error(f"Cannot start: {e}")
        sys.exit(1)

    host = args.host or config.server.host
    port = args.port or config.server.port

    logger.info(f"integration-guard starting on {host}:{port}")
    uvicorn.run(create_app(config), host=host, port=port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
