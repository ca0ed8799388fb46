"""
Utility functions for integration-guard
"""
import logging
import os
import re
from typing import Optional, Pattern

logger = logging.getLogger(__name__)

# Pre-compile regex patterns
ENV_VAR_PATTERN: Pattern[str] = re.compile(r'\$\{([^}]+)\}')
FIELD_SEPARATOR_PATTERN: Pattern[str] = re.compile(r'[\s\-_]+')
JSON_ARRAY_PATTERN: Pattern[str] = re.compile(r'\[[\s\S]*\]')


def substitute_env_vars(value: str, warn_missing: bool = True) -> str:
    """Substitute environment variables in a configuration value.

    Args:
        value: String that may contain ${VAR_NAME} placeholders
        warn_missing: Whether to log warnings for missing variables

    Returns:
        String with environment variables substituted

    Example:
        >>> os.environ['ANTHROPIC_API_KEY'] = 'secret123'
        >>> substitute_env_vars('${ANTHROPIC_API_KEY}')
        'secret123'
    """
    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)

        if (var_value := os.environ.get(var_name)) is not None:
            return var_value

        if warn_missing:
            logger.warning(f"Environment variable ${{{var_name}}} is not set")
        return match.group(0)

    return ENV_VAR_PATTERN.sub(replace_var, value)


def normalize_field_name(name: str) -> str:
    """Normalize a free-text field name into a taxonomy token.

    Lowercases and collapses dashes, whitespace and runs of underscores
    into a single underscore.

    Example:
        >>> normalize_field_name('Credit-Card  Number')
        'credit_card_number'
    """
    return FIELD_SEPARATOR_PATTERN.sub('_', name.strip().lower()).strip('_')


def extract_json_array(text: str) -> Optional[str]:
    """Return the first JSON-array-looking substring of free text, if any"""
    if not text:
        return None
    if match := JSON_ARRAY_PATTERN.search(text):
        return match.group(0)
    return None
