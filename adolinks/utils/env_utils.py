"""Environment variable utilities for adolinks.

Config values may reference environment variables as ``${VAR}`` so that a
Personal Access Token does not have to be written into a config file.
Sensitive keys are detected so their values and names stay out of logs.
"""

from __future__ import annotations

import logging
import os
import re

# Keys containing these substrings are considered sensitive and should not be logged
SENSITIVE_KEY_PATTERNS = ("TOKEN", "KEY", "SECRET", "PASSWORD", "PAT", "CREDENTIAL")

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

logger = logging.getLogger(__name__)


class EnvVarExpansionError(Exception):
    """Raised when environment variable expansion fails in strict mode."""

    pass


def is_sensitive_key(key: str) -> bool:
    """Check if a configuration key contains sensitive data.

    Args:
        key: The configuration key name

    Returns:
        True if the key is considered sensitive
    """
    key_upper = key.upper()
    return any(pattern in key_upper for pattern in SENSITIVE_KEY_PATTERNS)


def mask_value(value: str) -> str:
    """Mask a secret for display, keeping only its last four characters."""
    if not value:
        return ""
    if len(value) <= 4:
        return "****"
    return f"****{value[-4:]}"


def expand_env_vars(value: str, strict: bool = False, context: str = "") -> str:
    """Expand ``${VAR}`` references in a string to environment values.

    Args:
        value: The string to expand
        strict: If True, raises EnvVarExpansionError for missing env vars.
                If False, keeps the ``${VAR}`` text in place.
        context: Config key the value belongs to, for messages. Omitted
                 from messages when the key is sensitive.

    Returns:
        The expanded string

    Raises:
        EnvVarExpansionError: If strict=True and an env var is not set
    """
    missing_vars: list[str] = []

    def replace(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            missing_vars.append(var_name)
            if not strict:
                if context and not is_sensitive_key(context):
                    logger.warning("Environment variable '%s' not set in %s", var_name, context)
                else:
                    logger.warning("Environment variable '%s' not set", var_name)
            return match.group(0)
        return env_value

    result = _ENV_VAR_PATTERN.sub(replace, value)

    if strict and missing_vars:
        if context and not is_sensitive_key(context):
            raise EnvVarExpansionError(
                f"Missing environment variable(s): {', '.join(missing_vars)} in {context}"
            )
        raise EnvVarExpansionError(f"Missing environment variable(s): {', '.join(missing_vars)}")

    return result


__all__ = [
    "EnvVarExpansionError",
    "SENSITIVE_KEY_PATTERNS",
    "expand_env_vars",
    "is_sensitive_key",
    "mask_value",
]
