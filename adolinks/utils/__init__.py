"""Utility modules for adolinks.

This package contains:
- console: Rich-based terminal output utilities
- env_utils: Environment variable expansion and secret masking
- errors: Custom exceptions and exit codes
- logging: Logging configuration
"""

from adolinks.utils.console import (
    console,
    print_error,
    print_header,
    print_info,
    print_success,
    print_warning,
)
from adolinks.utils.env_utils import (
    SENSITIVE_KEY_PATTERNS,
    EnvVarExpansionError,
    expand_env_vars,
    is_sensitive_key,
    mask_value,
)
from adolinks.utils.errors import (
    AdoLinksError,
    ConfigurationError,
    ExitCode,
    InvalidBrowserUrlError,
)
from adolinks.utils.logging import log_message, setup_logging

__all__ = [
    # Console
    "console",
    "print_error",
    "print_success",
    "print_warning",
    "print_info",
    "print_header",
    # Env Utils
    "EnvVarExpansionError",
    "SENSITIVE_KEY_PATTERNS",
    "expand_env_vars",
    "is_sensitive_key",
    "mask_value",
    # Errors
    "ExitCode",
    "AdoLinksError",
    "InvalidBrowserUrlError",
    "ConfigurationError",
    # Logging
    "setup_logging",
    "log_message",
]
