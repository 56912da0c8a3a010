"""Custom exceptions and exit codes for adolinks.

Remote Azure DevOps conditions (HTTP failures, malformed payloads) are
reported as ``Failure`` results, not exceptions. The exceptions here cover
local problems: bad input and missing configuration.
"""

from enum import IntEnum
from typing import ClassVar


class ExitCode(IntEnum):
    """Exit codes used by the CLI."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_ARGUMENT = 2
    CONFIGURATION_ERROR = 3
    REMOTE_FAILURE = 4


class AdoLinksError(Exception):
    """Base exception for adolinks errors.

    Each exception type has an associated exit code for proper error reporting.
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.GENERAL_ERROR

    def __init__(self, message: str, exit_code: ExitCode | None = None) -> None:
        """Initialize the exception."""
        super().__init__(message)
        self._exit_code = exit_code

    @property
    def exit_code(self) -> ExitCode:
        """Get the exit code for this exception."""
        if self._exit_code is not None:
            return self._exit_code
        return self.__class__._default_exit_code


class InvalidBrowserUrlError(AdoLinksError, ValueError):
    """A build browser URL or base URL could not be parsed.

    Raised when:
    - The URL does not look like ``<scheme>://<host>/<collection>/<project>/_build...``
    - The ``buildId`` query parameter is missing, non-numeric or not positive
    - A configured base URL has no collection/organization segment
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.INVALID_ARGUMENT

    def __init__(self, url: str, message: str = "Unrecognized build browse URL.") -> None:
        self.url = url
        super().__init__(message)


class ConfigurationError(AdoLinksError):
    """Local configuration does not allow the requested operation.

    Raised when:
    - No Personal Access Token can be resolved for an organization URL
      (neither a tenant override nor the global base URL covers it)

    The message never includes the token itself.
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.CONFIGURATION_ERROR


__all__ = [
    "ExitCode",
    "AdoLinksError",
    "InvalidBrowserUrlError",
    "ConfigurationError",
]
