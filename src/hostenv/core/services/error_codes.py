"""Error codes and exception handling for hostenv.

The library surfaces exactly one failure to resolver callers (a home
directory that cannot be determined). Everything else listed here is either
raised by the CLI adapters or caught and logged inside the browser launcher.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """hostenv-wide error code enumeration.

    Categories:
        Resolver: HOME_NOT_FOUND, UNKNOWN_CATEGORY
        Launcher: UNSUPPORTED_PLATFORM, LAUNCH_FAILED
        Shared: CONFIG_INVALID, INVALID_ARGUMENT, UNKNOWN_ERROR
    """

    HOME_NOT_FOUND = "HOME_NOT_FOUND"
    UNKNOWN_CATEGORY = "UNKNOWN_CATEGORY"
    UNSUPPORTED_PLATFORM = "UNSUPPORTED_PLATFORM"
    LAUNCH_FAILED = "LAUNCH_FAILED"
    CONFIG_INVALID = "CONFIG_INVALID"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class HostenvError(Exception):
    """Base exception for hostenv errors.

    Wraps an ErrorCode with a human-readable message and optional structured
    details for machine-parseable error responses.

    Attributes:
        code: The ErrorCode enum value for this error.
        message: Human-readable error description.
        details: Optional dictionary of additional structured context.

    Example:
        >>> error = HostenvError(
        ...     code=ErrorCode.UNSUPPORTED_PLATFORM,
        ...     message="Unsupported platform: aix",
        ...     details={"platform": "aix"}
        ... )
        >>> error.code
        <ErrorCode.UNSUPPORTED_PLATFORM: 'UNSUPPORTED_PLATFORM'>
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)

    def __repr__(self) -> str:
        return f"HostenvError(code={self.code.value!r}, message={self.message!r}, details={self.details!r})"


class HomeDirectoryError(HostenvError, RuntimeError):
    """Raised when a fallback path is needed but no home directory is known.

    Catchable both as HostenvError (code HOME_NOT_FOUND) and as RuntimeError,
    which is what ``pathlib.Path.home()`` raises in the same situation.
    """

    def __init__(self, message: str = "could not determine home directory", details: dict | None = None):
        super().__init__(code=ErrorCode.HOME_NOT_FOUND, message=message, details=details or {})
