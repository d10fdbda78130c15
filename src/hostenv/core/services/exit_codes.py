"""Exit code mapping for the hostenv CLI (sysexits.h values)."""

from __future__ import annotations

import os

from hostenv.core.services.error_codes import ErrorCode

EX_SUCCESS = 0
EX_USAGE = getattr(os, "EX_USAGE", 64)
EX_UNAVAILABLE = getattr(os, "EX_UNAVAILABLE", 69)
EX_SOFTWARE = getattr(os, "EX_SOFTWARE", 70)
EX_OSERR = getattr(os, "EX_OSERR", 71)
EX_CANTCREAT = getattr(os, "EX_CANTCREAT", 73)
EX_CONFIG = getattr(os, "EX_CONFIG", 78)


def exit_code_for_error(error_code: ErrorCode) -> int:
    """Map ErrorCode to a sysexits exit code."""
    mapping = {
        ErrorCode.HOME_NOT_FOUND: EX_CONFIG,
        ErrorCode.CONFIG_INVALID: EX_CONFIG,
        ErrorCode.UNKNOWN_CATEGORY: EX_USAGE,
        ErrorCode.INVALID_ARGUMENT: EX_USAGE,
        ErrorCode.UNSUPPORTED_PLATFORM: EX_UNAVAILABLE,
        ErrorCode.LAUNCH_FAILED: EX_OSERR,
        ErrorCode.UNKNOWN_ERROR: EX_SOFTWARE,
    }
    return mapping.get(error_code, EX_SOFTWARE)
