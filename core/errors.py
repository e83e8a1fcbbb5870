"""Job tracker error types.

The core only raises for caller contract violations. Missing rates, zero
totals and absent actuals are defaulted, never raised.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ErrorCode:
    """Error code constants."""

    UNRECOGNIZED_STATUS = "UNRECOGNIZED_STATUS"
    CONFIG_ERROR = "CONFIG_ERROR"


class JobTrackerError(Exception):
    """Base exception with a structured payload for API responses."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


class UnrecognizedStatusError(JobTrackerError):
    """Status value outside Draft / Work Order / Invoiced / Paid."""

    def __init__(self, status: object):
        super().__init__(
            code=ErrorCode.UNRECOGNIZED_STATUS,
            message=f"Unrecognized job status: {status!r}",
            details={"status": str(status)},
        )
        self.status = status


class ConfigError(JobTrackerError):
    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(
            code=ErrorCode.CONFIG_ERROR,
            message=message,
            details={"path": path} if path else None,
        )
