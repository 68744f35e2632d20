"""
Error types for the Pocket API client.

Precondition, transport and validation failures are kept disjoint so callers
can tell "authorize first" apart from "network down" and "service changed".
"""

from typing import Any, Dict, Optional


class PocketError(Exception):
    """Base error class for the Pocket client."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON output."""
        result: Dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(PocketError):
    """Required configuration (consumer key, redirect URI) is missing."""


class MissingAccessTokenError(PocketError):
    """A content operation was called before authorization completed."""

    def __init__(self, operation: str):
        super().__init__(
            f"Missing access token: '{operation}' requires an authorized client",
            details={"operation": operation},
        )
        self.operation = operation


class TransportError(PocketError):
    """The request could not produce a JSON response body."""

    def __init__(
        self,
        message: str,
        status: int = 0,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.status = status
        self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        if self.error_code:
            result["error_code"] = self.error_code
        return result


class ResponseValidationError(PocketError):
    """A response parsed as JSON but did not match the expected schema."""

    def __init__(self, operation: str, path: str, expected: str, actual: Any):
        super().__init__(
            f"Invalid {operation} response at '{path}': {expected} (got {actual!r})",
            details={"path": path, "expected": expected, "actual": actual},
        )
        self.operation = operation
        self.path = path
        self.expected = expected
        self.actual = actual
