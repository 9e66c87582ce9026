"""Application error types and the JSON error envelope."""

from __future__ import annotations

from typing import Any


class ErrorCode:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SEARCH_TIMEOUT = "SEARCH_TIMEOUT"
    PLUGIN_ERROR = "PLUGIN_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class AppError(Exception):
    """Error carrying an API error code and an HTTP status.

    Client errors (4xx) are not logged by default; server errors are.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Any = None,
        should_log: bool = True,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.should_log = should_log

    @classmethod
    def bad_request(cls, code: str, message: str, details: Any = None) -> AppError:
        return cls(code, message, 400, details, should_log=False)

    @classmethod
    def unauthorized(cls, code: str, message: str, details: Any = None) -> AppError:
        return cls(code, message, 401, details, should_log=False)

    @classmethod
    def forbidden(cls, code: str, message: str, details: Any = None) -> AppError:
        return cls(code, message, 403, details, should_log=False)

    @classmethod
    def not_found(cls, code: str, message: str, details: Any = None) -> AppError:
        return cls(code, message, 404, details, should_log=False)

    @classmethod
    def too_many_requests(
        cls, code: str, message: str, details: Any = None
    ) -> AppError:
        return cls(code, message, 429, details, should_log=False)

    @classmethod
    def internal(cls, code: str, message: str, details: Any = None) -> AppError:
        return cls(code, message, 500, details, should_log=True)

    @classmethod
    def unavailable(cls, code: str, message: str, details: Any = None) -> AppError:
        return cls(code, message, 503, details, should_log=True)

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500

    def to_response(self) -> dict[str, Any]:
        """Render the error envelope returned by every API route."""
        return {
            "code": self.code,
            "message": self.message,
            "data": None,
            "error": {
                "status_code": self.status_code,
                "details": self.details,
            },
        }


class SearchError(Exception):
    """Orchestration failure that is not attributable to a single source."""
