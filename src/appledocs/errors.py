from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    NO_TECHNOLOGY_SELECTED = "NO_TECHNOLOGY_SELECTED"
    TECHNOLOGY_NOT_FOUND = "TECHNOLOGY_NOT_FOUND"
    SYMBOL_NOT_FOUND = "SYMBOL_NOT_FOUND"
    DOCUMENTATION_FETCH_FAILED = "DOCUMENTATION_FETCH_FAILED"


class AppleDocsError(Exception):
    """Raised for all expected failure conditions.

    Caught by server.py and serialised into the MCP error response, so
    business logic lets it propagate instead of catching it. The agent
    receives a structured error with a suggestion for its next call.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }
