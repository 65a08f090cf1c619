"""Custom exceptions for the Speakerdesk application."""


class SpeakerdeskError(Exception):
    """Base exception for Speakerdesk application."""

    error_code = "internal_error"

    def __init__(self, message: str = "", error_code: str | None = None, details: str | None = None) -> None:
        super().__init__(message)
        if error_code is not None:
            self.error_code = error_code
        self.details = details


class ValidationError(SpeakerdeskError):
    """Raised when caller input is malformed or incomplete."""

    error_code = "invalid_input"


class NotFoundError(SpeakerdeskError):
    """Raised when a resource is not found."""

    error_code = "not_found"


class PersistenceError(SpeakerdeskError):
    """Raised when the store rejects or cannot complete a write."""

    error_code = "persistence_failure"


class ConfigurationError(SpeakerdeskError):
    """Raised when configuration is invalid."""

    error_code = "configuration_error"


class AuthenticationError(SpeakerdeskError):
    """Raised when authentication fails."""

    error_code = "unauthenticated"


class AuthorizationError(SpeakerdeskError):
    """Raised when an authenticated principal lacks a required scope."""

    error_code = "forbidden"


class ToolLoopExceeded(SpeakerdeskError):
    """Raised when the assistant keeps requesting tools past the round cap."""

    error_code = "tool_loop_exceeded"

    def __init__(self, rounds: int) -> None:
        super().__init__(f"Assistant exceeded {rounds} tool rounds without a final answer.")
        self.rounds = rounds


class UpstreamServiceError(SpeakerdeskError):
    """Raised when a required external service (e.g. the LLM API) fails."""

    error_code = "upstream_failure"
