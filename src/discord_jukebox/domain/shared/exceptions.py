"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class NotInVoiceChannelError(DomainError):
    """Raised when the invoking user is not connected to a voice channel."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "User is not in a voice channel", code="NOT_IN_VOICE_CHANNEL")


class PermissionDeniedError(DomainError):
    """Raised when the bot cannot connect to or speak in a voice channel."""

    def __init__(self, channel_id: int, message: str | None = None) -> None:
        msg = message or f"Missing Connect/Speak permission in channel {channel_id}"
        super().__init__(msg, code="PERMISSION_DENIED")
        self.channel_id = channel_id


class ConnectionTimeoutError(DomainError):
    """Raised when a voice connection does not become ready in time."""

    def __init__(self, channel_id: int, timeout: float, message: str | None = None) -> None:
        msg = message or f"Voice connection to channel {channel_id} not ready after {timeout}s"
        super().__init__(msg, code="CONNECTION_TIMEOUT")
        self.channel_id = channel_id
        self.timeout = timeout


class ResolutionFailureError(DomainError):
    """Raised when a query does not produce a playable entry."""

    def __init__(self, query: str, message: str | None = None) -> None:
        super().__init__(message or f"No playable result for '{query}'", code="RESOLUTION_FAILURE")
        self.query = query


class StreamFailureError(DomainError):
    """Raised when an audio stream cannot be opened or breaks mid-playback."""

    def __init__(self, source_url: str, message: str | None = None) -> None:
        super().__init__(message or f"Could not stream '{source_url}'", code="STREAM_FAILURE")
        self.source_url = source_url


class BusinessRuleViolationError(DomainError):
    """Raised when a business rule is violated."""

    def __init__(self, rule: str, message: str | None = None) -> None:
        msg = message or f"Business rule violated: {rule}"
        super().__init__(msg, code="BUSINESS_RULE_VIOLATION")
        self.rule = rule


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state
