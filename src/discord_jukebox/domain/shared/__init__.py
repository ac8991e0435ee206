"""
Shared Domain Kernel

Contains constrained types, message templates and exceptions shared across
the package.
"""

from discord_jukebox.domain.shared.exceptions import (
    BusinessRuleViolationError,
    ConnectionTimeoutError,
    DomainError,
    InvalidOperationError,
    NotInVoiceChannelError,
    PermissionDeniedError,
    ResolutionFailureError,
    StreamFailureError,
)

__all__ = [
    "DomainError",
    "NotInVoiceChannelError",
    "PermissionDeniedError",
    "ConnectionTimeoutError",
    "ResolutionFailureError",
    "StreamFailureError",
    "BusinessRuleViolationError",
    "InvalidOperationError",
]
