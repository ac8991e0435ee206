"""
Domain Layer

Contains pure playback logic:
- shared/: Constrained types, messages and exceptions
- music/: Queue entries, the session state machine and the session registry
"""

from discord_jukebox.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
