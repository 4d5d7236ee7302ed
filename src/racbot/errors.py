"""Application-level exception types for racbot."""

from __future__ import annotations


class RacbotError(Exception):
    """Base exception for racbot."""


class ConfigurationError(RacbotError):
    """Base exception for configuration and startup validation errors."""


class ApiKeyNotConfiguredError(ConfigurationError):
    """Raised when the policy engine API key is missing."""


class TransportNotConfiguredError(ConfigurationError):
    """Raised when the selected transport lacks its credentials."""


class SessionFinishedError(RacbotError):
    """Raised when a turn is advanced on a finished session."""

    def __init__(self, peer_id: str) -> None:
        super().__init__(f"session for peer {peer_id} is finished")
        self.peer_id = peer_id
