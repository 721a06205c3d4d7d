"""Exception hierarchy for the outfit stylist."""

from __future__ import annotations


class StylistError(Exception):
    """Base class for errors raised by this package."""


class UpstreamParseError(StylistError):
    """A language backend answered, but not with the JSON we asked for."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text


class SessionNotFoundError(StylistError):
    """No session exists for the requested conversation."""

    def __init__(self, conversation_id: str) -> None:
        super().__init__(f"Unknown conversation_id {conversation_id}")
        self.conversation_id = conversation_id


__all__ = ["StylistError", "UpstreamParseError", "SessionNotFoundError"]
