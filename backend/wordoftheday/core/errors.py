from __future__ import annotations

from typing import Optional


class WordOfTheDayError(Exception):
    """
    Base error. Carries a short context message and the underlying cause,
    rendered as "<message>: <cause>" so wrapped errors read as a chain.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


class ConfigError(WordOfTheDayError):
    """Invalid or missing configuration. Fatal at startup."""


class StoreError(WordOfTheDayError):
    """A word store operation failed."""


class WordNotFoundError(StoreError):
    """No word matched the requested id."""


class ServiceError(WordOfTheDayError):
    """A WordService operation failed."""

    @property
    def not_found(self) -> bool:
        return isinstance(self.cause, WordNotFoundError)


class NotifierError(WordOfTheDayError):
    """Rendering or sending a notification failed."""


class ServerStartError(WordOfTheDayError):
    """A transport server could not start serving. Fatal at startup."""
