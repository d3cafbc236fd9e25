"""
Error taxonomy.

Every error is terminal for the call that raised it only; stored results
from other workflows are never touched.
"""

from __future__ import annotations


class MetaboError(Exception):
    """Base class for all Metabohyp errors."""


class FormatError(MetaboError):
    """Input data cannot be used as a table or as a hypothesis."""


class ConfigurationError(MetaboError):
    """A required setting (usually the API key) is missing or invalid."""


class TransportError(MetaboError):
    """The completion provider was unreachable or rejected the request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ExtractionError(MetaboError):
    """The response could not be salvaged into the expected JSON shape."""

    def __init__(self, message: str, hint: str = "Try reducing Max Tokens in Settings.") -> None:
        super().__init__(f"{message} {hint}".strip())
        self.hint = hint
