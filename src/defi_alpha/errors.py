"""Exception hierarchy shared across :mod:`defi_alpha`."""

from __future__ import annotations

from typing import Any


class DefiAlphaError(Exception):
    """Base class for all errors raised by DefiAlpha."""


class UpstreamUnavailable(DefiAlphaError):
    """The pool feed could not be fetched or decoded."""


class MalformedUpstreamRecord(DefiAlphaError):
    """A single raw pool record has required fields of the wrong shape."""


class InvalidQuery(DefiAlphaError):
    """Caller-supplied filter or sort parameters failed validation."""

    def __init__(self, details: list[dict[str, Any]]) -> None:
        self.details = details
        fields = ", ".join(str(d.get("field", "?")) for d in details)
        super().__init__(f"Invalid query parameters: {fields}")


__all__ = [
    "DefiAlphaError",
    "UpstreamUnavailable",
    "MalformedUpstreamRecord",
    "InvalidQuery",
]
