"""
Exception types raised by the script-elements gatherer, plus a helper
for consistent error message extraction.

Only structural problems surface as exceptions. Per-script retrieval
failures are absorbed by the fetch scheduler and never reach callers.
"""

from __future__ import annotations


class ScriptElementsError(Exception):
    """Base class for all gatherer errors."""


class ConfigurationError(ScriptElementsError):
    """The gatherer was given structurally invalid input."""


class MissingMainDocumentError(ConfigurationError):
    """No main-document transfer is available to attribute inline scripts to."""


class SnapshotFormatError(ScriptElementsError):
    """The DOM snapshot returned by the page did not have the expected shape."""


class BrowserSessionError(ScriptElementsError):
    """A browser operation was attempted without an active session."""


class PageEvaluationError(ScriptElementsError):
    """A page function threw, or its result could not be returned by value."""


class UnknownDeviceError(ScriptElementsError, ValueError):
    """The requested device profile does not exist."""


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.

    Exceptions without a message fall back to their class name.
    """
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    return "Unknown error"
