# src/core/wizard/errors.py
"""
Typed errors + utilities for the listing wizard.

Exports
-------
- WizardError, ValidationError, RemoteError
- WIZARD_ERRORS
- VALIDATION_KINDS
- classify_remote_error(exc, operation)
- remote_error_guard(operation)
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import requests

# Every ValidationError.kind the wizard raises
VALIDATION_KINDS = frozenset(
    {
        # field / step checks
        "MissingField",
        "InvalidField",
        "InvalidPropertyType",
        "NotEnoughImages",
        # proximity
        "MissingDistance",
        "InvalidDistance",
        "MissingName",
        "UnknownType",
        "UnitLocked",
        # images
        "ProbeInProgress",
        "InvalidFormat",
        "LimitReached",
        "LoadFailed",
        # navigation / submission
        "UnknownStep",
        "StepLocked",
        "NoNextStep",
        "NotOnLastStep",
        "SubmissionInProgress",
        "AlreadySubmitted",
    }
)

# =========================
# Exception types
# =========================


class WizardError(RuntimeError):
    """Base class for listing-wizard failures."""


class ValidationError(WizardError):
    """A precondition or field check failed. `kind` names the rule, `field` the first unmet field."""

    def __init__(self, kind: str, message: str | None = None, *, field: str | None = None) -> None:
        self.kind = kind
        self.field = field
        if message is None:
            message = f"{kind}: {field}" if field else kind
        super().__init__(message)


class RemoteError(WizardError):
    """The listing service failed or was unreachable."""

    def __init__(self, message: str, *, status_code: int | None = None, operation: str | None = None) -> None:
        self.status_code = status_code
        self.operation = operation
        super().__init__(message)

    @property
    def kind(self) -> str:
        return "RemoteError"


# Selector tuple for grouped exception handling
WIZARD_ERRORS = (
    ValidationError,
    RemoteError,
)

# =========================
# Classification helpers
# =========================


def classify_remote_error(exc: Exception, operation: str | None = None) -> WizardError:
    """
    Map arbitrary exceptions raised while talking to the listing service to a WizardError.

    Heuristics:
      - Any WizardError subclass → passed through
      - requests.HTTPError with a response → RemoteError carrying the status
      - Other requests.* errors → RemoteError without status
      - Fallback → RemoteError with the exception type in the message
    """
    if isinstance(exc, WizardError):
        return exc

    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return RemoteError(str(exc), status_code=exc.response.status_code, operation=operation)
    if isinstance(exc, requests.RequestException):
        return RemoteError(f"{type(exc).__name__}: {exc}", operation=operation)

    return RemoteError(f"{type(exc).__name__}: {exc}", operation=operation)


@contextmanager
def remote_error_guard(operation: str | None = None) -> Iterator[None]:
    """Context manager to normalize unexpected exceptions from listing-service calls."""
    try:
        yield
    except WIZARD_ERRORS:
        raise
    except Exception as exc:  # noqa: BLE001
        raise classify_remote_error(exc, operation) from exc


__all__ = [
    "WizardError",
    "ValidationError",
    "RemoteError",
    "WIZARD_ERRORS",
    "VALIDATION_KINDS",
    "classify_remote_error",
    "remote_error_guard",
]
