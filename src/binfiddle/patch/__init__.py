"""Patch codec and applier."""

from binfiddle.patch.applier import apply, revert, validate
from binfiddle.patch.codec import PatchParseError, parse, render, serialize, to_document
from binfiddle.patch.models import (
    ApplyMode,
    ApplyOutcome,
    FailureReason,
    PatchDocument,
    PatchEntry,
)

__all__ = [
    "ApplyMode",
    "ApplyOutcome",
    "FailureReason",
    "PatchDocument",
    "PatchEntry",
    "PatchParseError",
    "apply",
    "parse",
    "render",
    "revert",
    "serialize",
    "to_document",
    "validate",
]
