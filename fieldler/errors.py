# fieldler/fieldler/errors.py
from __future__ import annotations
from typing import Any


class FieldlerError(Exception):
    """Base class for errors raised by fieldler itself."""


class NullArgumentError(FieldlerError, ValueError):
    """A compared object or the equality tests mapping is missing (None)."""

    def __init__(self, argument: str):
        self.argument = argument
        super().__init__(f"'{argument}' must not be None")


class UndefinedFieldError(FieldlerError, KeyError):
    """A field was queried that has no equality test registered."""

    def __init__(self, field: Any):
        self.field = field
        super().__init__(field)

    def __str__(self) -> str:
        return f"Field {self.field!r} has no equality test defined"


class GenerationError(FieldlerError):
    """The field enumeration or comparator for a class could not be built."""
