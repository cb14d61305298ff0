"""
Error taxonomy for the member registry.

None of these are fatal to the process. Validation and classification errors
are raised; lookup and persistence failures usually travel inside a Result.
"""

from typing import Any


class MemberRegistryError(Exception):
    """Base class for every error raised or returned by the registry."""


class ValidationFailed(MemberRegistryError, ValueError):
    """A field value lies outside its domain bounds."""

    def __init__(self, field: str, value: Any, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class NotFound(MemberRegistryError, LookupError):
    """No member carries the requested identifier."""

    def __init__(self, member_id: str) -> None:
        super().__init__(f"Member {member_id!r} not found")
        self.member_id = member_id


class InvalidReading(MemberRegistryError, ValueError):
    """A systolic or diastolic reading is outside its physiological range."""

    def __init__(self, systolic: int, diastolic: int, message: str) -> None:
        super().__init__(message)
        self.systolic = systolic
        self.diastolic = diastolic


class PersistenceUnavailable(MemberRegistryError):
    """The store could not be reached to load members."""


class PersistenceWriteFailed(MemberRegistryError):
    """The store rejected or could not complete a write."""
