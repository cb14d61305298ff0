"""Closed value sets used by member records."""

from enum import Enum


class Gender(str, Enum):
    """Member gender, stored as a single-character code."""

    MALE = "M"
    FEMALE = "F"

    @property
    def label(self) -> str:
        return "Male" if self is Gender.MALE else "Female"

    @classmethod
    def parse(cls, value: str) -> "Gender":
        """Accept a code or a label in any case ('m', 'F', 'female')."""
        text = value.strip().upper()
        for gender in cls:
            if text in (gender.value, gender.label.upper()):
                return gender
        raise ValueError(f"Unknown gender: {value!r}")


class BloodPressureCategory(str, Enum):
    """Qualitative blood-pressure classification. UNSET until first reading."""

    UNSET = "Unset"
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"

    @classmethod
    def from_label(cls, label: str | None) -> "BloodPressureCategory | None":
        """Match a persisted label case-insensitively; None if it is not recognised."""
        if label is None:
            return None
        text = label.strip().lower()
        for category in cls:
            if category.value.lower() == text:
                return category
        return None
