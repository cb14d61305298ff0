"""
Field validation and blood-pressure classification for member records.

Every bound and threshold is a named field on MemberRules so that a deployment
can override it (see healthcentre.config) without touching the logic. The same
rules object serves intake prompts and the record's own mutators.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from healthcentre.domain.categories import BloodPressureCategory, Gender
from healthcentre.domain.errors import InvalidReading, ValidationFailed

RuleField = Literal["name", "gender", "age", "weight", "address", "systolic", "diastolic"]


class MemberRules(BaseModel):
    """Domain limits for member fields and blood-pressure readings."""

    model_config = ConfigDict(frozen=True)

    min_name_length: int = Field(default=2, ge=1, description="Minimum forename/surname length")

    min_age: int = Field(default=0, ge=0, description="Youngest accepted age in years")
    max_age: int = Field(default=120, gt=0, description="Oldest accepted age in years")

    min_weight: float = Field(default=1.0, gt=0.0, description="Lightest accepted weight in kg")
    max_weight: float = Field(default=300.0, gt=0.0, description="Heaviest accepted weight in kg")

    min_address_length: int = Field(default=5, ge=1, description="Shortest accepted address")
    max_address_length: int = Field(default=100, gt=0, description="Longest accepted address")

    # Physiological ranges a reading must fall in before it is classified
    min_systolic: int = Field(default=70, gt=0)
    max_systolic: int = Field(default=190, gt=0)
    min_diastolic: int = Field(default=40, gt=0)
    max_diastolic: int = Field(default=100, gt=0)

    # Classification thresholds (mmHg)
    high_systolic_threshold: int = Field(default=140, gt=0)
    high_diastolic_threshold: int = Field(default=90, gt=0)
    low_systolic_threshold: int = Field(default=90, gt=0)
    low_diastolic_threshold: int = Field(default=60, gt=0)

    @model_validator(mode="after")
    def ranges_are_ordered(self) -> "MemberRules":
        """Reject rule sets whose lower bound exceeds the upper bound."""
        pairs = [
            ("age", self.min_age, self.max_age),
            ("weight", self.min_weight, self.max_weight),
            ("address length", self.min_address_length, self.max_address_length),
            ("systolic", self.min_systolic, self.max_systolic),
            ("diastolic", self.min_diastolic, self.max_diastolic),
        ]
        for name, low, high in pairs:
            if low > high:
                raise ValueError(f"{name} range is inverted: {low} > {high}")

        if self.low_systolic_threshold >= self.high_systolic_threshold:
            raise ValueError("low systolic threshold must be below the high threshold")
        if self.low_diastolic_threshold >= self.high_diastolic_threshold:
            raise ValueError("low diastolic threshold must be below the high threshold")
        return self

    # Predicates

    def validate_name(self, value: str) -> bool:
        stripped = value.strip()
        return bool(stripped) and len(stripped) >= self.min_name_length

    def validate_gender(self, value: Gender | str) -> bool:
        if isinstance(value, Gender):
            return True
        try:
            Gender.parse(value)
        except ValueError:
            return False
        return True

    def validate_age(self, value: int) -> bool:
        return self.min_age <= value <= self.max_age

    def validate_weight(self, value: float) -> bool:
        return self.min_weight <= value <= self.max_weight

    def validate_address(self, value: str) -> bool:
        return self.min_address_length <= len(value) <= self.max_address_length

    def validate_systolic(self, value: int) -> bool:
        return self.min_systolic <= value <= self.max_systolic

    def validate_diastolic(self, value: int) -> bool:
        return self.min_diastolic <= value <= self.max_diastolic

    def message_for(self, field: RuleField) -> str:
        """Operator-facing explanation of what a field accepts."""
        messages = {
            "name": f"Name must be at least {self.min_name_length} characters and not blank.",
            "gender": "Please enter 'M' for Male or 'F' for Female.",
            "age": f"Age must be between {self.min_age} and {self.max_age}.",
            "weight": (
                f"Weight must be between {self.min_weight:g} and {self.max_weight:g} kg."
            ),
            "address": (
                f"Address must be between {self.min_address_length} and "
                f"{self.max_address_length} characters."
            ),
            "systolic": (
                f"Systolic pressure must be between {self.min_systolic} and {self.max_systolic}."
            ),
            "diastolic": (
                f"Diastolic pressure must be between {self.min_diastolic} "
                f"and {self.max_diastolic}."
            ),
        }
        return messages[field]

    def check(self, field: RuleField, value: Any) -> None:
        """Raise ValidationFailed if value is not acceptable for field."""
        validators = {
            "name": self.validate_name,
            "gender": self.validate_gender,
            "age": self.validate_age,
            "weight": self.validate_weight,
            "address": self.validate_address,
            "systolic": self.validate_systolic,
            "diastolic": self.validate_diastolic,
        }
        if not validators[field](value):
            raise ValidationFailed(field, value, self.message_for(field))

    # Classification

    def classify(self, systolic: int, diastolic: int) -> BloodPressureCategory:
        """
        Classify a reading pair.

        The high rule is checked first: either value at or above its high
        threshold gives High. Both values below their low thresholds give Low.
        Everything else is Normal.

        Raises:
            InvalidReading: if either value is outside its physiological range.
        """
        if not self.validate_systolic(systolic) or not self.validate_diastolic(diastolic):
            raise InvalidReading(
                systolic,
                diastolic,
                f"Invalid reading {systolic}/{diastolic}: "
                f"systolic must be {self.min_systolic}-{self.max_systolic}, "
                f"diastolic {self.min_diastolic}-{self.max_diastolic}",
            )

        if (
            systolic >= self.high_systolic_threshold
            or diastolic >= self.high_diastolic_threshold
        ):
            return BloodPressureCategory.HIGH
        if systolic < self.low_systolic_threshold and diastolic < self.low_diastolic_threshold:
            return BloodPressureCategory.LOW
        return BloodPressureCategory.NORMAL


DEFAULT_RULES = MemberRules()
