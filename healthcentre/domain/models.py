"""
Domain models for health centre members.

MemberRecord is the in-memory entity the registry owns. MemberRow is the flat
column contract shared with the persistence layer; conversion between the two
lives here so that stores never deal with enums and records never deal with
column names.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from healthcentre.domain.categories import BloodPressureCategory, Gender
from healthcentre.domain.rules import DEFAULT_RULES, MemberRules

# (header, width) for the fixed-width listing produced by format_summary_line
SUMMARY_COLUMNS: tuple[tuple[str, int], ...] = (
    ("ID", 10),
    ("First Name", 15),
    ("Surname", 15),
    ("Sex", 7),
    ("Age", 5),
    ("BP", 10),
)


def _fixed_width(values: list[str]) -> str:
    return " ".join(
        f"{value[:width]:<{width}}" for value, (_, width) in zip(values, SUMMARY_COLUMNS)
    )


def summary_header() -> str:
    """Header line aligned with MemberRecord.format_summary_line()."""
    return _fixed_width([header for header, _ in SUMMARY_COLUMNS])


class MemberRow(BaseModel):
    """
    One persisted member row, using the store's column contract.

    Only column types are enforced here. Domain limits are checked when the
    row becomes a MemberRecord, so a row with bad values still reaches the
    registry, which can skip it while keeping its id reserved.
    """

    model_config = ConfigDict(from_attributes=True)

    hc_number: str
    forename: str
    surname: str
    gender: str
    age: int
    weight: float
    address: str
    blood_pressure: str | None = None
    visit_tally: int = 0
    consultation_done: bool = False

    @field_validator("gender", mode="before")
    @classmethod
    def gender_code(cls, v: object) -> object:
        """Legacy rows may hold the full word; the code is its first character."""
        if isinstance(v, str):
            return v.strip()[:1]
        return v


class MemberRecord(BaseModel):
    """
    A registered health centre member and their tracked metrics.

    Records are created by MemberRegistry.add_member() or rebuilt from a
    MemberRow. The id never changes. Field mutators validate against a
    MemberRules instance and leave the record untouched when a value is
    rejected. blood_pressure is only ever written by classify_blood_pressure().
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(frozen=True, pattern=r"^\d+$")
    forename: str
    surname: str
    gender: Gender
    age: int
    weight: float
    address: str
    blood_pressure: BloodPressureCategory = BloodPressureCategory.UNSET
    visit_tally: int = Field(default=0, ge=0)
    consultation_done: bool = False

    @classmethod
    def from_row(cls, row: MemberRow) -> "MemberRecord":
        """
        Rebuild a record from a persisted row.

        Unrecognised blood-pressure labels come back as UNSET.

        Raises:
            ValueError: if the gender code or id in the row is malformed.
        """
        return cls(
            id=row.hc_number,
            forename=row.forename,
            surname=row.surname,
            gender=Gender.parse(row.gender),
            age=row.age,
            weight=row.weight,
            address=row.address,
            blood_pressure=(
                BloodPressureCategory.from_label(row.blood_pressure)
                or BloodPressureCategory.UNSET
            ),
            visit_tally=row.visit_tally,
            consultation_done=row.consultation_done,
        )

    def to_row(self) -> MemberRow:
        return MemberRow(
            hc_number=self.id,
            forename=self.forename,
            surname=self.surname,
            gender=self.gender.value,
            age=self.age,
            weight=self.weight,
            address=self.address,
            blood_pressure=self.blood_pressure.value,
            visit_tally=self.visit_tally,
            consultation_done=self.consultation_done,
        )

    # Mutators

    def record_visit(self) -> None:
        self.visit_tally += 1

    def record_consultation(self) -> None:
        """Mark the yearly face-to-face consultation as done."""
        self.consultation_done = True

    def set_weight(self, value: float, rules: MemberRules | None = None) -> bool:
        """Update weight if it passes validation. Returns whether it changed."""
        if not (rules or DEFAULT_RULES).validate_weight(value):
            return False
        self.weight = value
        return True

    def set_age(self, value: int, rules: MemberRules | None = None) -> bool:
        """Update age if it passes validation. Returns whether it changed."""
        if not (rules or DEFAULT_RULES).validate_age(value):
            return False
        self.age = value
        return True

    def classify_blood_pressure(
        self, systolic: int, diastolic: int, rules: MemberRules | None = None
    ) -> BloodPressureCategory:
        """
        Classify a reading and store the category on this record.

        Raises:
            InvalidReading: if either value is out of range. The stored
                category is left as it was.
        """
        category = (rules or DEFAULT_RULES).classify(systolic, diastolic)
        self.blood_pressure = category
        return category

    # Presentation

    @property
    def full_name(self) -> str:
        return f"{self.forename} {self.surname}"

    def format_summary_line(self) -> str:
        """Single fixed-width line: id, names, gender, age, blood pressure."""
        return _fixed_width(
            [
                self.id,
                self.forename,
                self.surname,
                self.gender.label,
                str(self.age),
                self.blood_pressure.value,
            ]
        )

    def details(self) -> dict[str, str]:
        """Labelled values for the single-member detail view."""
        return {
            "HC Number": self.id,
            "Name": self.full_name,
            "Gender": self.gender.label,
            "Age": f"{self.age} years",
            "Weight": f"{self.weight:.1f} kg",
            "Address": self.address,
            "Blood Pressure": self.blood_pressure.value,
            "Free Consultation": "Completed" if self.consultation_done else "Due",
            "Centre Visits": str(self.visit_tally),
        }
