"""
In-memory member registry with identifier allocation and clinical filters.

Design principles:
- The registry alone owns the record list and the id counter
- Reads and filters never touch the store; they work on the in-memory snapshot
- Store failures degrade to in-memory operation, they never abort
"""

from dataclasses import dataclass

from healthcentre.config import RegistryConfig
from healthcentre.domain.categories import BloodPressureCategory, Gender
from healthcentre.domain.errors import NotFound, PersistenceUnavailable, PersistenceWriteFailed
from healthcentre.domain.models import MemberRecord, MemberRow
from healthcentre.domain.rules import DEFAULT_RULES, MemberRules
from healthcentre.services.member_store import MemberStore, Result, logger


@dataclass
class Registration:
    """Outcome of add_member: the new record plus any non-fatal write failure."""

    record: MemberRecord
    write_error: PersistenceWriteFailed | None = None

    @property
    def persisted(self) -> bool:
        return self.write_error is None


class MemberRegistry:
    """
    Authoritative ordered collection of member records.

    Records keep registration order (which is also load order). Callers may
    mutate a record they looked up through its own field mutators, then call
    save_member() to write the change through to the store.
    """

    def __init__(
        self,
        store: MemberStore | None = None,
        config: RegistryConfig | None = None,
        rules: MemberRules | None = None,
    ) -> None:
        self.store = store
        self.config = config or RegistryConfig()
        self.rules = rules or DEFAULT_RULES
        self.logger = logger.bind(component="member_registry")
        self._records: list[MemberRecord] = []
        self._next_id: int = self.config.base_member_id

    @property
    def store_name(self) -> str:
        """Where records are persisted, for operator messages and logs."""
        return self.store.store_name if self.store is not None else "in-memory"

    @property
    def next_id(self) -> str:
        """The identifier the next add_member() call will receive."""
        return str(self._next_id)

    # Load boundary

    def load(self) -> Result[int, PersistenceUnavailable]:
        """
        Populate the registry from the store.

        A store that cannot be read leaves the registry empty and usable; the
        error is returned so the caller can warn the operator.
        """
        if self.store is None:
            self.initialize([])
            return Result.ok(0)

        result = self.store.load_all()
        if result.is_err():
            self.logger.warning(
                "member_load_failed_starting_empty",
                store=self.store_name,
                error=str(result.unwrap_err()),
            )
            self.initialize([])
            return Result.err(result.unwrap_err())

        self.initialize(result.unwrap())
        return Result.ok(len(self._records))

    def initialize(self, rows: list[MemberRow]) -> None:
        """Replace the collection with rows, in order, and derive the next id."""
        records: list[MemberRecord] = []
        seen: set[str] = set()

        for row in rows:
            if row.hc_number in seen:
                self.logger.warning("duplicate_member_row_skipped", member_id=row.hc_number)
                continue
            try:
                record = MemberRecord.from_row(row)
            except ValueError as e:
                self.logger.warning(
                    "malformed_member_row_skipped", member_id=row.hc_number, error=str(e)
                )
                continue
            if BloodPressureCategory.from_label(row.blood_pressure) is None:
                self.logger.warning(
                    "unknown_blood_pressure_label",
                    member_id=row.hc_number,
                    label=row.blood_pressure,
                )
            seen.add(record.id)
            records.append(record)

        self._records = records
        # Maximum over every stored id, skipped rows included: their ids are
        # still taken in the store. Not the last row: load order is not guaranteed.
        highest = max(
            (int(row.hc_number) for row in rows if row.hc_number.isdecimal()), default=None
        )
        if highest is None:
            self._next_id = self.config.base_member_id
        else:
            self._next_id = max(highest + 1, self.config.base_member_id)

        self.logger.info(
            "members_loaded",
            store=self.store_name,
            count=len(records),
            skipped=len(rows) - len(records),
            next_id=self._next_id,
        )

    def allocate_id(self) -> str:
        """Hand out the next identifier. Identifiers are never reused."""
        member_id = str(self._next_id)
        self._next_id += 1
        return member_id

    # Writes

    def add_member(
        self,
        forename: str,
        surname: str,
        gender: Gender,
        age: int,
        weight: float,
        address: str,
    ) -> Registration:
        """
        Register a new member and forward it to the store.

        Field values must already have passed MemberRules; they are not
        re-checked here. A failed store write is reported on the returned
        Registration and the record stays in memory.
        """
        record = MemberRecord(
            id=self.allocate_id(),
            forename=forename,
            surname=surname,
            gender=gender,
            age=age,
            weight=weight,
            address=address,
        )
        self._records.append(record)
        self.logger.info("member_added", member_id=record.id, total=len(self._records))

        if self.store is None:
            return Registration(record=record)

        result = self.store.insert_one(record)
        if result.is_err():
            error = result.unwrap_err()
            self.logger.warning("member_write_failed", member_id=record.id, error=str(error))
            return Registration(record=record, write_error=error)
        return Registration(record=record)

    def save_member(self, record: MemberRecord) -> Result[MemberRecord, PersistenceWriteFailed]:
        """Write field changes on an existing record through to the store."""
        if self.store is None:
            return Result.ok(record)

        result = self.store.update_one(record)
        if result.is_err():
            self.logger.warning(
                "member_write_failed", member_id=record.id, error=str(result.unwrap_err())
            )
        return result

    def reset_all_consultations(self) -> Result[int, PersistenceWriteFailed]:
        """
        Clear the consultation flag on every member.

        The in-memory reset always happens; the store is then updated so the
        reset survives a restart. Returns the number of in-memory records reset.
        """
        for record in self._records:
            record.consultation_done = False
        self.logger.info("consultations_reset", count=len(self._records))

        if self.store is not None:
            result = self.store.reset_consultations()
            if result.is_err():
                self.logger.warning(
                    "consultation_reset_write_failed", error=str(result.unwrap_err())
                )
                return Result.err(result.unwrap_err())
        return Result.ok(len(self._records))

    # Reads

    def find_by_id(self, member_id: str) -> Result[MemberRecord, NotFound]:
        wanted = member_id.strip()
        for record in self._records:
            if record.id == wanted:
                return Result.ok(record)
        return Result.err(NotFound(wanted))

    def members(self) -> list[MemberRecord]:
        """All records in registration order (a copy of the list, not the records)."""
        return list(self._records)

    def filter_by_gender(self, gender: Gender) -> list[MemberRecord]:
        return [r for r in self._records if r.gender == gender]

    def filter_high_blood_pressure(self) -> list[MemberRecord]:
        return [r for r in self._records if r.blood_pressure == BloodPressureCategory.HIGH]

    def filter_due_for_consultation(self) -> list[MemberRecord]:
        return [r for r in self._records if not r.consultation_done]

    def filter_low_visits(self, threshold: int | None = None) -> list[MemberRecord]:
        """Members with fewer than threshold visits (default from config)."""
        limit = self.config.low_visit_threshold if threshold is None else threshold
        return [r for r in self._records if r.visit_tally < limit]

    def count(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)
