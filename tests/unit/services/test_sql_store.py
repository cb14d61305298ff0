"""
Tests for the SQLAlchemy member store.

These run against a throwaway SQLite file so the real column mapping, the
Members table and the error translation are exercised end to end.
"""

from pathlib import Path

import pytest
from sqlalchemy import text

from healthcentre.config import DatabaseConfig
from healthcentre.domain.categories import BloodPressureCategory, Gender
from healthcentre.domain.errors import PersistenceUnavailable, PersistenceWriteFailed
from healthcentre.domain.models import MemberRecord
from healthcentre.services.member_registry import MemberRegistry
from healthcentre.services.sql_store import SqlMemberStore

pytestmark = pytest.mark.integration


@pytest.fixture
def store(tmp_path: Path) -> SqlMemberStore:
    store = SqlMemberStore(DatabaseConfig(url=f"sqlite:///{tmp_path / 'members.db'}"))
    assert store.ensure_schema().unwrap() == "Members"
    return store


def make_member(member_id: str = "100001") -> MemberRecord:
    return MemberRecord(
        id=member_id,
        forename="Anna",
        surname="Lee",
        gender=Gender.FEMALE,
        age=30,
        weight=65.0,
        address="1 Main St",
    )


def test_empty_store_loads_no_rows(store: SqlMemberStore) -> None:
    assert store.load_all().unwrap() == []


def test_insert_then_load_preserves_every_column(store: SqlMemberStore) -> None:
    member = make_member()
    member.classify_blood_pressure(150, 95)
    member.record_visit()
    member.record_consultation()

    assert store.insert_one(member).is_ok()
    rows = store.load_all().unwrap()

    assert len(rows) == 1
    row = rows[0]
    assert row.hc_number == "100001"
    assert row.gender == "F"
    assert row.blood_pressure == "High"
    assert row.visit_tally == 1
    assert row.consultation_done is True
    assert MemberRecord.from_row(row) == member


def test_rows_load_in_id_order(store: SqlMemberStore) -> None:
    for member_id in ("100003", "100001", "100002"):
        store.insert_one(make_member(member_id))

    rows = store.load_all().unwrap()

    assert [r.hc_number for r in rows] == ["100001", "100002", "100003"]


def test_duplicate_insert_is_a_write_failure(store: SqlMemberStore) -> None:
    store.insert_one(make_member())

    result = store.insert_one(make_member())

    assert result.is_err()
    assert isinstance(result.unwrap_err(), PersistenceWriteFailed)


def test_update_one_overwrites_row(store: SqlMemberStore) -> None:
    member = make_member()
    store.insert_one(member)

    member.set_weight(70.5)
    member.classify_blood_pressure(85, 55)
    assert store.update_one(member).is_ok()

    row = store.load_all().unwrap()[0]
    assert row.weight == 70.5
    assert row.blood_pressure == BloodPressureCategory.LOW.value


def test_update_of_unknown_member_fails(store: SqlMemberStore) -> None:
    result = store.update_one(make_member("100099"))

    assert result.is_err()
    assert "no stored row" in str(result.unwrap_err())


def test_reset_consultations_clears_every_row(store: SqlMemberStore) -> None:
    for member_id in ("100001", "100002"):
        member = make_member(member_id)
        member.record_consultation()
        store.insert_one(member)

    assert store.reset_consultations().unwrap() == 2
    assert all(not row.consultation_done for row in store.load_all().unwrap())


def test_missing_table_reports_unavailable(tmp_path: Path) -> None:
    store = SqlMemberStore(DatabaseConfig(url=f"sqlite:///{tmp_path / 'empty.db'}"))

    result = store.load_all()

    assert result.is_err()
    assert isinstance(result.unwrap_err(), PersistenceUnavailable)


def test_registry_survives_restart(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'restart.db'}"
    first_store = SqlMemberStore(DatabaseConfig(url=url))
    first_store.ensure_schema()
    first = MemberRegistry(first_store)
    first.load()
    first.add_member("Anna", "Lee", Gender.FEMALE, 30, 65.0, "1 Main St")
    ben = first.add_member("Ben", "Cole", Gender.MALE, 45, 82.5, "2 Side St").record
    ben.record_visit()
    first.save_member(ben)

    second = MemberRegistry(SqlMemberStore(DatabaseConfig(url=url)))

    assert second.load().unwrap() == 2
    assert second.find_by_id("100002").unwrap().visit_tally == 1
    assert second.add_member("Cara", "Dunn", Gender.FEMALE, 51, 60.0, "3 Low St").record.id == (
        "100003"
    )


def insert_raw(store: SqlMemberStore, **columns: object) -> None:
    values: dict[str, object] = {
        "HCNumber": "100001",
        "Forename": "Anna",
        "Surname": "Lee",
        "Gender": "F",
        "Age": 30,
        "Weight": 65.0,
        "Address": "1 Main St",
        "BloodPressure": "Unset",
        "VisitTally": 0,
        "FConsultation": 0,
    }
    values.update(columns)
    names = ", ".join(values)
    params = ", ".join(f":{name}" for name in values)
    with store.engine.begin() as conn:
        conn.execute(text(f"INSERT INTO Members ({names}) VALUES ({params})"), values)


def test_full_word_gender_is_read_as_its_code(store: SqlMemberStore) -> None:
    insert_raw(store, Gender="Female", BloodPressure="High")

    row = store.load_all().unwrap()[0]

    assert row.gender == "F"
    assert MemberRecord.from_row(row).gender == Gender.FEMALE


def test_unreadable_row_does_not_stop_the_load(store: SqlMemberStore) -> None:
    insert_raw(store, HCNumber="100001")
    insert_raw(store, HCNumber="100002", Age="old")
    insert_raw(store, HCNumber="100003")

    rows = store.load_all().unwrap()

    assert [r.hc_number for r in rows] == ["100001", "100003"]


def test_registry_loads_around_bad_stored_rows(store: SqlMemberStore) -> None:
    insert_raw(store, HCNumber="100001", Gender="Female", BloodPressure="High")
    insert_raw(store, HCNumber="100002", Gender="Male", VisitTally=-3)
    registry = MemberRegistry(store)

    result = registry.load()

    assert result.unwrap() == 1
    assert registry.find_by_id("100001").unwrap().blood_pressure == BloodPressureCategory.HIGH
    assert registry.find_by_id("100002").is_err()
    # The skipped row still owns its id in the table
    registration = registry.add_member("Cara", "Dunn", Gender.FEMALE, 51, 60.0, "3 Low St")
    assert registration.record.id == "100003"
    assert registration.persisted


def test_open_names_the_store_after_its_url(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'named.db'}"

    store = SqlMemberStore.open(DatabaseConfig(url=url)).unwrap()

    assert store.store_name == url
    assert MemberRegistry(store).store_name == url


@pytest.mark.parametrize("url", ["not a database url", "nosuchdialect://localhost/members"])
def test_open_reports_bad_url_as_unavailable(url: str) -> None:
    result = SqlMemberStore.open(DatabaseConfig(url=url))

    assert result.is_err()
    assert isinstance(result.unwrap_err(), PersistenceUnavailable)
