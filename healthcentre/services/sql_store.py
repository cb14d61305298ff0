"""
Relational member store backed by SQLAlchemy.

Maps the ten member columns onto the legacy ``Members`` table. Every
SQLAlchemyError is turned into the registry's error taxonomy and returned
inside a Result; nothing from the database layer escapes as an exception.
"""

from pydantic import ValidationError
from sqlalchemy import Boolean, Column, Float, Integer, String, create_engine, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from healthcentre.config import DatabaseConfig
from healthcentre.domain.errors import PersistenceUnavailable, PersistenceWriteFailed
from healthcentre.domain.models import MemberRecord, MemberRow
from healthcentre.services.member_store import Result, logger

Base = declarative_base()


class MemberTable(Base):
    __tablename__ = "Members"

    hc_number = Column("HCNumber", String(10), primary_key=True)
    forename = Column("Forename", String(100), nullable=False)
    surname = Column("Surname", String(100), nullable=False)
    gender = Column("Gender", String(1), nullable=False)
    age = Column("Age", Integer, nullable=False)
    weight = Column("Weight", Float, nullable=False)
    address = Column("Address", String(255), nullable=False)
    blood_pressure = Column("BloodPressure", String(20), nullable=True)
    visit_tally = Column("VisitTally", Integer, nullable=False, default=0)
    consultation_done = Column("FConsultation", Boolean, nullable=False, default=False)

    def apply(self, row: MemberRow) -> None:
        """Copy every non-key column from a row."""
        self.forename = row.forename
        self.surname = row.surname
        self.gender = row.gender
        self.age = row.age
        self.weight = row.weight
        self.address = row.address
        self.blood_pressure = row.blood_pressure
        self.visit_tally = row.visit_tally
        self.consultation_done = row.consultation_done


class SqlMemberStore:
    """MemberStore implementation over any SQLAlchemy-supported database."""

    def __init__(self, database: DatabaseConfig | None = None) -> None:
        self.database = database or DatabaseConfig()
        self.engine = create_engine(self.database.url, echo=self.database.echo)
        self.Session = sessionmaker(self.engine, expire_on_commit=False)
        self.store_name = self.engine.url.render_as_string(hide_password=True)
        self.logger = logger.bind(component="sql_member_store", store=self.store_name)

    @classmethod
    def open(
        cls, database: DatabaseConfig | None = None
    ) -> Result["SqlMemberStore", PersistenceUnavailable]:
        """Build a store, reporting a bad URL or a missing driver as an error value."""
        try:
            return Result.ok(cls(database))
        except (SQLAlchemyError, ImportError) as e:
            logger.bind(component="sql_member_store").warning(
                "member_store_unavailable", error=str(e)
            )
            return Result.err(PersistenceUnavailable(f"Cannot open database: {e}"))

    def ensure_schema(self) -> Result[str, PersistenceUnavailable]:
        """Create the Members table if it is missing."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            self.logger.warning("member_schema_unavailable", error=str(e))
            return Result.err(PersistenceUnavailable(str(e)))
        return Result.ok(MemberTable.__tablename__)

    def load_all(self) -> Result[list[MemberRow], PersistenceUnavailable]:
        try:
            with self.Session() as session:
                entities = session.scalars(
                    select(MemberTable).order_by(MemberTable.hc_number)
                ).all()
        except SQLAlchemyError as e:
            self.logger.error("member_load_failed", error=str(e))
            return Result.err(PersistenceUnavailable(f"Error loading from database: {e}"))

        members: list[MemberRow] = []
        for entity in entities:
            try:
                members.append(MemberRow.model_validate(entity))
            except ValidationError as e:
                # Column values of the wrong type; the rest of the table still loads
                self.logger.warning(
                    "unreadable_member_row_skipped",
                    member_id=entity.hc_number,
                    error=str(e),
                )

        self.logger.info(
            "member_rows_loaded", count=len(members), skipped=len(entities) - len(members)
        )
        return Result.ok(members)

    def insert_one(self, record: MemberRecord) -> Result[MemberRecord, PersistenceWriteFailed]:
        row = record.to_row()
        entity = MemberTable(hc_number=row.hc_number)
        entity.apply(row)

        try:
            with self.Session() as session, session.begin():
                session.add(entity)
        except SQLAlchemyError as e:
            self.logger.error("member_insert_failed", member_id=record.id, error=str(e))
            return Result.err(PersistenceWriteFailed(f"Error saving to database: {e}"))

        self.logger.info("member_inserted", member_id=record.id)
        return Result.ok(record)

    def update_one(self, record: MemberRecord) -> Result[MemberRecord, PersistenceWriteFailed]:
        try:
            with self.Session() as session, session.begin():
                entity = session.get(MemberTable, record.id)
                if entity is None:
                    return Result.err(
                        PersistenceWriteFailed(f"Member {record.id} has no stored row")
                    )
                entity.apply(record.to_row())
        except SQLAlchemyError as e:
            self.logger.error("member_update_failed", member_id=record.id, error=str(e))
            return Result.err(PersistenceWriteFailed(f"Error updating database: {e}"))

        self.logger.info("member_updated", member_id=record.id)
        return Result.ok(record)

    def reset_consultations(self) -> Result[int, PersistenceWriteFailed]:
        try:
            with self.Session() as session, session.begin():
                outcome = session.execute(update(MemberTable).values(consultation_done=False))
                touched = outcome.rowcount
        except SQLAlchemyError as e:
            self.logger.error("consultation_reset_failed", error=str(e))
            return Result.err(PersistenceWriteFailed(f"Error resetting consultations: {e}"))

        self.logger.info("consultations_reset_in_store", rows=touched)
        return Result.ok(touched)
