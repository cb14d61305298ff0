"""
Persistence contract for the member registry.

Key pieces:
- Result type so expected failures (store offline, write rejected) are values
- MemberStore protocol: the only surface the registry needs from a backend
- Structured logging setup shared by the services
"""

import logging
from typing import Generic, Literal, Protocol, TypeVar

import structlog

from healthcentre.domain.errors import PersistenceUnavailable, PersistenceWriteFailed
from healthcentre.domain.models import MemberRecord, MemberRow


def configure_logging(
    level: str = "INFO", fmt: Literal["json", "console"] = "json"
) -> None:
    """Install the structlog processor chain used by every component."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))

    renderer: structlog.types.Processor = (
        structlog.dev.ConsoleRenderer() if fmt == "console" else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()

logger = structlog.get_logger(__name__)

ValueT = TypeVar("ValueT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Explicit error handling without exceptions for expected failures.

    Used where failure is ordinary business (member not found, database
    offline) rather than a programming error.
    """

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value: ValueT | None = value
        self._error: ErrorT | None = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error

    def __repr__(self) -> str:
        if self._error is not None:
            return f"Result.err({self._error!r})"
        return f"Result.ok({self._value!r})"


class MemberStore(Protocol):
    """
    What the registry needs from a persistence backend.

    Implementations never raise for backend failures; they return
    Result.err with the matching taxonomy error. The registry does not retry.
    """

    store_name: str

    def load_all(self) -> Result[list[MemberRow], PersistenceUnavailable]:
        """Every persisted member row, in ascending id order where the backend can."""
        ...

    def insert_one(self, record: MemberRecord) -> Result[MemberRecord, PersistenceWriteFailed]:
        """Write a new row holding all ten member columns."""
        ...

    def update_one(self, record: MemberRecord) -> Result[MemberRecord, PersistenceWriteFailed]:
        """Overwrite the row of an existing member."""
        ...

    def reset_consultations(self) -> Result[int, PersistenceWriteFailed]:
        """Clear the consultation flag on every row. Returns the rows touched."""
        ...
