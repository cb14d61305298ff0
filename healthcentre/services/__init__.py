"""
Services for the member registry.

This package contains the in-memory registry, the persistence contract it
depends on, and the SQLAlchemy implementation of that contract.
"""

from .member_registry import MemberRegistry, Registration
from .member_store import MemberStore, Result, configure_logging
from .sql_store import SqlMemberStore

__all__ = [
    "MemberRegistry",
    "MemberStore",
    "Registration",
    "Result",
    "SqlMemberStore",
    "configure_logging",
]
