"""Shared FastAPI dependencies.

- get_unit_of_work: a fresh unit of work per request, bound to the
  application session factory

Tests override this dependency to bind the unit of work to a throwaway
database.
"""

from .database import SessionLocal
from .domain.documents.ports import UnitOfWorkPort
from .infrastructure.repositories import SqlAlchemyUnitOfWork


def get_unit_of_work() -> UnitOfWorkPort:
    return SqlAlchemyUnitOfWork(SessionLocal)
