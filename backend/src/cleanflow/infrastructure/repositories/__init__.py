"""SQLAlchemy adapters for the persistence ports."""

from .sqlalchemy_unit_of_work import (
    SqlAlchemyActivityLogRepository,
    SqlAlchemyDocumentRepository,
    SqlAlchemyJobRepository,
    SqlAlchemyUnitOfWork,
)

__all__ = [
    "SqlAlchemyActivityLogRepository",
    "SqlAlchemyDocumentRepository",
    "SqlAlchemyJobRepository",
    "SqlAlchemyUnitOfWork",
]
