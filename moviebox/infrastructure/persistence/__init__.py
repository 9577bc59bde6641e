"""
Couche de persistance SQLModel asynchrone.

Exporte l'engine, la fabrique de sessions et l'unite de travail.
"""

from moviebox.infrastructure.persistence.database import (
    create_database_engine,
    create_session_factory,
    init_db,
)
from moviebox.infrastructure.persistence.unit_of_work import SQLModelUnitOfWork

__all__ = [
    "SQLModelUnitOfWork",
    "create_database_engine",
    "create_session_factory",
    "init_db",
]
