"""Persistence and history services."""

from social_insurance_engine.services.repository import (
    EmployeeNotFoundError,
    InMemoryPremiumRepository,
    InvalidPeriodError,
    PremiumRepository,
    RepositoryError,
)
from social_insurance_engine.services.history_service import StandardRemunerationHistoryService
from social_insurance_engine.services.sql_repository import SqlPremiumRepository

__all__ = [
    "EmployeeNotFoundError",
    "InMemoryPremiumRepository",
    "InvalidPeriodError",
    "PremiumRepository",
    "RepositoryError",
    "SqlPremiumRepository",
    "StandardRemunerationHistoryService",
]
