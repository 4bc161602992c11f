"""SQLAlchemy ORM models."""

from social_insurance_engine.models.base import Base, TenantOwnedMixin, TimestampMixin
from social_insurance_engine.models.employee import EmployeeRecord
from social_insurance_engine.models.history import (
    InsuranceStatusHistoryRecord,
    StandardRemunerationHistoryRecord,
)
from social_insurance_engine.models.reference import GradeBandRecord, RateTableRecord
from social_insurance_engine.models.salary import BonusRecord, SalaryMonthRecord
from social_insurance_engine.models.tenant import Tenant

__all__ = [
    "Base",
    "BonusRecord",
    "EmployeeRecord",
    "GradeBandRecord",
    "InsuranceStatusHistoryRecord",
    "RateTableRecord",
    "SalaryMonthRecord",
    "StandardRemunerationHistoryRecord",
    "Tenant",
    "TenantOwnedMixin",
    "TimestampMixin",
]
