"""Social insurance premium and determination calculators."""

from social_insurance_engine.calculators.acquisition import AcquisitionDeterminer, determine_acquisition
from social_insurance_engine.calculators.bonus_premium import calculate_bonus, get_annual_premiums
from social_insurance_engine.calculators.engine import PremiumEngine, build_standard_timeline
from social_insurance_engine.calculators.grade_table import STANDARD_GRADE_TABLE, find_grade
from social_insurance_engine.calculators.monthly_premium import calculate_monthly_premiums
from social_insurance_engine.calculators.rates import RateSchedule
from social_insurance_engine.calculators.suiji import calculate_suiji_kettei, check_rehab_suiji
from social_insurance_engine.calculators.teiji import calculate_teiji_kettei

__all__ = [
    "AcquisitionDeterminer",
    "PremiumEngine",
    "RateSchedule",
    "STANDARD_GRADE_TABLE",
    "build_standard_timeline",
    "calculate_bonus",
    "calculate_monthly_premiums",
    "calculate_suiji_kettei",
    "calculate_teiji_kettei",
    "check_rehab_suiji",
    "determine_acquisition",
    "find_grade",
    "get_annual_premiums",
]
