"""Standard remuneration grade table lookup."""

from __future__ import annotations

from typing import Sequence

from social_insurance_engine.calculators.amounts import to_decimal
from social_insurance_engine.calculators.types import GradeBand, GradeResult

# (rank, lower, upper, standard) - reference table used when none is supplied
_REFERENCE_BANDS: tuple[tuple[int, int, int, int], ...] = (
    (1, 1, 63000, 58000),
    (2, 63000, 73000, 68000),
    (3, 73000, 83000, 78000),
    (4, 83000, 93000, 88000),
    (5, 93000, 101000, 98000),
    (6, 101000, 107000, 104000),
    (7, 107000, 114000, 110000),
    (8, 114000, 122000, 118000),
    (9, 122000, 130000, 126000),
    (10, 130000, 138000, 134000),
    (11, 138000, 146000, 142000),
    (12, 146000, 155000, 150000),
    (13, 155000, 165000, 160000),
    (14, 165000, 175000, 170000),
    (15, 175000, 185000, 180000),
    (16, 185000, 195000, 190000),
    (17, 195000, 210000, 200000),
    (18, 210000, 230000, 220000),
    (19, 230000, 250000, 240000),
    (20, 250000, 270000, 260000),
    (21, 270000, 290000, 280000),
    (22, 290000, 310000, 300000),
    (23, 310000, 330000, 320000),
    (24, 330000, 350000, 340000),
    (25, 350000, 370000, 360000),
    (26, 370000, 395000, 380000),
    (27, 395000, 425000, 410000),
    (28, 425000, 455000, 440000),
    (29, 455000, 485000, 470000),
    (30, 485000, 515000, 500000),
    (31, 515000, 545000, 530000),
    (32, 545000, 575000, 560000),
    (33, 575000, 605000, 590000),
    (34, 605000, 635000, 620000),
    (35, 635000, 665000, 650000),
    (36, 665000, 695000, 680000),
    (37, 695000, 730000, 710000),
    (38, 730000, 770000, 750000),
    (39, 770000, 810000, 790000),
    (40, 810000, 855000, 830000),
    (41, 855000, 905000, 880000),
    (42, 905000, 955000, 930000),
    (43, 955000, 1005000, 980000),
    (44, 1005000, 1055000, 1030000),
    (45, 1055000, 1115000, 1090000),
    (46, 1115000, 1175000, 1150000),
    (47, 1175000, 1235000, 1210000),
    (48, 1235000, 1295000, 1270000),
    (49, 1295000, 1355000, 1330000),
    (50, 1355000, 9999999, 1390000),
)

STANDARD_GRADE_TABLE: tuple[GradeBand, ...] = tuple(
    GradeBand(rank=rank, lower=lower, upper=upper, standard=standard)
    for rank, lower, upper, standard in _REFERENCE_BANDS
)


def resolve_table(table: Sequence[GradeBand] | None) -> Sequence[GradeBand]:
    """Return the supplied table, or the reference table when it is missing."""
    if not table:
        return STANDARD_GRADE_TABLE
    return table


def find_grade(table: Sequence[GradeBand] | None, amount: object) -> GradeResult | None:
    """Find the band with ``lower <= amount < upper``.

    Bands are expected in ascending order; the first match wins. Returns
    None for missing, NaN or negative amounts and for amounts outside
    the table.
    """
    value = to_decimal(amount)
    if value is None or value < 0:
        return None

    for band in resolve_table(table):
        if band.lower <= value < band.upper:
            return GradeResult(grade=band.rank, standard=band.standard)
    return None


def band_for_rank(table: Sequence[GradeBand] | None, rank: int) -> GradeBand | None:
    """Get the band with a given rank."""
    for band in resolve_table(table):
        if band.rank == rank:
            return band
    return None


def grade_for_standard(table: Sequence[GradeBand] | None, standard: int | None) -> int:
    """Reverse-map a determined standard monthly remuneration to its grade.

    An exact ``standard`` match wins; otherwise the standard is treated as
    an amount and looked up by band. Returns 0 when nothing matches.
    """
    if not standard or standard <= 0:
        return 0
    bands = resolve_table(table)
    for band in bands:
        if band.standard == standard:
            return band.rank
    result = find_grade(bands, standard)
    return result.grade if result else 0


def check_table(table: Sequence[GradeBand] | None) -> list[str]:
    """Describe gaps, overlaps and misplaced standards in a grade table.

    An empty list means every amount from the first lower bound up to the
    last upper bound falls in exactly one band.
    """
    problems: list[str] = []
    bands = list(resolve_table(table))
    for band in bands:
        if not band.lower <= band.standard < band.upper:
            problems.append(f"grade {band.rank}: standard {band.standard} outside [{band.lower}, {band.upper})")
    for previous, band in zip(bands, bands[1:]):
        if band.rank <= previous.rank:
            problems.append(f"grade {band.rank} follows grade {previous.rank}")
        elif band.lower != previous.upper:
            problems.append(f"grades {previous.rank} and {band.rank}: {previous.upper} != {band.lower}")
    return problems
