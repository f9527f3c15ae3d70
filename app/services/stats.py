from fractions import Fraction
from math import floor

from app.models.content_progress import ProgressStatus


def round_half_up(value: Fraction | int) -> int:
    # exact: Python's round() is banker's rounding, floats drift on .5
    return floor(Fraction(value) + Fraction(1, 2))


def exact_percentage(numerator: int, denominator: int) -> Fraction:
    """Unrounded percentage, for values that are averaged before rounding."""
    if denominator <= 0:
        return Fraction(0)
    return Fraction(numerator * 100, denominator)


def percentage(numerator: int, denominator: int) -> int:
    """Whole-number percentage rounded half up; 0 for an empty denominator."""
    return round_half_up(exact_percentage(numerator, denominator))


def average(values: list[Fraction | int]) -> int:
    if not values:
        return 0
    return round_half_up(Fraction(sum(values)) / len(values))


def container_status(completed: int, total: int) -> ProgressStatus:
    if completed == 0 or total == 0:
        return ProgressStatus.NOT_STARTED
    if completed >= total:
        return ProgressStatus.COMPLETED
    return ProgressStatus.IN_PROGRESS
