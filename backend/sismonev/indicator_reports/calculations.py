"""Year-record derivation: percentage, achievement category and resource totals."""

import math
from typing import Any

from sismonev.core.models import AchievementCategory

# Marker the data-entry sheets use for "not reported"
NOT_REPORTED_MARKER = "-"
DEFAULT_TARGET_UNIT = "Unit"


def is_not_reported(value: Any) -> bool:
    """True for the blank marker, empty strings and missing values."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in ("", NOT_REPORTED_MARKER)
    return False


def to_number(value: Any) -> float:
    """Coerce a numeric input to float; comma decimal separators are accepted.

    Anything unparseable (or not finite) becomes 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        n = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return 0.0
        try:
            n = float(text)
        except ValueError:
            return 0.0
    return n if math.isfinite(n) else 0.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def derive_year_values(target_raw: Any, actual_raw: Any) -> tuple[float, float, int, AchievementCategory]:
    """Return (target, actual, percentage, category) for one year record.

    Both values not reported, or both zero, gives NOT_REPORTED at 0%. A positive
    target gives percentage = round(actual / target * 100); 100 or more is
    ACHIEVED, anything above 0 is NOT_ACHIEVED. A non-positive target is
    NOT_REPORTED.
    """
    target_missing = is_not_reported(target_raw)
    actual_missing = is_not_reported(actual_raw)
    target = 0.0 if target_missing else to_number(target_raw)
    actual = 0.0 if actual_missing else to_number(actual_raw)

    if target_missing and actual_missing:
        return target, actual, 0, AchievementCategory.NOT_REPORTED
    if target == 0 and actual == 0:
        return target, actual, 0, AchievementCategory.NOT_REPORTED
    if target > 0:
        percentage = round_half_up(actual / max(1.0, target) * 100)
        if percentage >= 100:
            category = AchievementCategory.ACHIEVED
        elif percentage > 0:
            category = AchievementCategory.NOT_ACHIEVED
        else:
            category = AchievementCategory.NOT_REPORTED
        return target, actual, percentage, category
    return target, actual, 0, AchievementCategory.NOT_REPORTED


def to_resource_count(value: Any) -> int:
    """Per-indicator resource (RO) count as a non-negative integer."""
    n = to_number(value)
    return int(n) if n > 0 else 0


def total_resource_count(counts) -> int:
    """Top-level total: sum of the indicators' resource counts."""
    return sum(to_resource_count(c) for c in counts)


def normalize_target_unit(unit: str | None) -> str:
    if unit is None or not str(unit).strip():
        return DEFAULT_TARGET_UNIT
    return str(unit).strip()
