"""Shot, series and match totals for precision shooting.

Handicap is always applied per series: each series is rounded half away
from zero and clamped to 0..50 before the series are summed.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Optional, Protocol, Tuple, Union

from loguru import logger

MAX_SCORE_PER_SERIES = 50
MAX_SHOT_VALUE = 10
X_TOKEN = "X"

# decimal's ROUND_HALF_UP rounds ties away from zero for both signs.
STANDARD_ROUNDING = ROUND_HALF_UP

Number = Union[int, float, Decimal, str]


class SeriesLike(Protocol):
    series_number: int
    total: int
    x_count: int


def _to_decimal(value: Optional[Number]) -> Decimal:
    """Decimal for `value`; None, NaN and unparsable text become 0."""
    if value is None:
        return Decimal("0")
    if isinstance(value, float):
        # str() keeps 2.375 as 2.375 instead of its binary expansion.
        value = str(value)
    if isinstance(value, str):
        try:
            value = Decimal(value.strip())
        except InvalidOperation:
            return Decimal("0")
    result = Decimal(value)
    if result.is_nan():
        return Decimal("0")
    return result


def round_to_int(value: Number) -> int:
    # to_integral_value does not depend on the context precision, unlike quantize.
    return int(_to_decimal(value).to_integral_value(rounding=STANDARD_ROUNDING))


def round_to_quarter(value: Number) -> Decimal:
    """Round to the nearest 0.25, ties away from zero."""
    quarters = (_to_decimal(value) * 4).to_integral_value(rounding=STANDARD_ROUNDING)
    return quarters / 4


def _normalize_token(shot: object) -> str:
    if shot is None:
        return ""
    return str(shot).strip().upper()


def shot_to_points(shot: object) -> int:
    token = _normalize_token(shot)
    if token == X_TOKEN:
        return MAX_SHOT_VALUE
    if token.isdecimal():
        value = int(token)
        if 0 <= value <= MAX_SHOT_VALUE:
            return value
    return 0


def is_valid_shot(shot: object) -> bool:
    token = _normalize_token(shot)
    if token == X_TOKEN:
        return True
    return token.isdecimal() and 0 <= int(token) <= MAX_SHOT_VALUE


def shots_to_total(shots: Optional[Iterable[object]]) -> Tuple[int, int]:
    """Return (total points, X count). X is worth 10; invalid tokens count 0."""
    if not shots:
        return 0, 0
    total = 0
    x_count = 0
    for shot in shots:
        total += shot_to_points(shot)
        if _normalize_token(shot) == X_TOKEN:
            x_count += 1
    return total, x_count


def count_inner_tens(shots: Optional[Iterable[object]]) -> int:
    return sum(1 for s in shots or [] if _normalize_token(s) == X_TOKEN)


def count_all_tens(shots: Optional[Iterable[object]]) -> int:
    return sum(1 for s in shots or [] if is_valid_shot(s) and shot_to_points(s) == 10)


def count_nines(shots: Optional[Iterable[object]]) -> int:
    return sum(1 for s in shots or [] if is_valid_shot(s) and shot_to_points(s) == 9)


def valid_shots(shots: Optional[Iterable[object]]) -> List[str]:
    return [str(s) for s in shots or [] if is_valid_shot(s)]


def invalid_shots(shots: Optional[Iterable[object]]) -> List[str]:
    return ["" if s is None else str(s) for s in shots or [] if not is_valid_shot(s)]


def average_shot(shots: Optional[Iterable[object]]) -> Decimal:
    values = [shot_to_points(s) for s in shots or []]
    if not values:
        return Decimal("0")
    return Decimal(sum(values)) / len(values)


def lowest_shot(shots: Optional[Iterable[object]]) -> int:
    values = [shot_to_points(s) for s in shots or []]
    return min(values) if values else 0


def highest_shot(shots: Optional[Iterable[object]]) -> int:
    values = [shot_to_points(s) for s in shots or []]
    return max(values) if values else 0


def cap_series_total(total: int) -> int:
    return min(total, MAX_SCORE_PER_SERIES)


def adjusted_series_score(raw_total: int, handicap: Optional[Number]) -> int:
    """Apply a per-series handicap, round half away from zero and clamp to 0..50."""
    # Clamping first keeps infinite or huge sums out of the integer rounding.
    adjusted = Decimal(raw_total) + _to_decimal(handicap)
    adjusted = max(Decimal(0), min(adjusted, Decimal(MAX_SCORE_PER_SERIES)))
    return round_to_int(adjusted)


def effective_series(
    series: Optional[Iterable[SeriesLike]], equalized_count: Optional[int] = None
) -> List[SeriesLike]:
    """Series ordered by series number, truncated to the first `equalized_count`."""
    ordered = sorted(series or [], key=lambda s: s.series_number)
    if equalized_count is not None:
        if len(ordered) > max(equalized_count, 0):
            logger.debug(
                "Equalizing {} series down to {}", len(ordered), max(equalized_count, 0)
            )
        ordered = ordered[: max(equalized_count, 0)]
    return ordered


def raw_total(series: Optional[Iterable[SeriesLike]], equalized_count: Optional[int] = None) -> int:
    return sum(cap_series_total(s.total) for s in effective_series(series, equalized_count))


def adjusted_series_scores(
    series: Optional[Iterable[SeriesLike]],
    handicap: Optional[Number],
    equalized_count: Optional[int] = None,
) -> List[int]:
    return [
        adjusted_series_score(cap_series_total(s.total), handicap)
        for s in effective_series(series, equalized_count)
    ]


def adjusted_total(
    series: Optional[Iterable[SeriesLike]],
    handicap: Optional[Number],
    equalized_count: Optional[int] = None,
) -> int:
    return sum(adjusted_series_scores(series, handicap, equalized_count))


def effective_handicap(
    series: Optional[Iterable[SeriesLike]],
    handicap: Optional[Number],
    equalized_count: Optional[int] = None,
) -> int:
    """Handicap points that actually landed after per-series capping and clamping."""
    counted = effective_series(series, equalized_count)
    return adjusted_total(counted, handicap) - raw_total(counted)


def total_x_count(series: Optional[Iterable[SeriesLike]], equalized_count: Optional[int] = None) -> int:
    return sum(s.x_count for s in effective_series(series, equalized_count))
