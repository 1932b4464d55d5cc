"""
Handicap profiles.

handicap per series = reference score - effective average, capped at the
configured maximum (no lower bound) and rounded to quarter points. Until a
shooter has `required_matches` results, the class's provisional average
fills in for the missing matches.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from loguru import logger

from precision.config import HandicapSettings, get_handicap_settings
from precision.schemas import HandicapProfile, SeriesScore, ShooterStatistics
from precision.scoring import STANDARD_ROUNDING, raw_total, round_to_quarter

TWO_PLACES = Decimal("0.01")


class HandicapError(ValueError):
    pass


def _round2(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=STANDARD_ROUNDING)


class HandicapCalculator:
    def __init__(self, settings: Optional[HandicapSettings] = None) -> None:
        self.settings = settings or get_handicap_settings()

    def provisional_average(self, shooter_class: Optional[str]) -> Decimal:
        if not shooter_class or not shooter_class.strip():
            raise HandicapError(
                "Shooter class must be set before calculating handicap"
            )
        try:
            return self.settings.provisional_averages[shooter_class.strip()]
        except KeyError:
            valid = ", ".join(self.settings.provisional_averages)
            raise HandicapError(
                f"Unknown shooter class: {shooter_class!r}. Valid classes are: {valid}"
            ) from None

    def effective_average(
        self, actual_average: Decimal, completed_matches: int, provisional_average: Decimal
    ) -> Decimal:
        required = self.settings.required_matches
        if completed_matches >= required:
            return actual_average
        if completed_matches <= 0:
            return provisional_average
        # Each missing match is filled in with the provisional average.
        remaining = required - completed_matches
        weighted = provisional_average * remaining + actual_average * completed_matches
        return _round2(weighted / required)

    def calculate_handicap(
        self, stats: Optional[ShooterStatistics], shooter_class: Optional[str]
    ) -> HandicapProfile:
        completed = stats.completed_matches if stats else 0
        actual = stats.average_per_series if stats else Decimal("0")
        provisional = self.provisional_average(shooter_class)
        is_provisional = completed < self.settings.required_matches

        effective = (
            self.effective_average(actual, completed, provisional) if is_provisional else actual
        )
        raw_handicap = self.settings.reference_series_score - effective
        handicap = round_to_quarter(min(raw_handicap, self.settings.max_handicap_per_series))

        logger.debug(
            "Handicap for class {}: effective average {}, handicap {} (provisional={})",
            shooter_class,
            effective,
            handicap,
            is_provisional,
        )
        return HandicapProfile(
            effective_average=_round2(effective),
            handicap_per_series=handicap,
            is_provisional=is_provisional,
            completed_matches=completed,
            matches_until_full_handicap=(
                self.settings.required_matches - completed if is_provisional else 0
            ),
            actual_average=_round2(actual),
            provisional_average=provisional,
        )


def statistics_from_matches(
    matches: Sequence[Sequence[SeriesScore]], window: Optional[int] = None
) -> ShooterStatistics:
    """
    Statistics from historical matches, oldest first.

    The average per series covers the most recent `window` matches (capped
    raw series totals); matches without series are ignored.
    """
    played = [list(match) for match in matches if match]
    if not played:
        return ShooterStatistics()
    if window is None:
        window = get_handicap_settings().rolling_window_match_count
    recent = played[-window:] if window > 0 else played

    series_total = sum(raw_total(match) for match in recent)
    series_count = sum(len(match) for match in recent)
    return ShooterStatistics(
        completed_matches=len(played),
        average_per_series=_round2(Decimal(series_total) / series_count),
    )
