from decimal import Decimal

import pytest

from precision.config import HandicapSettings
from precision.handicap import HandicapCalculator, HandicapError, statistics_from_matches
from precision.schemas import SeriesScore, ShooterStatistics

BEGINNER = "Klass 1 - Nybörjare"
GOLD = "Klass 2 - Guldmärkesskytt"


def _match(*totals: int) -> list[SeriesScore]:
    return [SeriesScore(series_number=i, total=t) for i, t in enumerate(totals, start=1)]


def test_new_shooter_uses_provisional_average():
    profile = HandicapCalculator().calculate_handicap(None, BEGINNER)
    assert profile.is_provisional
    assert profile.effective_average == Decimal("44.00")
    assert profile.handicap_per_series == Decimal("4.00")
    assert profile.matches_until_full_handicap == 5
    assert profile.provisional_average == Decimal("44.0")


def test_provisional_average_fills_missing_matches():
    stats = ShooterStatistics(completed_matches=1, average_per_series=Decimal("40.0"))
    profile = HandicapCalculator().calculate_handicap(stats, BEGINNER)
    # (44 * 4 + 40) / 5 = 43.2 -> 4.8 -> nearest quarter 4.75
    assert profile.effective_average == Decimal("43.20")
    assert profile.handicap_per_series == Decimal("4.75")
    assert profile.matches_until_full_handicap == 4
    assert profile.completed_matches == 1


def test_established_shooter_uses_actual_average():
    stats = ShooterStatistics(completed_matches=7, average_per_series=Decimal("45.1"))
    profile = HandicapCalculator().calculate_handicap(stats, GOLD)
    assert not profile.is_provisional
    assert profile.effective_average == Decimal("45.10")
    # 2.9 -> 3.0
    assert profile.handicap_per_series == Decimal("3.0")
    assert profile.matches_until_full_handicap == 0


def test_handicap_is_capped_at_maximum():
    stats = ShooterStatistics(completed_matches=5, average_per_series=Decimal("30"))
    profile = HandicapCalculator().calculate_handicap(stats, BEGINNER)
    assert profile.handicap_per_series == Decimal("10")


def test_negative_handicap_is_allowed():
    stats = ShooterStatistics(completed_matches=5, average_per_series=Decimal("49.6"))
    profile = HandicapCalculator().calculate_handicap(stats, BEGINNER)
    assert profile.handicap_per_series == Decimal("-1.5")


def test_custom_settings():
    settings = HandicapSettings(
        reference_series_score=Decimal("50"),
        max_handicap_per_series=Decimal("3"),
        required_matches=2,
    )
    calculator = HandicapCalculator(settings)
    profile = calculator.calculate_handicap(None, GOLD)
    assert profile.handicap_per_series == Decimal("3")
    assert profile.matches_until_full_handicap == 2


def test_effective_average_weights():
    calculator = HandicapCalculator()
    assert calculator.effective_average(Decimal("40"), 0, Decimal("44")) == Decimal("44")
    assert calculator.effective_average(Decimal("40"), 5, Decimal("44")) == Decimal("40")
    assert calculator.effective_average(Decimal("42"), 3, Decimal("47")) == Decimal("44.00")


@pytest.mark.parametrize("shooter_class", [None, "", "   "])
def test_missing_class_raises(shooter_class):
    with pytest.raises(HandicapError):
        HandicapCalculator().calculate_handicap(None, shooter_class)


def test_unknown_class_raises():
    with pytest.raises(HandicapError, match="Unknown shooter class"):
        HandicapCalculator().calculate_handicap(None, "Klass 9")


def test_statistics_from_matches():
    matches = [_match(48, 46), [], _match(40, 42)]
    stats = statistics_from_matches(matches, window=10)
    assert stats.completed_matches == 2
    assert stats.average_per_series == Decimal("44.00")

    recent = statistics_from_matches(matches, window=1)
    assert recent.completed_matches == 2
    assert recent.average_per_series == Decimal("41.00")


def test_statistics_from_matches_caps_series_and_handles_empty():
    assert statistics_from_matches([_match(52, 48)], window=5).average_per_series == Decimal("49.00")
    empty = statistics_from_matches([])
    assert empty.completed_matches == 0
    assert empty.average_per_series == 0
