from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Medal(str, Enum):
    SILVER = "S"
    BRONZE = "B"


class SeriesScore(BaseModel):
    series_number: int = Field(ge=1)
    # Not range-checked here; the calculators cap it at 50.
    total: int
    x_count: int = Field(default=0, ge=0)


class ShooterResult(BaseModel):
    member_id: int
    shooting_class: Optional[str] = None
    total_score: int = 0
    total_x_count: int = 0
    series_count: int = 0
    standard_medal: Optional[Medal] = None


class ShooterEntry(BaseModel):
    """Upstream series record for one shooter, before totals are computed."""

    member_id: int
    shooting_class: Optional[str] = None
    series: list[SeriesScore] = Field(default_factory=list)
    handicap: Decimal = Decimal("0")
    equalized_count: Optional[int] = Field(default=None, gt=0)


class MedalConfig(BaseModel):
    series_count: int
    split_group_c: bool = False


class ShooterStatistics(BaseModel):
    completed_matches: int = Field(default=0, ge=0)
    average_per_series: Decimal = Decimal("0")


class HandicapProfile(BaseModel):
    effective_average: Decimal
    handicap_per_series: Decimal
    is_provisional: bool
    completed_matches: int
    matches_until_full_handicap: int
    actual_average: Decimal
    provisional_average: Decimal


class ScoreSummary(BaseModel):
    raw_total: int
    adjusted_total: int
    effective_handicap: int
    total_x_count: int
    series_count: int
    adjusted_series: list[int]


class ShotsTotalRequest(BaseModel):
    shots: list[Optional[str]] = Field(default_factory=list)


class ShotsTotalOut(BaseModel):
    total: int
    x_count: int
    inner_tens: int
    all_tens: int
    nines: int
    invalid_shots: list[str]


class ScoreSummaryRequest(BaseModel):
    series: list[SeriesScore] = Field(default_factory=list)
    handicap: Decimal = Decimal("0")
    equalized_count: Optional[int] = Field(default=None, gt=0)


class StandardMedalRequest(BaseModel):
    shooters: list[ShooterEntry]
    series_count: int
    # Either pass the split decision directly or let it be derived from the scope text.
    split_group_c: Optional[bool] = None
    competition_scope: Optional[str] = None


class StandardMedalRow(BaseModel):
    member_id: int
    shooting_class: Optional[str] = None
    weapon_group: str
    partition: str
    total_score: int
    total_x_count: int
    series_count: int
    standard_medal: Optional[Medal] = None


class StandardMedalOut(BaseModel):
    series_count: int
    split_group_c: bool
    results: list[StandardMedalRow]


class HandicapProfileRequest(BaseModel):
    shooting_class: Optional[str] = None
    statistics: Optional[ShooterStatistics] = None


class FixedScoreRequirementOut(BaseModel):
    weapon_group: str
    series_count: int
    bronze: int
    silver: int
