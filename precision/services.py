from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Optional

from fastapi import HTTPException
from loguru import logger

from precision.handicap import HandicapCalculator, HandicapError
from precision.medals import (
    FIXED_SCORE_TABLE,
    apply_standard_medals,
    partition_key,
    should_split_group_c,
    weapon_group,
)
from precision.schemas import (
    FixedScoreRequirementOut,
    HandicapProfile,
    HandicapProfileRequest,
    MedalConfig,
    ScoreSummary,
    SeriesScore,
    ShooterEntry,
    ShooterResult,
    ShotsTotalOut,
    StandardMedalOut,
    StandardMedalRequest,
    StandardMedalRow,
)
from precision.scoring import (
    adjusted_series_scores,
    count_all_tens,
    count_inner_tens,
    count_nines,
    effective_series,
    invalid_shots,
    raw_total,
    shots_to_total,
    total_x_count,
)


def shots_summary(shots: Optional[Iterable[Optional[str]]]) -> ShotsTotalOut:
    shots = list(shots or [])
    total, x_count = shots_to_total(shots)
    return ShotsTotalOut(
        total=total,
        x_count=x_count,
        inner_tens=count_inner_tens(shots),
        all_tens=count_all_tens(shots),
        nines=count_nines(shots),
        invalid_shots=invalid_shots(shots),
    )


def score_summary(
    series: Optional[Iterable[SeriesScore]],
    handicap: Decimal = Decimal("0"),
    equalized_count: Optional[int] = None,
) -> ScoreSummary:
    counted = effective_series(series, equalized_count)
    adjusted = adjusted_series_scores(counted, handicap)
    raw = raw_total(counted)
    return ScoreSummary(
        raw_total=raw,
        adjusted_total=sum(adjusted),
        effective_handicap=sum(adjusted) - raw,
        total_x_count=total_x_count(counted),
        series_count=len(counted),
        adjusted_series=adjusted,
    )


def shooter_result_from_entry(entry: ShooterEntry) -> ShooterResult:
    """Totals for one shooter, handicap applied per series."""
    summary = score_summary(entry.series, entry.handicap, entry.equalized_count)
    return ShooterResult(
        member_id=entry.member_id,
        shooting_class=entry.shooting_class,
        total_score=summary.adjusted_total,
        total_x_count=summary.total_x_count,
        series_count=summary.series_count,
    )


def standard_medal_report(payload: StandardMedalRequest) -> StandardMedalOut:
    split = (
        payload.split_group_c
        if payload.split_group_c is not None
        else should_split_group_c(payload.competition_scope)
    )
    config = MedalConfig(series_count=payload.series_count, split_group_c=split)
    results = apply_standard_medals(
        [shooter_result_from_entry(entry) for entry in payload.shooters], config
    )

    rows: List[StandardMedalRow] = [
        StandardMedalRow(
            member_id=r.member_id,
            shooting_class=r.shooting_class,
            weapon_group=weapon_group(r.shooting_class),
            partition=partition_key(r.shooting_class, split),
            total_score=r.total_score,
            total_x_count=r.total_x_count,
            series_count=r.series_count,
            standard_medal=r.standard_medal,
        )
        for r in results
    ]
    rows.sort(key=lambda r: (r.partition, -r.total_score, -r.total_x_count, r.member_id))
    logger.info(
        "Standard medals: {} shooters, {} series, split group C={}, {} medals",
        len(rows),
        config.series_count,
        split,
        sum(1 for r in rows if r.standard_medal is not None),
    )
    return StandardMedalOut(series_count=config.series_count, split_group_c=split, results=rows)


def fixed_score_table() -> List[FixedScoreRequirementOut]:
    return [
        FixedScoreRequirementOut(
            weapon_group=group, series_count=series_count, bronze=bronze, silver=silver
        )
        for (group, series_count), (bronze, silver) in sorted(
            FIXED_SCORE_TABLE.items(), key=lambda item: (item[0][1], item[0][0])
        )
    ]


def handicap_profile(
    payload: HandicapProfileRequest, calculator: Optional[HandicapCalculator] = None
) -> HandicapProfile:
    calculator = calculator or HandicapCalculator()
    try:
        return calculator.calculate_handicap(payload.statistics, payload.shooting_class)
    except HandicapError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
