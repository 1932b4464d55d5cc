from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from precision.config import get_settings
from precision.log import configure_logging
from precision.medals import should_split_group_c
from precision.schemas import (
    HandicapProfileRequest,
    ScoreSummaryRequest,
    ShotsTotalRequest,
    StandardMedalRequest,
)
from precision.services import (
    fixed_score_table,
    handicap_profile,
    score_summary,
    shots_summary,
    standard_medal_report,
)

settings = get_settings()

app = FastAPI(
    title="Precision - Result and Standard Medal Calculation",
    version="1.0.0",
    description=(
        "Stateless calculation service: handicap-adjusted series and match totals, "
        "standard medals per weapon group, and handicap profiles."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    configure_logging(settings.log_level)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/scores/shots")
def total_shots(payload: ShotsTotalRequest):
    return shots_summary(payload.shots)


@app.post("/scores/summary")
def summarize_scores(payload: ScoreSummaryRequest):
    return score_summary(payload.series, payload.handicap, payload.equalized_count)


@app.post("/medals/standard")
def calculate_medals(payload: StandardMedalRequest):
    return standard_medal_report(payload)


@app.get("/medals/fixed-score-table")
def get_fixed_score_table():
    return fixed_score_table()


@app.get("/medals/split-group-c")
def get_split_group_c(scope: Optional[str] = Query(default=None)):
    return {"scope": scope, "split_group_c": should_split_group_c(scope)}


@app.post("/handicap/profile")
def calculate_handicap_profile(payload: HandicapProfileRequest):
    return handicap_profile(payload)


def run() -> None:
    import uvicorn

    uvicorn.run(
        "precision.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
