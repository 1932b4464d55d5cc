from decimal import Decimal

from fastapi.testclient import TestClient

from precision.main import app

client = TestClient(app)


def _entry(member_id: int, shooting_class: str, *totals: int, handicap: str = "0") -> dict:
    return {
        "member_id": member_id,
        "shooting_class": shooting_class,
        "handicap": handicap,
        "series": [
            {"series_number": i, "total": t, "x_count": 1}
            for i, t in enumerate(totals, start=1)
        ],
    }


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_shots_total():
    resp = client.post("/scores/shots", json={"shots": ["X", "10", "9", "abc", None]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 29
    assert body["x_count"] == 1
    assert body["all_tens"] == 2
    assert body["nines"] == 1
    assert body["invalid_shots"] == ["abc", ""]


def test_score_summary_with_handicap():
    payload = {
        "series": [
            {"series_number": i, "total": t, "x_count": x}
            for i, (t, x) in enumerate([(49, 4), (46, 2), (44, 1), (46, 3), (42, 0), (48, 5)], start=1)
        ],
        "handicap": "3.0",
    }
    resp = client.post("/scores/summary", json=payload)
    assert resp.status_code == 200
    body = resp.json()
    assert body["raw_total"] == 275
    assert body["adjusted_total"] == 290
    assert body["effective_handicap"] == 15
    assert body["total_x_count"] == 15
    assert body["adjusted_series"] == [50, 49, 47, 49, 45, 50]


def test_score_summary_equalized_count():
    payload = {
        "series": [
            {"series_number": 2, "total": 45},
            {"series_number": 1, "total": 48},
            {"series_number": 3, "total": 50},
        ],
        "equalized_count": 2,
    }
    body = client.post("/scores/summary", json=payload).json()
    assert body["raw_total"] == 93
    assert body["series_count"] == 2


def test_score_summary_rejects_bad_series_number():
    resp = client.post("/scores/summary", json={"series": [{"series_number": 0, "total": 40}]})
    assert resp.status_code == 422


def test_standard_medals_split_from_scope():
    shooters = [
        _entry(1, "C1Dam", 48, 48, 48, 48, 48, 48),
        _entry(2, "C1Jun", 47, 47, 47, 47, 47, 46),
        _entry(3, "A3", 45, 45, 45, 45, 45, 45),
        _entry(4, "B2", 40, 40, 40, 40, 40, 40, handicap="2.5"),
    ]
    resp = client.post(
        "/medals/standard",
        json={"shooters": shooters, "series_count": 6, "competition_scope": "Svenskt Mästerskap"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["split_group_c"] is True
    rows = {row["member_id"]: row for row in body["results"]}

    assert rows[1]["partition"] == "C-Dam"
    assert rows[1]["total_score"] == 288
    assert rows[1]["standard_medal"] == "S"
    assert rows[2]["partition"] == "C-Jun"
    assert rows[2]["total_score"] == 281
    assert rows[2]["standard_medal"] == "B"
    assert rows[3]["weapon_group"] == "A"
    assert rows[3]["standard_medal"] == "B"
    # 40 + 2.5 rounds half away from zero to 43 per series.
    assert rows[4]["total_score"] == 258
    assert rows[4]["standard_medal"] is None
    assert [row["partition"] for row in body["results"]] == ["A", "B", "C-Dam", "C-Jun"]


def test_standard_medals_explicit_flag_overrides_scope():
    shooters = [_entry(1, "C1Dam", 48, 48, 48, 48, 48, 48)]
    body = client.post(
        "/medals/standard",
        json={
            "shooters": shooters,
            "series_count": 6,
            "split_group_c": False,
            "competition_scope": "Svenskt Mästerskap",
        },
    ).json()
    assert body["split_group_c"] is False
    assert body["results"][0]["partition"] == "C"


def test_standard_medals_below_six_series_awards_nothing():
    shooters = [_entry(1, "A1", 50, 50, 50, 50, 50)]
    body = client.post("/medals/standard", json={"shooters": shooters, "series_count": 5}).json()
    assert body["results"][0]["standard_medal"] is None


def test_fixed_score_table():
    body = client.get("/medals/fixed-score-table").json()
    assert len(body) == 9
    assert body[0] == {"weapon_group": "A", "series_count": 6, "bronze": 267, "silver": 277}
    assert body[-1] == {"weapon_group": "C", "series_count": 10, "bronze": 460, "silver": 471}


def test_split_group_c_endpoint():
    body = client.get("/medals/split-group-c", params={"scope": "Landsdelsmästerskap"}).json()
    assert body == {"scope": "Landsdelsmästerskap", "split_group_c": True}
    body = client.get("/medals/split-group-c").json()
    assert body["split_group_c"] is False


def test_handicap_profile():
    resp = client.post(
        "/handicap/profile",
        json={
            "shooting_class": "Klass 1 - Nybörjare",
            "statistics": {"completed_matches": 1, "average_per_series": "40.0"},
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    assert Decimal(body["handicap_per_series"]) == Decimal("4.75")
    assert Decimal(body["effective_average"]) == Decimal("43.2")
    assert body["is_provisional"] is True


def test_handicap_profile_unknown_class_is_bad_request():
    resp = client.post("/handicap/profile", json={"shooting_class": "Klass 9"})
    assert resp.status_code == 400
    assert "Unknown shooter class" in resp.json()["detail"]


def test_run_starts_uvicorn_with_configured_address(monkeypatch):
    import uvicorn

    from precision import main

    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))
    main.run()

    assert calls == [
        (
            "precision.main:app",
            {
                "host": main.settings.host,
                "port": main.settings.port,
                "log_level": main.settings.log_level.lower(),
            },
        )
    ]
