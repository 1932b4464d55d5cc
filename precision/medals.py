"""
Standard medal awards for precision shooting.

Each weapon group (optionally with group C split by classification) is
evaluated on its own with two methods:

* percentage quota: top 1/9 Silver, top 1/3 Bronze, rounded down, with
  everyone tied at a cutoff getting the cutoff's medal;
* fixed score table: absolute Bronze/Silver thresholds for 6, 7 and 10 series.

A shooter gets the better of the two results.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from precision.ranking import group_by_property, rank_with_tie_breakers
from precision.schemas import Medal, MedalConfig, ShooterResult

MIN_MEDAL_SERIES_COUNT = 6
SILVER_QUOTA_DIVISOR = 9
BRONZE_QUOTA_DIVISOR = 3

WEAPON_GROUPS = ("A", "B", "C")
DEFAULT_WEAPON_GROUP = "C"
OPEN_CLASSIFICATION = "Open"

# Matched against the upper-cased class with spaces removed, so "Vet Y" works too.
CLASSIFICATION_TOKENS: Tuple[Tuple[str, str], ...] = (
    ("DAM", "Dam"),
    ("JUN", "Jun"),
    ("VETY", "VetY"),
    ("VETÄ", "VetÄ"),
)

SPLIT_GROUP_C_SCOPES = frozenset({"Svenskt Mästerskap", "Landsdelsmästerskap"})

# (weapon group, series count) -> (bronze, silver), inclusive lower bounds.
FIXED_SCORE_TABLE: Dict[Tuple[str, int], Tuple[int, int]] = {
    ("A", 6): (267, 277),
    ("B", 6): (273, 282),
    ("C", 6): (276, 283),
    ("A", 7): (312, 323),
    ("B", 7): (319, 329),
    ("C", 7): (322, 330),
    ("A", 10): (445, 461),
    ("B", 10): (455, 470),
    ("C", 10): (460, 471),
}

_MEDAL_ORDER = {None: 0, Medal.BRONZE: 1, Medal.SILVER: 2}

MedalKey = Tuple[int, str]


def weapon_group(shooting_class: Optional[str]) -> str:
    """Weapon group from the first character of a class like "B3", "A2" or "C Dam"."""
    cleaned = (shooting_class or "").strip().upper()
    if cleaned and cleaned[0] in WEAPON_GROUPS:
        return cleaned[0]
    return DEFAULT_WEAPON_GROUP


def classification(shooting_class: Optional[str]) -> Optional[str]:
    """Classification token (Dam, Jun, VetY, VetÄ) or None for the open class."""
    cleaned = (shooting_class or "").upper().replace(" ", "")
    for token, label in CLASSIFICATION_TOKENS:
        if token in cleaned:
            return label
    return None


def partition_key(shooting_class: Optional[str], split_group_c: bool) -> str:
    group = weapon_group(shooting_class)
    if split_group_c and group == "C":
        return f"C-{classification(shooting_class) or OPEN_CLASSIFICATION}"
    return group


def medal_key(shooter: ShooterResult, split_group_c: bool) -> MedalKey:
    return shooter.member_id, partition_key(shooter.shooting_class, split_group_c)


def should_split_group_c(competition_scope: Optional[str]) -> bool:
    """Only national (SM) and regional (Landsdel) championships split group C."""
    if not competition_scope:
        return False
    return competition_scope.strip() in SPLIT_GROUP_C_SCOPES


def fixed_score_requirements(group: str, series_count: int) -> Optional[Tuple[int, int]]:
    return FIXED_SCORE_TABLE.get((group, series_count))


def fixed_score_medal(score: int, group: str, series_count: int) -> Optional[Medal]:
    requirements = fixed_score_requirements(group, series_count)
    if requirements is None:
        return None
    bronze, silver = requirements
    if score >= silver:
        return Medal.SILVER
    if score >= bronze:
        return Medal.BRONZE
    return None


def best_medal(*medals: Optional[Medal]) -> Optional[Medal]:
    return max(medals, key=lambda m: _MEDAL_ORDER[m], default=None)


def percentage_medals(shooters: Sequence[ShooterResult]) -> List[Optional[Medal]]:
    """
    Quota medals for one partition, aligned with the input order.

    Ranking uses (score, X count) as a single key, so shooters equal on both
    share a rank. With shared ranks, "rank within the quota" already covers
    everyone tied with the last shooter inside it, which can award more
    medals than the nominal quota.
    """
    count = len(shooters)
    silver_quota = count // SILVER_QUOTA_DIVISOR
    bronze_quota = count // BRONZE_QUOTA_DIVISOR

    ranked = rank_with_tie_breakers(
        range(count),
        lambda idx: (-shooters[idx].total_score, -shooters[idx].total_x_count),
    )
    medals: List[Optional[Medal]] = [None] * count
    for entry in ranked:
        if entry.rank <= silver_quota:
            medals[entry.item] = Medal.SILVER
        elif entry.rank <= bronze_quota:
            medals[entry.item] = Medal.BRONZE
    return medals


def _medals_in_input_order(shooters: Sequence[ShooterResult], config: MedalConfig) -> List[Optional[Medal]]:
    medals: List[Optional[Medal]] = [None] * len(shooters)
    partitions = group_by_property(
        range(len(shooters)),
        lambda idx: partition_key(shooters[idx].shooting_class, config.split_group_c),
    )
    for key, indices in partitions.items():
        members = [shooters[idx] for idx in indices]
        group = weapon_group(members[0].shooting_class)
        quota = percentage_medals(members)
        for idx, member, quota_medal in zip(indices, members, quota):
            fixed = fixed_score_medal(member.total_score, group, config.series_count)
            medals[idx] = best_medal(quota_medal, fixed)
        logger.debug(
            "Partition {}: {} shooters, {} silver, {} bronze",
            key,
            len(members),
            sum(1 for idx in indices if medals[idx] == Medal.SILVER),
            sum(1 for idx in indices if medals[idx] == Medal.BRONZE),
        )
    return medals


def _medals_applicable(shooters: Optional[Iterable[ShooterResult]], config: MedalConfig) -> bool:
    if not shooters:
        logger.debug("No shooters, skipping standard medals")
        return False
    if config.series_count < MIN_MEDAL_SERIES_COUNT:
        logger.debug(
            "Series count {} below {}, skipping standard medals",
            config.series_count,
            MIN_MEDAL_SERIES_COUNT,
        )
        return False
    return True


def calculate_standard_medals(
    shooters: Optional[Sequence[ShooterResult]], config: MedalConfig
) -> Dict[MedalKey, Optional[Medal]]:
    """
    Map (member id, partition) -> standard medal (None for no medal).

    A member entered in several weapon groups gets one key per group, so a
    medal won in one group is never overwritten by another entry.

    Returns an empty mapping when medals do not apply (no shooters or fewer
    than six series); the caller's records are never modified.
    """
    if not _medals_applicable(shooters, config):
        return {}
    medals = _medals_in_input_order(shooters, config)
    return {
        medal_key(shooter, config.split_group_c): medal
        for shooter, medal in zip(shooters, medals)
    }


def apply_standard_medals(
    shooters: Optional[Sequence[ShooterResult]], config: MedalConfig
) -> List[ShooterResult]:
    """Copies of `shooters` with `standard_medal` set; unchanged copies when medals do not apply."""
    if not _medals_applicable(shooters, config):
        return [shooter.model_copy() for shooter in shooters or []]
    medals = _medals_in_input_order(shooters, config)
    return [
        shooter.model_copy(update={"standard_medal": medal})
        for shooter, medal in zip(shooters, medals)
    ]
