from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from loguru import logger

T = TypeVar("T")
KeyFunc = Callable[[T], Any]

UNKNOWN_GROUP = "Unknown"


@dataclass(frozen=True)
class RankedItem(Generic[T]):
    item: T
    rank: int


def rank_with_tie_breakers(items: Optional[Iterable[T]], *keys: KeyFunc) -> List[RankedItem[T]]:
    """
    Sort ascending by every key in order (primary first) and assign ranks.
    Only the primary key decides ties; later keys just order items within a tie.
    Equal primary values share a rank and the next distinct value skips ahead
    to its 1-based position (1, 2, 2, 4).
    """
    if not keys:
        logger.debug("rank_with_tie_breakers called without ranking keys")
        return []
    ordered = sorted(items or [], key=lambda item: tuple(k(item) for k in keys))

    primary = keys[0]
    ranked: List[RankedItem[T]] = []
    previous: Any = None
    current_rank = 1
    for position, item in enumerate(ordered, start=1):
        value = primary(item)
        if ranked and value != previous:
            current_rank = position
        ranked.append(RankedItem(item=item, rank=current_rank))
        previous = value
    return ranked


def group_by_property(items: Optional[Iterable[T]], key: Callable[[T], Optional[str]]) -> Dict[str, List[T]]:
    groups: Dict[str, List[T]] = {}
    for item in items or []:
        group = key(item)
        groups.setdefault(UNKNOWN_GROUP if group is None else group, []).append(item)
    return groups


def rank_by_group(
    items: Optional[Iterable[T]],
    group_key: Callable[[T], Optional[str]],
    *keys: KeyFunc,
) -> Dict[str, List[RankedItem[T]]]:
    return {
        group: rank_with_tie_breakers(members, *keys)
        for group, members in group_by_property(items, group_key).items()
    }


def sort_ascending(items: Optional[Iterable[T]], key: KeyFunc) -> List[T]:
    return sorted(items or [], key=key)


def sort_descending(items: Optional[Iterable[T]], key: KeyFunc) -> List[T]:
    # reverse=True keeps equal items in their input order.
    return sorted(items or [], key=key, reverse=True)


def get_top_n(ranked: Optional[Iterable[RankedItem[T]]], count: int) -> List[T]:
    """Items ranked `count` or better; ties can make this longer than `count`."""
    if count <= 0:
        return []
    return [r.item for r in ranked or [] if r.rank <= count]


def get_rank_range(ranked: Optional[Iterable[RankedItem[T]]], start_rank: int, end_rank: int) -> List[T]:
    if start_rank < 1 or end_rank < start_rank:
        return []
    return [r.item for r in ranked or [] if start_rank <= r.rank <= end_rank]


def get_rank(ranked: Optional[Iterable[RankedItem[T]]], rank: int) -> List[T]:
    if rank < 1:
        return []
    return [r.item for r in ranked or [] if r.rank == rank]


def group_by_rank(ranked: Optional[Iterable[RankedItem[T]]]) -> Dict[int, List[T]]:
    groups: Dict[int, List[T]] = {}
    for r in ranked or []:
        groups.setdefault(r.rank, []).append(r.item)
    return groups


def renumber_sequential(ranked: Optional[Iterable[RankedItem[T]]]) -> List[RankedItem[T]]:
    """Collapse shared/gapped ranks (1, 1, 3, 4) into 1, 2, 3, 4."""
    ordered = sorted(ranked or [], key=lambda r: r.rank)
    return [RankedItem(item=r.item, rank=idx) for idx, r in enumerate(ordered, start=1)]


def is_tied(first: RankedItem[Any], second: RankedItem[Any]) -> bool:
    return first.rank == second.rank


def _ordinal(number: int) -> str:
    if 10 <= number % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return f"{number}{suffix}"


def placement_label(rank: int) -> str:
    if rank == 1:
        return "Gold"
    if rank == 2:
        return "Silver"
    if rank == 3:
        return "Bronze"
    return f"{_ordinal(rank)} place"


def placement_labels(ranked: Optional[Iterable[RankedItem[Any]]]) -> Dict[int, str]:
    return {rank: placement_label(rank) for rank in sorted({r.rank for r in ranked or []})}
