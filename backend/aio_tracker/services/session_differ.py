"""
Session Change Detection
Classifies how each keyword moved between two snapshots of a project
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..config import CHANGE_PRIORITY
from .keyword_records import KeywordRecord


class ChangeType(str, Enum):
    NEW = "new"
    REMOVED = "removed"
    AIO_GAINED = "aio_gained"
    AIO_LOST = "aio_lost"
    RANK_IMPROVED = "rank_improved"
    RANK_DECLINED = "rank_declined"
    NO_CHANGE = "no_change"


@dataclass
class SessionChange:
    """One keyword's delta between an older and a newer session"""
    keyword: str
    change_type: ChangeType
    old_has_aio: Optional[bool] = None      # None when absent from the older session
    new_has_aio: Optional[bool] = None      # None when absent from the newer session
    old_brand_rank: Optional[int] = None
    new_brand_rank: Optional[int] = None


@dataclass
class ChangeSummary:
    new_keywords: int = 0
    removed_keywords: int = 0
    aio_gained: int = 0
    aio_lost: int = 0
    rank_improved: int = 0
    rank_declined: int = 0
    unchanged: int = 0

    @property
    def total_changes(self) -> int:
        return (
            self.new_keywords + self.removed_keywords + self.aio_gained
            + self.aio_lost + self.rank_improved + self.rank_declined
        )


def classify_change(
    older: Optional[KeywordRecord],
    newer: Optional[KeywordRecord],
) -> ChangeType:
    """
    Classify one keyword from its state in each session.

    AIO presence is decided before rank, so gaining an overview is
    aio_gained even when the newer session also cites the brand.
    """
    if older is None and newer is None:
        return ChangeType.NO_CHANGE
    if older is None:
        return ChangeType.NEW
    if newer is None:
        return ChangeType.REMOVED

    if not older.has_ai_overview and newer.has_ai_overview:
        return ChangeType.AIO_GAINED
    if older.has_ai_overview and not newer.has_ai_overview:
        return ChangeType.AIO_LOST

    old_rank = older.brand_rank
    new_rank = newer.brand_rank

    if old_rank is not None and new_rank is not None:
        if new_rank < old_rank:
            return ChangeType.RANK_IMPROVED
        if new_rank > old_rank:
            return ChangeType.RANK_DECLINED
        return ChangeType.NO_CHANGE

    if old_rank is None and new_rank is not None:
        return ChangeType.RANK_IMPROVED
    if old_rank is not None and new_rank is None:
        return ChangeType.RANK_DECLINED

    return ChangeType.NO_CHANGE


def _by_keyword(records: Iterable[KeywordRecord]) -> Dict[str, KeywordRecord]:
    return {record.keyword: record for record in records}


def diff_sessions(
    older: Iterable[KeywordRecord],
    newer: Iterable[KeywordRecord],
) -> List[SessionChange]:
    """
    Per-keyword changes for every keyword present in either session.

    Keywords are listed older-session first, then keywords only in the
    newer session. No ordering by importance is applied here.
    """
    old_map = _by_keyword(older)
    new_map = _by_keyword(newer)

    all_keywords = list(old_map)
    all_keywords += [kw for kw in new_map if kw not in old_map]

    changes = []
    for keyword in all_keywords:
        old_kw = old_map.get(keyword)
        new_kw = new_map.get(keyword)

        changes.append(SessionChange(
            keyword=keyword,
            change_type=classify_change(old_kw, new_kw),
            old_has_aio=old_kw.has_ai_overview if old_kw else None,
            new_has_aio=new_kw.has_ai_overview if new_kw else None,
            old_brand_rank=old_kw.brand_rank if old_kw else None,
            new_brand_rank=new_kw.brand_rank if new_kw else None,
        ))

    return changes


def order_sessions(first: Any, second: Any) -> Tuple[Any, Any]:
    """
    Return (older, newer) by created_at, falling back to id on a tie.

    Callers may pass sessions in any order.
    """
    def sort_key(session):
        return (session.created_at, session.id)

    if sort_key(second) < sort_key(first):
        return second, first
    return first, second


def summarize_changes(changes: Iterable[SessionChange]) -> ChangeSummary:
    summary = ChangeSummary()
    counters = {
        ChangeType.NEW: "new_keywords",
        ChangeType.REMOVED: "removed_keywords",
        ChangeType.AIO_GAINED: "aio_gained",
        ChangeType.AIO_LOST: "aio_lost",
        ChangeType.RANK_IMPROVED: "rank_improved",
        ChangeType.RANK_DECLINED: "rank_declined",
        ChangeType.NO_CHANGE: "unchanged",
    }
    for change in changes:
        attr = counters[change.change_type]
        setattr(summary, attr, getattr(summary, attr) + 1)
    return summary


def top_changes(changes: Iterable[SessionChange], limit: int = 10) -> List[SessionChange]:
    """Most important changes first; unchanged keywords are dropped"""
    significant = [c for c in changes if c.change_type != ChangeType.NO_CHANGE]
    significant.sort(key=lambda c: CHANGE_PRIORITY.get(c.change_type.value, 99))
    return significant[:limit]


def changes_by_keyword(changes: Iterable[SessionChange]) -> Mapping[str, SessionChange]:
    return {change.keyword: change for change in changes}
