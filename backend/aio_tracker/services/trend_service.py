"""
Trend & Overview Aggregation
Folds a window of sessions into summary metrics and rank history
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from ..adapters.parsing import ParsedSegment, Reference
from .keyword_records import KeywordRecord, build_keyword_record, build_keyword_records
from .session_differ import (
    ChangeSummary,
    SessionChange,
    diff_sessions,
    summarize_changes,
    top_changes,
)


@dataclass
class SessionSnapshot:
    """A session together with its keyword records"""
    session: Any
    records: List[KeywordRecord]


@dataclass
class AIOStats:
    total_keywords: int = 0
    with_aio: int = 0
    aio_rate: float = 0            # Percent of keywords with an AI Overview
    brand_citations: int = 0       # Keywords citing the brand
    brand_citation_rate: float = 0 # Percent of AIO keywords citing the brand
    avg_brand_rank: Optional[float] = None
    top_ranked: int = 0


@dataclass
class SessionMetrics(AIOStats):
    session_id: Optional[int] = None
    session_name: str = ""
    date: Optional[datetime] = None
    # Organic results
    organic_rankings: int = 0
    avg_organic_rank: Optional[float] = None
    organic_visibility_rate: float = 0
    top_ranked_organic: int = 0


@dataclass
class RankPoint:
    session_id: int
    rank: Optional[int]


@dataclass
class KeywordTrend:
    keyword: str
    has_ai_overview: bool
    brand_rank: Optional[int]
    rank_history: List[RankPoint] = field(default_factory=list)


@dataclass
class ProjectOverview:
    has_data: bool
    sessions: List[Any] = field(default_factory=list)
    latest_session: Any = None
    previous_session: Any = None
    keywords: List[KeywordTrend] = field(default_factory=list)
    stats: Optional[AIOStats] = None
    change_summary: Optional[ChangeSummary] = None
    changes: Optional[List[SessionChange]] = None


@dataclass
class MatrixCell:
    has_aio: bool
    brand_rank: Optional[int]
    reference_count: int


@dataclass
class ComparisonMatrix:
    sessions: List[Any]
    keywords: List[str]
    matrix: Dict[str, Dict[int, Optional[MatrixCell]]]


@dataclass
class KeywordHistoryEntry:
    session_id: int
    session_name: Optional[str]
    session_date: datetime
    has_ai_overview: bool
    aio_markdown: Optional[str]
    references: List[Reference]
    brand_rank: Optional[int]
    segments: List[ParsedSegment] = field(default_factory=list)

    @property
    def reference_count(self) -> int:
        return len(self.references)


def compute_aio_stats(records: Sequence[KeywordRecord], top_rank_threshold: int = 3) -> AIOStats:
    """
    AI Overview and brand citation stats for one session.

    avg_brand_rank only averages keywords where the brand was cited and is
    None when it never was.
    """
    total = len(records)
    with_aio = sum(1 for r in records if r.has_ai_overview)
    ranks = [r.brand_rank for r in records if r.has_ai_overview and r.brand_rank is not None]

    return AIOStats(
        total_keywords=total,
        with_aio=with_aio,
        aio_rate=(with_aio / total) * 100 if total > 0 else 0,
        brand_citations=len(ranks),
        brand_citation_rate=(len(ranks) / with_aio) * 100 if with_aio > 0 else 0,
        avg_brand_rank=sum(ranks) / len(ranks) if ranks else None,
        top_ranked=sum(1 for rank in ranks if rank <= top_rank_threshold),
    )


def extract_organic_brand_rank(raw_api_result: Optional[str], brand_domain: str) -> Optional[int]:
    """Organic position of the brand domain in a stored provider result"""
    if not raw_api_result or not brand_domain:
        return None

    try:
        api_result = json.loads(raw_api_result)
    except (TypeError, ValueError):
        return None

    if not isinstance(api_result, dict):
        return None

    organic = [
        item for item in (api_result.get("items") or [])
        if isinstance(item, dict) and item.get("type") == "organic"
    ]
    organic.sort(key=lambda item: item.get("rank_group") or 0)

    needle = brand_domain.lower()
    for idx, item in enumerate(organic):
        if needle in str(item.get("domain") or "").lower():
            return item.get("rank_group") or idx + 1

    return None


def summarize_session(
    session: Any,
    rows: Sequence[Any],
    brand_name: Optional[str],
    brand_domain: Optional[str],
    top_rank_threshold: int = 3,
) -> SessionMetrics:
    """Trend metrics for one session's stored rows"""
    records = build_keyword_records(rows, brand_name, brand_domain)
    stats = compute_aio_stats(records, top_rank_threshold)

    organic_ranks = []
    for row in rows:
        rank = extract_organic_brand_rank(getattr(row, "raw_api_result", None), brand_domain or "")
        if rank is not None:
            organic_ranks.append(rank)

    total = stats.total_keywords
    return SessionMetrics(
        **stats.__dict__,
        session_id=session.id,
        session_name=session.name or f"Session {session.id}",
        date=session.created_at,
        organic_rankings=len(organic_ranks),
        avg_organic_rank=sum(organic_ranks) / len(organic_ranks) if organic_ranks else None,
        organic_visibility_rate=(len(organic_ranks) / total) * 100 if total > 0 else 0,
        top_ranked_organic=sum(1 for rank in organic_ranks if rank <= top_rank_threshold),
    )


def build_rank_history(window: Sequence[SessionSnapshot]) -> Dict[str, List[RankPoint]]:
    """
    Per-keyword brand rank across a newest-first window, oldest first.

    Sessions in which a keyword was not checked contribute no point.
    """
    history: Dict[str, List[RankPoint]] = {}
    for snapshot in reversed(window):
        for record in snapshot.records:
            history.setdefault(record.keyword, []).append(
                RankPoint(session_id=snapshot.session.id, rank=record.brand_rank)
            )
    return history


def build_overview(
    window: Sequence[SessionSnapshot],
    sparkline_window: int = 5,
    top_changes_limit: int = 10,
    top_rank_threshold: int = 3,
) -> ProjectOverview:
    """
    Dashboard overview of a project.

    Args:
        window: Newest-first sessions with their records; the first one is
            the current session
        sparkline_window: Sessions used for the rank history
        top_changes_limit: Size of the prioritized change list

    Returns:
        ProjectOverview with has_data False when the window is empty
    """
    if not window:
        return ProjectOverview(has_data=False)

    latest = window[0]
    previous = window[1] if len(window) > 1 else None

    history = build_rank_history(window[:sparkline_window])
    keywords = [
        KeywordTrend(
            keyword=record.keyword,
            has_ai_overview=record.has_ai_overview,
            brand_rank=record.brand_rank,
            rank_history=history.get(record.keyword, []),
        )
        for record in latest.records
    ]

    change_summary = None
    changes = None
    if previous is not None:
        all_changes = diff_sessions(previous.records, latest.records)
        change_summary = summarize_changes(all_changes)
        changes = top_changes(all_changes, limit=top_changes_limit)

    return ProjectOverview(
        has_data=True,
        sessions=[snapshot.session for snapshot in window[:sparkline_window]],
        latest_session=latest.session,
        previous_session=previous.session if previous else None,
        keywords=keywords,
        stats=compute_aio_stats(latest.records, top_rank_threshold),
        change_summary=change_summary,
        changes=changes,
    )


def build_comparison_matrix(snapshots: Sequence[SessionSnapshot]) -> ComparisonMatrix:
    """
    Keyword x session grid, sessions oldest first, keywords alphabetical.

    A None cell means the keyword was not checked in that session.
    """
    ordered = sorted(snapshots, key=lambda s: (s.session.created_at, s.session.id))
    keywords = sorted({record.keyword for snap in ordered for record in snap.records})

    matrix: Dict[str, Dict[int, Optional[MatrixCell]]] = {
        keyword: {snap.session.id: None for snap in ordered} for keyword in keywords
    }

    for snap in ordered:
        for record in snap.records:
            matrix[record.keyword][snap.session.id] = MatrixCell(
                has_aio=record.has_ai_overview,
                brand_rank=record.brand_rank,
                reference_count=record.reference_count,
            )

    return ComparisonMatrix(
        sessions=[snap.session for snap in ordered],
        keywords=keywords,
        matrix=matrix,
    )


def build_keyword_history(
    entries: Sequence[Any],
    brand_name: Optional[str],
    brand_domain: Optional[str],
) -> List[KeywordHistoryEntry]:
    """Timeline of one keyword from (session, row) pairs, order preserved"""
    history = []
    for session, row in entries:
        record = build_keyword_record(row, brand_name, brand_domain)
        history.append(KeywordHistoryEntry(
            session_id=session.id,
            session_name=session.name,
            session_date=session.created_at,
            has_ai_overview=record.has_ai_overview,
            aio_markdown=record.aio_markdown,
            references=record.references,
            brand_rank=record.brand_rank,
            segments=record.segments,
        ))
    return history
