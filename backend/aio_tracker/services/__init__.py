"""
Business Logic Services
"""

from .keyword_records import KeywordRecord, build_keyword_record, build_keyword_records
from .competitor_analyzer import (
    CompetitorMetrics,
    AnalysisSummary,
    AnalysisResult,
    aggregate_competitors,
    analyze_keywords,
)
from .session_differ import (
    ChangeType,
    SessionChange,
    ChangeSummary,
    classify_change,
    diff_sessions,
    order_sessions,
    summarize_changes,
    top_changes,
    changes_by_keyword,
)
from .trend_service import (
    SessionSnapshot,
    AIOStats,
    SessionMetrics,
    RankPoint,
    KeywordTrend,
    ProjectOverview,
    MatrixCell,
    ComparisonMatrix,
    KeywordHistoryEntry,
    compute_aio_stats,
    summarize_session,
    build_rank_history,
    build_overview,
    build_comparison_matrix,
    build_keyword_history,
)
from .session_store import SessionStore
from .dataforseo_service import DataForSEOService, DataForSEOError, FetchOutcome
from .export_service import keywords_to_csv, competitors_to_csv

__all__ = [
    "KeywordRecord",
    "build_keyword_record",
    "build_keyword_records",
    "CompetitorMetrics",
    "AnalysisSummary",
    "AnalysisResult",
    "aggregate_competitors",
    "analyze_keywords",
    "ChangeType",
    "SessionChange",
    "ChangeSummary",
    "classify_change",
    "diff_sessions",
    "order_sessions",
    "summarize_changes",
    "top_changes",
    "changes_by_keyword",
    "SessionSnapshot",
    "AIOStats",
    "SessionMetrics",
    "RankPoint",
    "KeywordTrend",
    "ProjectOverview",
    "MatrixCell",
    "ComparisonMatrix",
    "KeywordHistoryEntry",
    "compute_aio_stats",
    "summarize_session",
    "build_rank_history",
    "build_overview",
    "build_comparison_matrix",
    "build_keyword_history",
    "SessionStore",
    "DataForSEOService",
    "DataForSEOError",
    "FetchOutcome",
    "keywords_to_csv",
    "competitors_to_csv",
]
