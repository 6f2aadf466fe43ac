"""
Pydantic Schemas for API Request/Response validation
"""

from .project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectListResponse,
)
from .session import (
    SessionCreate,
    SessionUpdate,
    SessionResponse,
    SessionRef,
    ReferenceResponse,
    ParsedSegmentResponse,
    BrandHighlightResponse,
    KeywordRecordResponse,
    RankPointResponse,
    SessionDetailResponse,
    SessionChangeResponse,
    ChangeSummaryResponse,
    SessionCompareRequest,
    SessionComparisonResponse,
    MatrixCellResponse,
    ComparisonMatrixResponse,
    AIOStatsResponse,
    KeywordTrendResponse,
    ProjectOverviewResponse,
    KeywordHistoryEntryResponse,
    KeywordHistoryResponse,
)
from .analysis import (
    AnalyzeRequest,
    CompetitorMetricsResponse,
    AnalysisSummaryResponse,
    AnalysisResponse,
    SessionMetricsResponse,
    TrendsResponse,
)
from .ingest import (
    UploadResponse,
    FetchKeywordsRequest,
    FetchError,
    FetchKeywordsResponse,
)

__all__ = [
    # Project
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectResponse",
    "ProjectListResponse",
    # Session
    "SessionCreate",
    "SessionUpdate",
    "SessionResponse",
    "SessionRef",
    "ReferenceResponse",
    "ParsedSegmentResponse",
    "BrandHighlightResponse",
    "KeywordRecordResponse",
    "RankPointResponse",
    "SessionDetailResponse",
    "SessionChangeResponse",
    "ChangeSummaryResponse",
    "SessionCompareRequest",
    "SessionComparisonResponse",
    "MatrixCellResponse",
    "ComparisonMatrixResponse",
    "AIOStatsResponse",
    "KeywordTrendResponse",
    "ProjectOverviewResponse",
    "KeywordHistoryEntryResponse",
    "KeywordHistoryResponse",
    # Analysis
    "AnalyzeRequest",
    "CompetitorMetricsResponse",
    "AnalysisSummaryResponse",
    "AnalysisResponse",
    "SessionMetricsResponse",
    "TrendsResponse",
    # Ingest
    "UploadResponse",
    "FetchKeywordsRequest",
    "FetchError",
    "FetchKeywordsResponse",
]
