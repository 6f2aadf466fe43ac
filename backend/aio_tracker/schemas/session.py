"""
Check Session Schemas
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from aio_tracker.services.session_differ import ChangeType


class SessionCreate(BaseModel):
    """Session creation request"""
    project_id: int
    name: Optional[str] = Field(None, max_length=255)
    location_code: Optional[str] = Field(None, max_length=20)
    language_code: Optional[str] = Field(None, max_length=10)


class SessionUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)


class SessionResponse(BaseModel):
    """Check session with derived counts"""
    id: int
    project_id: int
    name: Optional[str] = None
    location_code: Optional[str] = None
    language_code: Optional[str] = None
    keyword_count: int = 0
    aio_count: int = 0
    aio_rate: float = 0
    created_at: datetime

    class Config:
        from_attributes = True


class SessionRef(BaseModel):
    id: int
    name: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ReferenceResponse(BaseModel):
    rank: int
    domain: str
    source: str
    url: str

    class Config:
        from_attributes = True


class ParsedSegmentResponse(BaseModel):
    """Text or citation piece of the AI Overview; citation_num is the reference rank when resolved"""
    type: str
    content: Optional[str] = None
    citation_num: Optional[int] = None
    url: Optional[str] = None
    resolved: bool = False

    class Config:
        from_attributes = True


class BrandHighlightResponse(BaseModel):
    start: int
    end: int
    text: str

    class Config:
        from_attributes = True


class KeywordRecordResponse(BaseModel):
    """One keyword's result, with brand rank for the current brand settings"""
    id: Optional[int] = None
    keyword: str
    has_ai_overview: bool
    aio_markdown: Optional[str] = None
    references: List[ReferenceResponse] = []
    reference_count: int = 0
    brand_rank: Optional[int] = None
    brand_mentioned: bool = False
    segments: List[ParsedSegmentResponse] = []
    aio_text: str = ""
    citation_numbers: List[int] = []
    brand_highlights: List[BrandHighlightResponse] = []
    session_id: Optional[int] = None
    created_at: Optional[datetime] = None

    # Change tracking (session detail only)
    change_type: Optional[ChangeType] = None
    previous_brand_rank: Optional[int] = None

    class Config:
        from_attributes = True


class RankPointResponse(BaseModel):
    session_id: int
    rank: Optional[int] = None

    class Config:
        from_attributes = True


class SessionDetailResponse(BaseModel):
    session: SessionResponse
    keywords: List[KeywordRecordResponse]
    previous_session: Optional[SessionRef] = None
    rank_history: Optional[Dict[str, List[RankPointResponse]]] = None


class SessionChangeResponse(BaseModel):
    keyword: str
    change_type: ChangeType
    old_has_aio: Optional[bool] = None
    new_has_aio: Optional[bool] = None
    old_brand_rank: Optional[int] = None
    new_brand_rank: Optional[int] = None

    class Config:
        from_attributes = True


class ChangeSummaryResponse(BaseModel):
    new_keywords: int = 0
    removed_keywords: int = 0
    aio_gained: int = 0
    aio_lost: int = 0
    rank_improved: int = 0
    rank_declined: int = 0
    unchanged: int = 0
    total_changes: int = 0

    class Config:
        from_attributes = True


class SessionCompareRequest(BaseModel):
    """Pairwise comparison; order is resolved by session creation time"""
    session_id_1: int
    session_id_2: int


class SessionComparisonResponse(BaseModel):
    from_session: SessionResponse
    to_session: SessionResponse
    changes: List[SessionChangeResponse]
    summary: ChangeSummaryResponse


class MatrixCellResponse(BaseModel):
    has_aio: bool
    brand_rank: Optional[int] = None
    reference_count: int = 0

    class Config:
        from_attributes = True


class ComparisonMatrixResponse(BaseModel):
    sessions: List[SessionResponse]
    keywords: List[str]
    matrix: Dict[str, Dict[int, Optional[MatrixCellResponse]]]

    class Config:
        from_attributes = True


class AIOStatsResponse(BaseModel):
    total_keywords: int = 0
    with_aio: int = 0
    aio_rate: float = 0
    brand_citations: int = 0
    brand_citation_rate: float = 0
    avg_brand_rank: Optional[float] = None
    top_ranked: int = 0

    class Config:
        from_attributes = True


class KeywordTrendResponse(BaseModel):
    keyword: str
    has_ai_overview: bool
    brand_rank: Optional[int] = None
    rank_history: List[RankPointResponse] = []

    class Config:
        from_attributes = True


class ProjectOverviewResponse(BaseModel):
    has_data: bool
    sessions: List[SessionResponse] = []
    latest_session: Optional[SessionResponse] = None
    previous_session: Optional[SessionResponse] = None
    keywords: List[KeywordTrendResponse] = []
    stats: Optional[AIOStatsResponse] = None
    change_summary: Optional[ChangeSummaryResponse] = None
    changes: Optional[List[SessionChangeResponse]] = None

    class Config:
        from_attributes = True


class KeywordHistoryEntryResponse(BaseModel):
    session_id: int
    session_name: Optional[str] = None
    session_date: datetime
    has_ai_overview: bool
    aio_markdown: Optional[str] = None
    references: List[ReferenceResponse] = []
    reference_count: int = 0
    brand_rank: Optional[int] = None
    segments: List[ParsedSegmentResponse] = []

    class Config:
        from_attributes = True


class KeywordHistoryResponse(BaseModel):
    keyword: str
    history: List[KeywordHistoryEntryResponse]
    latest_result: Optional[KeywordHistoryEntryResponse] = None
