"""
Competitor Analysis & Trend Schemas
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .session import KeywordRecordResponse


class AnalyzeRequest(BaseModel):
    """Analyze one session; the project's latest session when omitted"""
    project_id: int
    session_id: Optional[int] = None


class CompetitorMetricsResponse(BaseModel):
    """Citation and mention statistics for one cited source"""
    brand: str
    cited_count: int
    mentioned_count: int
    unique_domains: List[str] = []
    average_rank: float
    cited_in_prompts: int
    prompt_cited_rate: float
    mention_rate: float
    is_user_brand: bool = False

    class Config:
        from_attributes = True


class AnalysisSummaryResponse(BaseModel):
    total_keywords: int
    ai_overviews_found: int
    competitors_identified: int

    class Config:
        from_attributes = True


class AnalysisResponse(BaseModel):
    session_id: Optional[int] = None
    summary: AnalysisSummaryResponse
    keywords_analysis: List[KeywordRecordResponse]
    competitors: List[CompetitorMetricsResponse]

    class Config:
        from_attributes = True


class SessionMetricsResponse(BaseModel):
    """Per-session trend point"""
    session_id: int
    session_name: str
    date: datetime

    # AI Overview
    total_keywords: int = 0
    with_aio: int = 0
    aio_rate: float = 0
    brand_citations: int = 0
    brand_citation_rate: float = 0
    avg_brand_rank: Optional[float] = None
    top_ranked: int = 0

    # Organic
    organic_rankings: int = 0
    avg_organic_rank: Optional[float] = None
    organic_visibility_rate: float = 0
    top_ranked_organic: int = 0

    class Config:
        from_attributes = True


class TrendsResponse(BaseModel):
    project_id: int
    brand_name: Optional[str] = None
    brand_domain: Optional[str] = None
    trends: List[SessionMetricsResponse]
