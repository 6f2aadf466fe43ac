"""
Analysis Routes
Competitor analysis, CSV export and session trends
"""

import logging
from enum import Enum
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from aio_tracker.config import get_settings
from aio_tracker.models import CheckSession, Project
from aio_tracker.schemas.analysis import (
    AnalyzeRequest, AnalysisResponse, SessionMetricsResponse, TrendsResponse,
)
from aio_tracker.services import (
    AnalysisResult,
    SessionStore,
    analyze_keywords,
    summarize_session,
    keywords_to_csv,
    competitors_to_csv,
)
from aio_tracker.utils import get_db
from .projects import get_project_or_404

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()


class ExportType(str, Enum):
    KEYWORDS = "keywords"
    COMPETITORS = "competitors"


async def _resolve_session(
    store: SessionStore,
    project: Project,
    session_id: Optional[int],
) -> CheckSession:
    """The requested session of the project, or its latest one"""
    if session_id is not None:
        session = await store.get_session(session_id)
        if not session or session.project_id != project.id:
            raise HTTPException(status_code=404, detail="Session not found")
        return session

    session = await store.get_latest_session(project.id)
    if not session:
        raise HTTPException(status_code=400, detail="No keywords found in project")
    return session


async def _run_analysis(
    store: SessionStore,
    project_id: int,
    session_id: Optional[int],
) -> Tuple[CheckSession, AnalysisResult]:
    project = await get_project_or_404(store, project_id)
    session = await _resolve_session(store, project, session_id)

    rows = await store.get_session_keywords(session.id)
    if not rows:
        raise HTTPException(status_code=400, detail="No keywords found in project")

    result = analyze_keywords(rows, project.brand_name, project.brand_domain)
    logger.info(
        f"Analyzed session {session.id}: {result.summary.total_keywords} keywords, "
        f"{result.summary.competitors_identified} competitors"
    )
    return session, result


@router.post("", response_model=AnalysisResponse)
async def analyze_session(
    request: AnalyzeRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Competitor analysis for one session.

    Uses the project's latest session unless session_id is given. Brand
    settings are read from the project, so brand ranks follow the current
    configuration.
    """
    store = SessionStore(db)
    session, result = await _run_analysis(store, request.project_id, request.session_id)

    response = AnalysisResponse.model_validate(result)
    response.session_id = session.id
    return response


@router.get("/export")
async def export_analysis(
    project_id: int = Query(...),
    export_type: ExportType = Query(ExportType.KEYWORDS, alias="type"),
    session_id: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Download keyword records or competitor metrics as CSV"""
    store = SessionStore(db)
    session, result = await _run_analysis(store, project_id, session_id)

    if export_type == ExportType.COMPETITORS:
        content = competitors_to_csv(result.competitors)
    else:
        content = keywords_to_csv(result.keywords_analysis)

    filename = f"aio-{export_type.value}-project-{project_id}-session-{session.id}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/trends", response_model=TrendsResponse)
async def get_trends(
    project_id: int = Query(...),
    limit: int = Query(settings.TRENDS_DEFAULT_LIMIT, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """Per-session AI Overview and organic metrics for the newest sessions"""
    store = SessionStore(db)
    project = await get_project_or_404(store, project_id)

    sessions = await store.get_recent_sessions(project_id, limit=limit)
    rows_by_session = await store.get_keywords_for_sessions([s.id for s in sessions])

    trends = [
        SessionMetricsResponse.model_validate(summarize_session(
            session,
            rows_by_session.get(session.id, []),
            project.brand_name,
            project.brand_domain,
            top_rank_threshold=settings.TOP_RANK_THRESHOLD,
        ))
        for session in sessions
    ]

    return TrendsResponse(
        project_id=project.id,
        brand_name=project.brand_name,
        brand_domain=project.brand_domain,
        trends=trends,
    )
