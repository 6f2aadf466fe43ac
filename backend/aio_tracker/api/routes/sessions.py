"""
Check Session Routes
Session CRUD, change tracking, comparison and the project overview
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from aio_tracker.config import get_settings
from aio_tracker.models import CheckSession, Project
from aio_tracker.schemas.session import (
    SessionCreate, SessionUpdate, SessionResponse, SessionRef,
    KeywordRecordResponse, RankPointResponse, SessionDetailResponse,
    SessionChangeResponse, ChangeSummaryResponse, SessionCompareRequest,
    SessionComparisonResponse, ComparisonMatrixResponse, ProjectOverviewResponse,
)
from aio_tracker.services import (
    SessionStore,
    SessionSnapshot,
    build_keyword_records,
    build_rank_history,
    build_overview,
    build_comparison_matrix,
    diff_sessions,
    changes_by_keyword,
    order_sessions,
    summarize_changes,
)
from aio_tracker.utils import get_db
from .projects import get_project_or_404

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()


async def get_session_or_404(store: SessionStore, session_id: int) -> CheckSession:
    session = await store.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


async def load_snapshots(
    store: SessionStore,
    project: Project,
    sessions: List[CheckSession],
) -> List[SessionSnapshot]:
    """Keyword records for each session, brand settings read from the project"""
    rows_by_session = await store.get_keywords_for_sessions([s.id for s in sessions])
    return [
        SessionSnapshot(
            session=session,
            records=build_keyword_records(
                rows_by_session.get(session.id, []),
                project.brand_name,
                project.brand_domain,
            ),
        )
        for session in sessions
    ]


def _parse_session_ids(raw: str) -> List[int]:
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise HTTPException(status_code=400, detail="session_ids must be a comma-separated list of integers")


@router.get("", response_model=List[SessionResponse])
async def list_sessions(
    project_id: int = Query(...),
    limit: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """List a project's sessions, newest first"""
    store = SessionStore(db)
    await get_project_or_404(store, project_id)
    return await store.list_sessions(project_id, limit=limit)


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    session_data: SessionCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create an empty session; location and language default to the project's"""
    store = SessionStore(db)
    project = await get_project_or_404(store, session_data.project_id)

    session = await store.create_session(
        project_id=project.id,
        name=session_data.name,
        location_code=session_data.location_code or project.location_code,
        language_code=session_data.language_code or project.language_code,
    )
    await db.commit()
    return session


@router.get("/compare", response_model=ComparisonMatrixResponse)
async def compare_sessions_matrix(
    project_id: int = Query(...),
    session_ids: str = Query(..., description="Comma-separated session ids"),
    db: AsyncSession = Depends(get_db),
):
    """
    Keyword x session matrix for two or more sessions.

    Cells are null where the keyword was not checked in that session.
    """
    ids = _parse_session_ids(session_ids)
    if len(set(ids)) < 2:
        raise HTTPException(status_code=400, detail="At least 2 sessions are required for comparison")

    store = SessionStore(db)
    project = await get_project_or_404(store, project_id)

    sessions = await store.get_sessions(project_id, ids)
    if len(sessions) < 2:
        raise HTTPException(status_code=404, detail="Sessions not found in this project")

    matrix = build_comparison_matrix(await load_snapshots(store, project, sessions))
    return ComparisonMatrixResponse.model_validate(matrix)


@router.post("/compare", response_model=SessionComparisonResponse)
async def compare_session_pair(
    request: SessionCompareRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Diff two sessions of the same project.

    The older session (by creation time) is always the baseline, whichever
    order the ids are given in.
    """
    store = SessionStore(db)
    first = await get_session_or_404(store, request.session_id_1)
    second = await get_session_or_404(store, request.session_id_2)

    if first.project_id != second.project_id:
        raise HTTPException(status_code=400, detail="Sessions belong to different projects")

    older, newer = order_sessions(first, second)
    project = await get_project_or_404(store, older.project_id)
    older_snap, newer_snap = await load_snapshots(store, project, [older, newer])

    changes = diff_sessions(older_snap.records, newer_snap.records)
    summary = summarize_changes(changes)

    return SessionComparisonResponse(
        from_session=SessionResponse.model_validate(older),
        to_session=SessionResponse.model_validate(newer),
        changes=[SessionChangeResponse.model_validate(c) for c in changes],
        summary=ChangeSummaryResponse.model_validate(summary),
    )


@router.get("/overview", response_model=ProjectOverviewResponse)
async def get_project_overview(
    project_id: int = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Latest session stats, changes since the previous one and rank sparklines"""
    store = SessionStore(db)
    project = await get_project_or_404(store, project_id)

    window_size = max(settings.SPARKLINE_WINDOW, 2)
    sessions = await store.get_recent_sessions(project_id, limit=window_size)
    window = await load_snapshots(store, project, sessions)

    overview = build_overview(
        window,
        sparkline_window=settings.SPARKLINE_WINDOW,
        top_changes_limit=settings.TOP_CHANGES_LIMIT,
        top_rank_threshold=settings.TOP_RANK_THRESHOLD,
    )
    return ProjectOverviewResponse.model_validate(overview)


@router.get("/{session_id}", response_model=SessionDetailResponse)
async def get_session_detail(
    session_id: int,
    include_changes: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """
    Session with its keyword records.

    With include_changes, each record is annotated with its change against
    the previous session, and rank history covers the sessions up to and
    including this one.
    """
    store = SessionStore(db)
    session = await get_session_or_404(store, session_id)
    project = await get_project_or_404(store, session.project_id)

    (current,) = await load_snapshots(store, project, [session])
    keywords = [KeywordRecordResponse.model_validate(r) for r in current.records]

    previous = None
    rank_history = None

    if include_changes:
        previous = await store.get_previous_session(session)
        if previous is not None:
            (prev_snap,) = await load_snapshots(store, project, [previous])
            by_keyword = changes_by_keyword(diff_sessions(prev_snap.records, current.records))
            for item in keywords:
                change = by_keyword.get(item.keyword)
                if change is not None:
                    item.change_type = change.change_type
                    item.previous_brand_rank = change.old_brand_rank

        # Newest-first window ending at this session
        all_sessions = await store.list_sessions(session.project_id)
        position = next(i for i, s in enumerate(all_sessions) if s.id == session.id)
        window = await load_snapshots(
            store, project, all_sessions[position:position + settings.SPARKLINE_WINDOW]
        )
        rank_history = {
            keyword: [RankPointResponse.model_validate(p) for p in points]
            for keyword, points in build_rank_history(window).items()
        }

    return SessionDetailResponse(
        session=SessionResponse.model_validate(session),
        keywords=keywords,
        previous_session=SessionRef.model_validate(previous) if previous else None,
        rank_history=rank_history,
    )


@router.patch("/{session_id}", response_model=SessionResponse)
async def rename_session(
    session_id: int,
    update_data: SessionUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Rename a session"""
    store = SessionStore(db)
    session = await get_session_or_404(store, session_id)

    if update_data.name is not None:
        session = await store.rename_session(session, update_data.name)
        await db.commit()

    return session


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete a session and its keyword rows"""
    store = SessionStore(db)
    await get_session_or_404(store, session_id)

    await store.delete_session(session_id)
    await db.commit()
    logger.info(f"Deleted session {session_id}")
