"""
Ingest Routes
Stores provider results as a new check session, from a JSON upload or a live fetch
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from aio_tracker.adapters.ingest import detect_upload_format, normalize_upload, row_from_result
from aio_tracker.config import get_settings
from aio_tracker.schemas.ingest import (
    UploadResponse, FetchKeywordsRequest, FetchKeywordsResponse, FetchError,
)
from aio_tracker.services import DataForSEOService, SessionStore
from aio_tracker.utils import get_db
from .projects import get_project_or_404

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_REPORTED_ERRORS = 10


def get_dataforseo_service() -> DataForSEOService:
    """Provider client built from settings; 400 when no key is configured"""
    settings = get_settings()
    if not settings.DATAFORSEO_API_KEY:
        raise HTTPException(status_code=400, detail="DATAFORSEO_API_KEY not configured")

    return DataForSEOService(
        api_key=settings.DATAFORSEO_API_KEY,
        api_url=settings.DATAFORSEO_API_URL,
        timeout=settings.DATAFORSEO_TIMEOUT,
        depth=settings.DATAFORSEO_DEPTH,
    )


@router.post("/upload", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_results(
    project_id: int = Form(...),
    file: UploadFile = File(...),
    session_name: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """
    Import a provider results file into a new session.

    Accepts a result array, a DataFrame-style indexed object, a full task
    response or a single result.
    """
    store = SessionStore(db)
    project = await get_project_or_404(store, project_id)

    content = await file.read()
    try:
        payload = json.loads(content)
    except (UnicodeDecodeError, ValueError):
        logger.warning(f"Rejected upload '{file.filename}' for project {project_id}: invalid JSON")
        raise HTTPException(status_code=400, detail="Invalid JSON file")

    upload_format = detect_upload_format(payload)
    rows = normalize_upload(payload)
    if not rows:
        raise HTTPException(status_code=400, detail="No keyword data found in file")

    session = await store.create_session(
        project_id=project.id,
        name=session_name or file.filename,
        location_code=project.location_code,
        language_code=project.language_code,
    )
    saved = await store.save_keyword_rows(session, rows)
    await db.commit()

    logger.info(f"Uploaded {saved} keywords ({upload_format.value}) into session {session.id}")
    return UploadResponse(
        project_id=project.id,
        session_id=session.id,
        format=upload_format,
        saved_count=saved,
    )


@router.post("/fetch-keywords", response_model=FetchKeywordsResponse, status_code=status.HTTP_201_CREATED)
async def fetch_keywords(
    request: FetchKeywordsRequest,
    db: AsyncSession = Depends(get_db),
    service: DataForSEOService = Depends(get_dataforseo_service),
):
    """
    Fetch live SERP results for a keyword list into a new session.

    A keyword that fails is reported in errors and does not abort the rest.
    """
    settings = get_settings()
    store = SessionStore(db)
    project = await get_project_or_404(store, request.project_id)

    location_code = request.location_code or project.location_code
    language_code = request.language_code or project.language_code
    if not location_code or not language_code:
        raise HTTPException(status_code=400, detail="Location and language codes are required")

    session = await store.create_session(
        project_id=project.id,
        name=request.session_name,
        location_code=location_code,
        language_code=language_code,
    )

    outcomes = await service.fetch_keywords_batch(
        request.keywords,
        location_code,
        language_code,
        batch_size=settings.FETCH_BATCH_SIZE,
    )

    rows = [row_from_result(o.keyword, o.result) for o in outcomes if o.result is not None]
    errors = [FetchError(keyword=o.keyword, error=o.error) for o in outcomes if o.error is not None]

    saved = await store.save_keyword_rows(session, rows) if rows else 0
    await db.commit()

    logger.info(
        f"Fetched {len(request.keywords)} keywords into session {session.id}: "
        f"{saved} saved, {len(errors)} failed"
    )
    return FetchKeywordsResponse(
        project_id=project.id,
        session_id=session.id,
        total_keywords=len(request.keywords),
        saved_count=saved,
        error_count=len(errors),
        errors=errors[:MAX_REPORTED_ERRORS],
    )
