"""
Project Management Routes
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from aio_tracker.models import Project
from aio_tracker.schemas.project import (
    ProjectCreate, ProjectUpdate, ProjectResponse, ProjectListResponse,
)
from aio_tracker.schemas.session import (
    KeywordHistoryEntryResponse, KeywordHistoryResponse,
)
from aio_tracker.services import SessionStore, build_keyword_history
from aio_tracker.utils import get_db

router = APIRouter()


async def get_project_or_404(store: SessionStore, project_id: int) -> Project:
    project = await store.get_project(project_id)
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


async def _project_to_response(store: SessionStore, project: Project) -> ProjectResponse:
    keyword_count, aio_count = await store.get_project_counts(project.id)
    return ProjectResponse(
        id=project.id,
        name=project.name,
        brand_name=project.brand_name,
        brand_domain=project.brand_domain,
        location_code=project.location_code,
        language_code=project.language_code,
        created_at=project.created_at,
        keyword_count=keyword_count,
        aio_count=aio_count,
    )


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new project"""
    store = SessionStore(db)
    project = await store.create_project(
        name=project_data.name,
        brand_name=project_data.brand_name,
        brand_domain=project_data.brand_domain,
        location_code=project_data.location_code,
        language_code=project_data.language_code,
    )
    await db.commit()

    return await _project_to_response(store, project)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    db: AsyncSession = Depends(get_db),
):
    """List projects, newest first"""
    store = SessionStore(db)
    projects = await store.list_projects()

    return ProjectListResponse(
        items=[await _project_to_response(store, p) for p in projects],
        total=len(projects),
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get project details"""
    store = SessionStore(db)
    project = await get_project_or_404(store, project_id)
    return await _project_to_response(store, project)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    update_data: ProjectUpdate,
    db: AsyncSession = Depends(get_db),
):
    """
    Update project settings.

    Changing brand_name or brand_domain takes effect on the next read: brand
    ranks are always recomputed from the stored references.
    """
    store = SessionStore(db)
    project = await get_project_or_404(store, project_id)

    project = await store.update_project(project, **update_data.model_dump(exclude_unset=True))
    await db.commit()

    return await _project_to_response(store, project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete a project with all of its sessions and keyword rows"""
    store = SessionStore(db)
    await get_project_or_404(store, project_id)

    await store.delete_project(project_id)
    await db.commit()


@router.get("/{project_id}/keywords", response_model=List[str])
async def list_project_keywords(
    project_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Every keyword ever checked in the project, alphabetical"""
    store = SessionStore(db)
    await get_project_or_404(store, project_id)
    return await store.get_project_keywords(project_id)


@router.get("/{project_id}/keywords/history", response_model=KeywordHistoryResponse)
async def get_keyword_history(
    project_id: int,
    keyword: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """Timeline of one keyword across all sessions, newest first"""
    store = SessionStore(db)
    project = await get_project_or_404(store, project_id)

    entries = await store.get_keyword_history(project_id, keyword)
    history = [
        KeywordHistoryEntryResponse.model_validate(entry)
        for entry in build_keyword_history(entries, project.brand_name, project.brand_domain)
    ]

    return KeywordHistoryResponse(
        keyword=keyword,
        history=history,
        latest_result=history[0] if history else None,
    )
