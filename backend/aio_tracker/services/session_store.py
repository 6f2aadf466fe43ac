"""
Session Store
Data access for projects, check sessions and keyword rows
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import select, func, delete, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ..adapters.ingest import RawKeywordRow, dedupe_rows
from ..models import Project, CheckSession, KeywordResult

logger = logging.getLogger(__name__)

PROJECT_FIELDS = ("name", "brand_name", "brand_domain", "location_code", "language_code")


class SessionStore:
    """
    Reads and writes snapshot data for the analytics.

    Hands out fully loaded rows only; missing rows come back as None or an
    empty list and the caller decides whether that is an error.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # PROJECTS
    # =========================================================================

    async def create_project(
        self,
        name: str,
        brand_name: Optional[str] = None,
        brand_domain: Optional[str] = None,
        location_code: Optional[str] = None,
        language_code: Optional[str] = None,
    ) -> Project:
        project = Project(
            name=name,
            brand_name=brand_name or None,
            brand_domain=brand_domain or None,
            location_code=location_code or None,
            language_code=language_code or None,
        )
        self.db.add(project)
        await self.db.flush()
        logger.info(f"Created project {project.id} ({name})")
        return project

    async def list_projects(self) -> List[Project]:
        result = await self.db.execute(
            select(Project).order_by(Project.created_at.desc(), Project.id.desc())
        )
        return list(result.scalars().all())

    async def get_project(self, project_id: int) -> Optional[Project]:
        return await self.db.get(Project, project_id)

    async def update_project(self, project: Project, **updates) -> Project:
        """Apply only the fields that were given (None means untouched)"""
        for key, value in updates.items():
            if key in PROJECT_FIELDS and value is not None:
                setattr(project, key, value)
        await self.db.flush()
        return project

    async def delete_project(self, project_id: int):
        await self.db.execute(delete(KeywordResult).where(KeywordResult.project_id == project_id))
        await self.db.execute(delete(CheckSession).where(CheckSession.project_id == project_id))
        await self.db.execute(delete(Project).where(Project.id == project_id))

    async def get_project_counts(self, project_id: int) -> Tuple[int, int]:
        """Distinct keywords ever checked, and AIO keywords in the latest session"""
        result = await self.db.execute(
            select(func.count(func.distinct(KeywordResult.keyword)))
            .where(KeywordResult.project_id == project_id)
        )
        keyword_count = result.scalar() or 0

        latest = await self.get_latest_session(project_id)
        aio_count = latest.aio_count if latest else 0

        return keyword_count, aio_count

    async def get_project_keywords(self, project_id: int) -> List[str]:
        result = await self.db.execute(
            select(KeywordResult.keyword)
            .where(KeywordResult.project_id == project_id)
            .distinct()
            .order_by(KeywordResult.keyword.asc())
        )
        return list(result.scalars().all())

    # =========================================================================
    # SESSIONS
    # =========================================================================

    async def create_session(
        self,
        project_id: int,
        name: Optional[str] = None,
        location_code: Optional[str] = None,
        language_code: Optional[str] = None,
    ) -> CheckSession:
        session = CheckSession(
            project_id=project_id,
            name=name or None,
            location_code=location_code or None,
            language_code=language_code or None,
            keyword_count=0,
            aio_count=0,
        )
        self.db.add(session)
        await self.db.flush()
        logger.info(f"Created session {session.id} for project {project_id}")
        return session

    async def get_session(self, session_id: int) -> Optional[CheckSession]:
        return await self.db.get(CheckSession, session_id)

    async def list_sessions(self, project_id: int, limit: Optional[int] = None) -> List[CheckSession]:
        """Sessions newest first"""
        query = (
            select(CheckSession)
            .where(CheckSession.project_id == project_id)
            .order_by(CheckSession.created_at.desc(), CheckSession.id.desc())
        )
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_sessions(self, project_id: int, session_ids: Sequence[int]) -> List[CheckSession]:
        """The given sessions of one project, oldest first; unknown ids are skipped"""
        if not session_ids:
            return []

        result = await self.db.execute(
            select(CheckSession)
            .where(
                CheckSession.project_id == project_id,
                CheckSession.id.in_(list(session_ids)),
            )
            .order_by(CheckSession.created_at.asc(), CheckSession.id.asc())
        )
        return list(result.scalars().all())

    async def get_recent_sessions(self, project_id: int, limit: int) -> List[CheckSession]:
        """The newest `limit` sessions, newest first"""
        return await self.list_sessions(project_id, limit=limit)

    async def get_latest_session(self, project_id: int) -> Optional[CheckSession]:
        sessions = await self.list_sessions(project_id, limit=1)
        return sessions[0] if sessions else None

    async def get_previous_session(self, session: CheckSession) -> Optional[CheckSession]:
        """The session immediately before `session` in its project"""
        result = await self.db.execute(
            select(CheckSession)
            .where(
                CheckSession.project_id == session.project_id,
                or_(
                    CheckSession.created_at < session.created_at,
                    and_(
                        CheckSession.created_at == session.created_at,
                        CheckSession.id < session.id,
                    ),
                ),
            )
            .order_by(CheckSession.created_at.desc(), CheckSession.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def rename_session(self, session: CheckSession, name: str) -> CheckSession:
        session.name = name
        await self.db.flush()
        return session

    async def delete_session(self, session_id: int):
        await self.db.execute(delete(KeywordResult).where(KeywordResult.session_id == session_id))
        await self.db.execute(delete(CheckSession).where(CheckSession.id == session_id))

    # =========================================================================
    # KEYWORD ROWS
    # =========================================================================

    async def save_keyword_rows(self, session: CheckSession, rows: Iterable[RawKeywordRow]) -> int:
        """
        Persist canonical rows into a session and refresh its counts.

        A keyword already stored in the session is overwritten, so the last
        write wins both within a batch and across batches.
        """
        existing = {row.keyword: row for row in await self.get_session_keywords(session.id)}
        saved = 0

        for row in dedupe_rows(rows):
            stored = existing.get(row.keyword)
            if stored is None:
                stored = KeywordResult(
                    project_id=session.project_id,
                    session_id=session.id,
                    keyword=row.keyword,
                )
                self.db.add(stored)
                existing[row.keyword] = stored

            stored.has_ai_overview = row.has_ai_overview
            stored.aio_markdown = row.aio_markdown
            stored.aio_references = row.aio_references
            stored.raw_api_result = row.raw_api_result
            saved += 1

        await self.db.flush()
        await self.update_session_counts(session)
        logger.info(f"Saved {saved} keyword rows into session {session.id}")
        return saved

    async def update_session_counts(self, session: CheckSession) -> CheckSession:
        result = await self.db.execute(
            select(
                func.count(KeywordResult.id),
                func.coalesce(func.sum(KeywordResult.has_ai_overview), 0),
            ).where(KeywordResult.session_id == session.id)
        )
        total, aio = result.one()

        session.keyword_count = int(total or 0)
        session.aio_count = int(aio or 0)
        await self.db.flush()
        return session

    async def get_session_keywords(self, session_id: int) -> List[KeywordResult]:
        """Rows of one session in insertion order"""
        result = await self.db.execute(
            select(KeywordResult)
            .where(KeywordResult.session_id == session_id)
            .order_by(KeywordResult.id.asc())
        )
        return list(result.scalars().all())

    async def get_keywords_for_sessions(self, session_ids: Sequence[int]) -> Dict[int, List[KeywordResult]]:
        """Rows grouped by session id; every requested id gets a list"""
        grouped: Dict[int, List[KeywordResult]] = {sid: [] for sid in session_ids}
        if not session_ids:
            return grouped

        result = await self.db.execute(
            select(KeywordResult)
            .where(KeywordResult.session_id.in_(list(session_ids)))
            .order_by(KeywordResult.id.asc())
        )
        for row in result.scalars().all():
            grouped.setdefault(row.session_id, []).append(row)
        return grouped

    async def get_keyword_history(
        self,
        project_id: int,
        keyword: str,
    ) -> List[Tuple[CheckSession, KeywordResult]]:
        """Every session's row for one keyword, newest session first"""
        result = await self.db.execute(
            select(CheckSession, KeywordResult)
            .join(KeywordResult, KeywordResult.session_id == CheckSession.id)
            .where(
                KeywordResult.project_id == project_id,
                KeywordResult.keyword == keyword,
            )
            .order_by(CheckSession.created_at.desc(), CheckSession.id.desc())
        )
        return [(session, row) for session, row in result.all()]
