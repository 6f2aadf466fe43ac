"""
AIO Citation Tracker Database Models
SQLAlchemy ORM, portable between SQLite and PostgreSQL
"""

from datetime import datetime

from sqlalchemy import (
    Column, String, Text, Integer, DateTime, ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import relationship

Base = declarative_base()


# ============================================================================
# PROJECTS
# ============================================================================

class Project(Base):
    """A tracked brand and its keyword universe"""
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)

    # Brand configuration; mutable, so brand ranks are never stored
    brand_name = Column(String(255))
    brand_domain = Column(String(255))

    # Default search locale for fetches
    location_code = Column(String(20))
    language_code = Column(String(10))

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    sessions = relationship(
        "CheckSession",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


# ============================================================================
# CHECK SESSIONS & KEYWORD RESULTS
# ============================================================================

class CheckSession(Base):
    """One point-in-time snapshot batch (a fetch or an upload)"""
    __tablename__ = "check_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(255))
    location_code = Column(String(20))
    language_code = Column(String(10))

    # Derived, refreshed whenever the session's rows change
    keyword_count = Column(Integer, default=0, nullable=False)
    aio_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="sessions")
    keyword_results = relationship(
        "KeywordResult",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_sessions_project", "project_id"),
    )

    @property
    def aio_rate(self) -> float:
        return (self.aio_count / self.keyword_count) * 100 if self.keyword_count else 0


class KeywordResult(Base):
    """One keyword's raw snapshot inside a session"""
    __tablename__ = "keyword_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    session_id = Column(Integer, ForeignKey("check_sessions.id", ondelete="CASCADE"), nullable=False)

    keyword = Column(Text, nullable=False)
    has_ai_overview = Column(Integer, default=0, nullable=False)  # 0 / 1
    raw_api_result = Column(Text)
    aio_markdown = Column(Text)
    aio_references = Column(Text)  # JSON array, citation rank order

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    session = relationship("CheckSession", back_populates="keyword_results")

    __table_args__ = (
        UniqueConstraint("session_id", "keyword", name="uq_session_keyword"),
        Index("idx_keyword_results_project", "project_id"),
        Index("idx_keyword_results_keyword", "keyword"),
    )
