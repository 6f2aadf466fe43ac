"""
Ingest Schemas
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from aio_tracker.adapters.ingest import UploadFormat


class UploadResponse(BaseModel):
    project_id: int
    session_id: int
    format: UploadFormat
    saved_count: int


class FetchKeywordsRequest(BaseModel):
    """Fetch live results for a keyword list into a new session"""
    project_id: int
    keywords: List[str] = Field(..., min_length=1)
    location_code: Optional[str] = Field(None, max_length=20)
    language_code: Optional[str] = Field(None, max_length=10)
    session_name: Optional[str] = Field(None, max_length=255)

    @field_validator("keywords")
    @classmethod
    def clean_keywords(cls, v: List[str]) -> List[str]:
        cleaned = [kw.strip() for kw in v if kw and kw.strip()]
        if not cleaned:
            raise ValueError("At least one keyword is required")
        return cleaned


class FetchError(BaseModel):
    keyword: str
    error: str


class FetchKeywordsResponse(BaseModel):
    project_id: int
    session_id: int
    total_keywords: int
    saved_count: int
    error_count: int
    errors: List[FetchError] = []
