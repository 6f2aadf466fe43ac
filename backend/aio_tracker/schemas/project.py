"""
Project Schemas
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ProjectCreate(BaseModel):
    """Project creation request"""
    name: str = Field(..., min_length=1, max_length=255)
    brand_name: Optional[str] = Field(None, max_length=255)
    brand_domain: Optional[str] = Field(None, max_length=255)
    location_code: Optional[str] = Field(None, max_length=20)
    language_code: Optional[str] = Field(None, max_length=10)

    @field_validator("brand_name", "brand_domain")
    @classmethod
    def strip_brand(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class ProjectUpdate(BaseModel):
    """Project update request; omitted fields are left unchanged"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    brand_name: Optional[str] = Field(None, max_length=255)
    brand_domain: Optional[str] = Field(None, max_length=255)
    location_code: Optional[str] = Field(None, max_length=20)
    language_code: Optional[str] = Field(None, max_length=10)

    @field_validator("brand_name", "brand_domain")
    @classmethod
    def strip_brand(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class ProjectResponse(BaseModel):
    """Project response"""
    id: int
    name: str
    brand_name: Optional[str] = None
    brand_domain: Optional[str] = None
    location_code: Optional[str] = None
    language_code: Optional[str] = None
    created_at: datetime

    # Stats
    keyword_count: int = 0
    aio_count: int = 0

    class Config:
        from_attributes = True


class ProjectListResponse(BaseModel):
    items: List[ProjectResponse]
    total: int
