"""
Database Models for the AIO citation tracker
"""

from .database import (
    Base,
    Project,
    CheckSession,
    KeywordResult,
)

__all__ = [
    "Base",
    "Project",
    "CheckSession",
    "KeywordResult",
]
