"""
Keyword Record Builder
Combines a stored keyword row with the project's brand settings
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional

from ..adapters.parsing import (
    BrandMention,
    ParsedSegment,
    Reference,
    brand_matches_text,
    clean_markdown_citations,
    extract_citation_numbers,
    extract_references,
    find_brand_in_references,
    find_brand_mentions,
    parse_markdown_with_citations,
)


@dataclass
class KeywordRecord:
    """One keyword's result within one session, seen through the current brand settings"""
    keyword: str
    has_ai_overview: bool
    aio_markdown: Optional[str] = None
    references: List[Reference] = field(default_factory=list)
    brand_rank: Optional[int] = None       # Recomputed on every read
    brand_mentioned: bool = False
    segments: List[ParsedSegment] = field(default_factory=list)
    aio_text: str = ""                     # Markdown reduced to readable text
    citation_numbers: List[int] = field(default_factory=list)  # As printed
    brand_highlights: List[BrandMention] = field(default_factory=list)  # Spans in aio_text
    id: Optional[int] = None
    session_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def reference_count(self) -> int:
        return len(self.references)


def build_keyword_record(
    row: Any,
    brand_name: Optional[str],
    brand_domain: Optional[str],
) -> KeywordRecord:
    """
    Build a KeywordRecord from a canonical keyword row.

    Args:
        row: Anything with keyword / has_ai_overview / aio_markdown /
            aio_references attributes (ORM row or RawKeywordRow)
        brand_name: Project brand name, "" or None when not configured
        brand_domain: Project brand domain, "" or None when not configured

    Returns:
        KeywordRecord whose brand_rank is the rank of the first reference
        matching the brand, or None
    """
    brand_name = brand_name or ""
    brand_domain = brand_domain or ""

    has_aio = bool(row.has_ai_overview)
    markdown = row.aio_markdown if has_aio else None
    references = extract_references(row.aio_references) if has_aio else []

    brand_match = find_brand_in_references(references, brand_name, brand_domain)
    aio_text = clean_markdown_citations(markdown or "")

    return KeywordRecord(
        keyword=row.keyword,
        has_ai_overview=has_aio,
        aio_markdown=markdown,
        references=references,
        brand_rank=brand_match.rank if brand_match else None,
        brand_mentioned=brand_matches_text(brand_name, markdown or ""),
        segments=parse_markdown_with_citations(markdown or "", references),
        aio_text=aio_text,
        citation_numbers=extract_citation_numbers(markdown or ""),
        brand_highlights=find_brand_mentions(brand_name.strip(), aio_text),
        id=getattr(row, "id", None),
        session_id=getattr(row, "session_id", None),
        created_at=getattr(row, "created_at", None),
    )


def build_keyword_records(
    rows: Iterable[Any],
    brand_name: Optional[str],
    brand_domain: Optional[str],
) -> List[KeywordRecord]:
    return [build_keyword_record(row, brand_name, brand_domain) for row in rows]
