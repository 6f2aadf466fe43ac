"""
AI Overview Parsing Adapters
"""

from .domain_matcher import normalize_domain, domains_match
from .reference_extractor import Reference, extract_references
from .citation_parser import (
    ParsedSegment,
    iter_citation_segments,
    parse_markdown_with_citations,
    clean_markdown_citations,
    extract_citation_numbers,
    strip_cdn_images,
)
from .brand_matcher import (
    BrandMatcher,
    BrandMention,
    BrandReferenceMatch,
    brand_matches_text,
    brand_matches_domain,
    find_brand_in_references,
    find_brand_mentions,
)

__all__ = [
    "normalize_domain",
    "domains_match",
    "Reference",
    "extract_references",
    "ParsedSegment",
    "iter_citation_segments",
    "parse_markdown_with_citations",
    "clean_markdown_citations",
    "extract_citation_numbers",
    "strip_cdn_images",
    "BrandMatcher",
    "BrandMention",
    "BrandReferenceMatch",
    "brand_matches_text",
    "brand_matches_domain",
    "find_brand_in_references",
    "find_brand_mentions",
]
