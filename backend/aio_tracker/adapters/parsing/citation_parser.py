"""
Citation Parser
Splits AI Overview markdown into text and citation segments
"""

import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

from .domain_matcher import domains_match, normalize_domain
from .reference_extractor import Reference

# Images served from the provider's raw-data CDN are injected into the
# markdown and never appear in a real AI Overview.
RAW_DATA_CDN_HOSTS = (
    "dataforseo.com",
)

IMAGE_PATTERN = re.compile(r"!\[[^\]]*\]\(([^)\s]*)[^)]*\)")

# [[n]](url)
CITATION_PATTERN = re.compile(r"\[\[(\d+)\]\]\(([^)]+)\)")


@dataclass
class ParsedSegment:
    """A piece of AI Overview markdown"""
    type: str                          # "text" or "citation"
    raw: str                           # Exact source span
    content: Optional[str] = None      # Text segments only
    citation_num: Optional[int] = None # Reference rank, or printed number when unresolved
    url: Optional[str] = None
    resolved: bool = False             # citation_num came from a matching reference


def _is_cdn_host(url: str) -> bool:
    host = normalize_domain(url)
    return any(host == cdn or host.endswith("." + cdn) for cdn in RAW_DATA_CDN_HOSTS)


def strip_cdn_images(markdown: str) -> str:
    """Remove image markdown pointing at the provider's raw-data CDN"""
    if not markdown:
        return ""

    def _replace(match: re.Match) -> str:
        return "" if _is_cdn_host(match.group(1)) else match.group(0)

    return IMAGE_PATTERN.sub(_replace, markdown)


def resolve_citation_rank(url: str, references: Sequence[Reference]) -> Optional[int]:
    """
    Find the rank of the reference a citation URL points to.

    Matching is by domain, never by the number printed in the marker: the
    markdown numbering and the reference list order differ. The reference's
    own domain is checked first, then the domain of its URL.
    """
    cited_domain = normalize_domain(url)
    if not cited_domain:
        return None

    for ref in references:
        if domains_match(cited_domain, ref.domain) or domains_match(cited_domain, ref.url):
            return ref.rank

    return None


def iter_citation_segments(
    markdown: str,
    references: Optional[Sequence[Reference]] = None,
) -> Iterator[ParsedSegment]:
    """
    Yield text and citation segments in document order.

    Joining every segment's `raw` gives back the CDN-stripped markdown.
    Citations that match no reference keep their printed number with
    `resolved=False`.
    """
    text = strip_cdn_images(markdown)
    if not text:
        return

    references = references or []
    last_index = 0

    for match in CITATION_PATTERN.finditer(text):
        if match.start() > last_index:
            chunk = text[last_index:match.start()]
            yield ParsedSegment(type="text", raw=chunk, content=chunk)

        url = match.group(2)
        rank = resolve_citation_rank(url, references)

        yield ParsedSegment(
            type="citation",
            raw=match.group(0),
            citation_num=rank if rank is not None else int(match.group(1)),
            url=url,
            resolved=rank is not None,
        )

        last_index = match.end()

    if last_index < len(text):
        chunk = text[last_index:]
        yield ParsedSegment(type="text", raw=chunk, content=chunk)


def parse_markdown_with_citations(
    markdown: str,
    references: Optional[Sequence[Reference]] = None,
) -> List[ParsedSegment]:
    """Materialized form of iter_citation_segments"""
    return list(iter_citation_segments(markdown, references))


def clean_markdown_citations(markdown: str) -> str:
    """
    Readable plain text: citation markers and images removed, links
    reduced to their anchor text.
    """
    if not markdown:
        return ""

    cleaned = re.sub(r"\s*\[\[\d+\]\]\([^)]+\)", "", markdown)
    cleaned = re.sub(r"(?<!!)\[([^\]]+)\]\([^)]+\)", r"\1", cleaned)
    cleaned = re.sub(r"!\[[^\]]*\]\([^)]+\)", "", cleaned)

    cleaned = re.sub(r"[ \t]+", " ", cleaned)
    cleaned = re.sub(r"\s+([.,;:!?])", r"\1", cleaned)

    return cleaned.strip()


def extract_citation_numbers(markdown: str) -> List[int]:
    """Sorted unique marker numbers as printed in the markdown"""
    if not markdown:
        return []

    return sorted({int(num) for num in re.findall(r"\[\[(\d+)\]\]", markdown)})
