"""
Competitor Analysis Service
Aggregates AI Overview citations and mentions into per-source metrics
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from ..adapters.parsing import BrandMatcher, brand_matches_domain, brand_matches_text
from .keyword_records import KeywordRecord, build_keyword_records


@dataclass
class CompetitorMetrics:
    """Citation and mention statistics for one source name"""
    brand: str                    # Source name, the aggregation key
    cited_count: int              # Every reference occurrence counts
    mentioned_count: int          # Keywords whose markdown names the brand
    unique_domains: List[str]
    average_rank: float           # 0 when never cited
    cited_in_prompts: int         # Keywords citing the brand at least once
    prompt_cited_rate: float      # cited_in_prompts / AIO keywords
    mention_rate: float           # mentioned_count / AIO keywords
    is_user_brand: bool = False

    @property
    def engagement(self) -> int:
        return self.cited_count + self.mentioned_count


@dataclass
class AnalysisSummary:
    total_keywords: int
    ai_overviews_found: int
    competitors_identified: int


@dataclass
class AnalysisResult:
    summary: AnalysisSummary
    keywords_analysis: List[KeywordRecord]
    competitors: List[CompetitorMetrics]


@dataclass
class _BrandTally:
    cited_count: int = 0
    domains: Dict[str, None] = field(default_factory=dict)  # Ordered set
    ranks: List[int] = field(default_factory=list)
    cited_in: Set[str] = field(default_factory=set)
    mentioned_in: Set[str] = field(default_factory=set)


def aggregate_competitors(
    records: Sequence[KeywordRecord],
    brand_name: Optional[str] = "",
    brand_domain: Optional[str] = "",
) -> List[CompetitorMetrics]:
    """
    Rank every cited source across the AI Overview keywords of one set.

    Only sources already seen as citations are checked for mentions, so a
    name that appears in text but is never cited gets no row. Rates divide
    by the number of AIO keywords in `records`, so they only compare across
    calls made with the same keyword set.

    Args:
        records: Keyword records of one session (non-AIO ones are ignored)
        brand_name: Tracked brand name, used only to flag is_user_brand
        brand_domain: Tracked brand domain, used only to flag is_user_brand

    Returns:
        Metrics sorted by cited + mentioned, descending; ties keep the
        order in which sources were first cited
    """
    aio_records = [r for r in records if r.has_ai_overview]
    tallies: Dict[str, _BrandTally] = {}

    for record in aio_records:
        for ref in record.references:
            if not ref.source:
                continue

            tally = tallies.setdefault(ref.source, _BrandTally())
            tally.cited_count += 1
            if ref.domain:
                tally.domains[ref.domain] = None
            tally.ranks.append(ref.rank)
            tally.cited_in.add(record.keyword)

    matcher = BrandMatcher(tallies.keys())
    for record in aio_records:
        if not record.aio_markdown:
            continue
        for name in matcher.find_mentioned(record.aio_markdown):
            tallies[name].mentioned_in.add(record.keyword)

    total_prompts = len(aio_records)
    competitors = []

    for source, tally in tallies.items():
        domains = list(tally.domains)
        competitors.append(CompetitorMetrics(
            brand=source,
            cited_count=tally.cited_count,
            mentioned_count=len(tally.mentioned_in),
            unique_domains=domains,
            average_rank=sum(tally.ranks) / len(tally.ranks) if tally.ranks else 0,
            cited_in_prompts=len(tally.cited_in),
            prompt_cited_rate=len(tally.cited_in) / total_prompts if total_prompts > 0 else 0,
            mention_rate=len(tally.mentioned_in) / total_prompts if total_prompts > 0 else 0,
            is_user_brand=(
                brand_matches_text(brand_name or "", source)
                or any(brand_matches_domain(brand_domain or "", d) for d in domains)
            ),
        ))

    # sorted() is stable: equal engagement keeps first-cited order
    return sorted(competitors, key=lambda c: c.engagement, reverse=True)


def analyze_keywords(
    rows: Iterable[Any],
    brand_name: Optional[str],
    brand_domain: Optional[str],
) -> AnalysisResult:
    """Build keyword records for a session's rows and rank its cited sources"""
    keywords_analysis = build_keyword_records(rows, brand_name, brand_domain)
    competitors = aggregate_competitors(keywords_analysis, brand_name, brand_domain)

    return AnalysisResult(
        summary=AnalysisSummary(
            total_keywords=len(keywords_analysis),
            ai_overviews_found=sum(1 for r in keywords_analysis if r.has_ai_overview),
            competitors_identified=len(competitors),
        ),
        keywords_analysis=keywords_analysis,
        competitors=competitors,
    )
