"""
CSV Export
"""

import csv
import io
from typing import Iterable

from .competitor_analyzer import CompetitorMetrics
from .keyword_records import KeywordRecord

KEYWORD_COLUMNS = ["keyword", "has_ai_overview", "reference_count", "brand_rank", "references"]

COMPETITOR_COLUMNS = [
    "brand",
    "cited_count",
    "mentioned_count",
    "unique_domains",
    "average_rank",
    "cited_in_prompts",
    "prompt_cited_rate",
    "mention_rate",
]


def _write(header, rows) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()


def keywords_to_csv(records: Iterable[KeywordRecord]) -> str:
    rows = []
    for record in records:
        rows.append([
            record.keyword,
            "Yes" if record.has_ai_overview else "No",
            record.reference_count,
            record.brand_rank if record.brand_rank is not None else "",
            " | ".join(f"{ref.rank}. {ref.source} ({ref.domain})" for ref in record.references),
        ])
    return _write(KEYWORD_COLUMNS, rows)


def competitors_to_csv(competitors: Iterable[CompetitorMetrics]) -> str:
    rows = []
    for c in competitors:
        rows.append([
            c.brand,
            c.cited_count,
            c.mentioned_count,
            ", ".join(c.unique_domains),
            f"{c.average_rank:.2f}",
            c.cited_in_prompts,
            f"{c.prompt_cited_rate * 100:.1f}%",
            f"{c.mention_rate * 100:.1f}%",
        ])
    return _write(COMPETITOR_COLUMNS, rows)
