"""
CSV export of keyword records and competitor metrics
"""

import csv
import io

from aio_tracker.adapters.parsing import Reference
from aio_tracker.services import CompetitorMetrics, KeywordRecord, competitors_to_csv, keywords_to_csv


def _read(content):
    return list(csv.reader(io.StringIO(content)))


class TestKeywordsCsv:

    def test_columns_and_rows(self):
        records = [
            KeywordRecord(
                keyword="best crm",
                has_ai_overview=True,
                references=[
                    Reference(rank=1, domain="acme.com", source="Acme"),
                    Reference(rank=2, domain="beta.io", source="Beta, Inc"),
                ],
                brand_rank=1,
            ),
            KeywordRecord(keyword="crm login", has_ai_overview=False),
        ]

        header, first, second = _read(keywords_to_csv(records))

        assert header == ["keyword", "has_ai_overview", "reference_count", "brand_rank", "references"]
        assert first == ["best crm", "Yes", "2", "1", "1. Acme (acme.com) | 2. Beta, Inc (beta.io)"]
        assert second == ["crm login", "No", "0", "", ""]

    def test_empty(self):
        assert _read(keywords_to_csv([])) == [
            ["keyword", "has_ai_overview", "reference_count", "brand_rank", "references"],
        ]


class TestCompetitorsCsv:

    def test_formats_rates_and_domains(self):
        competitor = CompetitorMetrics(
            brand="Acme",
            cited_count=3,
            mentioned_count=1,
            unique_domains=["acme.com", "blog.acme.com"],
            average_rank=1.3333,
            cited_in_prompts=2,
            prompt_cited_rate=2 / 3,
            mention_rate=0.5,
        )

        header, row = _read(competitors_to_csv([competitor]))

        assert header[0] == "brand"
        assert row == ["Acme", "3", "1", "acme.com, blog.acme.com", "1.33", "2", "66.7%", "50.0%"]
