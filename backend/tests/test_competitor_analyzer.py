"""
Competitor aggregation over AI Overview references
"""

import pytest

from aio_tracker.services import aggregate_competitors, analyze_keywords, build_keyword_records


def _by_brand(competitors):
    return {c.brand: c for c in competitors}


@pytest.fixture
def two_keyword_rows(make_row):
    return [
        make_row(
            "keyword a",
            refs=[
                {"domain": "acme.com", "source": "Acme"},
                {"domain": "beta.io", "source": "Beta"},
            ],
            markdown="Overview for A",
        ),
        make_row(
            "keyword b",
            refs=[{"domain": "acme.com", "source": "Acme"}],
            markdown="Acme is mentioned here, Beta too.",
        ),
    ]


class TestAggregateCompetitors:

    def test_citation_counts_and_rates(self, two_keyword_rows):
        records = build_keyword_records(two_keyword_rows, "", "")
        competitors = _by_brand(aggregate_competitors(records))

        acme = competitors["Acme"]
        assert acme.cited_count == 2
        assert acme.cited_in_prompts == 2
        assert acme.prompt_cited_rate == 1.0
        assert acme.average_rank == 1.0
        assert acme.unique_domains == ["acme.com"]

        beta = competitors["Beta"]
        assert beta.cited_count == 1
        assert beta.cited_in_prompts == 1
        assert beta.prompt_cited_rate == 0.5
        assert beta.average_rank == 2.0

    def test_mentions_of_known_sources(self, two_keyword_rows):
        records = build_keyword_records(two_keyword_rows, "", "")
        competitors = _by_brand(aggregate_competitors(records))

        assert competitors["Acme"].mentioned_count == 1
        assert competitors["Beta"].mentioned_count == 1
        assert competitors["Beta"].mention_rate == 0.5

    def test_uncited_names_get_no_row(self, make_row):
        rows = [make_row("kw", refs=[{"domain": "acme.com", "source": "Acme"}], markdown="Globex beats Acme")]

        competitors = aggregate_competitors(build_keyword_records(rows, "", ""))

        assert [c.brand for c in competitors] == ["Acme"]

    def test_sorted_by_citations_plus_mentions(self, two_keyword_rows):
        records = build_keyword_records(two_keyword_rows, "", "")
        competitors = aggregate_competitors(records)

        assert [c.brand for c in competitors] == ["Acme", "Beta"]
        assert competitors[0].engagement == 3

    def test_ties_keep_first_cited_order(self, make_row):
        rows = [make_row("kw", refs=[
            {"domain": "z.com", "source": "Zed"},
            {"domain": "a.com", "source": "Alpha"},
        ])]

        competitors = aggregate_competitors(build_keyword_records(rows, "", ""))

        assert [c.brand for c in competitors] == ["Zed", "Alpha"]

    def test_skips_empty_sources_and_domains(self, make_row):
        rows = [make_row("kw", refs=[
            {"domain": "nameless.com", "source": ""},
            {"domain": "", "source": "Acme"},
        ])]

        competitors = aggregate_competitors(build_keyword_records(rows, "", ""))

        assert len(competitors) == 1
        assert competitors[0].unique_domains == []
        assert competitors[0].average_rank == 2.0

    def test_ignores_keywords_without_ai_overview(self, make_row):
        rows = [
            make_row("with", refs=[{"domain": "acme.com", "source": "Acme"}]),
            make_row("without", has_aio=False),
        ]

        (acme,) = aggregate_competitors(build_keyword_records(rows, "", ""))

        assert acme.prompt_cited_rate == 1.0

    def test_empty_input(self):
        assert aggregate_competitors([]) == []

    def test_rates_within_bounds(self, make_row):
        rows = [
            make_row(f"kw {i}", refs=[{"domain": "acme.com", "source": "Acme"}] * (i + 1), markdown="Acme Acme")
            for i in range(4)
        ]

        for competitor in aggregate_competitors(build_keyword_records(rows, "", "")):
            assert 0 <= competitor.prompt_cited_rate <= 1
            assert 0 <= competitor.mention_rate <= 1

    def test_user_brand_label_does_not_reorder(self, two_keyword_rows):
        records = build_keyword_records(two_keyword_rows, "Beta", "beta.io")
        competitors = aggregate_competitors(records, "Beta", "beta.io")

        assert [c.brand for c in competitors] == ["Acme", "Beta"]
        assert competitors[1].is_user_brand
        assert not competitors[0].is_user_brand


class TestAnalyzeKeywords:

    def test_summary(self, two_keyword_rows, make_row):
        rows = two_keyword_rows + [make_row("no overview", has_aio=False)]

        result = analyze_keywords(rows, "Acme", "acme.com")

        assert result.summary.total_keywords == 3
        assert result.summary.ai_overviews_found == 2
        assert result.summary.competitors_identified == 2
        assert [r.brand_rank for r in result.keywords_analysis] == [1, 1, None]
