"""
Trend, overview, comparison matrix and keyword history aggregation
"""

import json
from datetime import datetime, timedelta
from types import SimpleNamespace

from aio_tracker.adapters.ingest import row_from_result
from aio_tracker.adapters.parsing import Reference
from aio_tracker.services import (
    ChangeType,
    KeywordRecord,
    SessionSnapshot,
    build_comparison_matrix,
    build_keyword_history,
    build_overview,
    build_rank_history,
    compute_aio_stats,
    summarize_session,
)
from aio_tracker.services.trend_service import extract_organic_brand_rank

BASE_TIME = datetime(2026, 3, 1, 12, 0)


def session(session_id, days=0, name=None):
    return SimpleNamespace(id=session_id, name=name, created_at=BASE_TIME + timedelta(days=days))


def rec(keyword, has_aio=True, rank=None, refs=0):
    return KeywordRecord(
        keyword=keyword,
        has_ai_overview=has_aio,
        brand_rank=rank,
        references=[Reference(rank=i + 1) for i in range(refs)],
    )


class TestComputeAioStats:

    def test_stats(self):
        records = [rec("a", rank=1), rec("b", rank=5), rec("c"), rec("d", has_aio=False)]

        stats = compute_aio_stats(records)

        assert stats.total_keywords == 4
        assert stats.with_aio == 3
        assert stats.aio_rate == 75.0
        assert stats.brand_citations == 2
        assert round(stats.brand_citation_rate, 2) == 66.67
        assert stats.avg_brand_rank == 3.0
        assert stats.top_ranked == 1

    def test_never_cited_has_no_average(self):
        stats = compute_aio_stats([rec("a"), rec("b")])

        assert stats.avg_brand_rank is None
        assert stats.brand_citation_rate == 0

    def test_empty(self):
        stats = compute_aio_stats([])
        assert stats.aio_rate == 0
        assert stats.avg_brand_rank is None

    def test_threshold(self):
        stats = compute_aio_stats([rec("a", rank=4)], top_rank_threshold=5)
        assert stats.top_ranked == 1


class TestRankHistory:

    def test_oldest_first_with_gaps(self):
        window = [
            SessionSnapshot(session(3, days=2), [rec("a", rank=1), rec("b", rank=2)]),
            SessionSnapshot(session(2, days=1), [rec("a", rank=4)]),
            SessionSnapshot(session(1), [rec("a"), rec("b", rank=3)]),
        ]

        history = build_rank_history(window)

        assert [(p.session_id, p.rank) for p in history["a"]] == [(1, None), (2, 4), (3, 1)]
        assert [(p.session_id, p.rank) for p in history["b"]] == [(1, 3), (3, 2)]


class TestBuildOverview:

    def test_no_sessions(self):
        overview = build_overview([])
        assert not overview.has_data
        assert overview.keywords == []

    def test_single_session_has_no_changes(self):
        overview = build_overview([SessionSnapshot(session(1), [rec("a", rank=2)])])

        assert overview.has_data
        assert overview.previous_session is None
        assert overview.change_summary is None
        assert overview.changes is None
        assert overview.stats.brand_citations == 1

    def test_latest_against_previous(self):
        window = [
            SessionSnapshot(session(3, days=2), [rec("a", rank=1), rec("b", rank=2), rec("new")]),
            SessionSnapshot(session(2, days=1), [rec("a", rank=3), rec("b", rank=2)]),
            SessionSnapshot(session(1), [rec("a", rank=5)]),
        ]

        overview = build_overview(window, sparkline_window=2)

        assert overview.latest_session.id == 3
        assert overview.previous_session.id == 2
        assert [s.id for s in overview.sessions] == [3, 2]
        assert overview.change_summary.rank_improved == 1
        assert overview.change_summary.new_keywords == 1
        assert overview.change_summary.unchanged == 1
        assert [c.change_type for c in overview.changes] == [ChangeType.RANK_IMPROVED, ChangeType.NEW]

        trend_a = overview.keywords[0]
        assert trend_a.keyword == "a"
        assert [p.rank for p in trend_a.rank_history] == [3, 1]


class TestComparisonMatrix:

    def test_grid(self):
        snapshots = [
            SessionSnapshot(session(2, days=1), [rec("beta", rank=1, refs=3), rec("alpha", has_aio=False)]),
            SessionSnapshot(session(1), [rec("beta", refs=2)]),
        ]

        result = build_comparison_matrix(snapshots)

        assert [s.id for s in result.sessions] == [1, 2]
        assert result.keywords == ["alpha", "beta"]
        assert result.matrix["alpha"][1] is None
        assert result.matrix["alpha"][2].has_aio is False
        assert result.matrix["beta"][1].reference_count == 2
        assert result.matrix["beta"][2].brand_rank == 1


class TestOrganicRank:

    def _raw(self, domains):
        items = [
            {"type": "organic", "rank_group": i + 1, "domain": d}
            for i, d in enumerate(domains)
        ]
        items.insert(0, {"type": "ai_overview", "references": []})
        return json.dumps({"keyword": "kw", "items": items})

    def test_rank_group(self):
        assert extract_organic_brand_rank(self._raw(["x.com", "www.acme.com"]), "acme.com") == 2

    def test_not_found(self):
        assert extract_organic_brand_rank(self._raw(["x.com"]), "acme.com") is None

    def test_unusable_input(self):
        assert extract_organic_brand_rank(None, "acme.com") is None
        assert extract_organic_brand_rank("{oops", "acme.com") is None
        assert extract_organic_brand_rank(self._raw(["acme.com"]), "") is None


class TestSummarizeSession:

    def test_metrics(self, make_result):
        rows = [
            row_from_result("a", make_result("a", refs=[{"domain": "acme.com", "source": "Acme"}], organic=["acme.com"])),
            row_from_result("b", make_result("b", organic=["x.com", "y.com", "z.com", "acme.com"])),
        ]

        metrics = summarize_session(session(7), rows, "Acme", "acme.com")

        assert metrics.session_id == 7
        assert metrics.session_name == "Session 7"
        assert metrics.with_aio == 1
        assert metrics.aio_rate == 50.0
        assert metrics.brand_citations == 1
        assert metrics.organic_rankings == 2
        assert metrics.avg_organic_rank == 2.5
        assert metrics.organic_visibility_rate == 100.0
        assert metrics.top_ranked_organic == 1


class TestKeywordHistory:

    def test_entries_keep_order(self, make_row):
        entries = [
            (session(2, days=1, name="Second"), make_row("kw", refs=[{"domain": "acme.com"}])),
            (session(1, name="First"), make_row("kw", has_aio=False)),
        ]

        history = build_keyword_history(entries, "", "acme.com")

        assert [h.session_name for h in history] == ["Second", "First"]
        assert history[0].brand_rank == 1
        assert history[0].reference_count == 1
        assert history[1].has_ai_overview is False
