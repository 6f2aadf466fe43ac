"""
AI Overview markdown parsing and citation correlation
"""

import pytest

from aio_tracker.adapters.parsing import (
    Reference,
    clean_markdown_citations,
    extract_citation_numbers,
    parse_markdown_with_citations,
    strip_cdn_images,
)


def _citations(segments):
    return [s for s in segments if s.type == "citation"]


class TestCitationCorrelation:

    MARKDOWN = "AI snippet [[2]](https://sub.brandx.com/page)"

    def test_rank_comes_from_matching_reference(self):
        refs = [Reference(rank=1, domain="other.com"), Reference(rank=2, domain="brandx.com")]

        (citation,) = _citations(parse_markdown_with_citations(self.MARKDOWN, refs))

        assert citation.citation_num == 2
        assert citation.resolved
        assert citation.url == "https://sub.brandx.com/page"

    def test_rank_ignores_printed_number(self):
        refs = [Reference(rank=1, domain="brandx.com"), Reference(rank=2, domain="other.com")]

        (citation,) = _citations(parse_markdown_with_citations(self.MARKDOWN, refs))

        assert citation.citation_num == 1

    def test_falls_back_to_reference_url(self):
        refs = [Reference(rank=1, domain="", url="https://brandx.com/about")]

        (citation,) = _citations(parse_markdown_with_citations(self.MARKDOWN, refs))

        assert citation.citation_num == 1
        assert citation.resolved

    def test_unresolved_keeps_printed_number(self):
        refs = [Reference(rank=1, domain="unrelated.org")]

        (citation,) = _citations(parse_markdown_with_citations(self.MARKDOWN, refs))

        assert citation.citation_num == 2
        assert not citation.resolved

    def test_without_references(self):
        (citation,) = _citations(parse_markdown_with_citations(self.MARKDOWN))
        assert citation.citation_num == 2
        assert not citation.resolved


class TestSegmentation:

    def test_text_and_citations_in_order(self):
        markdown = "First [[1]](https://a.com) then [[2]](https://b.com) end."
        segments = parse_markdown_with_citations(markdown)

        assert [s.type for s in segments] == ["text", "citation", "text", "citation", "text"]
        assert segments[0].content == "First "
        assert segments[-1].content == " end."

    def test_plain_text_is_one_segment(self):
        segments = parse_markdown_with_citations("Just text, [not a citation](x)")
        assert len(segments) == 1
        assert segments[0].type == "text"

    def test_empty_markdown(self):
        assert parse_markdown_with_citations("") == []
        assert parse_markdown_with_citations(None) == []

    @pytest.mark.parametrize("markdown", [
        "Lead [[1]](https://a.com)[[2]](https://b.com)",
        "[[3]](https://c.com) starts with a citation",
        "Broken [[x]](https://a.com) and [[4]](unclosed",
        "**Bold** list:\n- one [[1]](https://a.com/x?y=1)\n- two\n",
        "Image ![logo](https://images.example.com/a.png) stays [[1]](https://a.com)",
    ])
    def test_segments_rebuild_input(self, markdown):
        segments = parse_markdown_with_citations(markdown, [Reference(rank=1, domain="a.com")])
        assert "".join(s.raw for s in segments) == strip_cdn_images(markdown)


class TestCdnImages:

    def test_strips_provider_cdn_images(self):
        markdown = "Intro ![img](https://api.dataforseo.com/cdn/x.png) body"
        assert strip_cdn_images(markdown) == "Intro  body"

    def test_keeps_other_images(self):
        markdown = "Intro ![img](https://images.example.com/x.png) body"
        assert strip_cdn_images(markdown) == markdown

    def test_rebuild_covers_stripped_text(self):
        markdown = "A ![i](https://dataforseo.com/i.png)[[1]](https://a.com) B"
        segments = parse_markdown_with_citations(markdown)

        assert "".join(s.raw for s in segments) == "A [[1]](https://a.com) B"


class TestCleanMarkdown:

    def test_removes_markers_links_and_images(self):
        markdown = "See [Acme](https://acme.com) docs [[1]](https://acme.com) ![x](https://a.com/i.png)."
        assert clean_markdown_citations(markdown) == "See Acme docs."

    def test_empty(self):
        assert clean_markdown_citations("") == ""


class TestCitationNumbers:

    def test_sorted_unique(self):
        markdown = "[[3]](https://c.com) [[1]](https://a.com) [[3]](https://c.com/x)"
        assert extract_citation_numbers(markdown) == [1, 3]

    def test_none(self):
        assert extract_citation_numbers(None) == []
