"""
Brand Matching Engine
Finds the tracked brand in references and brand names in AI Overview text
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Set

from .reference_extractor import Reference

# Shorter brand names would match almost any text
MIN_BRAND_LENGTH = 2


@dataclass
class BrandReferenceMatch:
    """The first reference attributed to the tracked brand"""
    rank: int
    matched_by: str              # "domain" or "source"


@dataclass
class BrandMention:
    """One occurrence of a brand name in text"""
    start: int
    end: int
    text: str                    # Original casing from the text


def _normalize(text: str) -> str:
    return text.lower().strip()


def brand_matches_text(brand_name: str, text: str) -> bool:
    """Case-insensitive substring check of a brand name against text"""
    if not brand_name or not text or len(brand_name.strip()) < MIN_BRAND_LENGTH:
        return False
    return _normalize(brand_name) in _normalize(text)


def brand_matches_domain(brand_domain: str, domain: str) -> bool:
    """Case-insensitive substring check of the brand domain against a raw domain"""
    needle = _normalize(brand_domain or "")
    if not needle or not domain:
        return False
    return needle in _normalize(domain)


def find_brand_in_references(
    references: Sequence[Reference],
    brand_name: str,
    brand_domain: str,
) -> Optional[BrandReferenceMatch]:
    """
    First reference, in rank order, whose domain contains the brand domain
    or whose source name contains the brand name.

    Some sources carry only a display name and no domain, hence both paths.
    """
    if not brand_name and not brand_domain:
        return None

    for ref in sorted(references, key=lambda r: r.rank):
        if brand_matches_domain(brand_domain, ref.domain):
            return BrandReferenceMatch(rank=ref.rank, matched_by="domain")
        if brand_matches_text(brand_name, ref.source):
            return BrandReferenceMatch(rank=ref.rank, matched_by="source")

    return None


def find_brand_mentions(brand_name: str, text: str) -> List[BrandMention]:
    """All (possibly overlapping) substring occurrences, for highlighting"""
    if not brand_name or not text or len(brand_name) < MIN_BRAND_LENGTH:
        return []

    needle = brand_name.lower()
    haystack = text.lower()
    mentions = []

    pos = haystack.find(needle)
    while pos != -1:
        end = pos + len(needle)
        mentions.append(BrandMention(start=pos, end=end, text=text[pos:end]))
        pos = haystack.find(needle, pos + 1)

    return mentions


class BrandMatcher:
    """
    Whole-word, case-insensitive matching of a fixed set of brand names.

    Used for competitor mention detection, where "Acme" must not match
    inside "Acmeville".
    """

    def __init__(self, brand_names: Iterable[str]):
        self.brand_names = [name for name in brand_names if name]
        self._build_match_index()

    def _build_match_index(self):
        """Lowercase lookup; spellings differing only in case share a key"""
        self.exact_matches = {}  # lowercase -> original name(s)
        for name in self.brand_names:
            self.exact_matches.setdefault(name.lower(), []).append(name)

    @staticmethod
    def contains_word(term: str, text: str) -> bool:
        """True if `term` occurs in `text` bounded by non-alphanumerics"""
        if not term or not text:
            return False

        term_lower = term.lower()
        text_lower = text.lower()

        start = 0
        while True:
            pos = text_lower.find(term_lower, start)
            if pos == -1:
                return False

            end = pos + len(term_lower)
            before_ok = pos == 0 or not text_lower[pos - 1].isalnum()
            after_ok = end >= len(text_lower) or not text_lower[end].isalnum()

            if before_ok and after_ok:
                return True

            start = pos + 1

    def find_mentioned(self, text: str) -> Set[str]:
        """Brand names (original spelling) mentioned as whole words in text"""
        if not text:
            return set()

        found = set()
        for match_text, names in self.exact_matches.items():
            if self.contains_word(match_text, text):
                found.update(names)
        return found
