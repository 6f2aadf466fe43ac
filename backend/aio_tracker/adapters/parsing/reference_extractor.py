"""
Reference Extractor
Turns the stored AI Overview reference list into ranked references
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reference:
    """
    One cited source within one AI Overview.

    `rank` is the 1-based position of the source in the stored reference
    array. It is assigned once on extraction and never recomputed.
    """
    rank: int
    domain: str = ""
    source: str = ""
    url: str = ""


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def extract_references(refs_json: Optional[str]) -> List[Reference]:
    """
    Parse a JSON array of {domain, source, url} into ranked references.

    Args:
        refs_json: JSON text as stored with the keyword row, or None

    Returns:
        One Reference per array element with rank = index + 1. Missing
        fields become "". None, invalid JSON and non-array JSON all give
        an empty list.
    """
    if not refs_json:
        return []

    try:
        refs = json.loads(refs_json)
    except (TypeError, ValueError):
        logger.debug("Ignoring unparsable reference list")
        return []

    if not isinstance(refs, list):
        return []

    references = []
    for idx, ref in enumerate(refs):
        fields = ref if isinstance(ref, dict) else {}
        references.append(Reference(
            rank=idx + 1,
            domain=_as_text(fields.get("domain")),
            source=_as_text(fields.get("source")),
            url=_as_text(fields.get("url")),
        ))

    return references
