"""
Upload Format Adapters
Normalize every accepted upload/fetch shape into canonical keyword rows
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple


class UploadFormat(str, Enum):
    RESULT_ARRAY = "result_array"      # [result, result, ...]
    INDEXED_FRAME = "indexed_frame"    # pandas DataFrame JSON: {"0": {"0": result}, ...}
    TASK_ENVELOPE = "task_envelope"    # Full provider response: {"tasks": [{"result": [...]}]}
    SINGLE_RESULT = "single_result"    # One result object
    UNKNOWN = "unknown"


@dataclass
class RawKeywordRow:
    """
    Canonical keyword-session row, the only shape the analytics accept.

    `aio_references` is the JSON text of the provider's reference array,
    in citation rank order.
    """
    keyword: str
    has_ai_overview: int = 0
    aio_markdown: Optional[str] = None
    aio_references: Optional[str] = None
    raw_api_result: Optional[str] = None


def find_ai_overview_item(result: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """First SERP item of type ai_overview, if any"""
    items = result.get("items") or []
    if not isinstance(items, list):
        return None

    for item in items:
        if isinstance(item, dict) and item.get("type") == "ai_overview":
            return item
    return None


def row_from_result(keyword: str, result: Dict[str, Any]) -> RawKeywordRow:
    """Build the canonical row for one provider result"""
    aio_item = find_ai_overview_item(result)
    references = aio_item.get("references") if aio_item else None

    return RawKeywordRow(
        keyword=keyword,
        has_ai_overview=1 if aio_item else 0,
        aio_markdown=(aio_item.get("markdown") or None) if aio_item else None,
        aio_references=json.dumps(references) if references else None,
        raw_api_result=json.dumps(result),
    )


def _is_index_key(key: Any) -> bool:
    try:
        int(key)
    except (TypeError, ValueError):
        return False
    return True


def detect_upload_format(payload: Any) -> UploadFormat:
    """Classify an uploaded JSON document"""
    if isinstance(payload, list):
        return UploadFormat.RESULT_ARRAY

    if not isinstance(payload, dict) or not payload:
        return UploadFormat.UNKNOWN

    if isinstance(payload.get("tasks"), list):
        return UploadFormat.TASK_ENVELOPE

    if all(_is_index_key(key) for key in payload):
        return UploadFormat.INDEXED_FRAME

    return UploadFormat.SINGLE_RESULT


def _iter_array(payload: List[Any]) -> Iterator[Dict[str, Any]]:
    for item in payload:
        if isinstance(item, dict):
            yield item


def _iter_indexed_frame(payload: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    for value in payload.values():
        if not isinstance(value, dict):
            continue
        # Nested frame: {"0": {"0": result}}
        if list(value.keys()) == ["0"] and isinstance(value["0"], dict):
            yield value["0"]
        else:
            yield value


def _iter_task_envelope(payload: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    for task in payload.get("tasks") or []:
        if not isinstance(task, dict):
            continue
        for result in task.get("result") or []:
            if isinstance(result, dict):
                yield result


def iter_results(payload: Any) -> Tuple[UploadFormat, Iterable[Dict[str, Any]]]:
    """Detected format plus the provider results it contains"""
    upload_format = detect_upload_format(payload)

    if upload_format == UploadFormat.RESULT_ARRAY:
        return upload_format, _iter_array(payload)
    if upload_format == UploadFormat.INDEXED_FRAME:
        return upload_format, _iter_indexed_frame(payload)
    if upload_format == UploadFormat.TASK_ENVELOPE:
        return upload_format, _iter_task_envelope(payload)
    if upload_format == UploadFormat.SINGLE_RESULT:
        return upload_format, [payload]
    return upload_format, []


def dedupe_rows(rows: Iterable[RawKeywordRow]) -> List[RawKeywordRow]:
    """One row per keyword; a later duplicate replaces the earlier one"""
    by_keyword: Dict[str, RawKeywordRow] = {}
    for row in rows:
        by_keyword[row.keyword] = row
    return list(by_keyword.values())


def normalize_upload(payload: Any) -> List[RawKeywordRow]:
    """
    Convert any accepted upload document into canonical rows.

    Results without a keyword are named keyword_<n> by position.
    Unrecognized documents give an empty list.
    """
    _, results = iter_results(payload)

    rows = []
    for idx, result in enumerate(results, 1):
        keyword = result.get("keyword")
        if not isinstance(keyword, str) or not keyword.strip():
            keyword = f"keyword_{idx}"
        rows.append(row_from_result(keyword, result))

    return dedupe_rows(rows)
