"""Normalize Logseq result shapes and render them as text.

Datalog ``pull`` queries return rows like ``[{"block/name": ...}]`` while the
Editor API returns bare records like ``{"name": ...}``. Everything here goes
through unwrap() and field() so both shapes render the same way.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Optional

from .config import (
    BLOCK_INDENT,
    NAME_CONTENT_CHARS,
    SUMMARY_CONTENT_CHARS,
    SUMMARY_MAX_RESULTS,
)
from .models import OutputMode

LINK_RE = re.compile(r"\[\[(.*?)\]\]")

NAME_KEYS = ("block/name", "block/original-name", "name", "originalName")
TITLE_KEYS = ("block/original-name", "originalName", "block/name", "name")
CONTENT_KEYS = ("block/content", "content")
MARKER_KEYS = ("block/marker", "marker")
JOURNAL_KEYS = ("block/journal?", "journal?")
JOURNAL_DAY_KEYS = ("block/journal-day", "journalDay")


def unwrap(raw: Any) -> Any:
    """Strip one level of tuple wrapping: ``[record, ...]`` -> ``record``.

    Rows whose first cell is not a record (``[:find ?tag (count ?b)]``) are
    returned whole so no column is lost.
    """
    if isinstance(raw, (list, tuple)) and raw and isinstance(raw[0], dict):
        return raw[0]
    return raw


def field(record: Any, *keys: str, default: Any = "") -> Any:
    """First truthy value among ``keys``; accepts namespaced and camelCase keys."""
    if not isinstance(record, dict):
        return default
    for key in keys:
        value = record.get(key)
        if value:
            return value
    return default


def page_title(record: Any) -> str:
    """Original-case page name for headings and links."""
    return str(field(record, *TITLE_KEYS, default="Unknown"))


def is_journal(record: Any) -> bool:
    return bool(field(record, *JOURNAL_KEYS, default=False))


def display_name(record: Any) -> str:
    if isinstance(record, (list, tuple)) and record:
        return display_name(record[0])
    if not isinstance(record, dict):
        return str(record)
    name = field(record, *NAME_KEYS)
    if name:
        return str(name)
    content = field(record, *CONTENT_KEYS)
    if content:
        return str(content)[:NAME_CONTENT_CHARS]
    return "Unknown"


def _excerpt(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def _summary_line(index: int, record: Any) -> str:
    parts = [f"{index}."]
    if isinstance(record, (list, tuple)):
        parts.extend(str(cell) for cell in record)
        return " ".join(parts)
    if not isinstance(record, dict):
        parts.append(str(record))
        return " ".join(parts)
    name = field(record, *NAME_KEYS)
    marker = field(record, *MARKER_KEYS)
    content = field(record, *CONTENT_KEYS)
    if name:
        parts.append(f"[[{name}]]")
    if marker:
        parts.append(f"[{marker}]")
    if content and not name:
        parts.append(_excerpt(str(content), SUMMARY_CONTENT_CHARS))
    return " ".join(parts)


def format_results(results: Iterable[Any], mode: OutputMode | str = OutputMode.SUMMARY) -> str:
    """Render query results as names, a capped summary, or a full JSON dump."""
    items = [unwrap(r) for r in results or []]
    mode = OutputMode(mode)

    if mode == OutputMode.NAMES:
        return "\n".join(display_name(item) for item in items)

    if mode == OutputMode.SUMMARY:
        lines = [f"Found {len(items)} results:", ""]
        for i, item in enumerate(items[:SUMMARY_MAX_RESULTS], start=1):
            lines.append(_summary_line(i, item))
        if len(items) > SUMMARY_MAX_RESULTS:
            lines.append("")
            lines.append(f"... and {len(items) - SUMMARY_MAX_RESULTS} more results")
        return "\n".join(lines)

    return json.dumps(items, indent=2, ensure_ascii=False, default=str)


def render_blocks(
    blocks: Optional[Iterable[Any]],
    depth: int = 0,
    max_depth: Optional[int] = None,
) -> str:
    """Render a block tree as nested markdown bullets, depth-first pre-order.

    Blocks without content produce no line, but their children are still
    rendered one level deeper. ``max_depth`` caps how many levels are shown.
    """
    if max_depth is not None and depth >= max_depth:
        return ""
    lines = []
    for block in blocks or []:
        if not isinstance(block, dict):
            continue
        content = block.get("content")
        if content:
            lines.append(f"{BLOCK_INDENT * depth}- {content}\n")
        children = block.get("children")
        if children:
            lines.append(render_blocks(children, depth + 1, max_depth))
    return "".join(lines)


def format_properties(properties: Optional[dict]) -> str:
    """``key:: value`` bullets, the way Logseq writes properties."""
    return "".join(f"- {key}:: {value}\n" for key, value in (properties or {}).items())


def extract_page_refs(text: str) -> list[str]:
    return LINK_RE.findall(text or "")
