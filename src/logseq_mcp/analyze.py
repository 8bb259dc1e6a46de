"""logseq_analyze -- graph statistics, gaps, orphans, tasks, tags and activity."""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime
from typing import Optional

from .client import LogseqAPI, get_client
from .config import (
    DATASCRIPT_QUERY,
    KNOWLEDGE_GAP_SCAN_PAGES,
    OVERVIEW_RECENT_PAGES,
    OVERVIEW_TOP_TAGS,
    TAG_BAR_MAX,
    TAG_BAR_UNIT,
    TODO_CONTENT_CHARS,
    TODO_GROUP_MAX,
)
from .dates import resolve_date_range
from .errors import RemoteError
from .formatting import (
    CONTENT_KEYS,
    MARKER_KEYS,
    extract_page_refs,
    field,
    is_journal,
    page_title,
    render_blocks,
    unwrap,
)
from .models import AnalysisType, AnalyzeOptions
from .queries import QueryKind, build_query

logger = logging.getLogger(__name__)

_MARKER_PREFIX_RE = re.compile(r"^(TODO|DOING|NOW|LATER|WAITING|DONE)\s*", re.IGNORECASE)


def _updated_at(page: dict) -> Optional[datetime]:
    ms = page.get("updatedAt")
    if not ms:
        return None
    return datetime.fromtimestamp(ms / 1000)


def _count_rows(client: LogseqAPI, kind: QueryKind) -> list:
    """Aggregate ``[key, count]`` rows, or [] when the query is rejected."""
    try:
        return client.call(DATASCRIPT_QUERY, [build_query(kind)]) or []
    except RemoteError as e:
        logger.warning("%s query failed: %s", kind.value, e)
        return []


def graph_overview(client: LogseqAPI, options: AnalyzeOptions) -> str:
    pages = client.call("logseq.Editor.getAllPages") or []
    journals = [p for p in pages if is_journal(p)]

    tags = _count_rows(client, QueryKind.TAG_COUNTS)
    markers = _count_rows(client, QueryKind.MARKER_COUNTS)

    output = "# Graph Overview\n\n"
    output += "## Page Statistics\n"
    output += f"- **Total Pages:** {len(pages)}\n"
    output += f"- **Regular Pages:** {len(pages) - len(journals)}\n"
    output += f"- **Journal Pages:** {len(journals)}\n\n"

    if tags:
        output += "## Top Tags\n"
        for name, count in sorted(tags, key=lambda t: t[1], reverse=True)[:OVERVIEW_TOP_TAGS]:
            output += f"- #{name} ({count} references)\n"
        output += "\n"

    if markers:
        output += "## Task Status\n"
        for marker, count in markers:
            output += f"- {marker}: {count} items\n"
        output += "\n"

    recent = sorted(
        (p for p in pages if p.get("updatedAt")),
        key=lambda p: p["updatedAt"],
        reverse=True,
    )[:OVERVIEW_RECENT_PAGES]
    if recent:
        output += "## Recently Modified\n"
        for p in recent:
            output += f"- [[{page_title(p)}]] ({_updated_at(p):%Y-%m-%d})\n"

    return output


def knowledge_gaps(client: LogseqAPI, options: AnalyzeOptions) -> str:
    """Pages with no outgoing [[links]] among the first scanned regular pages."""
    pages = client.call("logseq.Editor.getAllPages") or []
    regular = [p for p in pages if not is_journal(p)][:KNOWLEDGE_GAP_SCAN_PAGES]

    gaps = []
    for page in regular:
        blocks = client.call("logseq.Editor.getPageBlocksTree", [page.get("name")])
        if not extract_page_refs(render_blocks(blocks)):
            gaps.append(page_title(page))
    gaps = gaps[:options.limit]

    output = "# Knowledge Gap Analysis\n\n"
    output += "## Pages with No Outgoing Links\n"
    output += "*These pages don't connect to other knowledge - consider adding links*\n\n"
    if not gaps:
        output += "No isolated pages found. Great connectivity!\n"
    else:
        output += "".join(f"- [[{name}]]\n" for name in gaps)
    return output


def orphan_pages(client: LogseqAPI, options: AnalyzeOptions) -> str:
    rows = client.call(DATASCRIPT_QUERY, [build_query(QueryKind.ORPHAN_PAGES)]) or []
    orphans = [p for p in (unwrap(r) for r in rows) if not is_journal(p)][:options.limit]

    output = "# Orphan Pages\n\n"
    output += "*Pages with no incoming links from other pages*\n\n"
    if not orphans:
        output += "No orphan pages found.\n"
    else:
        output += f"Found {len(orphans)} orphan page(s):\n\n"
        output += "".join(f"- [[{page_title(p)}]]\n" for p in orphans)
    return output


def todo_summary(client: LogseqAPI, options: AnalyzeOptions) -> str:
    rows = client.call(DATASCRIPT_QUERY, [build_query(QueryKind.TODOS)]) or []

    by_status: dict[str, list] = {}
    for row in rows:
        block = unwrap(row)
        by_status.setdefault(field(block, *MARKER_KEYS, default="UNKNOWN"), []).append(block)

    output = "# Task Summary\n\n"
    output += f"**Total Tasks:** {len(rows)}\n\n"
    for status, items in by_status.items():
        output += f"## {status} ({len(items)})\n\n"
        for item in items[:TODO_GROUP_MAX]:
            text = _MARKER_PREFIX_RE.sub("", str(field(item, *CONTENT_KEYS)))
            suffix = "..." if len(text) > TODO_CONTENT_CHARS else ""
            output += f"- {text[:TODO_CONTENT_CHARS]}{suffix}\n"
        if len(items) > TODO_GROUP_MAX:
            output += f"- ... and {len(items) - TODO_GROUP_MAX} more\n"
        output += "\n"
    return output


def tag_distribution(client: LogseqAPI, options: AnalyzeOptions) -> str:
    rows = client.call(DATASCRIPT_QUERY, [build_query(QueryKind.TAG_COUNTS)]) or []
    tags = sorted(
        (r for r in rows if r and r[0] and not str(r[0]).startswith("block/")),
        key=lambda r: r[1],
        reverse=True,
    )

    output = "# Tag Distribution\n\n"
    output += f"**Total Unique Tags:** {len(tags)}\n\n"

    if options.focus_tag:
        focus = options.focus_tag.lower()
        for name, count in tags:
            if str(name).lower() == focus:
                output += f"## Focus: #{name}\n"
                output += f"Referenced {count} times\n\n"
                break

    output += "## Top Tags\n\n"
    for i, (name, count) in enumerate(tags[:options.limit], start=1):
        bar = "█" * min(math.ceil(count / TAG_BAR_UNIT), TAG_BAR_MAX)
        output += f"{i}. #{name} - {count} {bar}\n"
    return output


def recent_activity(client: LogseqAPI, options: AnalyzeOptions) -> str:
    date_range = resolve_date_range(options.date_range)
    pages = client.call("logseq.Editor.getAllPages") or []

    recent = []
    for page in pages:
        updated = _updated_at(page)
        if updated and date_range.start <= updated <= date_range.end:
            recent.append((updated, page))
    recent.sort(key=lambda pair: pair[0], reverse=True)
    recent = recent[:options.limit]

    output = "# Recent Activity\n\n"
    output += (
        f"*Period: {date_range.start.date().isoformat()} - "
        f"{date_range.end.date().isoformat()}*\n\n"
    )
    output += f"**Pages Modified:** {len(recent)}\n\n"
    if not recent:
        output += "No activity in this period.\n"
    else:
        for updated, page in recent:
            icon = "\U0001f4c5" if is_journal(page) else "\U0001f4c4"
            output += f"- {icon} [[{page_title(page)}]] - {updated:%Y-%m-%d %H:%M}\n"
    return output


ANALYSES = {
    AnalysisType.GRAPH_OVERVIEW: graph_overview,
    AnalysisType.KNOWLEDGE_GAPS: knowledge_gaps,
    AnalysisType.ORPHAN_PAGES: orphan_pages,
    AnalysisType.TODO_SUMMARY: todo_summary,
    AnalysisType.TAG_DISTRIBUTION: tag_distribution,
    AnalysisType.RECENT_ACTIVITY: recent_activity,
}


def run_analyze(
    analysis: AnalysisType | str,
    options: Optional[dict | AnalyzeOptions] = None,
    client: Optional[LogseqAPI] = None,
) -> str:
    """Tool entry point for logseq_analyze. Never raises."""
    try:
        handler = ANALYSES[AnalysisType(analysis)]
        options = AnalyzeOptions.model_validate(options or {})
        return handler(client or get_client(), options)
    except Exception as e:
        logger.error("logseq_analyze failed: %s", e, exc_info=True)
        return f"Analysis error: {e}"
