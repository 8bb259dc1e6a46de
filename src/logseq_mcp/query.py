"""logseq_query -- pages, blocks, tasks, journals, backlinks and raw Datalog."""

from __future__ import annotations

import logging
from typing import Optional

from .client import LogseqAPI, get_client
from .config import DATASCRIPT_QUERY, RECENT_QUERY_DAYS
from .dates import in_range, resolve_date_range
from .errors import RemoteError, ValidationError
from .formatting import JOURNAL_DAY_KEYS, NAME_KEYS, field, format_results, is_journal, unwrap
from .models import OutputMode, QueryFilters, QueryMode, QuerySpec
from .queries import QueryKind, build_query

logger = logging.getLogger(__name__)


def _datalog(client: LogseqAPI, kind: QueryKind, params: Optional[dict] = None) -> list:
    return client.call(DATASCRIPT_QUERY, [build_query(kind, params)]) or []


def _pages(client: LogseqAPI, query: Optional[str], filters: QueryFilters) -> list:
    if filters.tag:
        results = _datalog(client, QueryKind.PAGES_WITH_TAG, {"tag": filters.tag})
    elif filters.property and filters.property_value:
        results = _datalog(client, QueryKind.PAGES_WITH_PROPERTY, {
            "property": filters.property,
            "value": filters.property_value,
        })
    else:
        results = client.call("logseq.Editor.getAllPages") or []
        if query:
            needle = query.lower()
            results = [
                p for p in results
                if needle in str(field(unwrap(p), *NAME_KEYS)).lower()
            ]

    if filters.journal_only:
        results = [r for r in results if is_journal(unwrap(r))]
    return results


def _blocks(client: LogseqAPI, query: Optional[str], filters: QueryFilters) -> list:
    if query:
        return _datalog(client, QueryKind.BLOCKS_WITH_TEXT, {"text": query})
    if filters.tag:
        return _datalog(client, QueryKind.BLOCKS_WITH_TAG, {"tag": filters.tag})
    return []


def _journals(client: LogseqAPI, filters: QueryFilters) -> list:
    date_range = resolve_date_range(filters.date_range or "this week")
    journals = _datalog(client, QueryKind.JOURNALS)
    return [
        j for j in journals
        if in_range(field(unwrap(j), *JOURNAL_DAY_KEYS, default=None), date_range)
    ]


def _backlinks(client: LogseqAPI, page: str) -> list:
    try:
        return client.call("logseq.Editor.getPageLinkedReferences", [page]) or []
    except RemoteError as e:
        logger.info("Linked references unavailable (%s), using Datalog backlinks", e)
        return _datalog(client, QueryKind.BACKLINKS, {"page": page})


def execute_query(
    mode: QueryMode | str,
    query: Optional[str] = None,
    filters: Optional[dict | QueryFilters] = None,
    client: Optional[LogseqAPI] = None,
) -> list:
    """Run a query and return raw (unformatted) rows, with ``limit`` applied."""
    spec = QuerySpec(
        mode=mode,
        query=query,
        filters=QueryFilters.model_validate(filters or {}),
    )
    mode, query, filters = spec.mode, spec.query, spec.filters

    if mode in (QueryMode.BACKLINKS, QueryMode.SEARCH, QueryMode.DATALOG) and not query:
        raise ValidationError({
            QueryMode.BACKLINKS: "backlinks mode requires a page name in the query parameter",
            QueryMode.SEARCH: "search mode requires a query",
            QueryMode.DATALOG: "datalog mode requires a Datalog query string",
        }[mode])

    client = client or get_client()

    if mode == QueryMode.PAGES:
        results = _pages(client, query, filters)
    elif mode == QueryMode.BLOCKS:
        results = _blocks(client, query, filters)
    elif mode == QueryMode.TODOS:
        results = _datalog(client, QueryKind.TODOS)
    elif mode == QueryMode.JOURNALS:
        results = _journals(client, filters)
    elif mode == QueryMode.BACKLINKS:
        results = _backlinks(client, query)
    elif mode == QueryMode.RECENT:
        results = _datalog(client, QueryKind.RECENT_PAGES, {"days": RECENT_QUERY_DAYS})
    elif mode == QueryMode.SEARCH:
        results = _datalog(client, QueryKind.BLOCKS_WITH_TEXT, {"text": query})
    else:
        results = client.call(DATASCRIPT_QUERY, [query]) or []

    if filters.limit is not None and len(results) > filters.limit:
        results = results[:filters.limit]
    return list(results)


def run_query(
    mode: QueryMode | str,
    query: Optional[str] = None,
    filters: Optional[dict | QueryFilters] = None,
    output: OutputMode | str = OutputMode.SUMMARY,
    client: Optional[LogseqAPI] = None,
) -> str:
    """Tool entry point: query Logseq and format the rows. Never raises."""
    try:
        results = execute_query(mode, query, filters, client=client)
        return format_results(results, output or OutputMode.SUMMARY)
    except Exception as e:
        logger.error("logseq_query failed: %s", e, exc_info=True)
        return f"Query error: {e}"
