"""Datalog query catalog for Logseq's datascript database.

Each QueryKind maps to a builder that turns a parameter dict into a query
string. Caller-supplied values are emitted as escaped string literals and
keyword positions only accept plain keyword characters, so a page name with
quotes in it cannot change the shape of the query.
"""

from __future__ import annotations

import re
import time
from enum import Enum
from typing import Callable, Optional

from .config import RECENT_QUERY_DAYS, TASK_MARKERS
from .errors import ValidationError

DAY_MS = 86_400_000

_KEYWORD_RE = re.compile(r"^[A-Za-z0-9_*+!?<>=.-]+$")


class QueryKind(str, Enum):
    PAGES = "pages"
    PAGES_WITH_PROPERTY = "pages_with_property"
    TODOS = "todos"
    BLOCKS_WITH_TEXT = "blocks_with_text"
    PAGES_WITH_TAG = "pages_with_tag"
    BLOCKS_WITH_TAG = "blocks_with_tag"
    JOURNALS = "journals"
    RECENT_PAGES = "recent_pages"
    ORPHAN_PAGES = "orphan_pages"
    BACKLINKS = "backlinks"
    TAG_COUNTS = "tag_counts"
    MARKER_COUNTS = "marker_counts"


def string_literal(value) -> str:
    """Quote a value as an EDN string literal."""
    text = str(value)
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def keyword(value) -> str:
    """Render a property name as an EDN keyword, rejecting anything exotic."""
    text = str(value or "").strip().lstrip(":")
    if not _KEYWORD_RE.match(text):
        raise ValidationError(f"Invalid property name: {value!r}")
    return f":{text}"


def _require(params: dict, key: str) -> str:
    value = params.get(key)
    if value is None or str(value) == "":
        raise ValidationError(f"Missing query parameter: {key}")
    return str(value)


def _pages(params: dict, now_ms: int) -> str:
    return "[:find (pull ?p [*]) :where [?p :block/name]]"


def _pages_with_property(params: dict, now_ms: int) -> str:
    prop = keyword(_require(params, "property"))
    value = string_literal(_require(params, "value"))
    return (
        "[:find (pull ?p [*]) :where [?p :block/properties ?props] "
        f"[(get ?props {prop}) ?v] [(= ?v {value})]]"
    )


def _todos(params: dict, now_ms: int) -> str:
    markers = " ".join(string_literal(m) for m in TASK_MARKERS)
    return (
        "[:find (pull ?b [*]) :where [?b :block/marker ?m] "
        f"[(contains? #{{{markers}}} ?m)]]"
    )


def _blocks_with_text(params: dict, now_ms: int) -> str:
    text = string_literal(_require(params, "text"))
    return (
        "[:find (pull ?b [*]) :where [?b :block/content ?c] "
        f"[(clojure.string/includes? ?c {text})]]"
    )


def _pages_with_tag(params: dict, now_ms: int) -> str:
    tag = string_literal(_require(params, "tag").lower())
    return f"[:find (pull ?p [*]) :where [?p :block/tags ?t] [?t :block/name {tag}]]"


def _blocks_with_tag(params: dict, now_ms: int) -> str:
    tag = string_literal(_require(params, "tag").lower())
    return f"[:find (pull ?b [*]) :where [?b :block/refs ?r] [?r :block/name {tag}]]"


def _journals(params: dict, now_ms: int) -> str:
    return "[:find (pull ?p [*]) :where [?p :block/journal? true]]"


def _recent_pages(params: dict, now_ms: int) -> str:
    days = params.get("days") or RECENT_QUERY_DAYS
    try:
        days = int(days)
    except (TypeError, ValueError):
        raise ValidationError(f"days must be an integer, got {days!r}")
    cutoff = now_ms - days * DAY_MS
    return f"[:find (pull ?p [*]) :where [?p :block/updated-at ?t] [(> ?t {cutoff})]]"


def _orphan_pages(params: dict, now_ms: int) -> str:
    return "[:find (pull ?p [*]) :where [?p :block/name] (not [?b :block/refs ?p])]"


def _backlinks(params: dict, now_ms: int) -> str:
    page = string_literal(_require(params, "page").lower())
    return (
        "[:find (pull ?p [*]) :where [?b :block/refs ?target] "
        f"[?target :block/name {page}] [?b :block/page ?p]]"
    )


def _tag_counts(params: dict, now_ms: int) -> str:
    return "[:find ?name (count ?b) :where [?b :block/refs ?t] [?t :block/name ?name]]"


def _marker_counts(params: dict, now_ms: int) -> str:
    return "[:find ?m (count ?b) :where [?b :block/marker ?m]]"


BUILDERS: dict[QueryKind, Callable[[dict, int], str]] = {
    QueryKind.PAGES: _pages,
    QueryKind.PAGES_WITH_PROPERTY: _pages_with_property,
    QueryKind.TODOS: _todos,
    QueryKind.BLOCKS_WITH_TEXT: _blocks_with_text,
    QueryKind.PAGES_WITH_TAG: _pages_with_tag,
    QueryKind.BLOCKS_WITH_TAG: _blocks_with_tag,
    QueryKind.JOURNALS: _journals,
    QueryKind.RECENT_PAGES: _recent_pages,
    QueryKind.ORPHAN_PAGES: _orphan_pages,
    QueryKind.BACKLINKS: _backlinks,
    QueryKind.TAG_COUNTS: _tag_counts,
    QueryKind.MARKER_COUNTS: _marker_counts,
}


def build_query(
    kind: QueryKind | str,
    params: Optional[dict] = None,
    now_ms: Optional[int] = None,
) -> str:
    """Build a Datalog query string for ``kind``.

    An unknown kind never fails: it yields ``params["custom"]`` when given,
    otherwise the list-all-pages query.
    """
    params = params or {}
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    try:
        kind = QueryKind(kind)
    except ValueError:
        custom = params.get("custom")
        if custom:
            return str(custom)
        kind = QueryKind.PAGES
    return BUILDERS[kind](params, now_ms)
