"""MCP server entry point - the four Logseq tools."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from fastmcp import FastMCP

from . import config
from .models import (
    AnalysisType,
    AnalyzeOptions,
    OutputMode,
    QueryFilters,
    QueryMode,
    ReadOptions,
    ReadTarget,
    WriteOperation,
    WriteOptions,
)

# Configure logging to stderr (stdout is reserved for MCP JSON-RPC)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("logseq_mcp")

config.init()

mcp = FastMCP(
    "Logseq Tools",
    instructions=(
        "Read, search, write and analyze a Logseq knowledge graph through "
        "its local HTTP API. Page names are case-insensitive; journal pages "
        "are named like 'mar 14th, 2025'."
    ),
)


@mcp.tool()
def logseq_query(
    mode: QueryMode,
    query: Optional[str] = None,
    filters: Optional[QueryFilters] = None,
    output: OutputMode = OutputMode.SUMMARY,
) -> str:
    """Unified query interface.

    Modes: pages (list/filter pages), blocks (search block content),
    datalog (raw Datalog query), search (text search), todos (find tasks),
    journals (journal entries), backlinks (pages linking to target),
    recent (recently modified).
    Output: full (all data), summary (condensed), names (just names).
    """
    from .query import run_query

    return run_query(mode, query, filters, output)


@mcp.tool()
def logseq_read(
    target: ReadTarget,
    identifier: str,
    options: Optional[ReadOptions] = None,
) -> str:
    """Read a page (by name), a block (by UUID) or journals (by date or range).

    Journal identifiers: "today", "yesterday", "this week", "last week",
    "this month", "last month", "last 7 days", "last 30 days".
    """
    from .read import run_read

    return run_read(target, identifier, options)


@mcp.tool()
def logseq_write(
    operation: WriteOperation,
    target: str,
    content: Optional[str] = None,
    properties: Optional[dict[str, Any]] = None,
    options: Optional[WriteOptions] = None,
) -> str:
    """Create, update, delete or append pages and blocks, and edit properties.

    target is a page name, a block UUID, or "today"/"yesterday" for
    append_to_journal. Multi-line content becomes one block per line.
    """
    from .write import run_write

    return run_write(operation, target, content, properties, options)


@mcp.tool()
def logseq_analyze(
    analysis: AnalysisType,
    options: Optional[AnalyzeOptions] = None,
) -> str:
    """Analyze the graph: graph_overview (stats), knowledge_gaps (disconnected
    topics), orphan_pages (no links), todo_summary (task status),
    tag_distribution (tag usage), recent_activity (recent changes).
    """
    from .analyze import run_analyze

    return run_analyze(analysis, options)


# =============================================================================
# Server entry point
# =============================================================================

def main():
    """Run the MCP server."""
    logger.info("Logseq MCP server starting (API: %s)...", config.LOGSEQ_API_URL)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
