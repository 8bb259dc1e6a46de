"""Pydantic models for tool inputs and resolved values."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .config import ANALYSIS_DEFAULT_LIMIT, ANALYSIS_DEFAULT_RANGE


# --- Enums ---

class QueryMode(str, Enum):
    PAGES = "pages"
    BLOCKS = "blocks"
    DATALOG = "datalog"
    SEARCH = "search"
    TODOS = "todos"
    JOURNALS = "journals"
    BACKLINKS = "backlinks"
    RECENT = "recent"


class OutputMode(str, Enum):
    FULL = "full"
    SUMMARY = "summary"
    NAMES = "names"


class ReadTarget(str, Enum):
    PAGE = "page"
    BLOCK = "block"
    JOURNAL = "journal"


class WriteOperation(str, Enum):
    CREATE_PAGE = "create_page"
    DELETE_PAGE = "delete_page"
    CREATE_BLOCK = "create_block"
    UPDATE_BLOCK = "update_block"
    DELETE_BLOCK = "delete_block"
    APPEND_TO_PAGE = "append_to_page"
    APPEND_TO_JOURNAL = "append_to_journal"
    SET_PROPERTY = "set_property"
    REMOVE_PROPERTY = "remove_property"


class AnalysisType(str, Enum):
    GRAPH_OVERVIEW = "graph_overview"
    KNOWLEDGE_GAPS = "knowledge_gaps"
    ORPHAN_PAGES = "orphan_pages"
    TODO_SUMMARY = "todo_summary"
    TAG_DISTRIBUTION = "tag_distribution"
    RECENT_ACTIVITY = "recent_activity"


class InsertPosition(str, Enum):
    FIRST = "first"
    LAST = "last"


# --- Tool options ---
# Field aliases keep the camelCase names existing MCP clients already send.

class _Options(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class QueryFilters(_Options):
    tag: Optional[str] = Field(default=None, description="Filter by tag name")
    property: Optional[str] = Field(default=None, description="Property name to filter by")
    property_value: Optional[str] = Field(
        default=None, alias="propertyValue", description="Property value to match"
    )
    date_range: Optional[str] = Field(
        default=None,
        alias="dateRange",
        description='For journals: "today", "this week", "last 7 days", etc.',
    )
    journal_only: bool = Field(
        default=False, alias="journalOnly", description="Only include journal pages"
    )
    limit: Optional[int] = Field(default=None, ge=0, description="Max results to return")


class ReadOptions(_Options):
    include_content: bool = Field(default=True, alias="includeContent")
    include_backlinks: bool = Field(default=False, alias="includeBacklinks")
    include_properties: bool = Field(default=True, alias="includeProperties")
    depth: Optional[int] = Field(
        default=None, ge=1, description="Max depth for nested blocks (default: unlimited)"
    )


class WriteOptions(_Options):
    as_journal: bool = Field(default=False, alias="asJournal")
    parent_block_id: Optional[str] = Field(default=None, alias="parentBlockId")
    position: InsertPosition = InsertPosition.LAST


class AnalyzeOptions(_Options):
    limit: int = Field(default=ANALYSIS_DEFAULT_LIMIT, ge=0)
    date_range: str = Field(default=ANALYSIS_DEFAULT_RANGE, alias="dateRange")
    focus_tag: Optional[str] = Field(default=None, alias="focusTag")


# --- Resolved values ---

class DateRange(BaseModel):
    start: datetime
    end: datetime
    title: str

    @model_validator(mode="after")
    def _ordered(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError(f"start {self.start} is after end {self.end}")
        return self


class QuerySpec(BaseModel):
    mode: QueryMode
    query: Optional[str] = None
    filters: QueryFilters = Field(default_factory=QueryFilters)
    output: OutputMode = OutputMode.SUMMARY
