"""logseq_read -- render a page, a block, or a range of journal pages as markdown."""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Optional

from .client import LogseqAPI, get_client
from .config import BACKLINKS_MAX, TOP_REFERENCED_PAGES
from .dates import in_range, resolve_date_range
from .errors import NotFoundError, RemoteError
from .formatting import (
    JOURNAL_DAY_KEYS,
    extract_page_refs,
    field,
    format_properties,
    is_journal,
    page_title,
    render_blocks,
    unwrap,
)
from .models import ReadOptions, ReadTarget

logger = logging.getLogger(__name__)

_BLOCK_REF_RE = re.compile(r"^\(\(|\)\)$")


def clean_block_id(identifier: str) -> str:
    """Strip the ``((uuid))`` block-reference wrapper if present."""
    return _BLOCK_REF_RE.sub("", identifier.strip())


def _backlinks_section(client: LogseqAPI, name: str) -> str:
    try:
        refs = client.call("logseq.Editor.getPageLinkedReferences", [name]) or []
    except RemoteError as e:
        logger.warning("Backlinks for %r failed: %s", name, e)
        return "\n## Backlinks\n\nCould not fetch backlinks.\n"

    if not refs:
        return "\n## Backlinks\n\nNo backlinks found.\n"

    out = f"\n## Backlinks ({len(refs)})\n\n"
    for ref in refs[:BACKLINKS_MAX]:
        out += f"- [[{page_title(unwrap(ref))}]]\n"
    if len(refs) > BACKLINKS_MAX:
        out += f"- ... and {len(refs) - BACKLINKS_MAX} more\n"
    return out


def read_page(client: LogseqAPI, name: str, options: ReadOptions) -> str:
    page = client.call("logseq.Editor.getPage", [name])
    if not page:
        raise NotFoundError(f'Page "{name}" not found.')

    output = f"# {page_title(page)}\n\n"

    if options.include_properties and page.get("properties"):
        output += "## Properties\n"
        output += format_properties(page["properties"])
        output += "\n"

    if options.include_content:
        blocks = client.call("logseq.Editor.getPageBlocksTree", [name])
        if blocks:
            output += "## Content\n\n"
            output += render_blocks(blocks, max_depth=options.depth)

    if options.include_backlinks:
        output += _backlinks_section(client, name)

    return output


def read_block(client: LogseqAPI, identifier: str, options: ReadOptions) -> str:
    block_id = clean_block_id(identifier)
    block = client.call("logseq.Editor.getBlock", [block_id, {"includeChildren": True}])
    if not block:
        raise NotFoundError(f'Block "{block_id}" not found.')

    output = f"## Block: {block_id[:8]}...\n\n"
    output += f"**Content:** {block.get('content', '')}\n"
    if block.get("marker"):
        output += f"**Status:** {block['marker']}\n"
    if block.get("priority"):
        output += f"**Priority:** {block['priority']}\n"

    if options.include_properties and block.get("properties"):
        output += "\n### Properties\n"
        output += format_properties(block["properties"])

    if options.include_content and block.get("children"):
        output += "\n### Children\n\n"
        output += render_blocks(block["children"], max_depth=options.depth)

    return output


def read_journal(client: LogseqAPI, phrase: str, options: ReadOptions) -> str:
    date_range = resolve_date_range(phrase)
    pages = client.call("logseq.Editor.getAllPages") or []

    journal_pages = [
        p for p in (unwrap(p) for p in pages)
        if is_journal(p) and in_range(field(p, *JOURNAL_DAY_KEYS, default=None), date_range)
    ]
    journal_pages.sort(key=lambda p: int(field(p, *JOURNAL_DAY_KEYS, default=0)), reverse=True)

    output = f"# {date_range.title}\n\n"
    output += f"*{date_range.start.date().isoformat()} - {date_range.end.date().isoformat()}*\n\n"

    if not journal_pages:
        output += "No journal entries found for this period.\n"
        return output

    refs: Counter = Counter()
    for page in journal_pages:
        output += f"## {page_title(page)}\n\n"
        if options.include_content:
            name = field(page, "name", "block/name", "originalName", "block/original-name")
            blocks = client.call("logseq.Editor.getPageBlocksTree", [name])
            text = render_blocks(blocks, max_depth=options.depth)
            output += text + "\n"
            refs.update(extract_page_refs(text))

    if refs:
        output += "\n## Top Referenced Pages\n\n"
        for name, count in refs.most_common(TOP_REFERENCED_PAGES):
            output += f"- [[{name}]] ({count}x)\n"

    return output


def run_read(
    target: ReadTarget | str,
    identifier: str,
    options: Optional[dict | ReadOptions] = None,
    client: Optional[LogseqAPI] = None,
) -> str:
    """Tool entry point for logseq_read. Never raises."""
    try:
        target = ReadTarget(target)
        options = ReadOptions.model_validate(options or {})
        client = client or get_client()
        if target == ReadTarget.PAGE:
            return read_page(client, identifier, options)
        if target == ReadTarget.BLOCK:
            return read_block(client, identifier, options)
        return read_journal(client, identifier, options)
    except Exception as e:
        logger.error("logseq_read failed: %s", e, exc_info=True)
        return f"Read error: {e}"
