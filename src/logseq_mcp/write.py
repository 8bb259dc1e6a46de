"""logseq_write -- page/block create, update, delete, append and properties.

Writes go straight to Logseq, one call at a time. A multi-line append that
fails halfway leaves the earlier lines in place; nothing is rolled back.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from .client import LogseqAPI, get_client
from .dates import journal_page_name
from .errors import NotFoundError, ValidationError
from .models import InsertPosition, WriteOperation, WriteOptions
from .read import clean_block_id

logger = logging.getLogger(__name__)

_BLOCK_ID_RE = re.compile(r"^[0-9a-f-]{8,}$", re.IGNORECASE)


def is_block_id(target: str) -> bool:
    return bool(_BLOCK_ID_RE.match(clean_block_id(target)))


def split_lines(content: str) -> list[str]:
    """Non-blank lines of ``content``, one block each."""
    return [line for line in content.split("\n") if line.strip()]


def _require_content(content: Optional[str], operation: WriteOperation) -> str:
    if not content:
        raise ValidationError(f"content is required for {operation.value}")
    return content


def _require_properties(properties: Optional[dict], message: str) -> dict:
    if not properties:
        raise ValidationError(message)
    return properties


def _append_lines(client: LogseqAPI, page: str, content: str) -> int:
    lines = split_lines(content)
    for line in lines:
        client.call("logseq.Editor.appendBlockInPage", [page, line])
    return len(lines)


def _ensure_page(client: LogseqAPI, name: str, properties: dict) -> None:
    if not client.call("logseq.Editor.getPage", [name]):
        logger.info("Creating missing page %r", name)
        client.call("logseq.Editor.createPage", [name, properties])


def _first_block_uuid(client: LogseqAPI, page: str) -> str:
    blocks = client.call("logseq.Editor.getPageBlocksTree", [page]) or []
    if not blocks or not blocks[0].get("uuid"):
        raise NotFoundError(f'Page "{page}" has no blocks.')
    return blocks[0]["uuid"]


def create_page(client, target, content, properties, options: WriteOptions) -> str:
    page_props = dict(properties or {})
    if options.as_journal:
        page_props["journal?"] = True

    if client.call("logseq.Editor.getPage", [target]):
        return f'Page "{target}" already exists. Use append_to_page to add content.'

    client.call("logseq.Editor.createPage", [target, page_props])
    if content:
        _append_lines(client, target, content)
    return f'Page "{target}" created successfully.'


def create_block(client, target, content, properties, options: WriteOptions) -> str:
    content = _require_content(content, WriteOperation.CREATE_BLOCK)
    first = options.position == InsertPosition.FIRST

    if options.parent_block_id:
        parent_id = clean_block_id(options.parent_block_id)
        block = client.call("logseq.Editor.insertBlock", [
            parent_id, content, {"sibling": False, "before": first},
        ])
    elif first:
        block = client.call("logseq.Editor.prependBlockInPage", [target, content])
    else:
        block = client.call("logseq.Editor.appendBlockInPage", [target, content])

    uuid = (block or {}).get("uuid")
    if properties and uuid:
        for key, value in properties.items():
            client.call("logseq.Editor.upsertBlockProperty", [uuid, key, value])

    return f"Block created ({uuid[:8]}...)." if uuid else "Block created."


def _set_properties(client, target, properties) -> str:
    properties = _require_properties(properties, "properties required for set_property")
    if is_block_id(target):
        uuid, where = clean_block_id(target), "block"
    else:
        uuid, where = _first_block_uuid(client, target), f'page "{target}"'
    for key, value in properties.items():
        client.call("logseq.Editor.upsertBlockProperty", [uuid, key, value])
    return f"Set {len(properties)} property(ies) on {where}."


def _remove_properties(client, target, properties) -> str:
    properties = _require_properties(
        properties, "properties required (specify keys to remove)"
    )
    if is_block_id(target):
        uuid, where = clean_block_id(target), "block"
    else:
        uuid, where = _first_block_uuid(client, target), f'page "{target}"'
    for key in properties:
        client.call("logseq.Editor.removeBlockProperty", [uuid, key])
    return f"Removed {len(properties)} property(ies) from {where}."


def execute_write(
    operation: WriteOperation | str,
    target: str,
    content: Optional[str] = None,
    properties: Optional[dict] = None,
    options: Optional[dict | WriteOptions] = None,
    client: Optional[LogseqAPI] = None,
) -> str:
    operation = WriteOperation(operation)
    options = WriteOptions.model_validate(options or {})

    if operation in (
        WriteOperation.CREATE_BLOCK,
        WriteOperation.UPDATE_BLOCK,
        WriteOperation.APPEND_TO_PAGE,
        WriteOperation.APPEND_TO_JOURNAL,
    ):
        _require_content(content, operation)

    client = client or get_client()

    if operation == WriteOperation.CREATE_PAGE:
        return create_page(client, target, content, properties, options)

    if operation == WriteOperation.DELETE_PAGE:
        client.call("logseq.Editor.deletePage", [target])
        return f'Page "{target}" deleted.'

    if operation == WriteOperation.CREATE_BLOCK:
        return create_block(client, target, content, properties, options)

    if operation == WriteOperation.UPDATE_BLOCK:
        block_id = clean_block_id(target)
        client.call("logseq.Editor.updateBlock", [block_id, content])
        return f"Block {block_id[:8]}... updated."

    if operation == WriteOperation.DELETE_BLOCK:
        block_id = clean_block_id(target)
        client.call("logseq.Editor.removeBlock", [block_id])
        return f"Block {block_id[:8]}... deleted."

    if operation == WriteOperation.APPEND_TO_PAGE:
        _ensure_page(client, target, {})
        count = _append_lines(client, target, content)
        return f'Added {count} block(s) to "{target}".'

    if operation == WriteOperation.APPEND_TO_JOURNAL:
        page_name = journal_page_name(target)
        _ensure_page(client, page_name, {"journal?": True})
        count = _append_lines(client, page_name, content)
        return f'Added {count} block(s) to journal "{page_name}".'

    if operation == WriteOperation.SET_PROPERTY:
        return _set_properties(client, target, properties)

    return _remove_properties(client, target, properties)


def run_write(
    operation: WriteOperation | str,
    target: str,
    content: Optional[str] = None,
    properties: Optional[dict] = None,
    options: Optional[dict | WriteOptions] = None,
    client: Optional[LogseqAPI] = None,
) -> str:
    """Tool entry point for logseq_write. Never raises."""
    try:
        return execute_write(operation, target, content, properties, options, client=client)
    except Exception as e:
        logger.error("logseq_write failed: %s", e, exc_info=True)
        return f"Write error: {e}"
