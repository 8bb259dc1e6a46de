"""Tests for the logseq_write handler."""

from datetime import date

from logseq_mcp.dates import format_journal_date
from logseq_mcp.errors import RemoteError
from logseq_mcp.write import is_block_id, run_write, split_lines

from conftest import FakeLogseq

UUID = "6553a1b2-0000-4000-8000-000000000000"


class TestAppendToJournal:
    def test_creates_missing_journal_then_appends(self):
        fake = FakeLogseq({"logseq.Editor.getPage": None})
        out = run_write("append_to_journal", "today", "buy milk\ncall mom", client=fake)

        name = format_journal_date(date.today())
        assert fake.calls[0] == ("logseq.Editor.getPage", [name])
        assert fake.calls[1] == ("logseq.Editor.createPage", [name, {"journal?": True}])
        assert fake.calls_to("logseq.Editor.appendBlockInPage") == [
            [name, "buy milk"],
            [name, "call mom"],
        ]
        assert out == f'Added 2 block(s) to journal "{name}".'

    def test_existing_journal_not_recreated(self):
        fake = FakeLogseq({"logseq.Editor.getPage": {"name": "x"}})
        run_write("append_to_journal", "2025-03-14", "note", client=fake)
        assert "logseq.Editor.createPage" not in fake.methods()
        assert fake.calls_to("logseq.Editor.appendBlockInPage") == [["mar 14th, 2025", "note"]]

    def test_requires_content(self):
        fake = FakeLogseq()
        out = run_write("append_to_journal", "today", client=fake)
        assert out == "Write error: content is required for append_to_journal"
        assert fake.calls == []


class TestPages:
    def test_create_page(self):
        fake = FakeLogseq({"logseq.Editor.getPage": None})
        out = run_write("create_page", "Reading List", "a\n\n  \nb", {"type": "list"},
                        {"asJournal": True}, client=fake)
        assert out == 'Page "Reading List" created successfully.'
        assert fake.calls_to("logseq.Editor.createPage") == [
            ["Reading List", {"type": "list", "journal?": True}],
        ]
        assert len(fake.calls_to("logseq.Editor.appendBlockInPage")) == 2

    def test_create_existing_page(self):
        fake = FakeLogseq({"logseq.Editor.getPage": {"name": "x"}})
        out = run_write("create_page", "x", client=fake)
        assert "already exists" in out
        assert "logseq.Editor.createPage" not in fake.methods()

    def test_delete_page(self):
        fake = FakeLogseq()
        assert run_write("delete_page", "old", client=fake) == 'Page "old" deleted.'
        assert fake.calls == [("logseq.Editor.deletePage", ["old"])]

    def test_append_to_page_creates_missing(self):
        fake = FakeLogseq({"logseq.Editor.getPage": None})
        out = run_write("append_to_page", "Inbox", "one\ntwo\nthree", client=fake)
        assert out == 'Added 3 block(s) to "Inbox".'
        assert fake.calls_to("logseq.Editor.createPage") == [["Inbox", {}]]

    def test_partial_failure_leaves_earlier_blocks(self):
        appended = []

        def append(args):
            if len(appended) == 1:
                raise RemoteError(500, "boom")
            appended.append(args[1])
            return {"uuid": UUID}

        fake = FakeLogseq({"logseq.Editor.getPage": {"name": "p"},
                           "logseq.Editor.appendBlockInPage": append})
        out = run_write("append_to_page", "p", "first\nsecond\nthird", client=fake)
        assert out.startswith("Write error:")
        assert appended == ["first"]
        assert "logseq.Editor.removeBlock" not in fake.methods()


class TestBlocks:
    def test_create_block_appends_and_sets_properties(self):
        fake = FakeLogseq({"logseq.Editor.appendBlockInPage": {"uuid": UUID}})
        out = run_write("create_block", "Page", "hello", {"status": "open"}, client=fake)
        assert out == "Block created (6553a1b2...)."
        assert fake.calls_to("logseq.Editor.upsertBlockProperty") == [[UUID, "status", "open"]]

    def test_create_child_block(self):
        fake = FakeLogseq({"logseq.Editor.insertBlock": {"uuid": UUID}})
        run_write("create_block", "Page", "child", options={"parentBlockId": f"(({UUID}))"}, client=fake)
        assert fake.calls_to("logseq.Editor.insertBlock") == [
            [UUID, "child", {"sibling": False, "before": False}],
        ]

    def test_create_block_first(self):
        fake = FakeLogseq({"logseq.Editor.prependBlockInPage": None})
        out = run_write("create_block", "Page", "top", options={"position": "first"}, client=fake)
        assert out == "Block created."
        assert fake.calls_to("logseq.Editor.prependBlockInPage") == [["Page", "top"]]

    def test_update_block(self):
        fake = FakeLogseq()
        out = run_write("update_block", f"(({UUID}))", "new text", client=fake)
        assert out == "Block 6553a1b2... updated."
        assert fake.calls == [("logseq.Editor.updateBlock", [UUID, "new text"])]

    def test_update_block_requires_content(self):
        assert run_write("update_block", UUID, client=FakeLogseq()).startswith("Write error:")

    def test_delete_block(self):
        fake = FakeLogseq()
        assert run_write("delete_block", UUID, client=fake) == "Block 6553a1b2... deleted."


class TestProperties:
    def test_set_on_block(self):
        fake = FakeLogseq()
        out = run_write("set_property", UUID, properties={"a": 1, "b": 2}, client=fake)
        assert out == "Set 2 property(ies) on block."
        assert fake.calls_to("logseq.Editor.upsertBlockProperty") == [[UUID, "a", 1], [UUID, "b", 2]]

    def test_set_on_page_uses_first_block(self):
        fake = FakeLogseq({"logseq.Editor.getPageBlocksTree": [{"uuid": "first-uuid"}, {"uuid": "other"}]})
        out = run_write("set_property", "Reading List", properties={"type": "list"}, client=fake)
        assert out == 'Set 1 property(ies) on page "Reading List".'
        assert fake.calls_to("logseq.Editor.upsertBlockProperty") == [["first-uuid", "type", "list"]]

    def test_set_on_empty_page(self):
        fake = FakeLogseq({"logseq.Editor.getPageBlocksTree": []})
        out = run_write("set_property", "Empty", properties={"a": 1}, client=fake)
        assert out == 'Write error: Page "Empty" has no blocks.'

    def test_set_requires_properties(self):
        fake = FakeLogseq()
        out = run_write("set_property", UUID, client=fake)
        assert out == "Write error: properties required for set_property"
        assert fake.calls == []

    def test_remove_from_block(self):
        fake = FakeLogseq()
        out = run_write("remove_property", UUID, properties={"a": None}, client=fake)
        assert out == "Removed 1 property(ies) from block."
        assert fake.calls_to("logseq.Editor.removeBlockProperty") == [[UUID, "a"]]

    def test_remove_from_page(self):
        fake = FakeLogseq({"logseq.Editor.getPageBlocksTree": [{"uuid": "first-uuid"}]})
        out = run_write("remove_property", "Notes", properties={"a": ""}, client=fake)
        assert out == 'Removed 1 property(ies) from page "Notes".'


class TestHelpers:
    def test_is_block_id(self):
        assert is_block_id(UUID)
        assert is_block_id(f"(({UUID}))")
        assert not is_block_id("Reading List")

    def test_split_lines(self):
        assert split_lines("a\n\n \nb\n") == ["a", "b"]

    def test_unknown_operation(self):
        assert run_write("rename_page", "x", client=FakeLogseq()).startswith("Write error:")
