"""Tests for server tool wiring (tools delegate to the handler modules)."""

from unittest.mock import patch

import pytest

from conftest import FakeLogseq


@pytest.fixture
def server():
    import logseq_mcp.server as server_mod
    return server_mod


def _fn(tool):
    # FastMCP may wrap the decorated function in a tool object
    return getattr(tool, "fn", tool)


class TestServer:
    def test_server_name(self, server):
        assert server.mcp.name == "Logseq Tools"
        assert callable(server.main)

    def test_query_tool(self, server):
        fake = FakeLogseq({"logseq.Editor.getAllPages": [{"name": "a"}]})
        with patch("logseq_mcp.query.get_client", return_value=fake):
            out = _fn(server.logseq_query)(mode="pages", output="names")
        assert out == "a"

    def test_read_tool(self, server):
        fake = FakeLogseq({"logseq.Editor.getPage": None})
        with patch("logseq_mcp.read.get_client", return_value=fake):
            out = _fn(server.logseq_read)(target="page", identifier="nope")
        assert out == 'Read error: Page "nope" not found.'

    def test_write_tool(self, server):
        fake = FakeLogseq()
        with patch("logseq_mcp.write.get_client", return_value=fake):
            out = _fn(server.logseq_write)(operation="delete_page", target="old")
        assert out == 'Page "old" deleted.'

    def test_analyze_tool(self, server):
        fake = FakeLogseq({"logseq.DB.datascriptQuery": []})
        with patch("logseq_mcp.analyze.get_client", return_value=fake):
            out = _fn(server.logseq_analyze)(analysis="orphan_pages")
        assert "No orphan pages found." in out
