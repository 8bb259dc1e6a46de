"""Shared test fixtures."""

import pytest


class FakeLogseq:
    """Stands in for LogseqAPI: canned responses per method, every call recorded.

    A response may be a value, an exception instance (raised), or a callable
    taking the args list.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def call(self, method, args=None):
        args = list(args or [])
        self.calls.append((method, args))
        response = self.responses.get(method)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(args)
        return response

    def methods(self):
        return [method for method, _ in self.calls]

    def calls_to(self, method):
        return [args for m, args in self.calls if m == method]


@pytest.fixture
def fake_logseq():
    return FakeLogseq()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep tests independent of the developer's .env and LOGSEQ_* variables."""
    import logseq_mcp.client as client_mod
    import logseq_mcp.config as config

    for var in ("LOGSEQ_TOKEN", "LOGSEQ_HOST", "LOGSEQ_PORT", "LOGSEQ_API_URL", "LOGSEQ_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(config, "PROJECT_ROOT", tmp_path)
    monkeypatch.setattr(config, "_env_initialized", False)
    client_mod.reset_client()
    yield tmp_path
    client_mod.reset_client()
