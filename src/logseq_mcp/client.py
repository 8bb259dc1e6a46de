"""Thin wrapper around the Logseq HTTP API.

Logseq exposes every plugin API method through a single endpoint: POST
``{"method": "logseq.Editor.getPage", "args": [...]}`` with a bearer token.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from . import config
from .errors import AuthError, RemoteError

logger = logging.getLogger(__name__)


def _auth_help(url: str) -> str:
    return (
        "Logseq API authentication failed (401 Unauthorized). "
        "Please verify:\n"
        "1. The HTTP API is enabled in Logseq (Settings > Features > HTTP APIs Server)\n"
        "2. Your LOGSEQ_TOKEN matches the one in Logseq's \"Authorization token\" setting\n"
        f"3. Logseq is running and accessible at {url} "
        "(set LOGSEQ_HOST/LOGSEQ_PORT or LOGSEQ_API_URL)"
    )


class LogseqAPI:
    """One POST per API method, no retries."""

    def __init__(
        self,
        url: str,
        token: str = "",
        timeout: Optional[float] = None,
    ) -> None:
        self.url = url
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        })

    def call(self, method: str, args: Optional[list] = None) -> Any:
        """Invoke a Logseq API method and return the decoded JSON result.

        Raises AuthError on 401, RemoteError on any other non-2xx status.
        Transport errors (requests.RequestException) propagate as-is.
        """
        logger.debug("Logseq call %s (%d args)", method, len(args or []))
        resp = self._session.post(
            self.url,
            json={"method": method, "args": list(args or [])},
            timeout=self._timeout,
        )
        if resp.status_code == 401:
            raise AuthError(_auth_help(self.url))
        if not resp.ok:
            raise RemoteError(resp.status_code, resp.reason or "")
        if not resp.content:
            return None
        return resp.json()

    def close(self) -> None:
        self._session.close()


_client: Optional[LogseqAPI] = None


def get_client() -> LogseqAPI:
    """Return the process-wide client, built from config on first use."""
    global _client
    if _client is None:
        config.init()
        _client = LogseqAPI(
            config.LOGSEQ_API_URL,
            config.LOGSEQ_TOKEN,
            timeout=config.LOGSEQ_TIMEOUT,
        )
        logger.info("Logseq API endpoint: %s", config.LOGSEQ_API_URL)
    return _client


def reset_client() -> None:
    """Drop the cached client so the next get_client() rereads config."""
    global _client
    if _client is not None:
        _client.close()
    _client = None
