"""
HTTP helpers for upstream release sources.

Goals:
- One shared requests.Session (connection reuse across update checks).
- Every call is bounded by one overall deadline: connect, headers and the
  whole body. A server trickling bytes cannot keep a worker busy past it.
- Non-2xx responses raise, so adapters can turn them into failures.
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, List, Optional

import requests

USER_AGENT = "SFR-Mirror-Coordinator"
CHUNK_SIZE = 16 * 1024

# ----------------------------------------------------
# Requests session (shared)
# ----------------------------------------------------
_session = requests.Session()


def get_session() -> requests.Session:
    return _session


# ----------------------------------------------------
# INTERNAL: read the body before the deadline
# ----------------------------------------------------
def _read_body(resp: requests.Response, url: str, deadline: float, timeout_s: float) -> bytes:
    chunks: List[bytes] = []
    for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
        if time.monotonic() > deadline:
            raise requests.Timeout(f"Response from {url} not received within {timeout_s}s")
        chunks.append(chunk)
    return b"".join(chunks)


# ----------------------------------------------------
# GET helper returning decoded JSON
# ----------------------------------------------------
def get_json(
    url: str,
    *,
    timeout_s: float,
    headers: Optional[Dict[str, str]] = None,
    session: Optional[requests.Session] = None,
) -> Any:
    """
    Raises requests.RequestException on transport errors, timeouts and
    HTTP error statuses, ValueError when the body is not JSON.
    """
    h = {"User-Agent": USER_AGENT}
    if headers:
        h.update(headers)

    deadline = time.monotonic() + timeout_s
    resp = (session or _session).get(url, headers=h, timeout=timeout_s, stream=True)
    try:
        resp.raise_for_status()
        body = _read_body(resp, url, deadline, timeout_s)
    finally:
        resp.close()

    try:
        return json.loads(body)
    except ValueError as e:
        raise ValueError(f"Invalid JSON from {url}: {e}") from e
