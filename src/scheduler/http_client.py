"""Single-shot HTTP helper that checks response codes for the Travis API calls."""

from __future__ import annotations

from typing import Iterable

import requests

from .config import REQUEST_TIMEOUT
from .errors import TransportError, UnexpectedStatus


def new_session() -> requests.Session:
    """Return a session dedicated to one CI host; its pool lives as long as the client."""
    return requests.Session()


def log_http_error(resp: requests.Response, method: str, url: str) -> None:
    """Print a short, human-readable message when the CI host rejects a call."""
    print(f"[error] HTTP {resp.status_code} for {method} {url}")


def execute(
    session: requests.Session,
    method: str,
    url: str,
    expected: Iterable[int] = (200,),
    **kwargs,
) -> str:
    """Send one request and return its body text when the status is in `expected`.

    There is no retry: connection problems raise TransportError and any other
    status raises UnexpectedStatus carrying the expected codes, the actual code
    and the response body.
    """
    expected = tuple(expected)
    if not expected:
        raise ValueError("At least one acceptable HTTP status is required")

    timeout = kwargs.pop("timeout", REQUEST_TIMEOUT)
    try:
        resp = session.request(method, url, timeout=timeout, **kwargs)
        body = resp.text
    except requests.RequestException as exc:
        raise TransportError(f"{method} {url} failed: {exc}") from exc

    if resp.status_code not in expected:
        log_http_error(resp, method, url)
        raise UnexpectedStatus(expected, resp.status_code, body)
    return body


__all__ = ["new_session", "log_http_error", "execute"]
