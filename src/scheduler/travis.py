"""Travis CI API client used by the nightly scheduler."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

import requests

from .config import BUILD_MESSAGE, DEFAULT_BRANCH, JSON_CONTENT_TYPE, USER_AGENT
from .discovery import RepoDiscovery
from .errors import UnexpectedOutcome
from .http_client import execute, new_session

PENDING = "pending"


def encode_slug(slug: str) -> str:
    """Encode `owner/repo` as a single path segment (`owner%2Frepo`)."""
    return quote(slug, safe="")


@dataclass(frozen=True)
class BuildRequestAck:
    """Immediate answer of the CI host to a build submission."""

    slug: str
    type_tag: Optional[str]
    body: str

    @property
    def accepted(self) -> bool:
        return self.type_tag == PENDING


class TravisClient:
    """Talks to one Travis host with a session token obtained from a GitHub token."""

    def __init__(
        self,
        endpoint: str,
        github_token: str,
        discovery: RepoDiscovery,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.discovery = discovery
        self.session = session or new_session()
        self._github_token = github_token
        self._access_token: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self._access_token is not None

    def _url(self, path: str) -> str:
        path = path if path.startswith("/") else f"/{path}"
        return f"{self.endpoint}{path}"

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self._access_token:
            headers["Authorization"] = f"token {self._access_token}"
        if extra:
            headers.update(extra)
        return headers

    def _send(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        expected: Iterable[int] = (200,),
        **kwargs,
    ) -> str:
        extra = dict(headers or {})
        if payload is not None:
            extra["Content-Type"] = JSON_CONTENT_TYPE
            kwargs["data"] = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        return execute(
            self.session,
            method,
            self._url(path),
            expected,
            headers=self._headers(extra),
            **kwargs,
        )

    def get(self, path: str, **kwargs) -> str:
        """Authenticated GET returning the body of a 200 response."""
        self.ensure_authenticated()
        return self._send("GET", path, **kwargs)

    def authenticate(self) -> str:
        """Exchange the GitHub token for a Travis session token and keep it."""
        body = self._send("POST", "/auth/github", payload={"github_token": self._github_token})
        try:
            token = json.loads(body).get("access_token")
        except (ValueError, AttributeError):
            token = None
        if not token:
            # the body is not echoed: it would contain the session token if one were issued
            raise UnexpectedOutcome(f"No access_token returned by {self.endpoint}/auth/github", "<omitted>")
        self._access_token = token
        print(f"[auth] authenticated against {self.endpoint}")
        return token

    def ensure_authenticated(self) -> None:
        if self._access_token is None:
            self.authenticate()

    def list_active_repo_slugs(self, owner: str) -> List[str]:
        """Slugs of the owner's repositories that Travis currently builds."""
        slugs = self.discovery.active_slugs(self, owner)
        print(f"[discovery] {owner} on {self.endpoint}: {len(slugs)} active repositories")
        return slugs

    def delete_default_branch_cache(self, slug: str) -> None:
        self.ensure_authenticated()
        self._send("DELETE", f"/repos/{slug}/caches", params={"branch": DEFAULT_BRANCH})

    def request_default_branch_build(self, slug: str) -> BuildRequestAck:
        """Ask Travis to build the default branch; raise UnexpectedOutcome unless it is pending.

        A 403 is an accepted completion status here: Travis uses it for benign
        refusals (quota, skipped branch) and the `@type` of the body decides.
        """
        self.ensure_authenticated()
        body = self._send(
            "POST",
            f"/repo/{encode_slug(slug)}/requests",
            payload={"request": {"branch": DEFAULT_BRANCH, "message": BUILD_MESSAGE}},
            headers={"Travis-API-Version": "3"},
            expected=(202, 403),
        )
        try:
            type_tag = json.loads(body).get("@type")
        except (ValueError, AttributeError):
            type_tag = None
        ack = BuildRequestAck(slug=slug, type_tag=type_tag, body=body)
        if not ack.accepted:
            raise UnexpectedOutcome(f"Build request for {slug} was not accepted", body)
        return ack


__all__ = ["PENDING", "BuildRequestAck", "TravisClient", "encode_slug"]
