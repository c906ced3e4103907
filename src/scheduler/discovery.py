"""Repository discovery for the two Travis API shapes.

The legacy API answers ``GET /repos?owner_name=...`` with a JSON array and
marks built repositories with a non-null ``last_build_id``. The v3 API answers
``GET /v3/owner/<owner>`` with an owner object whose ``repositories`` entries
carry an explicit ``active`` flag. Both yield plain slugs.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Callable, Dict, List
from urllib.parse import quote

from .config import SHAPE_LEGACY, SHAPE_V3, V3_OWNER_INCLUDE
from .errors import UnexpectedOutcome

if TYPE_CHECKING:
    from .travis import TravisClient


def _parse(body: str) -> Any:
    try:
        return json.loads(body)
    except ValueError as exc:
        raise UnexpectedOutcome("Repository listing is not valid JSON", body) from exc


def _active_slugs(repos: List[Any], is_active: Callable[[Dict[str, Any]], bool], body: str) -> List[str]:
    slugs = []
    for repo in repos:
        if not isinstance(repo, dict) or not isinstance(repo.get("slug"), str):
            raise UnexpectedOutcome("Repository descriptor without a slug", body)
        if is_active(repo):
            slugs.append(repo["slug"])
    return slugs


class RepoDiscovery:
    """Fetches an owner listing and keeps the slugs of active repositories."""

    def fetch(self, client: "TravisClient", owner: str) -> str:
        raise NotImplementedError

    def select_slugs(self, body: str) -> List[str]:
        raise NotImplementedError

    def active_slugs(self, client: "TravisClient", owner: str) -> List[str]:
        return self.select_slugs(self.fetch(client, owner))


class LegacyRepoDiscovery(RepoDiscovery):
    """Active repositories through the pre-v3 ``/repos`` listing."""

    def fetch(self, client: "TravisClient", owner: str) -> str:
        return client.get("/repos", params={"owner_name": owner, "active": "true"})

    def select_slugs(self, body: str) -> List[str]:
        repos = _parse(body)
        if not isinstance(repos, list):
            raise UnexpectedOutcome("Expected a JSON array of repositories", body)
        return _active_slugs(repos, lambda repo: repo.get("last_build_id") is not None, body)


class V3RepoDiscovery(RepoDiscovery):
    """Active repositories through the v3 owner resource."""

    def fetch(self, client: "TravisClient", owner: str) -> str:
        # the include list must reach the host unescaped, so it bypasses `params`
        return client.get(f"/v3/owner/{quote(owner, safe='')}?include={V3_OWNER_INCLUDE}")

    def select_slugs(self, body: str) -> List[str]:
        owner_doc = _parse(body)
        if not isinstance(owner_doc, dict):
            raise UnexpectedOutcome("Expected a JSON object describing the owner", body)
        repos = owner_doc.get("repositories") or []
        return _active_slugs(repos, lambda repo: repo.get("active") is True, body)


_SHAPES = {
    SHAPE_LEGACY: LegacyRepoDiscovery,
    SHAPE_V3: V3RepoDiscovery,
}


def discovery_for_shape(shape: str) -> RepoDiscovery:
    """Return the discovery implementation for a configured shape name."""
    try:
        return _SHAPES[shape]()
    except KeyError:
        raise ValueError(f"Unknown discovery shape '{shape}'") from None


__all__ = ["RepoDiscovery", "LegacyRepoDiscovery", "V3RepoDiscovery", "discovery_for_shape"]
