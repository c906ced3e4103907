"""Entry points for the nightly rebuild of every active Travis repository."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from .config import (
    FAILURE_RATIO_THRESHOLD,
    SCHEDULE,
    THROTTLE_SEC,
    ScheduleEntry,
    load_github_token,
)
from .discovery import discovery_for_shape
from .errors import SchedulerError, TooManyFailures, UnexpectedOutcome, UnexpectedStatus
from .travis import TravisClient


@dataclass
class OwnerRunStats:
    """Build submissions attempted and failed during one owner pass."""

    owner: str
    total: int = 0
    failures: int = 0
    failed_slugs: List[str] = field(default_factory=list)

    @property
    def failure_ratio(self) -> float:
        return self.failures / self.total if self.total else 0.0


def check_failure_ratio(stats: OwnerRunStats, threshold: float = FAILURE_RATIO_THRESHOLD) -> None:
    """Raise TooManyFailures when at least `threshold` of the submissions failed."""
    if stats.total > 0 and stats.failure_ratio >= threshold:
        raise TooManyFailures(stats.owner, stats.failures, stats.total, threshold)


def schedule_owner(
    client: TravisClient,
    owner: str,
    *,
    throttle_sec: float = THROTTLE_SEC,
    sleep: Optional[Callable[[float], None]] = None,
) -> OwnerRunStats:
    """Drop the default-branch cache and request a build for each active repo of `owner`.

    Only build-request refusals are counted and tolerated; cache deletion
    errors and transport errors propagate and end the run.
    """
    stats = OwnerRunStats(owner=owner)
    for slug in client.list_active_repo_slugs(owner):
        print(f"Launching the build of: {slug}")
        client.delete_default_branch_cache(slug)
        stats.total += 1
        try:
            client.request_default_branch_build(slug)
        except (UnexpectedStatus, UnexpectedOutcome) as exc:
            stats.failures += 1
            stats.failed_slugs.append(slug)
            print(f"  - FAILED! {exc}")
        (sleep or time.sleep)(throttle_sec)

    check_failure_ratio(stats)
    return stats


def _build_client(entry: ScheduleEntry, github_token: str) -> TravisClient:
    return TravisClient(
        endpoint=entry.endpoint,
        github_token=github_token,
        discovery=discovery_for_shape(entry.shape),
    )


def run_schedule(
    entries: Iterable[ScheduleEntry],
    github_token: str,
    *,
    sleep: Optional[Callable[[float], None]] = None,
) -> List[OwnerRunStats]:
    """Process every schedule entry in order; the first error aborts the remaining ones."""
    clients: Dict[tuple, TravisClient] = {}
    results: List[OwnerRunStats] = []
    for entry in entries:
        key = (entry.endpoint, entry.shape)
        if key not in clients:
            clients[key] = _build_client(entry, github_token)
        results.append(schedule_owner(clients[key], entry.owner, sleep=sleep))
    print("Done")
    return results


def main(entries: Optional[List[ScheduleEntry]] = None) -> None:
    """CLI entry point; exits non-zero on any scheduler failure."""
    try:
        github_token = load_github_token()
        run_schedule(entries or SCHEDULE, github_token)
    except SchedulerError as exc:
        print(f"[error] {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
