"""Exception types raised by the scheduler and handled by the run driver."""

from __future__ import annotations

from typing import Iterable, Tuple


class SchedulerError(RuntimeError):
    """Base class for every failure that should end the run with a non-zero exit."""


class ConfigurationError(SchedulerError):
    """A required setting (the GitHub token) is missing."""


class TransportError(SchedulerError):
    """The request could not be sent or its response could not be read."""


class UnexpectedStatus(SchedulerError):
    """The CI host answered with a status outside the acceptable set."""

    def __init__(self, expected: Iterable[int], actual: int, body: str) -> None:
        self.expected: Tuple[int, ...] = tuple(expected)
        self.actual = actual
        self.body = body
        codes = ", ".join(str(code) for code in self.expected)
        super().__init__(f"Expected HTTP response {codes}, actual was {actual}: {body}")


class UnexpectedOutcome(SchedulerError):
    """The status was acceptable but the body did not say what we needed."""

    def __init__(self, message: str, body: str) -> None:
        self.body = body
        super().__init__(f"{message}: {body}")


class TooManyFailures(SchedulerError):
    """Too large a share of build requests failed for one owner."""

    def __init__(self, owner: str, failures: int, total: int, threshold: float) -> None:
        self.owner = owner
        self.failures = failures
        self.total = total
        self.threshold = threshold
        super().__init__(
            f"Too many failed build requests for {owner}: {failures}/{total} "
            f"(threshold {threshold:.0%})"
        )


__all__ = [
    "SchedulerError",
    "ConfigurationError",
    "TransportError",
    "UnexpectedStatus",
    "UnexpectedOutcome",
    "TooManyFailures",
]
