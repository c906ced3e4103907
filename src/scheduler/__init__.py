"""Nightly Travis CI build scheduler."""

from .runner import main, run_schedule, schedule_owner

__all__ = ["main", "run_schedule", "schedule_owner"]
