"""Convenience shim to run the nightly Travis build scheduler."""

from __future__ import annotations

from src.scheduler.runner import main as scheduler_main


if __name__ == "__main__":
    scheduler_main()
