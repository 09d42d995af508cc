"""Scheduler module for background jobs."""

from .scheduler import TaskScheduler, run_tick
from .jobs import Job, JobRegistry, create_default_jobs

__all__ = ["TaskScheduler", "run_tick", "Job", "JobRegistry", "create_default_jobs"]
