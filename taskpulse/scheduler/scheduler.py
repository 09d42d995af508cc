"""Interval scheduler using APScheduler."""

import asyncio
from typing import Optional, Callable, Any
import logging

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..domain.models import utcnow
from .jobs import JobRegistry, Job

logger = logging.getLogger(__name__)


async def run_tick(job: Job) -> Any:
    """Run one firing of a job.

    A failure is logged and recorded on the job, never raised, so the
    next firing happens on schedule.
    """
    job.last_run = utcnow()
    try:
        result = job.func(*job.args, **job.kwargs)
        if asyncio.iscoroutine(result):
            result = await result
    except Exception as e:
        job.last_error = str(e)
        logger.exception(f"Job {job.name} failed: {e}")
        return None

    job.last_error = None
    logger.info(f"Job {job.name} completed successfully")
    return result


class TaskScheduler:
    """Scheduler running each registered job at a fixed interval."""

    def __init__(
        self,
        registry: JobRegistry,
        timezone: str = "UTC",
    ):
        """Initialize scheduler.

        Args:
            registry: Job registry with registered jobs
            timezone: Timezone for the scheduler clock
        """
        self._registry = registry
        self._timezone = timezone
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._running = False

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running

    @property
    def registry(self) -> JobRegistry:
        """Get the job registry."""
        return self._registry

    def start(self) -> None:
        """Start the scheduler. Must be called with a running event loop."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        self._scheduler = AsyncIOScheduler(timezone=self._timezone)

        for job in self._registry.list_enabled():
            self._add_job_to_scheduler(job)

        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started")

    def stop(self) -> None:
        """Stop the scheduler."""
        if not self._running or not self._scheduler:
            return

        self._scheduler.shutdown(wait=False)
        self._running = False
        logger.info("Scheduler stopped")

    def _add_job_to_scheduler(self, job: Job) -> None:
        """Add a job to the APScheduler.

        Missed firings are coalesced into one and a firing is skipped
        while the previous one is still running.
        """
        if not self._scheduler:
            return

        self._scheduler.add_job(
            run_tick,
            trigger=IntervalTrigger(seconds=job.interval_seconds, timezone=self._timezone),
            args=(job,),
            id=job.name,
            name=job.description or job.name,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        logger.debug(f"Added job: {job.name} every {job.interval_seconds}s")

    def add_job(
        self,
        name: str,
        func: Callable[..., Any],
        interval_seconds: int,
        description: str = "",
    ) -> Job:
        """Add a new job to both registry and scheduler.

        Returns:
            Created Job
        """
        job = self._registry.register(
            name=name,
            func=func,
            interval_seconds=interval_seconds,
            description=description,
        )

        if self._running and self._scheduler:
            self._add_job_to_scheduler(job)

        return job

    def remove_job(self, name: str) -> bool:
        """Remove a job from scheduler and registry.

        Returns:
            True if removed, False if not found
        """
        if self._running and self._scheduler:
            try:
                self._scheduler.remove_job(name)
            except JobLookupError:
                logger.debug(f"Job {name} was not scheduled")

        return self._registry.unregister(name)

    def pause_job(self, name: str) -> bool:
        """Pause a job.

        Returns:
            True if paused, False if not found
        """
        if self._running and self._scheduler:
            try:
                self._scheduler.pause_job(name)
            except JobLookupError:
                logger.debug(f"Job {name} was not scheduled")

        return self._registry.disable(name)

    def resume_job(self, name: str) -> bool:
        """Resume a paused job.

        Returns:
            True if resumed, False if not found
        """
        if not self._registry.enable(name):
            return False

        if self._running and self._scheduler:
            try:
                self._scheduler.resume_job(name)
            except JobLookupError:
                # Job was disabled at start and never scheduled
                job = self._registry.get(name)
                if job:
                    self._add_job_to_scheduler(job)

        return True

    async def run_job_now(self, name: str) -> Any:
        """Run a job immediately.

        Raises:
            KeyError: If job not found
        """
        job = self._registry.get(name)
        if not job:
            raise KeyError(f"Job not found: {name}")
        return await run_tick(job)

    def get_job_status(self, name: str) -> Optional[dict]:
        """Get status of a job.

        Returns:
            Job status dict or None if not found
        """
        job = self._registry.get(name)
        if not job:
            return None

        status = {
            "name": job.name,
            "description": job.description,
            "interval_seconds": job.interval_seconds,
            "enabled": job.enabled,
            "last_run": job.last_run.isoformat() if job.last_run else None,
            "last_error": job.last_error,
        }

        if self._running and self._scheduler:
            apjob = self._scheduler.get_job(name)
            if apjob:
                status["next_run"] = (
                    apjob.next_run_time.isoformat()
                    if apjob.next_run_time
                    else None
                )

        return status

    def list_jobs(self) -> list[dict]:
        """List all jobs with their status."""
        return [
            status
            for job in self._registry.list_jobs()
            if (status := self.get_job_status(job.name))
        ]
