"""Job definitions for the scheduler."""

from datetime import datetime
from typing import Callable, Any, Optional
from dataclasses import dataclass, field


@dataclass
class Job:
    """Definition of a fixed-interval job."""

    name: str
    func: Callable[..., Any]
    interval_seconds: int
    description: str = ""
    enabled: bool = True
    args: tuple = field(default_factory=tuple)
    kwargs: dict = field(default_factory=dict)
    last_run: Optional[datetime] = None
    last_error: Optional[str] = None


class JobRegistry:
    """Registry for managing scheduled jobs."""

    def __init__(self):
        self._jobs: dict[str, Job] = {}

    def register(
        self,
        name: str,
        func: Callable[..., Any],
        interval_seconds: int,
        description: str = "",
        enabled: bool = True,
        args: tuple = (),
        kwargs: Optional[dict] = None,
    ) -> Job:
        """Register a new job.

        Args:
            name: Unique job name
            func: Function to execute
            interval_seconds: Seconds between runs
            description: Job description
            enabled: Whether job is enabled
            args: Positional arguments for func
            kwargs: Keyword arguments for func

        Returns:
            Created Job instance
        """
        if interval_seconds <= 0:
            raise ValueError(f"Interval must be positive: {interval_seconds}")

        job = Job(
            name=name,
            func=func,
            interval_seconds=interval_seconds,
            description=description,
            enabled=enabled,
            args=args,
            kwargs=kwargs or {},
        )
        self._jobs[name] = job
        return job

    def unregister(self, name: str) -> bool:
        """Unregister a job by name.

        Returns:
            True if removed, False if not found
        """
        return self._jobs.pop(name, None) is not None

    def get(self, name: str) -> Optional[Job]:
        """Get job by name."""
        return self._jobs.get(name)

    def list_jobs(self) -> list[Job]:
        """List all registered jobs."""
        return list(self._jobs.values())

    def list_enabled(self) -> list[Job]:
        """List enabled jobs only."""
        return [job for job in self._jobs.values() if job.enabled]

    def enable(self, name: str) -> bool:
        """Enable a job. Returns False if not found."""
        return self._set_enabled(name, True)

    def disable(self, name: str) -> bool:
        """Disable a job. Returns False if not found."""
        return self._set_enabled(name, False)

    def _set_enabled(self, name: str, enabled: bool) -> bool:
        job = self._jobs.get(name)
        if job is None:
            return False
        job.enabled = enabled
        return True


def create_default_jobs(registry: JobRegistry, container, settings=None) -> None:
    """Register the accountability, insight and communication jobs.

    Args:
        registry: Job registry to add jobs to
        container: DI container for service access
        settings: SchedulerSettings; defaults to the container's settings
    """
    settings = settings or container.settings.scheduler

    async def accountability_check():
        """Generate and send an accountability check-in."""
        return await container.coach_service.perform_accountability_check()

    async def refresh_insights():
        """Regenerate and publish productivity insights."""
        return await container.coach_service.refresh_insights()

    async def sync_communications():
        """Sync communication services."""
        return await container.coach_service.sync_communications()

    registry.register(
        name="accountability_check",
        func=accountability_check,
        interval_seconds=settings.accountability_interval,
        description="Hourly accountability check-in",
    )

    registry.register(
        name="refresh_insights",
        func=refresh_insights,
        interval_seconds=settings.insights_interval,
        description="Refresh AI insights",
    )

    registry.register(
        name="sync_communications",
        func=sync_communications,
        interval_seconds=settings.communication_interval,
        description="Sync email and chat activity",
    )
