"""CLI commands for the productivity tracker."""

import asyncio
import json
import logging
from datetime import datetime
from typing import Optional

import click

from ..container import get_container
from ..domain.errors import NotFoundError, StorageError
from ..domain.models import (
    CreateTaskRequest,
    Task,
    TaskId,
    TaskPriority,
    TaskStatus,
    UpdateTaskRequest,
    utcnow,
)

STATUS_ICONS = {
    "pending": "📋",
    "in_progress": "🔄",
    "completed": "✅",
    "paused": "⏸️",
    "cancelled": "🚫",
}

PRIORITY_ICONS = {
    "low": "🟢",
    "medium": "🔵",
    "high": "🟠",
    "critical": "🔴",
}

STATUS_CHOICES = click.Choice([s.value for s in TaskStatus])
PRIORITY_CHOICES = click.Choice([p.value for p in TaskPriority])
DUE_DATE = click.DateTime(formats=["%Y-%m-%d", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M:%S"])

_loop: Optional[asyncio.AbstractEventLoop] = None


def setup_logging(verbose: bool = False) -> None:
    """Configure logging from settings; --verbose forces DEBUG."""
    from ..config.settings import get_settings

    level = logging.DEBUG if verbose else getattr(
        logging, get_settings().log_level.upper(), logging.INFO
    )
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def setup_container():
    """Set up container from settings unless already configured."""
    container = get_container()
    if container.is_configured:
        return
    container.configure_from_settings()


def run_async(coro):
    """Run async coroutine in sync context.

    Every command shares one event loop so the store locks stay bound to it.
    Storage failures become a click error (stderr, non-zero exit).
    """
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
    try:
        return _loop.run_until_complete(coro)
    except StorageError as e:
        raise click.ClickException(f"Storage error: {e}")


def resolve_task(task_id: str) -> Task:
    """Find a task by full id or unique id prefix."""
    service = get_container().task_service

    task = run_async(service.get_task(TaskId(task_id)))
    if task:
        return task

    matches = [t for t in run_async(service.list_tasks()) if t.id.value.startswith(task_id)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise click.ClickException(f"Ambiguous task id: {task_id}")
    raise click.ClickException(f"Task not found: {task_id}")


def format_task_line(task: Task) -> str:
    status_icon = STATUS_ICONS.get(task.status.value, "❓")
    priority_icon = PRIORITY_ICONS.get(task.priority.value, "⚪")

    due_str = ""
    if task.due_date:
        due_str = f" 📅 {task.due_date.strftime('%Y-%m-%d')}"

    return f"{status_icon} {priority_icon} [{task.id.value[:8]}] {task.title}{due_str}"


def task_to_dict(task: Task) -> dict:
    return {
        "id": task.id.value,
        "title": task.title,
        "status": task.status.value,
        "priority": task.priority.value,
        "category": task.category,
        "estimated_time": task.estimated_time,
        "actual_time": task.actual_time,
        "due_date": task.due_date.isoformat() if task.due_date else None,
        "completed_at": task.completed_at.isoformat() if task.completed_at else None,
    }


@click.group()
@click.version_option(version="1.0.0")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Personal productivity tracker with AI coaching."""
    setup_logging(verbose)
    setup_container()


@cli.command("add")
@click.argument("title")
@click.option("--priority", "-p", type=PRIORITY_CHOICES, default="medium", help="Task priority")
@click.option("--category", "-c", default="general", help="Task category")
@click.option("--estimate", "-e", type=int, default=0, help="Estimated minutes")
@click.option("--description", "-d", help="Task description")
@click.option("--due", type=DUE_DATE, help="Due date (UTC)")
def add_task(
    title: str,
    priority: str,
    category: str,
    estimate: int,
    description: Optional[str],
    due: Optional[datetime],
):
    """Create a new task."""
    service = get_container().task_service

    task = run_async(
        service.create_task(
            CreateTaskRequest(
                title=title,
                priority=TaskPriority(priority),
                category=category,
                estimated_time=estimate,
                description=description,
                due_date=due,
            )
        )
    )
    click.echo(f"✅ Created task [{task.id.value[:8]}] {task.title}")


@cli.command("list")
@click.option("--status", "-s", type=STATUS_CHOICES, help="Filter by status")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def list_tasks(status: Optional[str], output_json: bool):
    """List tasks, newest first."""
    service = get_container().task_service
    tasks = run_async(service.list_tasks(TaskStatus(status) if status else None))

    if output_json:
        output = {"tasks": [task_to_dict(t) for t in tasks], "total": len(tasks)}
        click.echo(json.dumps(output, indent=2, ensure_ascii=False))
        return

    if not tasks:
        click.echo("No tasks found.")
        return

    click.echo(f"Found {len(tasks)} task(s):\n")
    for task in tasks:
        click.echo(format_task_line(task))


@cli.command("show")
@click.argument("task_id")
def show_task(task_id: str):
    """Show task details."""
    task = resolve_task(task_id)

    click.echo(f"ID: {task.id.value}")
    click.echo(f"Title: {task.title}")
    click.echo(f"Status: {task.status.value}")
    click.echo(f"Priority: {task.priority.value}")
    click.echo(f"Category: {task.category}")
    click.echo(f"Estimated: {task.estimated_time} min")

    if task.actual_time is not None:
        click.echo(f"Actual: {task.actual_time} min")

    if task.description:
        click.echo(f"Description: {task.description}")

    if task.due_date:
        click.echo(f"Due Date: {task.due_date.strftime('%Y-%m-%d %H:%M')}")

    if task.completed_at:
        click.echo(f"Completed: {task.completed_at.strftime('%Y-%m-%d %H:%M')}")

    click.echo(f"Created: {task.created_at.strftime('%Y-%m-%d %H:%M')}")
    click.echo(f"Updated: {task.updated_at.strftime('%Y-%m-%d %H:%M')}")


def _update(task: Task, request: UpdateTaskRequest) -> Task:
    """Apply an update, sending an achievement on the first completion."""
    container = get_container()
    try:
        updated = run_async(container.task_service.update_task(task.id, request))
    except NotFoundError as e:
        raise click.ClickException(str(e))

    if task.completed_at is None and updated.completed_at is not None:
        run_async(
            container.notification_service.send_achievement(f"Completed '{updated.title}'")
        )
    return updated


@cli.command("update")
@click.argument("task_id")
@click.option("--title", "-t", help="New title")
@click.option("--description", "-d", help="New description")
@click.option("--priority", "-p", type=PRIORITY_CHOICES, help="New priority")
@click.option("--status", "-s", type=STATUS_CHOICES, help="New status")
@click.option("--category", "-c", help="New category")
@click.option("--estimate", "-e", type=int, help="Estimated minutes")
@click.option("--actual", "-a", type=int, help="Actual minutes spent")
@click.option("--due", type=DUE_DATE, help="Due date (UTC)")
def update_task(
    task_id: str,
    title: Optional[str],
    description: Optional[str],
    priority: Optional[str],
    status: Optional[str],
    category: Optional[str],
    estimate: Optional[int],
    actual: Optional[int],
    due: Optional[datetime],
):
    """Update fields of a task."""
    task = resolve_task(task_id)

    updated = _update(
        task,
        UpdateTaskRequest(
            title=title,
            description=description,
            priority=TaskPriority(priority) if priority else None,
            status=TaskStatus(status) if status else None,
            category=category,
            estimated_time=estimate,
            actual_time=actual,
            due_date=due,
        ),
    )
    click.echo(f"🔄 Task updated: {format_task_line(updated)}")


@cli.command("complete")
@click.argument("task_id")
@click.option("--actual", "-a", type=int, help="Actual minutes spent")
def complete_task(task_id: str, actual: Optional[int]):
    """Mark a task as complete."""
    task = resolve_task(task_id)

    updated = _update(
        task, UpdateTaskRequest(status=TaskStatus.COMPLETED, actual_time=actual)
    )
    click.echo(f"✅ Task completed: {updated.title}")


@cli.command("delete")
@click.argument("task_id")
def delete_task(task_id: str):
    """Delete a task."""
    task = resolve_task(task_id)
    service = get_container().task_service

    run_async(service.delete_task(task.id))
    click.echo(f"🗑️ Task deleted: {task.title}")


@cli.command("overdue")
def overdue():
    """Show overdue tasks."""
    service = get_container().task_service
    tasks = run_async(service.list_overdue())

    if not tasks:
        click.echo("No overdue tasks! 🎉")
        return

    now = utcnow()
    click.echo(f"⚠️ Overdue tasks ({len(tasks)}):\n")
    for task in tasks:
        days_overdue = -(task.days_until_due(now) or 0)
        click.echo(f"🔴 [{task.id.value[:8]}] {task.title} ({days_overdue} days overdue)")


@cli.command("stats")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def stats(output_json: bool):
    """Show productivity statistics."""
    service = get_container().coach_service
    result = run_async(service.productivity_stats())

    if output_json:
        output = {
            "total_tasks": result.total_tasks,
            "completed_tasks": result.completed_tasks,
            "pending_tasks": result.pending_tasks,
            "overdue_tasks": result.overdue_tasks,
            "completion_rate": result.completion_rate,
            "average_completion_time": result.average_completion_time,
            "most_productive_hours": result.most_productive_hours,
            "common_categories": result.common_categories,
            "weekly_progress": [
                {
                    "date": day.date.isoformat(),
                    "completed": day.completed,
                    "created": day.created,
                    "total_time": day.total_time,
                }
                for day in result.weekly_progress
            ],
        }
        click.echo(json.dumps(output, indent=2, ensure_ascii=False))
        return

    click.echo("📊 Productivity Stats\n")
    click.echo(f"Total tasks: {result.total_tasks}")
    click.echo(f"Completed: {result.completed_tasks}")
    click.echo(f"Pending: {result.pending_tasks}")
    click.echo(f"Overdue: {result.overdue_tasks}")
    click.echo(f"Completion rate: {result.completion_rate:.0f}%")

    if result.average_completion_time is not None:
        click.echo(f"Average completion time: {result.average_completion_time:.1f} min")

    if result.most_productive_hours:
        hours = ", ".join(f"{h:02d}:00" for h in result.most_productive_hours)
        click.echo(f"Most productive hours: {hours}")

    if result.common_categories:
        click.echo(f"Top categories: {', '.join(result.common_categories)}")

    click.echo("\nLast 7 days:")
    for day in result.weekly_progress:
        click.echo(f"  {day.date.isoformat()}: {day.completed} done, {day.created} created")


@cli.command("patterns")
def patterns():
    """Show detected productivity patterns."""
    service = get_container().coach_service
    lines = run_async(service.productivity_patterns())

    if not lines:
        click.echo("Not enough data to detect patterns yet.")
        return

    click.echo("🔍 Productivity Patterns\n")
    for line in lines:
        click.echo(f"  • {line}")


@cli.command("insights")
@click.option("--refresh", is_flag=True, help="Store and publish the generated insights")
@click.option("--history", is_flag=True, help="Show stored insights instead")
@click.option("--limit", "-l", default=10, help="Number of stored insights to show")
def insights(refresh: bool, history: bool, limit: int):
    """Generate AI insights about your tasks."""
    service = get_container().coach_service

    if history:
        stored = run_async(service.recent_insights(limit))
        if not stored:
            click.echo("No insights stored yet.")
            return
        for insight in stored:
            stamp = insight.created_at.strftime("%Y-%m-%d %H:%M")
            click.echo(f"💡 [{stamp}] {insight.message} ({insight.confidence:.0%})")
        return

    if refresh:
        lines = run_async(service.refresh_insights())
    else:
        lines = run_async(service.generate_insights())

    click.echo("💡 AI Insights\n")
    for line in lines:
        click.echo(f"  • {line}")


@cli.command("check-in")
def check_in():
    """Run an accountability check-in now."""
    service = get_container().coach_service
    message = run_async(service.perform_accountability_check())
    click.echo(f"⏰ {message}")


@cli.command("notifications")
@click.option("--limit", "-l", default=20, help="Maximum number of notifications to show")
def notifications(limit: int):
    """List recent notifications."""
    service = get_container().notification_service
    items = run_async(service.list_notifications(limit))
    unread = run_async(service.unread_count())

    if not items:
        click.echo("No notifications.")
        return

    click.echo(f"🔔 Notifications ({unread} unread):\n")
    for item in items:
        marker = "  " if item.is_read else "● "
        click.echo(f"{marker}[{item.id[:8]}] {item.title}: {item.message}")


@cli.command("read")
@click.argument("notification_id")
def read_notification(notification_id: str):
    """Mark a notification as read (full id or unique prefix)."""
    service = get_container().notification_service

    if not run_async(service.mark_read(notification_id)):
        # Fall back to prefix lookup
        items = run_async(service.list_notifications(limit=1000))
        matches = [n for n in items if n.id.startswith(notification_id)]
        if len(matches) != 1 or not run_async(service.mark_read(matches[0].id)):
            raise click.ClickException(f"Notification not found: {notification_id}")

    click.echo("✅ Notification marked as read")


@cli.command("remind")
def remind():
    """Send reminders for overdue tasks."""
    service = get_container().notification_service
    sent = run_async(service.send_overdue_reminders())
    click.echo(f"📨 Sent {sent} reminder(s)")


@cli.command("comm-status")
@click.option("--sync", "do_sync", is_flag=True, help="Store snapshots and alert on unread messages")
def comm_status(do_sync: bool):
    """Show communication service status."""
    container = get_container()
    manager = container.communication

    if do_sync:
        activities = run_async(container.coach_service.sync_communications())
    else:
        activities = run_async(manager.get_status())

    for activity in activities:
        enabled = manager.is_service_enabled(activity.service)
        icon = "✅" if enabled else "⚪"
        click.echo(
            f"{icon} {activity.service}: {activity.unread_count} unread, "
            f"{activity.message_count} messages, {activity.mentions} mentions"
        )


@cli.command("connect")
@click.argument("service")
def connect(service: str):
    """Request a connection to a communication service."""
    manager = get_container().communication
    try:
        message = run_async(manager.connect_service(service))
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(message)


def _build_registry():
    from ..scheduler.jobs import JobRegistry, create_default_jobs

    container = get_container()
    registry = JobRegistry()
    create_default_jobs(registry, container)
    return registry


@cli.command("jobs")
def list_jobs():
    """List all scheduled jobs."""
    jobs = _build_registry().list_jobs()

    if not jobs:
        click.echo("No jobs configured.")
        return

    click.echo("Scheduled jobs:\n")
    for job in jobs:
        status = "✅" if job.enabled else "⏸️"
        click.echo(f"{status} {job.name}")
        click.echo(f"   Every: {job.interval_seconds}s")
        click.echo(f"   Description: {job.description}")
        click.echo()


@cli.command("run-job")
@click.argument("job_name")
def run_job(job_name: str):
    """Run a scheduled job immediately."""
    from ..scheduler.scheduler import run_tick

    registry = _build_registry()

    job = registry.get(job_name)
    if not job:
        click.echo(f"Job not found: {job_name}", err=True)
        click.echo("Available jobs:")
        for j in registry.list_jobs():
            click.echo(f"  - {j.name}: {j.description}")
        raise SystemExit(1)

    click.echo(f"Running job: {job_name}...")
    result = run_async(run_tick(job))
    if job.last_error:
        raise click.ClickException(f"Job failed: {job.last_error}")
    click.echo(f"✅ Job completed: {result}")


def _echo_event(event) -> None:
    from ..events import EventType

    if event.type == EventType.ACCOUNTABILITY_CHECK:
        click.echo(f"⏰ {event.payload}")
    elif event.type == EventType.INSIGHTS_UPDATED:
        for line in event.payload:
            click.echo(f"💡 {line}")
    elif event.type == EventType.NOTIFICATION:
        click.echo(f"🔔 {event.payload.title}: {event.payload.message}")
    elif event.type == EventType.COMMUNICATION_SYNCED:
        click.echo(f"💬 Synced {len(event.payload)} communication service(s)")


@cli.command("run")
def run():
    """Run the background scheduler in the foreground."""
    from ..events import EventType
    from ..scheduler.scheduler import TaskScheduler

    container = get_container()
    settings = container.settings.scheduler
    registry = _build_registry()
    scheduler = TaskScheduler(registry, timezone=settings.timezone)

    for event_type in EventType:
        container.events.subscribe(event_type, _echo_event)

    async def serve_forever():
        scheduler.start()
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.stop()

    click.echo("Scheduler running. Press Ctrl+C to stop")
    try:
        run_async(serve_forever())
    except KeyboardInterrupt:
        click.echo("\nStopped.")


@cli.command("serve")
@click.option("--host", "-h", default=None, help="Host to bind to")
@click.option("--port", "-p", type=int, default=None, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Start the API server."""
    import uvicorn
    from ..config.settings import get_settings

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    click.echo(f"Starting server at http://{host}:{port}")
    click.echo("Press Ctrl+C to stop")

    uvicorn.run(
        "taskpulse.api.app:app",
        host=host,
        port=port,
        reload=reload,
    )


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
