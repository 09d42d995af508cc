"""Insight, statistics and accountability routes."""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from ...container import get_container
from ...domain.models import Insight, ProductivityStats

router = APIRouter(prefix="/insights", tags=["insights"])


class InsightListResponse(BaseModel):
    """Freshly generated insights."""

    insights: list[str]


class InsightResponse(BaseModel):
    """Stored insight."""

    id: str
    message: str
    insight_type: str
    confidence: float
    created_at: datetime


class InsightHistoryResponse(BaseModel):
    insights: list[InsightResponse]
    total: int


class DailyProgressResponse(BaseModel):
    date: date
    completed: int
    created: int
    total_time: int


class StatsResponse(BaseModel):
    """Productivity statistics."""

    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    overdue_tasks: int
    completion_rate: float
    average_completion_time: Optional[float] = None
    most_productive_hours: list[int] = Field(default_factory=list)
    common_categories: list[str] = Field(default_factory=list)
    weekly_progress: list[DailyProgressResponse] = Field(default_factory=list)


class PatternsResponse(BaseModel):
    patterns: list[str]


class AccountabilityResponse(BaseModel):
    message: str


def insight_to_response(insight: Insight) -> InsightResponse:
    return InsightResponse(
        id=insight.id,
        message=insight.message,
        insight_type=insight.insight_type.value,
        confidence=insight.confidence,
        created_at=insight.created_at,
    )


def stats_to_response(stats: ProductivityStats) -> StatsResponse:
    return StatsResponse(
        total_tasks=stats.total_tasks,
        completed_tasks=stats.completed_tasks,
        pending_tasks=stats.pending_tasks,
        overdue_tasks=stats.overdue_tasks,
        completion_rate=stats.completion_rate,
        average_completion_time=stats.average_completion_time,
        most_productive_hours=stats.most_productive_hours,
        common_categories=stats.common_categories,
        weekly_progress=[
            DailyProgressResponse(
                date=day.date,
                completed=day.completed,
                created=day.created,
                total_time=day.total_time,
            )
            for day in stats.weekly_progress
        ],
    )


@router.get("", response_model=InsightListResponse)
async def generate_insights() -> InsightListResponse:
    """Generate insights for the current tasks without storing them."""
    service = get_container().coach_service
    return InsightListResponse(insights=await service.generate_insights())


@router.get("/history", response_model=InsightHistoryResponse)
async def insight_history(
    limit: int = Query(20, ge=1, le=200),
) -> InsightHistoryResponse:
    """Stored insights, newest first."""
    service = get_container().coach_service
    insights = await service.recent_insights(limit)

    return InsightHistoryResponse(
        insights=[insight_to_response(i) for i in insights],
        total=len(insights),
    )


@router.get("/stats", response_model=StatsResponse)
async def productivity_stats() -> StatsResponse:
    """Productivity statistics over all tasks."""
    service = get_container().coach_service
    return stats_to_response(await service.productivity_stats())


@router.get("/patterns", response_model=PatternsResponse)
async def productivity_patterns() -> PatternsResponse:
    service = get_container().coach_service
    return PatternsResponse(patterns=await service.productivity_patterns())


@router.post("/accountability", response_model=AccountabilityResponse)
async def accountability_check() -> AccountabilityResponse:
    """Run an accountability check-in now."""
    service = get_container().coach_service
    message = await service.perform_accountability_check()
    return AccountabilityResponse(message=message)
