"""Reading trends and cross-document estimates.

Velocity trends within a document, pooled reading speed across a topic's
documents, and the reading pace needed to meet a deadline.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from .estimates import (
    ConfidenceTier,
    estimate_remaining,
    estimate_total,
    reading_speed_pages_per_hour,
)

VELOCITY_MIN_PAGES = 3
VELOCITY_WINDOW = 5
VELOCITY_CHANGE_PERCENT = 10

DEFAULT_DEADLINE_DAYS = 30


class VelocityTrend(str, Enum):
    """Direction of a reader's pace."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"
    INSUFFICIENT_DATA = "insufficient-data"


@dataclass(frozen=True)
class ReadingVelocity:
    """Recent pace compared with earlier pages."""

    trend: VelocityTrend
    pages_per_hour: float = 0.0
    improvement_percent: int = 0


@dataclass(frozen=True)
class TopicReadingStats:
    """Reading speed pooled across a topic's documents."""

    average_seconds_per_page: float = 0.0
    reading_speed_pages_per_hour: float = 0.0
    pages_with_data: int = 0
    documents_with_data: int = 0
    confidence: ConfidenceTier = ConfidenceTier.LOW

    @property
    def has_data(self) -> bool:
        return self.pages_with_data > 0


@dataclass(frozen=True)
class TopicDocumentEstimate:
    """Estimate for a document that has no timing of its own."""

    total_estimate_seconds: float = 0.0
    remaining_estimate_seconds: float = 0.0
    completion_percentage: float = 0.0
    confidence: Optional[ConfidenceTier] = None


@dataclass(frozen=True)
class ReadingRequirements:
    """Reading time needed to finish by a target date."""

    daily_minutes: int
    weekly_minutes: int
    days_remaining: int
    target_date: datetime


def reading_velocity(snapshot: Mapping[int, float]) -> ReadingVelocity:
    """Compare the pace on the latest pages with the earliest ones.

    Pages are ordered by page number. The earliest and latest windows hold
    up to five pages each and never overlap. A change of more than 10% in
    average time per page is reported as improving or declining.
    """
    times = [
        seconds
        for _, seconds in sorted(snapshot.items())
        if seconds > 0 and math.isfinite(seconds)
    ]
    if len(times) < VELOCITY_MIN_PAGES:
        return ReadingVelocity(VelocityTrend.INSUFFICIENT_DATA)

    window = min(VELOCITY_WINDOW, len(times) // 2)
    earlier = times[:window]
    recent = times[-window:]

    earlier_avg = sum(earlier) / len(earlier)
    recent_avg = sum(recent) / len(recent)
    improvement = (earlier_avg - recent_avg) / earlier_avg * 100

    if improvement > VELOCITY_CHANGE_PERCENT:
        trend = VelocityTrend.IMPROVING
    elif improvement < -VELOCITY_CHANGE_PERCENT:
        trend = VelocityTrend.DECLINING
    else:
        trend = VelocityTrend.STABLE

    return ReadingVelocity(
        trend=trend,
        pages_per_hour=reading_speed_pages_per_hour(recent_avg),
        improvement_percent=round(improvement),
    )


def topic_reading_stats(ledgers: Iterable[Mapping[int, float]]) -> TopicReadingStats:
    """Pool per-page times from several documents into one reading speed.

    Topic confidence: medium from 5 timed pages, high from 10.
    """
    pooled: list[float] = []
    documents_with_data = 0

    for ledger in ledgers:
        times = [s for s in ledger.values() if s > 0 and math.isfinite(s)]
        if times:
            documents_with_data += 1
            pooled.extend(times)

    if not pooled:
        return TopicReadingStats()

    average = sum(pooled) / len(pooled)
    if len(pooled) >= 10:
        confidence = ConfidenceTier.HIGH
    elif len(pooled) >= 5:
        confidence = ConfidenceTier.MEDIUM
    else:
        confidence = ConfidenceTier.LOW

    return TopicReadingStats(
        average_seconds_per_page=average,
        reading_speed_pages_per_hour=reading_speed_pages_per_hour(average),
        pages_with_data=len(pooled),
        documents_with_data=documents_with_data,
        confidence=confidence,
    )


def estimate_from_topic_stats(
    total_pages: int, current_page: int, stats: TopicReadingStats
) -> TopicDocumentEstimate:
    """Estimate an untimed document from its topic's reading speed."""
    if not stats.has_data or total_pages <= 0:
        return TopicDocumentEstimate()

    per_page = stats.average_seconds_per_page
    return TopicDocumentEstimate(
        total_estimate_seconds=estimate_total(per_page, total_pages),
        remaining_estimate_seconds=estimate_remaining(per_page, current_page, total_pages),
        completion_percentage=min(max(current_page - 1, 0) / total_pages * 100, 100.0),
        confidence=stats.confidence,
    )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def reading_requirements(
    remaining_seconds: float,
    deadline: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> ReadingRequirements:
    """Daily and weekly reading minutes needed to finish by ``deadline``.

    Without a deadline the target is 30 days from now. At least one day is
    always assumed to remain. Naive datetimes are taken as UTC.
    """
    now = _as_utc(now or datetime.now(timezone.utc))
    target = _as_utc(deadline) if deadline else now + timedelta(days=DEFAULT_DEADLINE_DAYS)

    days_remaining = max(1, math.ceil((target - now) / timedelta(days=1)))
    minutes_remaining = max(remaining_seconds, 0) / 60

    return ReadingRequirements(
        daily_minutes=math.ceil(minutes_remaining / days_remaining),
        weekly_minutes=math.ceil(minutes_remaining * 7 / days_remaining),
        days_remaining=days_remaining,
        target_date=target,
    )
