"""Reading-time estimation.

Pure functions turning a ledger snapshot (page -> seconds) plus document
metadata into a per-page estimate, reading speed, confidence tier and
completion projections. Nothing here keeps state; the same inputs always
give the same outputs.
"""

import math
import statistics
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

# Samples needed before the estimation snapshot reports anything
MIN_PAGES_FOR_ESTIMATE = 2

# Median replaces the mean once this many pages are sampled and the two
# differ by more than MEDIAN_SPREAD of the mean
MEDIAN_MIN_PAGES = 5
MEDIAN_SPREAD = 0.3


class Estimator(str, Enum):
    """Statistic used as the per-page estimate."""

    MEAN = "mean"
    MEDIAN = "median"


class ConfidenceTier(str, Enum):
    """How much sampled data backs an estimate. Ordered low to very-high."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very-high"

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, ConfidenceTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, ConfidenceTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, ConfidenceTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, ConfidenceTier):
            return NotImplemented
        return self.rank >= other.rank


_TIER_ORDER = [
    ConfidenceTier.LOW,
    ConfidenceTier.MEDIUM,
    ConfidenceTier.HIGH,
    ConfidenceTier.VERY_HIGH,
]


@dataclass(frozen=True)
class ConfidenceThresholds:
    """Sample counts at which each confidence tier is reached."""

    medium: int
    high: int
    very_high_fraction: float  # of the document's total pages


# Estimating the whole document extrapolates furthest, so it asks for more
# samples than projecting the remaining pages does.
TOTAL_ESTIMATE_THRESHOLDS = ConfidenceThresholds(medium=5, high=10, very_high_fraction=0.20)
REMAINING_ESTIMATE_THRESHOLDS = ConfidenceThresholds(medium=3, high=7, very_high_fraction=0.15)


@dataclass(frozen=True)
class ConfidenceInfo:
    """Display text for a confidence tier."""

    label: str
    description: str


_CONFIDENCE_INFO = {
    ConfidenceTier.LOW: ConfidenceInfo("Low", "Need more data for accurate estimates"),
    ConfidenceTier.MEDIUM: ConfidenceInfo("Medium", "Estimates based on limited data"),
    ConfidenceTier.HIGH: ConfidenceInfo("High", "Reliable estimates based on reading pattern"),
    ConfidenceTier.VERY_HIGH: ConfidenceInfo("Very High", "Highly accurate estimates"),
}


@dataclass(frozen=True)
class EstimationSnapshot:
    """Reading estimates for one document at one moment."""

    average_seconds_per_page: float = 0.0
    median_seconds_per_page: float = 0.0
    pages_sampled: int = 0
    confidence_tier: ConfidenceTier = ConfidenceTier.LOW
    total_estimate_seconds: float = 0.0
    remaining_estimate_seconds: float = 0.0
    completion_percentage: float = 0.0
    projected_finish_timestamp: Optional[datetime] = None

    # Extras
    estimator: Estimator = Estimator.MEAN
    seconds_per_page: float = 0.0
    reading_speed_pages_per_hour: float = 0.0
    total_confidence_tier: ConfidenceTier = ConfidenceTier.LOW

    @property
    def has_estimate(self) -> bool:
        return self.seconds_per_page > 0


def sampled_times(snapshot: Mapping[int, float]) -> list[float]:
    """Positive, finite per-page times from a snapshot, sorted ascending."""
    return sorted(
        float(seconds)
        for seconds in snapshot.values()
        if seconds > 0 and math.isfinite(seconds)
    )


def average_seconds_per_page(snapshot: Mapping[int, float]) -> float:
    """Arithmetic mean of the timed pages; 0 if none."""
    times = sampled_times(snapshot)
    if not times:
        return 0.0
    return sum(times) / len(times)


def median_seconds_per_page(snapshot: Mapping[int, float]) -> float:
    """Median of the timed pages; 0 if none."""
    times = sampled_times(snapshot)
    if not times:
        return 0.0
    return float(statistics.median(times))


def choose_estimator(snapshot: Mapping[int, float]) -> Estimator:
    """Pick mean or median as the per-page estimate.

    The median wins when at least five pages are sampled and the mean and
    median differ by more than 30% of the mean, which signals outlier
    pages (e.g. a tab left open for an hour).
    """
    times = sampled_times(snapshot)
    if len(times) < MEDIAN_MIN_PAGES:
        return Estimator.MEAN

    mean = sum(times) / len(times)
    median = statistics.median(times)
    if abs(mean - median) > MEDIAN_SPREAD * mean:
        return Estimator.MEDIAN
    return Estimator.MEAN


def per_page_estimate(snapshot: Mapping[int, float]) -> float:
    """Seconds per page according to :func:`choose_estimator`."""
    if choose_estimator(snapshot) is Estimator.MEDIAN:
        return median_seconds_per_page(snapshot)
    return average_seconds_per_page(snapshot)


def confidence_tier(
    pages_sampled: int,
    total_pages: int,
    thresholds: ConfidenceThresholds = REMAINING_ESTIMATE_THRESHOLDS,
) -> ConfidenceTier:
    """Confidence of an estimate backed by ``pages_sampled`` timed pages.

    Below the medium threshold the tier is always low. Above it, sampling
    ``very_high_fraction`` of the document gives very-high even before the
    high threshold is reached.

    Args:
        pages_sampled: Number of timed pages
        total_pages: Pages in the document
        thresholds: TOTAL_ESTIMATE_THRESHOLDS for whole-document estimates,
                    REMAINING_ESTIMATE_THRESHOLDS for remaining-time estimates
    """
    if pages_sampled < thresholds.medium:
        return ConfidenceTier.LOW
    if total_pages > 0 and pages_sampled >= total_pages * thresholds.very_high_fraction:
        return ConfidenceTier.VERY_HIGH
    if pages_sampled >= thresholds.high:
        return ConfidenceTier.HIGH
    return ConfidenceTier.MEDIUM


def confidence_info(tier: ConfidenceTier) -> ConfidenceInfo:
    """Label and description for a confidence tier."""
    return _CONFIDENCE_INFO.get(tier, _CONFIDENCE_INFO[ConfidenceTier.LOW])


def estimate_total(per_page_seconds: float, total_pages: int) -> float:
    """Seconds to read the whole document; 0 if either input is non-positive."""
    if per_page_seconds <= 0 or total_pages <= 0:
        return 0.0
    return per_page_seconds * total_pages


def estimate_remaining(per_page_seconds: float, current_page: int, total_pages: int) -> float:
    """Seconds to read the pages after ``current_page``."""
    if per_page_seconds <= 0:
        return 0.0
    return per_page_seconds * max(total_pages - current_page, 0)


def projected_finish_timestamp(
    remaining_seconds: float,
    now: Optional[datetime] = None,
    pages_sampled: Optional[int] = None,
) -> Optional[datetime]:
    """When the reader will finish at the current pace.

    Returns None when nothing remains or when there is no sample to base a
    projection on.
    """
    if remaining_seconds <= 0 or pages_sampled == 0:
        return None
    now = now or datetime.now(timezone.utc)
    return now + timedelta(seconds=remaining_seconds)


def reading_speed_pages_per_hour(per_page_seconds: float) -> float:
    """Pages per hour for a per-page time; 0 if the time is non-positive."""
    if per_page_seconds <= 0:
        return 0.0
    return 3600 / per_page_seconds


def completion_percentage(pages_sampled: int, total_pages: int) -> float:
    """Share of the document's pages that have been read, capped at 100."""
    if total_pages <= 0 or pages_sampled <= 0:
        return 0.0
    return min(pages_sampled / total_pages * 100, 100.0)


def estimate(
    snapshot: Mapping[int, float],
    total_pages: int,
    current_page: int,
    now: Optional[datetime] = None,
) -> EstimationSnapshot:
    """Build the full estimation snapshot for a document.

    Fewer than two timed pages give an all-zero snapshot.

    Args:
        snapshot: Ledger snapshot (page -> seconds)
        total_pages: Pages in the document
        current_page: Page the reader is on
        now: Reference time for the finish projection (default: utcnow)
    """
    times = sampled_times(snapshot)
    pages_sampled = len(times)
    if pages_sampled < MIN_PAGES_FOR_ESTIMATE:
        return EstimationSnapshot(pages_sampled=pages_sampled)

    average = average_seconds_per_page(snapshot)
    median = median_seconds_per_page(snapshot)
    estimator = choose_estimator(snapshot)
    per_page = median if estimator is Estimator.MEDIAN else average
    remaining = estimate_remaining(per_page, current_page, total_pages)

    return EstimationSnapshot(
        average_seconds_per_page=average,
        median_seconds_per_page=median,
        pages_sampled=pages_sampled,
        confidence_tier=confidence_tier(
            pages_sampled, total_pages, REMAINING_ESTIMATE_THRESHOLDS
        ),
        total_estimate_seconds=estimate_total(per_page, total_pages),
        remaining_estimate_seconds=remaining,
        completion_percentage=completion_percentage(pages_sampled, total_pages),
        projected_finish_timestamp=projected_finish_timestamp(remaining, now, pages_sampled),
        estimator=estimator,
        seconds_per_page=per_page,
        reading_speed_pages_per_hour=reading_speed_pages_per_hour(per_page),
        total_confidence_tier=confidence_tier(
            pages_sampled, total_pages, TOTAL_ESTIMATE_THRESHOLDS
        ),
    )
