"""Reading-time estimates and trends."""

from .estimates import (
    ConfidenceThresholds,
    ConfidenceTier,
    EstimationSnapshot,
    Estimator,
    REMAINING_ESTIMATE_THRESHOLDS,
    TOTAL_ESTIMATE_THRESHOLDS,
    average_seconds_per_page,
    choose_estimator,
    completion_percentage,
    confidence_info,
    confidence_tier,
    estimate,
    estimate_remaining,
    estimate_total,
    median_seconds_per_page,
    per_page_estimate,
    projected_finish_timestamp,
    reading_speed_pages_per_hour,
)
from .insights import (
    ReadingRequirements,
    ReadingVelocity,
    TopicDocumentEstimate,
    TopicReadingStats,
    VelocityTrend,
    estimate_from_topic_stats,
    reading_requirements,
    reading_velocity,
    topic_reading_stats,
)

__all__ = [
    "ConfidenceThresholds",
    "ConfidenceTier",
    "EstimationSnapshot",
    "Estimator",
    "REMAINING_ESTIMATE_THRESHOLDS",
    "TOTAL_ESTIMATE_THRESHOLDS",
    "average_seconds_per_page",
    "choose_estimator",
    "completion_percentage",
    "confidence_info",
    "confidence_tier",
    "estimate",
    "estimate_remaining",
    "estimate_total",
    "median_seconds_per_page",
    "per_page_estimate",
    "projected_finish_timestamp",
    "reading_speed_pages_per_hour",
    "ReadingRequirements",
    "ReadingVelocity",
    "TopicDocumentEstimate",
    "TopicReadingStats",
    "VelocityTrend",
    "estimate_from_topic_stats",
    "reading_requirements",
    "reading_velocity",
    "topic_reading_stats",
]
