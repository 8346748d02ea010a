"""Formatting helpers for durations."""


def format_duration(seconds: float, context: str = "short") -> str:
    """
    Format a duration for display.

    Args:
        seconds: Duration in seconds
        context: "short" (``1h 5m``), "detailed" (``1h 5m`` / ``5 minutes``)
                 or "goal" (collapses to days once over 24 hours)

    Returns:
        Human-readable duration

    Example:
        >>> format_duration(42)
        '42s'
        >>> format_duration(3900)
        '1h 5m'
        >>> format_duration(300, "detailed")
        '5 minutes'
        >>> format_duration(90000, "goal")
        '1d 1h'
    """
    seconds = max(seconds, 0)
    if seconds < 60:
        return f"{round(seconds)} seconds" if context == "detailed" else f"{round(seconds)}s"

    minutes = int(seconds // 60)
    hours = minutes // 60
    days = hours // 24

    if context == "goal" and days > 0:
        remaining_hours = hours % 24
        return f"{days}d {remaining_hours}h" if remaining_hours else f"{days}d"

    if hours > 0:
        remaining_minutes = minutes % 60
        if context == "detailed" and not remaining_minutes:
            return f"{hours}h"
        return f"{hours}h {remaining_minutes}m"

    return f"{minutes} minutes" if context == "detailed" else f"{minutes}m"


def format_clock(seconds: float) -> str:
    """
    Format seconds as a stopwatch reading.

    Example:
        >>> format_clock(75)
        '1:15'
        >>> format_clock(3725)
        '1:02:05'
    """
    total = int(max(seconds, 0))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
