"""
Duration policy helpers: countdown seeding and short human-readable labels.
"""

from ..models import (
    ConcentrationDuration,
    Duration,
    MinutesDuration,
    RoundsDuration,
    UntilRemovedDuration,
    UntilRestDuration,
    UntilSaveDuration,
)

ROUNDS_PER_MINUTE = 10


def initial_remaining(duration: Duration) -> int | None:
    """Rounds a fresh countdown starts with, or None for non-countdown policies."""
    if isinstance(duration, RoundsDuration):
        return duration.rounds
    if isinstance(duration, MinutesDuration):
        return duration.minutes * ROUNDS_PER_MINUTE
    return None


def describe_duration(duration: Duration) -> str:
    """Render a policy for status displays, e.g. ``"until DC 13 wisdom save"``."""
    if isinstance(duration, RoundsDuration):
        return f"{duration.rounds} round{'s' if duration.rounds != 1 else ''}"
    if isinstance(duration, MinutesDuration):
        return f"{duration.minutes} minute{'s' if duration.minutes != 1 else ''}"
    if isinstance(duration, UntilSaveDuration):
        timing = duration.timing.value.replace("_", " ")
        return f"until DC {duration.dc} {duration.ability.value} save ({timing})"
    if isinstance(duration, UntilRestDuration):
        return f"until {duration.rest_type.value} rest"
    if isinstance(duration, ConcentrationDuration):
        return f"while {duration.concentrator_id} concentrates"
    if isinstance(duration, UntilRemovedDuration):
        return "until removed"
    raise TypeError(f"Unknown duration policy: {duration!r}")
