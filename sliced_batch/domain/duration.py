"""Human-readable rendering of elapsed and remaining durations."""

from __future__ import annotations

_MINUTE = 60.0
_HOUR = 3600.0
_DAY = 86400.0


def seconds_as_duration(seconds: float | None) -> str | None:
    """Render seconds as e.g. ``"2d 3h 4m"``, ``"5m 6s"``, ``"1.500s"`` or ``"12.5ms"``.

    Returns None when ``seconds`` is None.
    """
    if seconds is None:
        return None

    whole = int(seconds)
    hours, remainder = divmod(whole % int(_DAY), int(_HOUR))
    minutes, secs = divmod(remainder, int(_MINUTE))

    if seconds >= _DAY:
        return f"{whole // int(_DAY)}d {hours}h {minutes}m"
    if seconds >= _HOUR:
        return f"{hours}h {minutes}m"
    if seconds >= _MINUTE:
        return f"{minutes}m {secs}s"
    if seconds >= 1.0:
        return f"{seconds:.3f}s"

    millis = seconds * 1000
    if millis < 10.0:
        return f"{millis:.3f}ms"
    return f"{millis:.1f}ms"
