"""Service level indicator calculators.

Each calculator turns the retained metric history of an SLO into the
SLO's current value. Calculators never fail on empty input; they fall
back to a neutral default instead.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from pulse_sre.metrics import Metric
from pulse_sre.slo.objectives import SLIType

REQUEST_TOTAL = "request_total"
REQUEST_SUCCESS = "request_success"
REQUEST_ERRORS = "request_errors"
REQUEST_DURATION = "request_duration"

LATENCY_PERCENTILE = 95.0
BURN_RATE_WINDOW = 10

_NANOS_PER_SECOND = 1_000_000_000
_NANOS_PER_HOUR = 3600 * _NANOS_PER_SECOND


def _sum_named(metrics: Sequence[Metric], name: str) -> float:
    return sum(m.value for m in metrics if m.name == name)


def calculate_availability(metrics: Sequence[Metric]) -> float:
    """Successful over total requests, as a percentage."""
    total = _sum_named(metrics, REQUEST_TOTAL)
    if total == 0:
        return 100.0
    return _sum_named(metrics, REQUEST_SUCCESS) / total * 100.0


def calculate_latency(metrics: Sequence[Metric]) -> float:
    """Approximate p95 of ``request_duration`` samples."""
    latencies = [m.value for m in metrics if m.name == REQUEST_DURATION]
    return percentile(latencies, LATENCY_PERCENTILE)


def calculate_error_rate(metrics: Sequence[Metric]) -> float:
    """Complement of the error percentage, i.e. the success rate."""
    total = _sum_named(metrics, REQUEST_TOTAL)
    if total == 0:
        return 0.0
    return 100.0 - _sum_named(metrics, REQUEST_ERRORS) / total * 100.0


def calculate_generic(metrics: Sequence[Metric]) -> float:
    """Arithmetic mean of every retained value."""
    if not metrics:
        return 0.0
    return sum(m.value for m in metrics) / len(metrics)


def percentile(values: Sequence[float], pct: float) -> float:
    """Rank-index percentile over *values* in arrival order.

    The sequence is not sorted, so this is only a true order statistic
    when the input already is.
    """
    if not values:
        return 0.0
    index = int(pct / 100.0 * (len(values) - 1) + 0.5)
    index = min(index, len(values) - 1)
    return values[index]


def calculate_burn_rate(metrics: Sequence[Metric], window: int = BURN_RATE_WINDOW) -> float:
    """Average per-step decrease over the last *window* samples.

    Rises are ignored, so flat or improving trends burn nothing.
    """
    recent = list(metrics[-window:])
    if len(recent) < 2 or window < 2:
        return 0.0

    drop = 0.0
    for prev, curr in zip(recent, recent[1:]):
        if curr.value < prev.value:
            drop += prev.value - curr.value
    return drop / (window - 1)


def format_duration(hours: float) -> str:
    """Render *hours* as a compact duration such as ``"1h30m0s"``."""
    nanos = int(hours * _NANOS_PER_HOUR)
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)

    if nanos < _NANOS_PER_SECOND:
        for unit, scale, digits in (("ms", 1_000_000, 6), ("µs", 1_000, 3)):
            if nanos >= scale:
                whole, frac = divmod(nanos, scale)
                return f"{sign}{whole}{_fraction(frac, digits)}{unit}"
        return f"{sign}{nanos}ns"

    whole_seconds, frac = divmod(nanos, _NANOS_PER_SECOND)
    hours_part, rem = divmod(whole_seconds, 3600)
    minutes, seconds = divmod(rem, 60)
    secs = f"{seconds}{_fraction(frac, 9)}s"
    if hours_part:
        return f"{sign}{hours_part}h{minutes}m{secs}"
    if minutes:
        return f"{sign}{minutes}m{secs}"
    return f"{sign}{secs}"


def _fraction(frac: int, digits: int) -> str:
    if not frac:
        return ""
    return "." + f"{frac:0{digits}d}".rstrip("0")


Calculator = Callable[[Sequence[Metric]], float]

CALCULATORS: dict[SLIType, Calculator] = {
    SLIType.AVAILABILITY: calculate_availability,
    SLIType.LATENCY: calculate_latency,
    SLIType.ERROR_RATE: calculate_error_rate,
    SLIType.GENERIC: calculate_generic,
}


def current_value(sli: SLIType, metrics: Sequence[Metric]) -> float:
    """Evaluate *metrics* with the calculator registered for *sli*."""
    return CALCULATORS.get(sli, calculate_generic)(metrics)
