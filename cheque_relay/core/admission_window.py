"""Admission Window Math: fixed-window counting and progressive delay.

Invariants:
    - All functions are PURE: time is passed in, never read
    - A window opens on the first hit and lasts window_seconds; the next hit
      at or after its end opens a fresh window with zero hits
    - hits counts every request seen in the window, including rejected ones
    - Per client: NORMAL -> SOFT_THRESHOLD (delay grows) -> HARD_LIMIT (429)
      -> window reset -> NORMAL
"""

import math
from dataclasses import dataclass, replace

from cheque_relay.core.domain_types import AdmissionState


@dataclass(frozen=True)
class WindowPolicy:
    """Hard limit for one route class."""
    limit: int
    window_seconds: float


@dataclass(frozen=True)
class SlowDownPolicy:
    """Soft threshold: hits above delay_after are delayed step_ms each, capped."""
    delay_after: int
    step_ms: int
    max_delay_ms: int
    window_seconds: float


@dataclass(frozen=True)
class WindowCounter:
    window_start: float
    hits: int = 0


def advance_window(
    counter: WindowCounter | None, now: float, window_seconds: float,
) -> WindowCounter:
    """Return the counter for the window containing `now`."""
    if counter is None or now - counter.window_start >= window_seconds:
        return WindowCounter(window_start=now)
    return counter


def record_hit(
    counter: WindowCounter | None, now: float, window_seconds: float,
) -> WindowCounter:
    current = advance_window(counter, now, window_seconds)
    return replace(current, hits=current.hits + 1)


def seconds_until_reset(
    counter: WindowCounter, now: float, window_seconds: float,
) -> int:
    """Whole seconds until the window closes, never less than 1."""
    remaining = counter.window_start + window_seconds - now
    return max(1, math.ceil(remaining))


def is_over_limit(counter: WindowCounter, policy: WindowPolicy) -> bool:
    return counter.hits > policy.limit


def remaining_allowance(counter: WindowCounter, policy: WindowPolicy) -> int:
    return max(0, policy.limit - counter.hits)


def slowdown_delay_ms(hits: int, policy: SlowDownPolicy) -> int:
    """Delay for the hits-th request of the window."""
    if hits <= policy.delay_after:
        return 0
    return min((hits - policy.delay_after) * policy.step_ms, policy.max_delay_ms)


def classify_hits(
    hits: int, hard_limit: int, soft_threshold: int | None = None,
) -> AdmissionState:
    if hits > hard_limit:
        return AdmissionState.HARD_LIMIT
    if soft_threshold is not None and hits > soft_threshold:
        return AdmissionState.SOFT_THRESHOLD
    return AdmissionState.NORMAL
