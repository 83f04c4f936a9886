"""Admission Control: per-route-class rate limiting and progressive slow-down.

Invariants:
    - Each route class has an independent fixed window per client key
    - Slow-down runs before the hard limit on the same request, so moderate
      bursts get slower responses before they get 429s
    - Exceeding a hard limit raises RateLimitExceededError with the seconds left
      in the window; the offending client and masked path are logged at WARNING
    - Each admitted hit is classified NORMAL, SOFT_THRESHOLD or HARD_LIMIT;
      slowed requests are logged with their state
    - State is in-process memory only; no cross-instance coordination
    - Counters are read and written with no await in between (single event loop)

Design Decisions:
    - AdmissionControl is owned by the app (app.state.admission), built by the
      app factory, reset on shutdown
    - Clock and sleep injectable: tests drive windows without waiting
    - Expired counters are pruned once the table grows past max_tracked_clients
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable

from cheque_relay.config import InternalSettings, PublicSettings
from cheque_relay.core.admission_window import (
    SlowDownPolicy,
    WindowCounter,
    WindowPolicy,
    advance_window,
    classify_hits,
    is_over_limit,
    record_hit,
    remaining_allowance,
    seconds_until_reset,
    slowdown_delay_ms,
)
from cheque_relay.core.domain_types import AdmissionState, RouteClass
from cheque_relay.core.errors import ErrorContext, RateLimitExceededError
from cheque_relay.infrastructure.observability import mask_path

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class LimitDecision:
    """Result of one hit against a fixed window."""
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int
    hits: int = 0


class _CounterTable:
    """Client key -> WindowCounter, pruned of expired windows when large."""

    def __init__(self, window_seconds: float, clock: Clock, max_tracked_clients: int):
        self.window_seconds = window_seconds
        self.clock = clock
        self.max_tracked_clients = max_tracked_clients
        self._counters: dict[str, WindowCounter] = {}

    def hit(self, key: str) -> tuple[WindowCounter, float]:
        now = self.clock()
        if key not in self._counters and len(self._counters) >= self.max_tracked_clients:
            self._prune(now)
        counter = record_hit(self._counters.get(key), now, self.window_seconds)
        self._counters[key] = counter
        return counter, now

    def _prune(self, now: float) -> None:
        expired = [
            k for k, c in self._counters.items()
            if advance_window(c, now, self.window_seconds) is not c
        ]
        for k in expired:
            del self._counters[k]

    def clear(self) -> None:
        self._counters.clear()

    def __len__(self) -> int:
        return len(self._counters)


class FixedWindowLimiter:
    """Hard limit: more than policy.limit hits in a window is rejected."""

    def __init__(
        self,
        policy: WindowPolicy,
        clock: Clock = time.monotonic,
        max_tracked_clients: int = 10_000,
    ):
        self.policy = policy
        self._table = _CounterTable(policy.window_seconds, clock, max_tracked_clients)

    def hit(self, key: str) -> LimitDecision:
        counter, now = self._table.hit(key)
        return LimitDecision(
            allowed=not is_over_limit(counter, self.policy),
            limit=self.policy.limit,
            remaining=remaining_allowance(counter, self.policy),
            reset_seconds=seconds_until_reset(counter, now, self.policy.window_seconds),
            hits=counter.hits,
        )

    def reset(self) -> None:
        self._table.clear()


class ProgressiveSlowDown:
    """Soft threshold: each hit past delay_after waits a little longer."""

    def __init__(
        self,
        policy: SlowDownPolicy,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
        max_tracked_clients: int = 10_000,
    ):
        self.policy = policy
        self._sleep = sleep
        self._table = _CounterTable(policy.window_seconds, clock, max_tracked_clients)

    async def delay(self, key: str) -> int:
        """Count the hit and wait as required. Returns the delay in ms."""
        counter, _ = self._table.hit(key)
        delay_ms = slowdown_delay_ms(counter.hits, self.policy)
        if delay_ms:
            await self._sleep(delay_ms / 1000)
        return delay_ms

    def reset(self) -> None:
        self._table.clear()


class AdmissionControl:
    """All throttles of one app, keyed by RouteClass."""

    def __init__(
        self,
        limiters: dict[RouteClass, FixedWindowLimiter],
        slowdowns: dict[RouteClass, ProgressiveSlowDown] | None = None,
    ):
        self.limiters = limiters
        self.slowdowns = slowdowns or {}

    async def admit(
        self, route_class: RouteClass, client_key: str, path: str,
    ) -> LimitDecision | None:
        """Apply slow-down then hard limit. Raises RateLimitExceededError."""
        slowdown = self.slowdowns.get(route_class)
        delay_ms = 0
        if slowdown is not None:
            delay_ms = await slowdown.delay(client_key)

        limiter = self.limiters.get(route_class)
        if limiter is None:
            return None
        decision = limiter.hit(client_key)
        soft_threshold = slowdown.policy.delay_after if slowdown is not None else None
        state = classify_hits(decision.hits, decision.limit, soft_threshold)
        masked = mask_path(path)
        if state is AdmissionState.HARD_LIMIT:
            logger.warning(
                f"Rate limit exceeded for IP: {client_key} on {masked}",
                extra={
                    "client_ip": client_key,
                    "path": masked,
                    "route_class": route_class.value,
                    "retry_after": decision.reset_seconds,
                    "admission_state": state.value,
                },
            )
            raise RateLimitExceededError(
                decision.reset_seconds, ErrorContext(retry_after_seconds=decision.reset_seconds),
            )
        if delay_ms:
            logger.info(
                "Request slowed down",
                extra={
                    "route_class": route_class.value,
                    "duration_ms": delay_ms,
                    "admission_state": state.value,
                },
            )
        return decision

    def reset(self) -> None:
        for limiter in self.limiters.values():
            limiter.reset()
        for slowdown in self.slowdowns.values():
            slowdown.reset()

    @classmethod
    def for_public(
        cls,
        settings: PublicSettings,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> "AdmissionControl":
        return cls(
            limiters={
                RouteClass.GENERAL: FixedWindowLimiter(
                    WindowPolicy(
                        settings.general_rate_limit_max_requests,
                        settings.general_rate_limit_window_seconds,
                    ),
                    clock,
                ),
                RouteClass.VERIFICATION: FixedWindowLimiter(
                    WindowPolicy(
                        settings.verify_rate_limit_max_requests,
                        settings.verify_rate_limit_window_seconds,
                    ),
                    clock,
                ),
                RouteClass.HEALTH: FixedWindowLimiter(
                    WindowPolicy(
                        settings.health_rate_limit_max_requests,
                        settings.health_rate_limit_window_seconds,
                    ),
                    clock,
                ),
            },
            slowdowns={
                RouteClass.VERIFICATION: ProgressiveSlowDown(
                    SlowDownPolicy(
                        delay_after=settings.verify_slowdown_delay_after,
                        step_ms=settings.verify_slowdown_delay_step_ms,
                        max_delay_ms=settings.verify_slowdown_max_delay_ms,
                        window_seconds=settings.verify_rate_limit_window_seconds,
                    ),
                    clock,
                    sleep,
                ),
            },
        )

    @classmethod
    def for_internal(
        cls, settings: InternalSettings, clock: Clock = time.monotonic,
    ) -> "AdmissionControl":
        return cls(
            limiters={
                RouteClass.INTERNAL_LOOKUP: FixedWindowLimiter(
                    WindowPolicy(
                        settings.rate_limit_max_requests,
                        settings.rate_limit_window_minutes * 60,
                    ),
                    clock,
                ),
                RouteClass.HEALTH: FixedWindowLimiter(
                    WindowPolicy(
                        settings.health_rate_limit_max_requests,
                        settings.health_rate_limit_window_seconds,
                    ),
                    clock,
                ),
            },
        )
