"""Prometheus metrics helpers for doxsearch operations.

Examples
--------
>>> from doxsearch_common.observability import MetricsProvider, observe_duration
>>> provider = MetricsProvider()
>>> with observe_duration(provider, "lookup", component="store") as observation:
...     observation.mark_success()
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from doxsearch_common.logging import get_logger, with_fields

if TYPE_CHECKING:
    from types import TracebackType

__all__ = [
    "DurationObservation",
    "MetricsProvider",
    "observe_duration",
]

LOGGER = get_logger(__name__)

type StatusLiteral = Literal["success", "error"]


class MetricsProvider:
    """Prometheus collectors for doxsearch operations.

    Each provider owns its registry so that independent stores (and tests)
    never collide on metric names.

    Parameters
    ----------
    registry : CollectorRegistry | None, optional
        Registry to register the collectors with. Defaults to a fresh registry.
    """

    _default: MetricsProvider | None = None

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self.operations_total = Counter(
            "doxsearch_operations_total",
            "Number of completed doxsearch operations",
            ["component", "operation", "status"],
            registry=self.registry,
        )
        self.operation_duration_seconds = Histogram(
            "doxsearch_operation_duration_seconds",
            "Duration of doxsearch operations in seconds",
            ["component", "operation", "status"],
            registry=self.registry,
        )

    @classmethod
    def default(cls) -> MetricsProvider:
        """Return the process-wide provider, creating it on first use."""
        if cls._default is None:
            cls._default = cls()
        return cls._default

    def render(self) -> bytes:
        """Return the registry in Prometheus text exposition format."""
        return generate_latest(self.registry)


@dataclass(slots=True)
class DurationObservation:
    """Capture status and timing for an in-flight operation."""

    metrics: MetricsProvider
    operation: str
    component: str
    status: StatusLiteral = "success"
    _start: float = field(default_factory=time.monotonic)

    def mark_success(self) -> None:
        """Mark the operation as successful."""
        self.status = "success"

    def mark_error(self) -> None:
        """Mark the operation as failed."""
        self.status = "error"

    def duration_seconds(self) -> float:
        """Return the elapsed wall-clock duration in seconds."""
        return time.monotonic() - self._start


class _DurationObservationContext:
    """Context manager that finalises :class:`DurationObservation` instances."""

    def __init__(self, *, metrics: MetricsProvider, operation: str, component: str) -> None:
        self._observation = DurationObservation(
            metrics=metrics, operation=operation, component=component
        )

    def __enter__(self) -> DurationObservation:
        return self._observation

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        _tb: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self._observation.mark_error()
        _finalise_observation(self._observation)
        return False


def observe_duration(
    metrics: MetricsProvider,
    operation: str,
    *,
    component: str = "unknown",
) -> _DurationObservationContext:
    """Record metrics and a structured log entry for a component operation.

    Exceptions raised within the managed block propagate after the observation
    is marked as ``"error"``.

    Parameters
    ----------
    metrics : MetricsProvider
        Metrics provider instance.
    operation : str
        Operation name.
    component : str, optional
        Component name. Defaults to "unknown".

    Returns
    -------
    _DurationObservationContext
        Context manager yielding a :class:`DurationObservation`.
    """
    return _DurationObservationContext(metrics=metrics, operation=operation, component=component)


def _finalise_observation(observation: DurationObservation) -> None:
    duration = observation.duration_seconds()
    labels = {
        "component": observation.component,
        "operation": observation.operation,
        "status": observation.status,
    }
    observation.metrics.operations_total.labels(**labels).inc()
    observation.metrics.operation_duration_seconds.labels(**labels).observe(duration)
    with with_fields(
        LOGGER, operation=observation.operation, status=observation.status
    ) as adapter:
        adapter.debug(
            "Operation completed",
            extra={"component": observation.component, "duration_ms": duration * 1000},
        )
