"""Prometheus metrics for interactor invocations.

Interactors record into :data:`interactor_metrics` unless
``STRATA_METRICS_ENABLED=false``. The default instance registers with
``prometheus_client``'s process-wide registry, so any exporter already
serving that registry (``start_http_server``, ``make_asgi_app``) picks the
interactor metrics up without further wiring.

Tests and embedders that need isolation pass their own registry::

    registry = CollectorRegistry()
    metrics = InteractorMetrics(registry)
    save = SaveSummaryValue(repository, metrics=metrics)
    ...
    print(metrics.export().decode())
"""

import time

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram, generate_latest

# Interactors span sub-millisecond cache reads to the 5 minute default deadline
DURATION_BUCKETS = (0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 300.0)


class InteractorMetrics:
    """Counters, gauge and histogram describing interactor invocations.

    ``status`` is the terminal state of an invocation:
    ``completed``, ``failed``, ``timed_out`` or ``cancelled``.
    ``source`` is ``user`` or ``ambient``.
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = REGISTRY if registry is None else registry

        self.invocations = Counter(
            "strata_interactor_invocations_total",
            "Total interactor invocations started",
            ["interactor", "source"],
            registry=self.registry,
        )

        self.completed = Counter(
            "strata_interactor_completed_total",
            "Total interactor invocations finished, by terminal state",
            ["interactor", "status"],
            registry=self.registry,
        )

        self.in_flight = Gauge(
            "strata_interactor_in_flight",
            "Interactor invocations currently in flight",
            ["interactor", "source"],
            registry=self.registry,
        )

        self.duration = Histogram(
            "strata_interactor_duration_seconds",
            "Interactor invocation duration in seconds",
            ["interactor"],
            buckets=DURATION_BUCKETS,
            registry=self.registry,
        )

    def record_start(self, interactor: str, source: str) -> None:
        self.invocations.labels(interactor=interactor, source=source).inc()
        self.in_flight.labels(interactor=interactor, source=source).inc()

    def record_end(self, interactor: str, source: str, status: str, started_at: float) -> None:
        """Record the terminal state; ``started_at`` is a ``time.perf_counter()`` reading."""
        self.completed.labels(interactor=interactor, status=status).inc()
        self.in_flight.labels(interactor=interactor, source=source).dec()
        self.duration.labels(interactor=interactor).observe(time.perf_counter() - started_at)

    def export(self) -> bytes:
        """Prometheus text exposition of this instance's registry."""
        return generate_latest(self.registry)


interactor_metrics = InteractorMetrics()
