"""Observability for the execution layer: Prometheus interactor metrics."""

from strata.observability.metrics import DURATION_BUCKETS, InteractorMetrics, interactor_metrics

__all__ = [
    "DURATION_BUCKETS",
    "InteractorMetrics",
    "interactor_metrics",
]
