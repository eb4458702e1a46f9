"""Prometheus monitoring backend for the AuthProxyWorkload operator.

Exposes reconcile health as Prometheus metrics:

- authproxy_reconcile_* - reconcile counts, duration and errors by state reached
- authproxy_workloads_matched - workloads matched per AuthProxyWorkload
- authproxy_finalizer_operations_total / authproxy_status_patches_total - writes made
"""

from typing import Any, Optional
import time
import logging

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

from authproxy.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class PrometheusMonitor(OperatorSensor):
    """Prometheus metrics monitor.

    Metrics register with `registry`, the process-wide default unless given.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        super().__init__()

        self.reconcile_duration = Histogram(
            'authproxy_reconcile_duration_seconds',
            'Time spent in a single reconcile',
            labelnames=['name', 'namespace', 'state'],
            buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            registry=registry,
        )

        self.reconcile_total = Counter(
            'authproxy_reconcile_total',
            'Total number of reconciles',
            labelnames=['name', 'namespace', 'state', 'requeue', 'result'],
            registry=registry,
        )

        self.reconcile_errors = Counter(
            'authproxy_reconcile_errors_total',
            'Total number of reconciles that returned an error',
            labelnames=['name', 'namespace', 'state', 'error_type'],
            registry=registry,
        )

        self.workloads_matched = Gauge(
            'authproxy_workloads_matched',
            'Number of workloads matched by the last reconcile',
            labelnames=['name', 'namespace'],
            registry=registry,
        )

        self.finalizer_operations = Counter(
            'authproxy_finalizer_operations_total',
            'Total number of finalizers added or removed',
            labelnames=['name', 'namespace', 'operation'],
            registry=registry,
        )

        self.status_patches = Counter(
            'authproxy_status_patches_total',
            'Total number of status patches written',
            labelnames=['name', 'namespace'],
            registry=registry,
        )

        logger.info("PrometheusMonitor initialized with all metrics")

    def on_reconcile_start(self, name: str, namespace: str) -> Optional[float]:
        return time.monotonic()

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[float],
        result: Any,
    ) -> None:
        reached = result.state.value
        outcome = 'success' if result.error is None else 'error'
        if state is not None:
            self.reconcile_duration.labels(
                name=name, namespace=namespace, state=reached
            ).observe(time.monotonic() - state)
        self.reconcile_total.labels(
            name=name,
            namespace=namespace,
            state=reached,
            requeue=result.requeue.value,
            result=outcome,
        ).inc()
        if result.error is not None:
            self.reconcile_errors.labels(
                name=name,
                namespace=namespace,
                state=reached,
                error_type=type(result.error).__name__,
            ).inc()

    def on_workloads_resolved(self, name: str, namespace: str, count: int) -> None:
        self.workloads_matched.labels(name=name, namespace=namespace).set(count)

    def on_finalizer_added(self, name: str, namespace: str) -> None:
        self.finalizer_operations.labels(
            name=name, namespace=namespace, operation='add'
        ).inc()

    def on_finalizer_removed(self, name: str, namespace: str) -> None:
        self.finalizer_operations.labels(
            name=name, namespace=namespace, operation='remove'
        ).inc()
        try:
            self.workloads_matched.remove(name, namespace)
        except KeyError:
            # Never resolved any workloads.
            pass

    def on_status_patched(self, name: str, namespace: str) -> None:
        self.status_patches.labels(name=name, namespace=namespace).inc()

