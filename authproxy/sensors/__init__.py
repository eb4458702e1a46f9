"""Sensors for AuthProxyWorkload reconcile monitoring.

- OperatorSensor: base class defining no-op lifecycle hooks
- SensorDelegate: fans events out to several sensor backends
- PrometheusMonitor: Prometheus metrics exporter
"""

from authproxy.sensors.base import OperatorSensor
from authproxy.sensors.delegate import SensorDelegate
from authproxy.sensors.prometheus import PrometheusMonitor
from authproxy.sensors.server import init_metrics_server

__all__ = [
    'OperatorSensor',
    'SensorDelegate',
    'PrometheusMonitor',
    'init_metrics_server',
]
