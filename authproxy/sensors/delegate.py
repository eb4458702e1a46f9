"""Sensor delegation for fan-out to several monitoring backends."""

from typing import Any, Dict, Optional, Set
import logging

from authproxy.sensors.base import OperatorSensor

logger = logging.getLogger(__name__)


class SensorDelegate(OperatorSensor):
    """Delegate sensor that fans out events to multiple backends.

    A failing backend is logged and skipped, it never fails the reconcile.
    Each backend gets back its own state from start/complete hook pairs.
    """

    def __init__(self) -> None:
        self._sensors: Set[OperatorSensor] = set()

    def add(self, sensor: OperatorSensor) -> None:
        logger.info(f"Adding sensor: {sensor.__class__.__name__}")
        self._sensors.add(sensor)

    def remove(self, sensor: OperatorSensor) -> None:
        logger.info(f"Removing sensor: {sensor.__class__.__name__}")
        self._sensors.discard(sensor)

    def clear(self) -> None:
        logger.info(f"Clearing {len(self._sensors)} sensors")
        self._sensors.clear()

    def _fan_out(self, hook: str, *args: Any) -> None:
        for sensor in self._sensors:
            try:
                getattr(sensor, hook)(*args)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.{hook}: {e}",
                    exc_info=True,
                )

    def on_reconcile_start(
        self, name: str, namespace: str
    ) -> Optional[Dict[OperatorSensor, Any]]:
        if not self._sensors:
            return None
        states = {}
        for sensor in self._sensors:
            try:
                state = sensor.on_reconcile_start(name, namespace)
                if state is not None:
                    states[sensor] = state
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.on_reconcile_start: {e}",
                    exc_info=True,
                )
        return states if states else None

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[Dict[OperatorSensor, Any]],
        result: Any,
    ) -> None:
        for sensor in self._sensors:
            try:
                sensor_state = state.get(sensor) if state else None
                sensor.on_reconcile_complete(name, namespace, sensor_state, result)
            except Exception as e:
                logger.error(
                    f"Error in {sensor.__class__.__name__}.on_reconcile_complete: {e}",
                    exc_info=True,
                )

    def on_workloads_resolved(self, name: str, namespace: str, count: int) -> None:
        self._fan_out("on_workloads_resolved", name, namespace, count)

    def on_finalizer_added(self, name: str, namespace: str) -> None:
        self._fan_out("on_finalizer_added", name, namespace)

    def on_finalizer_removed(self, name: str, namespace: str) -> None:
        self._fan_out("on_finalizer_removed", name, namespace)

    def on_status_patched(self, name: str, namespace: str) -> None:
        self._fan_out("on_status_patched", name, namespace)
