"""Base sensor class for operator monitoring.

All hooks are no-ops by default, so subclasses override only the events
they care about. Start hooks may return a state object which is handed back
to the matching complete hook.
"""

from typing import Any, Optional
import logging

logger = logging.getLogger(__name__)


class OperatorSensor:
    """Base sensor class for AuthProxyWorkload reconcile monitoring.

    Example:
        class LoggingSensor(OperatorSensor):
            def on_reconcile_start(self, name: str, namespace: str) -> float:
                return time.monotonic()

            def on_reconcile_complete(self, name, namespace, state, result) -> None:
                logger.info(f"Reconciled {name} in {time.monotonic() - state}s")
    """

    def on_reconcile_start(self, name: str, namespace: str) -> Optional[Any]:
        """Called when a reconcile begins.

        Returns:
            Optional state passed to on_reconcile_complete
        """
        pass

    def on_reconcile_complete(
        self,
        name: str,
        namespace: str,
        state: Optional[Any],
        result: Any,
    ) -> None:
        """Called when a reconcile returns.

        Args:
            name: AuthProxyWorkload name
            namespace: Kubernetes namespace
            state: State returned from on_reconcile_start
            result: The ReconcileResult, carrying the state reached and any error
        """
        pass

    def on_workloads_resolved(self, name: str, namespace: str, count: int) -> None:
        """Called when the workload selector has been resolved."""
        pass

    def on_finalizer_added(self, name: str, namespace: str) -> None:
        pass

    def on_finalizer_removed(self, name: str, namespace: str) -> None:
        pass

    def on_status_patched(self, name: str, namespace: str) -> None:
        pass
