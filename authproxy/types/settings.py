import os
from typing import Any

_TRUE, _FALSE = {"True", "true", "yes", "1"}, {"False", "false", "no", "0"}


def _getenv(name: str, *default: Any) -> Any:
    try:
        v = os.environ[name]
        if v in _TRUE:
            return True
        elif v in _FALSE:
            return False
        else:
            return v
    except KeyError:
        pass
    if default:
        return default[0]
    raise KeyError(name)


# ------------------------------------------------
# ---- Defaults and environment variables ----
# ------------------------------------------------

#: Seconds to wait before re-invoking reconcile after a transient failure
REQUEUE_DELAY_SECONDS = float(_getenv("REQUEUE_DELAY_SECONDS", 30.0))

#: Seconds between periodic full reconciliations of every AuthProxyWorkload
RESYNC_INTERVAL_SECONDS = float(_getenv("RESYNC_INTERVAL_SECONDS", 300.0))

#: Upper bound on keys remembered by the deletion tracker (0 for unbounded)
DELETION_TRACKER_MAX_ENTRIES = int(_getenv("DELETION_TRACKER_MAX_ENTRIES", 10000))

#: Maximum number of AuthProxyWorkloads reconciled concurrently
WORKER_LIMIT = int(_getenv("WORKER_LIMIT", 4))

#: Expose Prometheus metrics
METRICS_ENABLED = bool(_getenv("METRICS_ENABLED", True))


class Settings:
    """Operator settings"""

    requeue_delay_seconds: float = REQUEUE_DELAY_SECONDS
    resync_interval_seconds: float = RESYNC_INTERVAL_SECONDS
    deletion_tracker_max_entries: int = DELETION_TRACKER_MAX_ENTRIES
    worker_limit: int = WORKER_LIMIT
    metrics_enabled: bool = METRICS_ENABLED

    def __init__(
        self,
        *args,
        requeue_delay_seconds: float = None,
        resync_interval_seconds: float = None,
        deletion_tracker_max_entries: int = None,
        worker_limit: int = None,
        metrics_enabled: bool = None,
        **kwargs,
    ):
        if requeue_delay_seconds is not None:
            self.requeue_delay_seconds = requeue_delay_seconds

        if resync_interval_seconds is not None:
            self.resync_interval_seconds = resync_interval_seconds

        if deletion_tracker_max_entries is not None:
            self.deletion_tracker_max_entries = deletion_tracker_max_entries

        if worker_limit is not None:
            self.worker_limit = worker_limit

        if metrics_enabled is not None:
            self.metrics_enabled = metrics_enabled
