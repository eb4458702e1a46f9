import kopf
import logging
from authproxy.handlers import authproxyworkload, probes  # noqa: F401
from authproxy.controller import AuthProxyWorkloadReconciler, DeletionTracker
from authproxy.resources import KubernetesStore
from authproxy.sensors import SensorDelegate, PrometheusMonitor, init_metrics_server
from authproxy.types.settings import Settings
from kubernetes_asyncio import config
from kubernetes_asyncio.client.api_client import ApiClient


@kopf.on.startup()
async def setup(
    settings: kopf.OperatorSettings, memo: kopf.Memo, logger: logging.Logger, **kwargs
):
    # Load Kubernetes config - in-cluster first (for production), then local kubeconfig (for dev)
    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        logger.info("In-cluster config not found, trying local kubeconfig")
        try:
            await config.load_kube_config()
            logger.info("Loaded local Kubernetes configuration")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise

    memo.conf = Settings()

    # One API client shared by every reconcile to prevent connection leaks
    memo.api_client = ApiClient()
    logger.info("Shared Kubernetes API client initialized")

    sensor = SensorDelegate()
    if memo.conf.metrics_enabled:
        sensor.add(PrometheusMonitor())
        try:
            init_metrics_server()
        except Exception as e:
            # Don't fail operator startup if metrics server fails
            logger.error(f"Failed to start metrics server: {e}")
            logger.warning("Continuing without metrics server")
    memo.sensor = sensor

    memo.tracker = DeletionTracker(max_entries=memo.conf.deletion_tracker_max_entries)
    memo.reconciler = AuthProxyWorkloadReconciler(
        store=KubernetesStore(memo.api_client),
        tracker=memo.tracker,
        settings=memo.conf,
        sensor=sensor,
    )

    # Limit the number of concurrent workers to prevent flooding the API
    settings.batching.worker_limit = memo.conf.worker_limit

    settings.posting.enabled = True
    settings.posting.level = logging.WARNING


@kopf.on.cleanup()
async def cleanup(memo: kopf.Memo, logger: logging.Logger, **kwargs):
    """Cleanup handler for operator shutdown."""
    logger.info("Shutting down operator...")
    authproxyworkload.cancel_all_requeues()

    api_client = getattr(memo, "api_client", None)
    if api_client is not None:
        await api_client.close()
        logger.info("Shared API client closed")

    logger.info("Operator shutdown complete")
