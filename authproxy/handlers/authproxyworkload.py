import asyncio
import kopf
from logging import Logger
from collections import defaultdict
from typing import Dict
from authproxy.common.models.keys import NamespacedName
from authproxy.controller import AuthProxyWorkloadReconciler, ReconcileResult, Requeue
from authproxy.resources import AuthProxyWorkload
from authproxy.types.settings import RESYNC_INTERVAL_SECONDS

GROUP = AuthProxyWorkload.GROUP
VERSION = AuthProxyWorkload.VERSION
PLURAL = AuthProxyWorkload.PLURAL_NAME

# Locks serializing reconciles of the same AuthProxyWorkload
reconcile_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
# Pending delayed requeues, one per AuthProxyWorkload
requeue_tasks: Dict[str, asyncio.Task] = {}


async def dispatch(
    reconciler: AuthProxyWorkloadReconciler, key: NamespacedName
) -> ReconcileResult:
    """Run one reconcile for `key`, never two at once for the same key."""
    async with reconcile_locks[str(key)]:
        return await reconciler.reconcile(key)


def schedule_requeue(
    reconciler: AuthProxyWorkloadReconciler,
    key: NamespacedName,
    delay: float,
    logger: Logger,
) -> None:
    """Reconcile `key` again after `delay` seconds, unless already scheduled."""
    pending = requeue_tasks.get(str(key))
    if pending is not None and not pending.done():
        return
    requeue_tasks[str(key)] = asyncio.create_task(
        _requeue_later(reconciler, key, delay, logger)
    )


def cancel_requeue(key: NamespacedName) -> None:
    pending = requeue_tasks.pop(str(key), None)
    if pending is not None and not pending.done():
        pending.cancel()


async def _requeue_later(
    reconciler: AuthProxyWorkloadReconciler,
    key: NamespacedName,
    delay: float,
    logger: Logger,
) -> None:
    await asyncio.sleep(delay)
    requeue_tasks.pop(str(key), None)
    try:
        result = await dispatch(reconciler, key)
    except Exception as ex:
        retry = reconciler.settings.requeue_delay_seconds
        logger.error(
            f"Requeued reconcile of AuthProxyWorkload {key} raised, retrying in {retry}s: {ex}",
            exc_info=True,
        )
        schedule_requeue(reconciler, key, retry, logger)
        return
    handle_result(reconciler, key, result, logger)


def handle_result(
    reconciler: AuthProxyWorkloadReconciler,
    key: NamespacedName,
    result: ReconcileResult,
    logger: Logger,
) -> None:
    """Honour the requeue directive of a reconcile.

    An immediate requeue needs no action: the write that preceded it produces
    a new watch event. A failed reconcile is retried after the requeue delay.
    """
    if result.error is not None:
        delay = result.requeue_after or reconciler.settings.requeue_delay_seconds
        logger.warning(
            f"Reconcile of AuthProxyWorkload {key} failed in state "
            f"{result.state.value}, retrying in {delay}s: {result.error}"
        )
        schedule_requeue(reconciler, key, delay, logger)
    elif result.requeue is Requeue.DELAYED:
        schedule_requeue(reconciler, key, result.requeue_after, logger)
    elif result.requeue is Requeue.NEVER:
        cancel_requeue(key)


@kopf.on.event(GROUP, VERSION, PLURAL)
async def on_event(name, namespace, type, memo: kopf.Memo, logger: Logger, **kwargs):
    """Reconcile on every watch event, including deletions."""
    key = NamespacedName(namespace, name)
    logger.debug(f"Watch event {type} for AuthProxyWorkload {key}")
    result = await dispatch(memo.reconciler, key)
    handle_result(memo.reconciler, key, result, logger)


@kopf.timer(GROUP, VERSION, PLURAL, interval=RESYNC_INTERVAL_SECONDS, initial_delay=10.0)
async def periodic_reconciliation(name, namespace, memo: kopf.Memo, **kwargs):
    """Periodic full resync, catching drift in the matched workloads."""
    result = await dispatch(memo.reconciler, NamespacedName(namespace, name))
    if result.error is not None:
        raise kopf.TemporaryError(
            f"Reconcile failed in state {result.state.value}: {result.error}",
            delay=result.requeue_after or memo.reconciler.settings.requeue_delay_seconds,
        )


def cancel_all_requeues() -> None:
    for task in requeue_tasks.values():
        task.cancel()
    requeue_tasks.clear()
