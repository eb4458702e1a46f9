import logging
from typing import List
from authproxy.common.models.keys import NamespacedName
from authproxy.controller.deletion import DeletionTracker
from authproxy.controller.states import (
    Mutation,
    ReconcileResult,
    ReconcileState,
    Requeue,
    classify,
    next_action,
)
from authproxy.controller.status import (
    find_workload_status,
    new_workload_status,
    upsert_condition,
    upsert_workload_status,
)
from authproxy.resources.authproxyworkload import AuthProxyWorkload
from authproxy.resources.store import Store
from authproxy.sensors.base import OperatorSensor
from authproxy.types.models import Condition, ConditionStatus
from authproxy.types.settings import Settings
from authproxy.utils.errors import (
    LabelSelectorError,
    StoreError,
    UnknownWorkloadKindError,
)
from authproxy.workload.kinds import Workload
from authproxy.workload.locator import WorkloadLocator

logger = logging.getLogger(__name__)

# Errors that end a reconcile early but are retried later
RESOLVE_ERRORS = (StoreError, UnknownWorkloadKindError, LabelSelectorError)


class AuthProxyWorkloadReconciler:
    """Reconciles AuthProxyWorkload resources.

    Each call to `reconcile` looks at one AuthProxyWorkload, makes at most one
    write (add the finalizer, remove it, or patch the status) and returns a
    `ReconcileResult` telling the caller whether and when to call again. It
    often takes several calls to finish reconciling a single change.

    Matching workloads are only recorded in the status. Their pod specs are
    changed by the admission webhook, not here.

    The caller must not run two reconciles for the same key at once.
    Reconciles for different keys may run concurrently.
    """

    def __init__(
        self,
        store: Store,
        tracker: DeletionTracker = None,
        locator: WorkloadLocator = None,
        settings: Settings = None,
        sensor: OperatorSensor = None,
    ) -> None:
        self.store = store
        self.tracker = tracker if tracker is not None else DeletionTracker()
        self.locator = locator if locator is not None else WorkloadLocator(store)
        self.settings = settings if settings is not None else Settings()
        self.sensor = sensor if sensor is not None else OperatorSensor()

    async def reconcile(self, key: NamespacedName) -> ReconcileResult:
        """Run one step of the state machine for the resource at `key`."""
        logger.info(f"Reconcile loop started AuthProxyWorkload {key}")
        sensor_state = self.sensor.on_reconcile_start(key.name, key.namespace)
        try:
            result = await self._reconcile(key)
        except Exception as ex:
            # e.g. a body that fails schema validation
            logger.exception(f"Unexpected error reconciling AuthProxyWorkload {key}")
            result = self._result(ReconcileState.UNAVAILABLE, error=ex)
        self.sensor.on_reconcile_complete(key.name, key.namespace, sensor_state, result)
        logger.info(
            f"Reconcile loop finished AuthProxyWorkload {key}: "
            f"state={result.state.value} requeue={result.requeue.value}"
        )
        return result

    async def _reconcile(self, key: NamespacedName) -> ReconcileResult:
        try:
            resource = await self.store.get(key)
        except StoreError as ex:
            state = classify(found=False, recently_deleted=self.tracker.get(key))
            if state is ReconcileState.GONE:
                # Deleted and already processed, nothing left to do.
                return self._result(state)
            # Likely the eventually-consistent API lagging behind.
            logger.error(f"Unable to fetch AuthProxyWorkload {key}: {ex}")
            return self._result(state, error=ex)

        if resource.is_deleted():
            logger.info(
                f"Reconcile delete for AuthProxyWorkload {key} gen={resource.generation}"
            )
            self.tracker.set(key, True)
            return await self.do_delete(resource)

        logger.info(
            f"Reconcile add/update for AuthProxyWorkload {key} gen={resource.generation}"
        )
        self.tracker.set(key, False)
        return await self.do_create_update(resource)

    async def do_delete(self, resource: AuthProxyWorkload) -> ReconcileResult:
        """Refresh the matching workloads' status and release the finalizer."""
        original = resource.deep_copy()
        state = classify(found=True, deleted=True, has_finalizer=resource.has_finalizer())
        if state is ReconcileState.DELETING:
            try:
                await self.update_workload_status(resource)
            except RESOLVE_ERRORS as ex:
                logger.warning(
                    f"Unable to list workloads for deleted AuthProxyWorkload "
                    f"{resource.key}, removing finalizer anyway: {ex}"
                )
        return await self.apply(state, resource, original)

    async def do_create_update(self, resource: AuthProxyWorkload) -> ReconcileResult:
        """Reconcile an AuthProxyWorkload that was created or updated."""
        original = resource.deep_copy()

        if not resource.has_finalizer():
            # Brand new: claim it with our finalizer first and come back.
            return await self.apply(ReconcileState.NEEDS_FINALIZER, resource, original)

        try:
            workloads = await self.update_workload_status(resource)
        except RESOLVE_ERRORS as ex:
            logger.error(f"Unable to list workloads for AuthProxyWorkload {resource.key}: {ex}")
            return self._result(ReconcileState.WORKLOADS_UNAVAILABLE, error=ex)

        state = classify(found=True, has_finalizer=True, workload_count=len(workloads))
        if state is ReconcileState.NO_WORKLOADS:
            reason = AuthProxyWorkload.REASON_NO_WORKLOADS_FOUND
            message = "No workload updates needed"
        else:
            reason = AuthProxyWorkload.REASON_FINISHED_RECONCILE
            message = f"Reconciled {len(workloads)} matching workloads complete"

        resource.status.conditions = upsert_condition(
            resource.status.conditions,
            Condition(
                type=AuthProxyWorkload.CONDITION_UP_TO_DATE,
                status=ConditionStatus.TRUE,
                observed_generation=resource.generation,
                reason=reason,
                message=message,
                last_transition_time=None,
            ),
        )
        return await self.apply(state, resource, original)

    async def update_workload_status(self, resource: AuthProxyWorkload) -> List[Workload]:
        """Find the workloads matching `resource` and mark each one up to date.

        Only the in-memory working copy is changed.
        """
        matching = await self.locator.resolve(resource.spec.workload, resource.namespace)
        self.sensor.on_workloads_resolved(resource.name, resource.namespace, len(matching))

        for workload in matching:
            status = new_workload_status(workload)
            existing = find_workload_status(resource.status.workload_statuses, status)
            status.conditions = upsert_condition(
                existing.conditions if existing else [],
                Condition(
                    type=AuthProxyWorkload.CONDITION_WORKLOAD_UP_TO_DATE,
                    status=ConditionStatus.TRUE,
                    observed_generation=resource.generation,
                    reason=AuthProxyWorkload.REASON_UP_TO_DATE,
                    message="No update needed for this workload",
                    last_transition_time=None,
                ),
            )
            resource.status.workload_statuses = upsert_workload_status(
                resource.status.workload_statuses, status
            )
        return matching

    async def apply(
        self,
        state: ReconcileState,
        resource: AuthProxyWorkload,
        original: AuthProxyWorkload,
    ) -> ReconcileResult:
        """Perform the single write for `state`."""
        action = next_action(state)
        try:
            if action.mutation is Mutation.ADD_FINALIZER:
                resource.add_finalizer()
                await self.store.update(resource)
                logger.info(f"Added finalizer to {resource.key}, will requeue quickly")
                self.sensor.on_finalizer_added(resource.name, resource.namespace)
            elif action.mutation is Mutation.REMOVE_FINALIZER:
                resource.remove_finalizer()
                await self.store.update(resource)
                logger.info(f"Removed finalizer from {resource.key}")
                self.sensor.on_finalizer_removed(resource.name, resource.namespace)
            elif action.mutation is Mutation.PATCH_STATUS:
                if resource.status_patch(original):
                    await self.store.patch_status(resource, original)
                    self.sensor.on_status_patched(resource.name, resource.namespace)
                else:
                    logger.debug(f"Status of {resource.key} already up to date")
        except StoreError as ex:
            logger.error(
                f"Unable to apply {action.mutation.value} to AuthProxyWorkload "
                f"{resource.key}: {ex}"
            )
            return self._result(state, requeue=action.requeue_on_error, error=ex)
        return self._result(state, requeue=action.requeue)

    def _result(
        self, state: ReconcileState, requeue: Requeue = None, error: Exception = None
    ) -> ReconcileResult:
        if requeue is None:
            requeue = next_action(state).requeue
        requeue_after = (
            self.settings.requeue_delay_seconds if requeue is Requeue.DELAYED else None
        )
        return ReconcileResult(
            state=state, requeue=requeue, requeue_after=requeue_after, error=error
        )
