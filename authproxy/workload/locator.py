import logging
from typing import List, Optional
from authproxy.common.models.keys import NamespacedName
from authproxy.common.models.labels import Labels
from authproxy.resources.store import Store
from authproxy.types.models import WorkloadSelectorSpec
from authproxy.utils.errors import NotFoundError
from authproxy.workload.kinds import (
    Workload,
    workload_for_kind,
    workload_list_for_kind,
)

logger = logging.getLogger(__name__)


class WorkloadLocator:
    """Resolves a workload selector to the workloads it matches."""

    def __init__(self, store: Store) -> None:
        self.store = store

    async def resolve(
        self, selector: Optional[WorkloadSelectorSpec], default_namespace: str
    ) -> List[Workload]:
        """Return the workloads matching `selector`.

        The selector's namespace, when set, overrides `default_namespace`.
        A name takes precedence over a label selector.

        Raises:
            UnknownWorkloadKindError: the selector's kind is not supported.
            LabelSelectorError: the label selector is malformed.
            StoreError: the workloads could not be read.
        """
        if selector is None:
            return []
        namespace = selector.namespace or default_namespace
        if selector.name:
            return await self.load_by_name(selector, namespace)
        return await self.load_by_label_selector(selector, namespace)

    async def load_by_name(
        self, selector: WorkloadSelectorSpec, namespace: str
    ) -> List[Workload]:
        """Load a single workload by name. A missing workload is not an error."""
        key = NamespacedName(namespace, selector.name)
        workload = workload_for_kind(selector.kind)
        try:
            await self.store.get_workload(key, workload)
        except NotFoundError:
            logger.debug(f"No {workload.kind} named {key}")
            return []
        return [workload]

    async def load_by_label_selector(
        self, selector: WorkloadSelectorSpec, namespace: str
    ) -> List[Workload]:
        """Load all workloads of the selector's kind matching its labels."""
        if selector.selector is None:
            # Neither a name nor labels, so nothing is selected.
            return []
        labels = Labels.from_selector(selector.selector)
        workload_list = workload_list_for_kind(selector.kind)
        try:
            await self.store.list_workloads(namespace, labels.as_str(), workload_list)
        except Exception as ex:
            logger.error(
                f"Unable to list {workload_list.kind} in {namespace} "
                f"for selector {labels.as_str()!r}: {ex}"
            )
            raise
        return workload_list.workloads()
