import abc
import logging
from kubernetes_asyncio.client import ApiClient, ApiException, CustomObjectsApi
from authproxy.common.models.keys import NamespacedName
from authproxy.resources.authproxyworkload import AuthProxyWorkload
from authproxy.utils.errors import convert_api_exception
from authproxy.workload.kinds import Workload, WorkloadList

logger = logging.getLogger(__name__)

# Status patches are RFC 7386 merge patches, not JSON patch operation lists
MERGE_PATCH_CONTENT_TYPE = "application/merge-patch+json"


class Store(abc.ABC):
    """Reads and writes the objects a reconcile works with.

    Every method raises `StoreError` (or its `NotFoundError` and
    `ConflictError` subclasses) on failure.
    """

    @abc.abstractmethod
    async def get(self, key: NamespacedName) -> AuthProxyWorkload:
        """Fetch the managed resource."""

    @abc.abstractmethod
    async def update(self, resource: AuthProxyWorkload) -> None:
        """Replace the whole resource, conditional on its resourceVersion."""

    @abc.abstractmethod
    async def patch_status(
        self, resource: AuthProxyWorkload, original: AuthProxyWorkload
    ) -> None:
        """Merge-patch the status subresource from `original` to `resource`."""

    @abc.abstractmethod
    async def get_workload(self, key: NamespacedName, workload: Workload) -> Workload:
        """Read a single workload into the empty typed `workload`."""

    @abc.abstractmethod
    async def list_workloads(
        self, namespace: str, label_selector: str, workload_list: WorkloadList
    ) -> WorkloadList:
        """List workloads matching `label_selector` into the empty typed list."""


class KubernetesStore(Store):
    """Store backed by the Kubernetes API through kubernetes_asyncio."""

    def __init__(self, api_client: ApiClient = None) -> None:
        self.api_client = api_client
        self.custom_objects_api = CustomObjectsApi(api_client)
        self._apis = {}

    def _api_for(self, workload_cls):
        api_cls = workload_cls.API_CLASS
        if api_cls not in self._apis:
            self._apis[api_cls] = api_cls(self.api_client)
        return self._apis[api_cls]

    async def get(self, key: NamespacedName) -> AuthProxyWorkload:
        try:
            body = await self.custom_objects_api.get_namespaced_custom_object(
                group=AuthProxyWorkload.GROUP,
                version=AuthProxyWorkload.VERSION,
                namespace=key.namespace,
                plural=AuthProxyWorkload.PLURAL_NAME,
                name=key.name,
            )
        except ApiException as ex:
            raise convert_api_exception(ex) from ex
        return AuthProxyWorkload(body)

    async def update(self, resource: AuthProxyWorkload) -> None:
        try:
            await self.custom_objects_api.replace_namespaced_custom_object(
                group=AuthProxyWorkload.GROUP,
                version=AuthProxyWorkload.VERSION,
                namespace=resource.namespace,
                plural=AuthProxyWorkload.PLURAL_NAME,
                name=resource.name,
                body=resource.as_dict(),
            )
        except ApiException as ex:
            raise convert_api_exception(ex) from ex

    async def patch_status(
        self, resource: AuthProxyWorkload, original: AuthProxyWorkload
    ) -> None:
        patch = resource.status_patch(original)
        if not patch:
            logger.debug(f"Status of {resource.key} unchanged, skipping patch")
            return
        try:
            await self.custom_objects_api.patch_namespaced_custom_object_status(
                group=AuthProxyWorkload.GROUP,
                version=AuthProxyWorkload.VERSION,
                namespace=resource.namespace,
                plural=AuthProxyWorkload.PLURAL_NAME,
                name=resource.name,
                body=patch,
                _content_type=MERGE_PATCH_CONTENT_TYPE,
            )
        except ApiException as ex:
            raise convert_api_exception(ex) from ex

    async def get_workload(self, key: NamespacedName, workload: Workload) -> Workload:
        api = self._api_for(type(workload))
        try:
            workload.obj = await getattr(api, workload.READ_METHOD)(
                name=key.name, namespace=key.namespace
            )
        except ApiException as ex:
            raise convert_api_exception(ex) from ex
        return workload

    async def list_workloads(
        self, namespace: str, label_selector: str, workload_list: WorkloadList
    ) -> WorkloadList:
        api = self._api_for(workload_list.workload_cls)
        try:
            result = await getattr(api, workload_list.workload_cls.LIST_METHOD)(
                namespace=namespace, label_selector=label_selector
            )
        except ApiException as ex:
            raise convert_api_exception(ex) from ex
        workload_list.items = list(result.items or [])
        return workload_list
