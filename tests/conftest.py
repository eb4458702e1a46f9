import pytest
from typing import Dict, List, Optional, Tuple
from kubernetes_asyncio.client import V1ObjectMeta, V1Deployment, V1Job
from authproxy.common.models.keys import NamespacedName
from authproxy.controller import AuthProxyWorkloadReconciler, DeletionTracker
from authproxy.resources import AuthProxyWorkload, Store
from authproxy.types.settings import Settings
from authproxy.utils.errors import ConflictError, NotFoundError, StoreError
from authproxy.workload.kinds import Workload, WorkloadList

NAMESPACE = "default"


class FakeStore(Store):
    """In-memory store recording every write."""

    def __init__(self) -> None:
        self.resources: Dict[NamespacedName, dict] = {}
        self.workloads: Dict[Tuple[str, str, str], object] = {}
        self.calls: List[tuple] = []
        self.get_error: Optional[Exception] = None
        self.update_error: Optional[Exception] = None
        self.patch_error: Optional[Exception] = None
        self.list_error: Optional[Exception] = None

    # -- fixtures helpers --

    def add_resource(self, body: dict) -> NamespacedName:
        meta = body["metadata"]
        meta.setdefault("resourceVersion", "1")
        key = NamespacedName(meta["namespace"], meta["name"])
        self.resources[key] = body
        return key

    def add_workload(self, kind: str, obj) -> None:
        self.workloads[(kind, obj.metadata.namespace, obj.metadata.name)] = obj

    def writes(self) -> List[tuple]:
        return [c for c in self.calls if c[0] in ("update", "patch_status")]

    def stored(self, key: NamespacedName) -> AuthProxyWorkload:
        return AuthProxyWorkload(self.resources[key])

    # -- Store --

    async def get(self, key):
        self.calls.append(("get", key))
        if self.get_error:
            raise self.get_error
        if key not in self.resources:
            raise NotFoundError(f"authproxyworkloads {key} not found", status=404)
        return AuthProxyWorkload(self.resources[key])

    def _check_version(self, key, version):
        if key not in self.resources:
            raise NotFoundError(f"authproxyworkloads {key} not found", status=404)
        if self.resources[key]["metadata"]["resourceVersion"] != version:
            raise ConflictError("the object has been modified", status=409)

    def _bump(self, key):
        meta = self.resources[key]["metadata"]
        meta["resourceVersion"] = str(int(meta["resourceVersion"]) + 1)

    async def update(self, resource):
        self.calls.append(("update", resource.deep_copy()))
        if self.update_error:
            raise self.update_error
        self._check_version(resource.key, resource.resource_version)
        body = resource.as_dict()
        # Status is a subresource, a whole-object update does not change it.
        body["status"] = self.resources[resource.key].get("status", {})
        self.resources[resource.key] = body
        self._bump(resource.key)

    async def patch_status(self, resource, original):
        patch = resource.status_patch(original)
        self.calls.append(("patch_status", patch))
        if self.patch_error:
            raise self.patch_error
        self._check_version(resource.key, original.resource_version)
        self.resources[resource.key]["status"] = resource.status_as_dict()
        self._bump(resource.key)

    async def get_workload(self, key, workload: Workload):
        self.calls.append(("get_workload", workload.kind, key))
        try:
            workload.obj = self.workloads[(workload.kind, key.namespace, key.name)]
        except KeyError:
            raise NotFoundError(f"{workload.kind} {key} not found", status=404)
        return workload

    async def list_workloads(self, namespace, label_selector, workload_list: WorkloadList):
        self.calls.append(("list_workloads", workload_list.kind, namespace, label_selector))
        if self.list_error:
            raise self.list_error
        wanted = dict(
            part.split("=", 1) for part in label_selector.split(",") if "=" in part
        )
        workload_list.items = [
            obj
            for (kind, ns, _), obj in self.workloads.items()
            if kind == workload_list.kind
            and ns == namespace
            and all((obj.metadata.labels or {}).get(k) == v for k, v in wanted.items())
        ]
        return workload_list


def make_body(
    name: str = "proxy",
    namespace: str = NAMESPACE,
    workload: dict = None,
    finalizers: list = None,
    deletion_timestamp: str = None,
    status: dict = None,
    generation: int = 1,
) -> dict:
    metadata = {
        "name": name,
        "namespace": namespace,
        "generation": generation,
        "resourceVersion": "1",
    }
    if finalizers is not None:
        metadata["finalizers"] = finalizers
    if deletion_timestamp:
        metadata["deletionTimestamp"] = deletion_timestamp
    body = {
        "apiVersion": f"{AuthProxyWorkload.GROUP}/{AuthProxyWorkload.VERSION}",
        "kind": AuthProxyWorkload.KIND,
        "metadata": metadata,
        "spec": {
            "workload": workload or {"kind": "Deployment", "name": "app"},
            "instances": [{"connectionString": "project:region:db"}],
        },
    }
    if status is not None:
        body["status"] = status
    return body


def deployment(name: str, namespace: str = NAMESPACE, labels: dict = None) -> V1Deployment:
    return V1Deployment(
        metadata=V1ObjectMeta(name=name, namespace=namespace, labels=labels or {})
    )


def job(name: str, namespace: str = NAMESPACE, labels: dict = None) -> V1Job:
    return V1Job(metadata=V1ObjectMeta(name=name, namespace=namespace, labels=labels or {}))


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def tracker():
    return DeletionTracker()


@pytest.fixture
def reconciler(store, tracker):
    return AuthProxyWorkloadReconciler(
        store=store,
        tracker=tracker,
        settings=Settings(requeue_delay_seconds=30.0),
    )
