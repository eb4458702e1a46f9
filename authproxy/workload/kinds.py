"""Workload kinds that an AuthProxyWorkload can select.

Each supported kind is a `Workload` subclass that knows its API coordinates
and which kubernetes_asyncio calls read and list it. Subclasses register
themselves by kind, so the locator can dispatch on the kind string found in
a workload selector.
"""
from typing import Any, Dict, List, Optional, Type
from kubernetes_asyncio.client import AppsV1Api, BatchV1Api, CoreV1Api
from authproxy.utils.errors import UnknownWorkloadKindError

_registry: Dict[str, Type["Workload"]] = {}


def register(cls: Type["Workload"]) -> Type["Workload"]:
    """Class decorator adding a workload kind to the registry."""
    _registry[cls.KIND.lower()] = cls
    return cls


def parse_kind_arg(kind: str) -> str:
    """Return the kind from `Kind`, `kind.group` or `Kind.version.group`."""
    return (kind or "").split(".", 1)[0].strip()


def lookup(kind: str) -> Type["Workload"]:
    try:
        return _registry[parse_kind_arg(kind).lower()]
    except KeyError:
        raise UnknownWorkloadKindError(kind) from None


def workload_for_kind(kind: str) -> "Workload":
    """Return an empty workload of the given kind, ready to be fetched into."""
    return lookup(kind)()


def workload_list_for_kind(kind: str) -> "WorkloadList":
    """Return an empty workload list of the given kind, ready to be listed into."""
    return WorkloadList(lookup(kind))


def supported_kinds() -> List[str]:
    return sorted(cls.KIND for cls in _registry.values())


class Workload:
    """A reference to a target object of some kind.

    `obj` holds the kubernetes_asyncio model once the workload has been read
    or listed. Kind and apiVersion come from the class, since list responses
    do not carry them on each item.
    """

    KIND: str
    API_VERSION: str
    API_CLASS: Type
    READ_METHOD: str
    LIST_METHOD: str

    obj: Optional[Any]

    def __init__(self, obj: Any = None) -> None:
        self.obj = obj

    @property
    def kind(self) -> str:
        return self.KIND

    @property
    def api_version(self) -> str:
        return self.API_VERSION

    @property
    def name(self) -> Optional[str]:
        return self.obj.metadata.name if self.obj is not None else None

    @property
    def namespace(self) -> Optional[str]:
        return self.obj.metadata.namespace if self.obj is not None else None

    def __repr__(self) -> str:
        return f"<{self.KIND} {self.namespace}/{self.name}>"


class WorkloadList:
    """A typed list of workloads of a single kind."""

    workload_cls: Type[Workload]
    items: List[Any]

    def __init__(self, workload_cls: Type[Workload], items: List[Any] = None) -> None:
        self.workload_cls = workload_cls
        self.items = list(items or [])

    @property
    def kind(self) -> str:
        return self.workload_cls.KIND

    def workloads(self) -> List[Workload]:
        return [self.workload_cls(item) for item in self.items]


@register
class DeploymentWorkload(Workload):
    KIND = "Deployment"
    API_VERSION = "apps/v1"
    API_CLASS = AppsV1Api
    READ_METHOD = "read_namespaced_deployment"
    LIST_METHOD = "list_namespaced_deployment"


@register
class StatefulSetWorkload(Workload):
    KIND = "StatefulSet"
    API_VERSION = "apps/v1"
    API_CLASS = AppsV1Api
    READ_METHOD = "read_namespaced_stateful_set"
    LIST_METHOD = "list_namespaced_stateful_set"


@register
class DaemonSetWorkload(Workload):
    KIND = "DaemonSet"
    API_VERSION = "apps/v1"
    API_CLASS = AppsV1Api
    READ_METHOD = "read_namespaced_daemon_set"
    LIST_METHOD = "list_namespaced_daemon_set"


@register
class ReplicaSetWorkload(Workload):
    KIND = "ReplicaSet"
    API_VERSION = "apps/v1"
    API_CLASS = AppsV1Api
    READ_METHOD = "read_namespaced_replica_set"
    LIST_METHOD = "list_namespaced_replica_set"


@register
class JobWorkload(Workload):
    KIND = "Job"
    API_VERSION = "batch/v1"
    API_CLASS = BatchV1Api
    READ_METHOD = "read_namespaced_job"
    LIST_METHOD = "list_namespaced_job"


@register
class CronJobWorkload(Workload):
    KIND = "CronJob"
    API_VERSION = "batch/v1"
    API_CLASS = BatchV1Api
    READ_METHOD = "read_namespaced_cron_job"
    LIST_METHOD = "list_namespaced_cron_job"


@register
class PodWorkload(Workload):
    KIND = "Pod"
    API_VERSION = "v1"
    API_CLASS = CoreV1Api
    READ_METHOD = "read_namespaced_pod"
    LIST_METHOD = "list_namespaced_pod"
