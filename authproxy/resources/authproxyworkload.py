import copy
from typing import Any, Dict, List, Optional
from authproxy.common.models.keys import NamespacedName
from authproxy.types.models import AuthProxyWorkloadSpec, AuthProxyWorkloadStatus
from authproxy.types.schemas import (
    AuthProxyWorkloadSpecSchema,
    AuthProxyWorkloadStatusSchema,
)
from authproxy.utils.helpers import create_merge_patch


class AuthProxyWorkload:
    """AuthProxyWorkload resource.

    Wraps the raw object read from the API. `spec` and `status` are parsed
    into models, and finalizers are tracked separately. Everything else in the
    raw body is carried through untouched, so a whole-object update writes
    back exactly what was read plus the finalizer change.
    """

    GROUP = "authproxy.dev"
    VERSION = "v1alpha1"
    KIND = "AuthProxyWorkload"
    PLURAL_NAME = "authproxyworkloads"
    FINALIZER = f"{GROUP}/{KIND}-finalizer"

    # Condition types and reasons
    CONDITION_UP_TO_DATE = "UpToDate"
    CONDITION_WORKLOAD_UP_TO_DATE = "WorkloadUpToDate"
    REASON_NO_WORKLOADS_FOUND = "NoWorkloadsFound"
    REASON_FINISHED_RECONCILE = "FinishedReconcile"
    REASON_UP_TO_DATE = "UpToDate"

    spec: AuthProxyWorkloadSpec
    status: AuthProxyWorkloadStatus
    finalizers: List[str]

    def __init__(self, body: Dict[str, Any]) -> None:
        self._body = copy.deepcopy(body)
        metadata = self._body.setdefault("metadata", {})
        self.finalizers = list(metadata.get("finalizers") or [])
        self.spec = AuthProxyWorkloadSpecSchema().load(self._body.get("spec") or {})
        self.status = AuthProxyWorkloadStatusSchema().load(
            self._body.get("status") or {}
        )

    @property
    def metadata(self) -> Dict[str, Any]:
        return self._body["metadata"]

    @property
    def name(self) -> str:
        return self.metadata.get("name")

    @property
    def namespace(self) -> str:
        return self.metadata.get("namespace")

    @property
    def generation(self) -> int:
        return self.metadata.get("generation", 0)

    @property
    def resource_version(self) -> Optional[str]:
        return self.metadata.get("resourceVersion")

    @property
    def deletion_timestamp(self) -> Optional[str]:
        return self.metadata.get("deletionTimestamp")

    @property
    def key(self) -> NamespacedName:
        return NamespacedName(self.namespace, self.name)

    def is_deleted(self) -> bool:
        """True once the API server has marked this resource for deletion."""
        return bool(self.deletion_timestamp)

    def has_finalizer(self, finalizer: str = FINALIZER) -> bool:
        return finalizer in self.finalizers

    def add_finalizer(self, finalizer: str = FINALIZER) -> bool:
        """Add the finalizer. Returns False if it was already present."""
        if finalizer in self.finalizers:
            return False
        self.finalizers.append(finalizer)
        return True

    def remove_finalizer(self, finalizer: str = FINALIZER) -> bool:
        """Remove the finalizer. Returns False if it was not present."""
        if finalizer not in self.finalizers:
            return False
        self.finalizers = [f for f in self.finalizers if f != finalizer]
        return True

    def deep_copy(self) -> "AuthProxyWorkload":
        return copy.deepcopy(self)

    def status_as_dict(self) -> Dict[str, Any]:
        return AuthProxyWorkloadStatusSchema().dump(self.status)

    def as_dict(self) -> Dict[str, Any]:
        """Return the full object as it should be written back to the API."""
        body = copy.deepcopy(self._body)
        body["metadata"]["finalizers"] = list(self.finalizers)
        body["status"] = self.status_as_dict()
        return body

    def status_patch(self, original: "AuthProxyWorkload") -> Dict[str, Any]:
        """Merge patch turning `original`'s status into this copy's status.

        Empty when nothing changed. Otherwise it is pinned to the original's
        resourceVersion so the write fails on a stale copy.
        """
        diff = create_merge_patch(original.status_as_dict(), self.status_as_dict())
        if not diff:
            return {}
        patch = {"status": diff}
        if original.resource_version:
            patch["metadata"] = {"resourceVersion": original.resource_version}
        return patch

    def __repr__(self) -> str:
        return f"<{self.KIND} {self.namespace}/{self.name} gen={self.generation}>"
