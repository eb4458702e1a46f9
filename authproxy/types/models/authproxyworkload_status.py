from typing import List, Optional
from authproxy.types.base import BaseModel
from authproxy.types.models.condition import Condition


class WorkloadStatus(BaseModel):
    """Status of a single matched workload, keyed by kind, version, namespace and name."""

    kind: str
    version: str
    namespace: str
    name: str
    conditions: Optional[List[Condition]]

    def same_workload(self, other: "WorkloadStatus") -> bool:
        return (
            self.kind == other.kind
            and self.version == other.version
            and self.namespace == other.namespace
            and self.name == other.name
        )


class AuthProxyWorkloadStatus(BaseModel):
    conditions: Optional[List[Condition]]
    workload_statuses: Optional[List[WorkloadStatus]]
