from .kinds import (
    Workload,
    WorkloadList,
    workload_for_kind,
    workload_list_for_kind,
    supported_kinds,
)

__all__ = [
    "Workload",
    "WorkloadList",
    "workload_for_kind",
    "workload_list_for_kind",
    "supported_kinds",
]
