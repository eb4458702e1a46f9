from .condition import Condition, ConditionStatus
from .authproxyworkload_spec import (
    LabelSelectorRequirement,
    LabelSelector,
    WorkloadSelectorSpec,
    AuthProxyWorkloadSpec,
)
from .authproxyworkload_status import WorkloadStatus, AuthProxyWorkloadStatus

__all__ = [
    "Condition",
    "ConditionStatus",
    "LabelSelectorRequirement",
    "LabelSelector",
    "WorkloadSelectorSpec",
    "AuthProxyWorkloadSpec",
    "WorkloadStatus",
    "AuthProxyWorkloadStatus",
]
