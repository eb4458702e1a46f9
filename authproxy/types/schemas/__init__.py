from .condition import ConditionSchema
from .authproxyworkload_spec import (
    LabelSelectorRequirementSchema,
    LabelSelectorSchema,
    WorkloadSelectorSpecSchema,
    AuthProxyWorkloadSpecSchema,
)
from .authproxyworkload_status import (
    WorkloadStatusSchema,
    AuthProxyWorkloadStatusSchema,
)

__all__ = [
    "ConditionSchema",
    "LabelSelectorRequirementSchema",
    "LabelSelectorSchema",
    "WorkloadSelectorSpecSchema",
    "AuthProxyWorkloadSpecSchema",
    "WorkloadStatusSchema",
    "AuthProxyWorkloadStatusSchema",
]
