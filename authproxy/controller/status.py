"""Merging of status conditions and per-workload status entries."""
import copy
from typing import List, Optional
from authproxy.types.models import Condition, WorkloadStatus
from authproxy.utils.helpers import now
from authproxy.workload.kinds import Workload


def find_condition(conds: Optional[List[Condition]], type_: str) -> Optional[Condition]:
    for cond in conds or []:
        if cond.type == type_:
            return cond
    return None


def upsert_condition(conds: Optional[List[Condition]], newc: Condition) -> List[Condition]:
    """Merge `newc` into `conds` by type.

    lastTransitionTime is carried over when the status did not change and a
    timestamp exists, otherwise it is stamped with the current time. The
    input list and condition are left untouched.
    """
    conds = list(conds or [])
    newc = copy.copy(newc)
    for i, c in enumerate(conds):
        if c.type != newc.type:
            continue
        if c.status == newc.status and c.last_transition_time:
            newc.last_transition_time = c.last_transition_time
        else:
            newc.last_transition_time = now()
        conds[i] = newc
        return conds
    newc.last_transition_time = now()
    conds.append(newc)
    return conds


def find_workload_status(
    statuses: Optional[List[WorkloadStatus]], status: WorkloadStatus
) -> Optional[WorkloadStatus]:
    for s in statuses or []:
        if s.same_workload(status):
            return s
    return None


def upsert_workload_status(
    statuses: Optional[List[WorkloadStatus]], updated: WorkloadStatus
) -> List[WorkloadStatus]:
    """Replace the entry for the same kind, version, namespace and name, or append."""
    statuses = list(statuses or [])
    for i, s in enumerate(statuses):
        if s.same_workload(updated):
            statuses[i] = updated
            return statuses
    statuses.append(updated)
    return statuses


def new_workload_status(workload: Workload) -> WorkloadStatus:
    """Create a WorkloadStatus with the identifying fields of `workload` filled in."""
    return WorkloadStatus(
        kind=workload.kind,
        version=workload.api_version,
        namespace=workload.namespace or "",
        name=workload.name,
        conditions=[],
    )
