from .deletion import DeletionTracker
from .reconciler import AuthProxyWorkloadReconciler
from .states import (
    Action,
    Mutation,
    ReconcileResult,
    ReconcileState,
    Requeue,
    classify,
    next_action,
)

__all__ = [
    "DeletionTracker",
    "AuthProxyWorkloadReconciler",
    "Action",
    "Mutation",
    "ReconcileResult",
    "ReconcileState",
    "Requeue",
    "classify",
    "next_action",
]
