"""The AuthProxyWorkload reconcile state machine.

A reconcile makes at most one write and then returns. Several reconciles
in a row finish the work, each re-entering the machine in a later state.

| state                 | finalizer | deletion | fetch/list | workloads | write            | requeue   |
|-----------------------|-----------|----------|------------|-----------|------------------|-----------|
| GONE                  | *         | *        | get fails  | *         | none             | never     |
| UNAVAILABLE           | *         | *        | get fails  | *         | none             | delayed   |
| NEEDS_FINALIZER       | absent    | unset    | ok         | *         | add finalizer    | immediate |
| DELETING              | present   | set      | ok         | *         | remove finalizer | never     |
| FINALIZED             | absent    | set      | ok         | *         | none             | never     |
| WORKLOADS_UNAVAILABLE | present   | unset    | list fails | *         | none             | delayed   |
| NO_WORKLOADS          | present   | unset    | ok         | 0         | patch status     | never     |
| WORKLOADS_RECONCILED  | present   | unset    | ok         | > 0       | patch status     | never     |

GONE applies when the key was recently seen deleted. Otherwise a failed get
is taken for read lag and is UNAVAILABLE.
"""
from enum import Enum
from typing import NamedTuple, Optional


class ReconcileState(Enum):
    GONE = "Gone"
    UNAVAILABLE = "Unavailable"
    NEEDS_FINALIZER = "NeedsFinalizer"
    DELETING = "Deleting"
    FINALIZED = "Finalized"
    WORKLOADS_UNAVAILABLE = "WorkloadsUnavailable"
    NO_WORKLOADS = "NoWorkloads"
    WORKLOADS_RECONCILED = "WorkloadsReconciled"


class Mutation(Enum):
    NONE = "None"
    ADD_FINALIZER = "AddFinalizer"
    REMOVE_FINALIZER = "RemoveFinalizer"
    PATCH_STATUS = "PatchStatus"


class Requeue(Enum):
    NEVER = "Never"
    IMMEDIATE = "Immediate"
    DELAYED = "Delayed"


class Action(NamedTuple):
    mutation: Mutation
    requeue: Requeue
    requeue_on_error: Requeue


class ReconcileResult(NamedTuple):
    """What a reconcile did and when it wants to run again."""

    state: ReconcileState
    requeue: Requeue = Requeue.NEVER
    requeue_after: Optional[float] = None
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


_ACTIONS = {
    ReconcileState.GONE: Action(Mutation.NONE, Requeue.NEVER, Requeue.NEVER),
    ReconcileState.UNAVAILABLE: Action(Mutation.NONE, Requeue.DELAYED, Requeue.DELAYED),
    ReconcileState.NEEDS_FINALIZER: Action(
        Mutation.ADD_FINALIZER, Requeue.IMMEDIATE, Requeue.IMMEDIATE
    ),
    ReconcileState.DELETING: Action(
        Mutation.REMOVE_FINALIZER, Requeue.NEVER, Requeue.NEVER
    ),
    ReconcileState.FINALIZED: Action(Mutation.NONE, Requeue.NEVER, Requeue.NEVER),
    ReconcileState.WORKLOADS_UNAVAILABLE: Action(
        Mutation.NONE, Requeue.DELAYED, Requeue.DELAYED
    ),
    ReconcileState.NO_WORKLOADS: Action(
        Mutation.PATCH_STATUS, Requeue.NEVER, Requeue.NEVER
    ),
    ReconcileState.WORKLOADS_RECONCILED: Action(
        Mutation.PATCH_STATUS, Requeue.NEVER, Requeue.NEVER
    ),
}


def next_action(state: ReconcileState) -> Action:
    """Return the single write and the requeue directive for `state`."""
    return _ACTIONS[state]


def classify(
    found: bool,
    recently_deleted: bool = False,
    deleted: bool = False,
    has_finalizer: bool = False,
    list_failed: bool = False,
    workload_count: int = 0,
) -> ReconcileState:
    """Determine the reconcile state from what was observed.

    A resource marked for deletion always takes the delete path, whatever
    else was observed.
    """
    if not found:
        return ReconcileState.GONE if recently_deleted else ReconcileState.UNAVAILABLE
    if deleted:
        return ReconcileState.DELETING if has_finalizer else ReconcileState.FINALIZED
    if not has_finalizer:
        return ReconcileState.NEEDS_FINALIZER
    if list_failed:
        return ReconcileState.WORKLOADS_UNAVAILABLE
    if workload_count == 0:
        return ReconcileState.NO_WORKLOADS
    return ReconcileState.WORKLOADS_RECONCILED
