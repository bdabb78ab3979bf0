"""Initial state discovery for an instance group."""

from __future__ import annotations

from .models import ReconcileState

SCALING_GROUP_DELETION_STATUS = "Delete in progress"


def discover_state(
    current: ReconcileState,
    deleting: bool,
    provisioned: bool,
    group_status: str | None = None,
) -> ReconcileState:
    """Work out the reconcile state at the start of a new reconcile.

    States other than INIT are returned unchanged.
    """
    if current is not ReconcileState.INIT:
        return current

    if deleting:
        if not provisioned:
            return ReconcileState.DELETED
        if group_status == SCALING_GROUP_DELETION_STATUS:
            return ReconcileState.DELETING
        return ReconcileState.INIT_DELETE

    if provisioned:
        return ReconcileState.INIT_UPDATE
    return ReconcileState.INIT_CREATE


def is_ready(state: ReconcileState) -> bool:
    """Whether an instance group in this state has finished reconciling."""
    return state is ReconcileState.MODIFIED