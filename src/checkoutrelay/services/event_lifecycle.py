from __future__ import annotations

from checkoutrelay.core.errors import InvalidOutcomeTransition
from checkoutrelay.core.event_outcomes import (
    EVENT_OUTCOME_DUPLICATE,
    EVENT_OUTCOME_FAILED,
    EVENT_OUTCOME_PENDING,
    EVENT_OUTCOME_PROCESSED,
)

# A retry after `failed` appends a fresh `pending` record; it never reopens the old one.
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    EVENT_OUTCOME_PENDING: {EVENT_OUTCOME_PROCESSED, EVENT_OUTCOME_FAILED},
    EVENT_OUTCOME_PROCESSED: set(),
    EVENT_OUTCOME_FAILED: set(),
    EVENT_OUTCOME_DUPLICATE: set(),
}


def check_outcome_change(old_outcome: str, new_outcome: str) -> None:
    if new_outcome not in ALLOWED_TRANSITIONS.get(old_outcome, set()):
        raise InvalidOutcomeTransition(
            f"Invalid outcome transition: {old_outcome} → {new_outcome}"
        )


def apply_outcome_change(row, new_outcome: str, error: str | None = None):
    """Works on both the in-memory EventRecord and the ORM row (same attribute names)."""
    check_outcome_change(row.outcome, new_outcome)

    row.outcome = new_outcome
    if new_outcome == EVENT_OUTCOME_FAILED:
        row.error = error
    else:
        row.error = None

    return row
