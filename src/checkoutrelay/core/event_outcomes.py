from typing import Final

EVENT_OUTCOME_PENDING: Final[str] = "pending"
EVENT_OUTCOME_PROCESSED: Final[str] = "processed"
EVENT_OUTCOME_DUPLICATE: Final[str] = "duplicate"
EVENT_OUTCOME_FAILED: Final[str] = "failed"

EVENT_OUTCOMES: Final[set[str]] = {
    EVENT_OUTCOME_PENDING,
    EVENT_OUTCOME_PROCESSED,
    EVENT_OUTCOME_DUPLICATE,
    EVENT_OUTCOME_FAILED,
}
