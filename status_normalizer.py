"""
Status classification utilities for tracking events
"""
from typing import List, Optional, Sequence

from pydantic import ConfigDict

from models import STATUS_LABELS, TrackingEvent, TrackingStatus, WireModel


# Statuses that mean the delivery is at risk. Matched exactly after lowercasing.
PROBLEM_STATUSES = frozenset({
    TrackingStatus.ON_HOLD.value,
    TrackingStatus.LOST.value,
    TrackingStatus.HELD_BY_CUSTOMS.value,
    TrackingStatus.DELAYED.value,
})

# Forward lifecycle, in order. Every other known status is a branch/exception state.
LIFECYCLE: List[str] = [
    TrackingStatus.SHIPMENT_CREATED.value,
    TrackingStatus.PROCESSING_ORIGIN.value,
    TrackingStatus.IN_TRANSIT.value,
    TrackingStatus.ARRIVED_DESTINATION_COUNTRY.value,
    TrackingStatus.PROCESSING_DESTINATION.value,
    TrackingStatus.OUT_FOR_DELIVERY.value,
    TrackingStatus.DELIVERED.value,
]

KNOWN_STATUSES = frozenset(status.value for status in TrackingStatus)


class StatusClassification(WireModel):
    """Derived display state for one status code"""
    model_config = ConfigDict(frozen=True)

    status: str
    is_problem: bool
    normalized_label: str
    is_known: bool
    phase: str  # "lifecycle", "exception" or "unknown"
    stage: Optional[int] = None


def normalize_label(status: Optional[str]) -> str:
    """
    Turn a status code into a display label.

    Hyphens become spaces and every word is capitalized:
    - "held-by-customs" -> "Held By Customs"
    - "IN-TRANSIT" -> "In Transit"

    Args:
        status: Raw status code

    Returns:
        Normalized label, or "" for empty input
    """
    if not status or not isinstance(status, str):
        return ""

    words = status.strip().lower().replace("-", " ").split()
    return " ".join(word.capitalize() for word in words)


def is_problem_status(status: Optional[str]) -> bool:
    if not isinstance(status, str):
        return False
    return status.lower() in PROBLEM_STATUSES


def classify(status: Optional[str]) -> StatusClassification:
    """
    Classify a tracking event status code.

    Never raises: codes outside the closed set come back with
    ``is_known=False`` and ``is_problem=False``.
    """
    raw = status if isinstance(status, str) else ""
    code = raw.lower()

    is_known = code in KNOWN_STATUSES
    if code in LIFECYCLE:
        phase = "lifecycle"
        stage = LIFECYCLE.index(code)
    else:
        phase = "exception" if is_known else "unknown"
        stage = None

    return StatusClassification(
        status=raw,
        is_problem=is_problem_status(raw),
        normalized_label=normalize_label(raw),
        is_known=is_known,
        phase=phase,
        stage=stage,
    )


def display_label(status: Optional[str]) -> str:
    """Admin label for known codes, otherwise the normalized label"""
    code = status.lower() if isinstance(status, str) else ""
    if code in KNOWN_STATUSES:
        return STATUS_LABELS[TrackingStatus(code)]
    return normalize_label(status)


def latest_status(history: Sequence[TrackingEvent]) -> Optional[StatusClassification]:
    # Insertion order is chronological order; dates are not used to reorder
    if not history:
        return None
    return classify(history[-1].status)
