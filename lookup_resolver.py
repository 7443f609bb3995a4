"""
Tracking number lookup against a snapshot of shipment records
"""
import logging
from enum import Enum
from typing import List, Sequence, Union

from pydantic import BaseModel, ConfigDict

from errors import ValidationError
from models import ShipmentRecord

logger = logging.getLogger(__name__)


class LookupMode(str, Enum):
    EXACT = "exact"
    SUBSTRING = "substring"


class LookupOutcome(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"


class LookupResult(BaseModel):
    """Records matched by a query. NOT_FOUND carries zero records."""
    model_config = ConfigDict(frozen=True)

    query: str
    mode: LookupMode
    outcome: LookupOutcome
    records: List[ShipmentRecord]

    @property
    def found(self) -> bool:
        return self.outcome == LookupOutcome.FOUND


def normalize_query(query: str) -> str:
    """
    Trim a user query.

    Raises:
        ValidationError: if nothing is left after trimming
    """
    cleaned = (query or "").strip()
    if not cleaned:
        raise ValidationError("empty query")
    return cleaned


def _match_exact(needle: str, records: Sequence[ShipmentRecord]) -> List[ShipmentRecord]:
    # Tracking numbers are unique, so the first match is the only one
    for record in records:
        if record.tracking_number.strip().lower() == needle:
            return [record]
    return []


def _match_substring(needle: str, records: Sequence[ShipmentRecord]) -> List[ShipmentRecord]:
    return [record for record in records if needle in record.tracking_number.lower()]


def resolve(
    query: str,
    records: Sequence[ShipmentRecord],
    mode: Union[LookupMode, str] = LookupMode.EXACT,
    show_all: bool = False,
) -> LookupResult:
    """
    Match a query against tracking numbers, case-insensitively.

    Exact mode returns at most one record whose tracking number equals the
    trimmed query. Substring mode returns every record whose tracking number
    contains it, in input order.

    Args:
        query: User input, complete or partial
        records: Snapshot of shipment records
        mode: LookupMode or its string value
        show_all: Substring mode only. An empty query returns every record
            instead of raising.

    Returns:
        LookupResult with outcome FOUND or NOT_FOUND

    Raises:
        ValidationError: if the query is empty after trimming
    """
    mode = LookupMode(mode)

    if show_all and mode == LookupMode.SUBSTRING and not (query or "").strip():
        outcome = LookupOutcome.FOUND if records else LookupOutcome.NOT_FOUND
        return LookupResult(query="", mode=mode, outcome=outcome, records=list(records))

    cleaned = normalize_query(query)
    needle = cleaned.lower()

    if mode == LookupMode.EXACT:
        matches = _match_exact(needle, records)
    else:
        matches = _match_substring(needle, records)

    outcome = LookupOutcome.FOUND if matches else LookupOutcome.NOT_FOUND
    logger.info(f"Lookup '{cleaned}' ({mode.value}): {len(matches)} of {len(records)} records matched")
    return LookupResult(query=cleaned, mode=mode, outcome=outcome, records=matches)
