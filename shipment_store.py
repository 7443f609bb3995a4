"""
In-memory shipment store backing the admin routes
"""
import json
import logging
import secrets
import string
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from config import TRACKING_CODE_LENGTH, TRACKING_NUMBER_MAX_ATTEMPTS, TRACKING_NUMBER_PREFIX
from errors import ValidationError
from models import ShipmentCreate, ShipmentRecord, ShipmentUpdate, TrackingEvent

logger = logging.getLogger(__name__)

TRACKING_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_tracking_code(length: int = TRACKING_CODE_LENGTH) -> str:
    return "".join(secrets.choice(TRACKING_CODE_ALPHABET) for _ in range(length))


def validate_tracking_number_format(tracking_number: str) -> bool:
    """
    Validate that the tracking number follows the required format (SHIP-XXXXXXXX)
    """
    if not tracking_number.startswith(TRACKING_NUMBER_PREFIX):
        return False
    code = tracking_number[len(TRACKING_NUMBER_PREFIX):]
    return len(code) == TRACKING_CODE_LENGTH and all(c in TRACKING_CODE_ALPHABET for c in code)


class ShipmentStore:
    """Shipments keyed by tracking number. Lookups ignore case."""

    def __init__(self):
        self._records: Dict[str, ShipmentRecord] = {}
        self._next_id = 1

    @staticmethod
    def _key(tracking_number: str) -> str:
        return tracking_number.strip().upper()

    def generate_tracking_number(self) -> str:
        """
        Generate an unused tracking number.

        Raises:
            RuntimeError: if every attempt collided
        """
        for _ in range(TRACKING_NUMBER_MAX_ATTEMPTS):
            candidate = f"{TRACKING_NUMBER_PREFIX}{generate_tracking_code()}"
            if self._key(candidate) not in self._records:
                return candidate
        raise RuntimeError(f"Could not generate a unique tracking number after {TRACKING_NUMBER_MAX_ATTEMPTS} attempts")

    def _take_id(self) -> int:
        new_id = self._next_id
        self._next_id += 1
        return new_id

    def create(self, data: ShipmentCreate) -> ShipmentRecord:
        now = datetime.now(timezone.utc)
        record = ShipmentRecord(
            id=self._take_id(),
            tracking_number=self.generate_tracking_number(),
            shipment_details=data.shipment_details,
            destination=data.destination,
            origin=data.origin,
            tracking_history=tuple(data.tracking_history),
            created_at=now,
            updated_at=now,
        )
        self._records[self._key(record.tracking_number)] = record
        logger.info(f"Created shipment {record.tracking_number}")
        return record

    def add(self, record: ShipmentRecord) -> ShipmentRecord:
        """Insert a record that already carries a tracking number (seed data, imports)"""
        key = self._key(record.tracking_number)
        if key in self._records:
            raise ValidationError(
                f"Duplicate tracking number {record.tracking_number}",
                user_message="A shipment with this tracking number already exists.",
            )
        self._records[key] = record
        if isinstance(record.id, int) and record.id >= self._next_id:
            self._next_id = record.id + 1
        return record

    def get(self, tracking_number: str) -> Optional[ShipmentRecord]:
        if not tracking_number:
            return None
        return self._records.get(self._key(tracking_number))

    def list(self) -> List[ShipmentRecord]:
        return list(self._records.values())

    def update(self, tracking_number: str, changes: ShipmentUpdate) -> Optional[ShipmentRecord]:
        """Apply admin changes. The tracking number itself never changes."""
        record = self.get(tracking_number)
        if record is None:
            return None

        fields = changes.model_dump(exclude_unset=True, exclude_none=True)
        update = {name: getattr(changes, name) for name in fields}
        update["updated_at"] = datetime.now(timezone.utc)
        updated = record.model_copy(update=update)
        self._records[self._key(tracking_number)] = updated
        logger.info(f"Updated shipment {record.tracking_number}: {sorted(fields)}")
        return updated

    def add_event(self, tracking_number: str, event: TrackingEvent) -> Optional[ShipmentRecord]:
        record = self.get(tracking_number)
        if record is None:
            return None

        updated = record.model_copy(update={
            "tracking_history": (*record.tracking_history, event),
            "updated_at": datetime.now(timezone.utc),
        })
        self._records[self._key(tracking_number)] = updated
        logger.info(f"Shipment {record.tracking_number}: appended status '{event.status}'")
        return updated

    def delete(self, tracking_number: str) -> bool:
        record = self._records.pop(self._key(tracking_number), None) if tracking_number else None
        if record is None:
            return False
        logger.info(f"Deleted shipment {record.tracking_number}")
        return True

    def load_seed_file(self, path: Union[str, Path]) -> int:
        """
        Load shipments from a JSON file holding a list or {"shipments": [...]}.

        Returns:
            Number of records loaded

        Raises:
            ValidationError: if the file content breaks the data contract
        """
        path = Path(path)
        logger.info(f"Loading shipment seed file: {path}")
        data = json.loads(path.read_text(encoding="utf-8"))
        items = data.get("shipments", []) if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise ValidationError(f"Seed file {path} does not contain a list of shipments")

        try:
            records = [ShipmentRecord.model_validate(item) for item in items]
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid shipment in seed file {path}: {e}") from e

        for record in records:
            self.add(record)
        logger.info(f"Loaded {len(records)} shipments")
        return len(records)
