"""
Shipment data contract shared by the store, the upstream client and the HTTP routes.

Field names are snake_case in Python and camelCase on the wire.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from errors import UpstreamFailure

logger = logging.getLogger(__name__)


class TrackingStatus(str, Enum):
    """Closed set of tracking event status codes"""
    SHIPMENT_CREATED = "shipment-created"
    PROCESSING_ORIGIN = "processing-origin"
    IN_TRANSIT = "in-transit"
    ARRIVED_DESTINATION_COUNTRY = "arrived-destination-country"
    PROCESSING_DESTINATION = "processing-destination"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    FAILED_DELIVERY_ATTEMPT = "failed-delivery-attempt"
    DELAYED = "delayed"
    HELD_BY_CUSTOMS = "held-by-customs"
    AWAITING_PICKUP = "awaiting-pickup"
    RETURNED_TO_SENDER = "returned-to-sender"
    CANCELLED = "cancelled"
    LOST = "lost"
    DAMAGED = "damaged"
    ON_HOLD = "on-hold"


# Labels shown in the admin UI
STATUS_LABELS = {
    TrackingStatus.SHIPMENT_CREATED: "Shipment Created",
    TrackingStatus.PROCESSING_ORIGIN: "Processing at Origin",
    TrackingStatus.IN_TRANSIT: "In Transit",
    TrackingStatus.ARRIVED_DESTINATION_COUNTRY: "Arrived at Destination Country",
    TrackingStatus.PROCESSING_DESTINATION: "Processing at Destination",
    TrackingStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    TrackingStatus.DELIVERED: "Delivered",
    TrackingStatus.FAILED_DELIVERY_ATTEMPT: "Failed Delivery Attempt",
    TrackingStatus.DELAYED: "Delayed",
    TrackingStatus.HELD_BY_CUSTOMS: "Held by Customs",
    TrackingStatus.AWAITING_PICKUP: "Awaiting Pickup",
    TrackingStatus.RETURNED_TO_SENDER: "Returned to Sender",
    TrackingStatus.CANCELLED: "Cancelled",
    TrackingStatus.LOST: "Lost",
    TrackingStatus.DAMAGED: "Damaged",
    TrackingStatus.ON_HOLD: "On Hold",
}


class WireModel(BaseModel):
    """Base model: camelCase aliases on the wire, snake_case in Python"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class TrackingEvent(WireModel):
    """One entry in a shipment's tracking history"""
    id: Optional[Union[int, str]] = None
    date: Optional[datetime] = None
    location: Optional[str] = None
    remark: Optional[str] = None
    # Kept as a plain string so codes outside TrackingStatus pass through unclassified
    status: str


class ShipmentDetails(WireModel):
    quantity: PositiveInt
    weight: str
    service_type: str
    description: Optional[str] = None

    @field_validator("weight", mode="before")
    @classmethod
    def weight_as_text(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class Destination(WireModel):
    receiver_name: str
    receiver_email: str
    receiver_address: Optional[str] = None
    expected_delivery_date: Optional[datetime] = None


class Origin(WireModel):
    sender_name: str
    location: Optional[str] = None
    shipment_date: Optional[datetime] = None


class ShipmentRecord(WireModel):
    """A shipment as fetched for one view. Never mutated in place."""
    id: Union[int, str]
    tracking_number: str = Field(min_length=1)
    shipment_details: ShipmentDetails
    destination: Destination
    origin: Origin
    tracking_history: Tuple[TrackingEvent, ...] = ()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("tracking_number")
    @classmethod
    def tracking_number_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("tracking number must not be blank")
        return value

    @field_validator("tracking_history", mode="before")
    @classmethod
    def history_defaults_to_empty(cls, value):
        return () if value is None else value


class ShipmentCreate(WireModel):
    """Admin input for a new shipment. The tracking number is assigned by the store."""
    shipment_details: ShipmentDetails
    destination: Destination
    origin: Origin
    tracking_history: Tuple[TrackingEvent, ...] = ()


class ShipmentUpdate(WireModel):
    """Admin changes to an existing shipment. The tracking number cannot be changed."""
    shipment_details: Optional[ShipmentDetails] = None
    destination: Optional[Destination] = None
    origin: Optional[Origin] = None
    tracking_history: Optional[Tuple[TrackingEvent, ...]] = None


def ensure_unique_tracking_numbers(records: List[ShipmentRecord]) -> List[ShipmentRecord]:
    """Reject a record set in which two shipments share a tracking number"""
    seen = set()
    for record in records:
        key = record.tracking_number.strip().upper()
        if key in seen:
            raise UpstreamFailure(
                "Shipment source returned duplicate tracking numbers",
                detail=f"duplicate tracking number {record.tracking_number}",
            )
        seen.add(key)
    return records


def _require_success(payload: Any, what: str) -> Dict[str, Any]:
    if not isinstance(payload, dict):
        raise UpstreamFailure(f"Malformed {what} payload", detail=f"expected object, got {type(payload).__name__}")
    if payload.get("success") is not True:
        detail = payload.get("error") or payload.get("message") or "success flag not set"
        raise UpstreamFailure(f"Shipment source reported failure for {what}", detail=str(detail))
    return payload


def parse_shipments_payload(payload: Any) -> List[ShipmentRecord]:
    """
    Validate a ``{success, shipments}`` envelope.

    Raises:
        UpstreamFailure: if the source reported failure or the records break the contract
    """
    payload = _require_success(payload, "shipments")
    shipments = payload.get("shipments")
    if not isinstance(shipments, list):
        raise UpstreamFailure("Malformed shipments payload", detail="'shipments' is not a list")

    try:
        records = [ShipmentRecord.model_validate(item) for item in shipments]
    except PydanticValidationError as e:
        logger.error(f"Shipment records failed validation: {e}")
        raise UpstreamFailure("Malformed shipment record", detail=str(e)) from e

    return ensure_unique_tracking_numbers(records)


def parse_shipment_payload(payload: Any) -> ShipmentRecord:
    """Validate a single-record ``{success, shipment}`` envelope"""
    payload = _require_success(payload, "shipment")
    try:
        return ShipmentRecord.model_validate(payload.get("shipment"))
    except PydanticValidationError as e:
        logger.error(f"Shipment record failed validation: {e}")
        raise UpstreamFailure("Malformed shipment record", detail=str(e)) from e
