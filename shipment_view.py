"""
Render-ready views of shipment records
"""
from typing import List, Optional, Union

from description_heuristic import needs_attention
from models import Destination, Origin, ShipmentDetails, ShipmentRecord, TrackingEvent, WireModel
from status_normalizer import StatusClassification, classify, display_label, latest_status


class TrackingEventView(WireModel):
    event: TrackingEvent
    classification: StatusClassification
    display_label: str


class ShipmentView(WireModel):
    """A shipment with every history entry classified independently"""
    id: Union[int, str]
    tracking_number: str
    shipment_details: ShipmentDetails
    destination: Destination
    origin: Origin
    history: List[TrackingEventView]
    latest_status: Optional[StatusClassification] = None
    has_problem: bool
    description_needs_attention: bool


def build_event_view(event: TrackingEvent) -> TrackingEventView:
    return TrackingEventView(
        event=event,
        classification=classify(event.status),
        display_label=display_label(event.status),
    )


def build_shipment_view(record: ShipmentRecord) -> ShipmentView:
    history = [build_event_view(event) for event in record.tracking_history]
    return ShipmentView(
        id=record.id,
        tracking_number=record.tracking_number,
        shipment_details=record.shipment_details,
        destination=record.destination,
        origin=record.origin,
        history=history,
        latest_status=latest_status(record.tracking_history),
        has_problem=any(item.classification.is_problem for item in history),
        description_needs_attention=needs_attention(record.shipment_details.description),
    )
