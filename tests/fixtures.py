"""
Test Object Factories

Factory functions for creating shipment payloads and records.
Payloads use the camelCase wire format.
"""
import itertools
from typing import Any, Dict, Iterable, List, Optional

from models import ShipmentRecord

_ids = itertools.count(1)


def make_event(status: str = "in-transit", day: int = 1, location: str = "Lagos Hub",
               remark: str = "Scanned") -> Dict[str, Any]:
    """Create a tracking event dict"""
    return {
        "id": f"evt-{next(_ids)}",
        "date": f"2024-05-{day:02d}T09:00:00Z",
        "location": location,
        "remark": remark,
        "status": status,
    }


def make_record_payload(
    tracking_number: str = "SHIP-AB12CD34",
    statuses: Iterable[str] = ("in-transit",),
    description: Optional[str] = None,
    record_id: Optional[int] = None,
) -> Dict[str, Any]:
    """Create a shipment dict as served by the shipments API"""
    return {
        "id": record_id if record_id is not None else next(_ids),
        "trackingNumber": tracking_number,
        "shipmentDetails": {
            "quantity": 2,
            "weight": "4.5",
            "serviceType": "Express",
            "description": description,
        },
        "destination": {
            "receiverName": "Ada Obi",
            "receiverEmail": "ada@example.com",
            "receiverAddress": "12 Marina Road",
            "expectedDeliveryDate": "2024-05-20T00:00:00Z",
        },
        "origin": {
            "senderName": "Northwind Traders",
            "location": "Rotterdam",
            "shipmentDate": "2024-05-01T00:00:00Z",
        },
        "trackingHistory": [make_event(status, day=i + 1) for i, status in enumerate(statuses)],
    }


def make_record(**kwargs) -> ShipmentRecord:
    return ShipmentRecord.model_validate(make_record_payload(**kwargs))


def make_create_payload(statuses: Iterable[str] = (), description: Optional[str] = None) -> Dict[str, Any]:
    """Create a POST /my-route/shipments body"""
    payload = make_record_payload(statuses=statuses, description=description)
    del payload["id"]
    del payload["trackingNumber"]
    return payload


def make_sample_records() -> List[ShipmentRecord]:
    """Three shipments: one with a problem, one delivered, one without history"""
    return [
        make_record(tracking_number="SHIP-AB12CD34", statuses=("in-transit", "on-hold"),
                    description="Fragile electronics"),
        make_record(tracking_number="SHIP-ZX98YU76", statuses=("shipment-created", "delivered"),
                    description="Held at customs for inspection"),
        make_record(tracking_number="SHIP-AB12EF56", statuses=()),
    ]
