"""
Shared fixtures for the shipment tracking tests
"""
import pytest

from shipment_store import ShipmentStore
from tests.fixtures import make_sample_records


@pytest.fixture
def records():
    return make_sample_records()


@pytest.fixture
def store(records):
    shipment_store = ShipmentStore()
    for record in records:
        shipment_store.add(record)
    return shipment_store


@pytest.fixture
def no_retry_delay(monkeypatch):
    """Make upstream retries immediate"""
    import tracking_api
    monkeypatch.setattr(tracking_api, "RETRY_DELAY", 0)
