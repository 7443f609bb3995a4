"""
Tests for the in-memory shipment store
"""
import json
import re

import pytest
from pydantic import ValidationError as PydanticValidationError

from errors import ValidationError
from models import ShipmentCreate, ShipmentUpdate, TrackingEvent
from shipment_store import ShipmentStore, validate_tracking_number_format
from tests.fixtures import make_create_payload, make_record, make_record_payload

TRACKING_NUMBER_RE = re.compile(r"^SHIP-[A-Z0-9]{8}$")


class TestTrackingNumbers:

    def test_generated_format(self):
        store = ShipmentStore()
        for _ in range(20):
            assert TRACKING_NUMBER_RE.match(store.generate_tracking_number())

    def test_generation_skips_collisions(self, monkeypatch):
        import shipment_store
        codes = iter(["AAAA1111", "AAAA1111", "BBBB2222"])
        monkeypatch.setattr(shipment_store, "generate_tracking_code", lambda: next(codes))

        store = ShipmentStore()
        first = store.create(ShipmentCreate.model_validate(make_create_payload()))
        second = store.create(ShipmentCreate.model_validate(make_create_payload()))

        assert first.tracking_number == "SHIP-AAAA1111"
        assert second.tracking_number == "SHIP-BBBB2222"

    def test_generation_gives_up(self, monkeypatch):
        import shipment_store
        monkeypatch.setattr(shipment_store, "generate_tracking_code", lambda: "AAAA1111")
        monkeypatch.setattr(shipment_store, "TRACKING_NUMBER_MAX_ATTEMPTS", 3)

        store = ShipmentStore()
        store.create(ShipmentCreate.model_validate(make_create_payload()))
        with pytest.raises(RuntimeError):
            store.generate_tracking_number()

    @pytest.mark.parametrize("value,expected", [
        ("SHIP-AB12CD34", True),
        ("SHIP-ab12cd34", False),
        ("SHIP-AB12CD3", False),
        ("SN001", False),
        ("SHIP-AB12-D34", False),
    ])
    def test_format_validation(self, value, expected):
        assert validate_tracking_number_format(value) is expected


class TestCrud:

    def test_create_assigns_identity(self):
        store = ShipmentStore()
        record = store.create(ShipmentCreate.model_validate(make_create_payload(statuses=("shipment-created",))))
        assert record.id == 1
        assert record.created_at is not None
        assert store.get(record.tracking_number) == record

    def test_get_ignores_case_and_whitespace(self, store):
        assert store.get(" ship-ab12cd34 ").tracking_number == "SHIP-AB12CD34"
        assert store.get("") is None
        assert store.get("SHIP-NOPE0000") is None

    def test_add_rejects_duplicates(self, store):
        with pytest.raises(ValidationError):
            store.add(make_record(tracking_number="ship-ab12cd34"))

    def test_update_keeps_tracking_number(self, store):
        changes = ShipmentUpdate.model_validate({"origin": {"senderName": "Contoso", "location": "Hamburg"}})
        updated = store.update("SHIP-AB12CD34", changes)
        assert updated.tracking_number == "SHIP-AB12CD34"
        assert updated.origin.sender_name == "Contoso"
        assert updated.destination.receiver_name == "Ada Obi"

    def test_update_missing(self, store):
        assert store.update("SHIP-NOPE0000", ShipmentUpdate()) is None

    def test_add_event_appends(self, store):
        updated = store.add_event("SHIP-AB12CD34", TrackingEvent(status="delivered", location="Lagos"))
        assert [e.status for e in updated.tracking_history] == ["in-transit", "on-hold", "delivered"]
        assert store.get("SHIP-AB12CD34") is updated

    def test_add_event_leaves_previous_snapshot_alone(self, store):
        before = store.get("SHIP-AB12CD34")
        store.add_event("SHIP-AB12CD34", TrackingEvent(status="delivered"))
        assert len(before.tracking_history) == 2

    def test_listed_history_cannot_be_mutated(self, store):
        listed = store.list()[0]
        with pytest.raises(AttributeError):
            listed.tracking_history.append(TrackingEvent(status="lost"))
        with pytest.raises(PydanticValidationError):
            listed.tracking_history[0].status = "lost"

        stored = store.get(listed.tracking_number)
        assert [e.status for e in stored.tracking_history] == ["in-transit", "on-hold"]

    def test_delete(self, store):
        assert store.delete("ship-ab12cd34") is True
        assert store.get("SHIP-AB12CD34") is None
        assert store.delete("SHIP-AB12CD34") is False

    def test_ids_continue_after_seeded_records(self):
        store = ShipmentStore()
        store.add(make_record(tracking_number="SHIP-AAAA1111", record_id=41))
        record = store.create(ShipmentCreate.model_validate(make_create_payload()))
        assert record.id == 42


class TestSeedFile:

    def test_load_list(self, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps([
            make_record_payload(tracking_number="SHIP-AAAA1111"),
            make_record_payload(tracking_number="SHIP-BBBB2222"),
        ]), encoding="utf-8")

        store = ShipmentStore()
        assert store.load_seed_file(path) == 2
        assert store.get("SHIP-BBBB2222") is not None

    def test_load_envelope(self, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps({"shipments": [make_record_payload()]}), encoding="utf-8")
        assert ShipmentStore().load_seed_file(path) == 1

    def test_invalid_record(self, tmp_path):
        path = tmp_path / "seed.json"
        path.write_text(json.dumps([{"trackingNumber": "SHIP-AAAA1111"}]), encoding="utf-8")
        with pytest.raises(ValidationError):
            ShipmentStore().load_seed_file(path)
