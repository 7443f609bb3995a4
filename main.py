"""
FastAPI Application for Shipment Tracking
Serves the shipments data layer and the tracking lookup views
"""
import base64
import binascii
import logging
from typing import Optional, Sequence

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import FETCH_DELAY_SECONDS, LOG_FORMAT, LOG_LEVEL, SHIPMENTS_SEED_FILE, SHIPMENTS_SOURCE_URL
from errors import UpstreamFailure, ValidationError
from excel_processor import BulkLookupProcessor, BulkLookupReport
from lookup_resolver import LookupMode
from models import ShipmentCreate, ShipmentUpdate, TrackingEvent
from shipment_store import ShipmentStore
from status_normalizer import KNOWN_STATUSES
from tracking_service import HttpSource, ShipmentSource, StoreSource, track
from tracking_session import SessionState, TrackingSession

# Set up logging
logging.basicConfig(
    level=LOG_LEVEL,
    format=LOG_FORMAT
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Shipment Tracking Service",
    description="Look up shipments by tracking number and classify their status history",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

store = ShipmentStore()
if SHIPMENTS_SEED_FILE:
    store.load_seed_file(SHIPMENTS_SEED_FILE)


class FileUploadBase64(BaseModel):
    file: str  # base64 encoded file content
    filename: str  # original filename


def get_source() -> ShipmentSource:
    if SHIPMENTS_SOURCE_URL:
        return HttpSource(SHIPMENTS_SOURCE_URL)
    return StoreSource(store)


def check_statuses(events: Optional[Sequence[TrackingEvent]]) -> None:
    """Reject status codes outside the closed set"""
    for event in events or []:
        if event.status not in KNOWN_STATUSES:
            raise HTTPException(status_code=400, detail=f"Unknown tracking status: {event.status}")


def not_found_response() -> JSONResponse:
    return JSONResponse(
        content={"success": False, "message": "Shipment not found"},
        status_code=404
    )


def failure_response(message: str, error: Exception) -> JSONResponse:
    return JSONResponse(
        content={"success": False, "message": message, "error": str(error)},
        status_code=500
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Shipment Tracking Service",
        "version": "1.0.0",
        "endpoints": {
            "GET /my-route/shipments": "List all shipments",
            "GET /my-route/shipments/{trackingNumber}": "Get one shipment by tracking number",
            "GET /api/track?q=...&mode=exact|substring": "Tracking lookup with classified history",
            "POST /api/track/bulk": "Upload Excel/CSV file with a TrackingNumber column",
            "GET /docs": "API documentation"
        }
    }


@app.get("/my-route/shipments")
async def list_shipments():
    try:
        shipments = [record.to_wire() for record in store.list()]
        return {"success": True, "shipments": shipments}
    except Exception as e:
        logger.error(f"Error fetching shipments: {e}", exc_info=True)
        return failure_response("Failed to fetch shipments", e)


@app.get("/my-route/shipments/{tracking_number}")
async def get_shipment(tracking_number: str):
    try:
        record = store.get(tracking_number)
    except Exception as e:
        logger.error(f"Error fetching shipment {tracking_number}: {e}", exc_info=True)
        return failure_response("Failed to fetch shipment", e)

    if record is None:
        return not_found_response()
    return {"success": True, "shipment": record.to_wire()}


@app.post("/my-route/shipments", status_code=201)
async def create_shipment(data: ShipmentCreate):
    check_statuses(data.tracking_history)
    record = store.create(data)
    return {"success": True, "shipment": record.to_wire()}


@app.patch("/my-route/shipments/{tracking_number}")
async def update_shipment(tracking_number: str, changes: ShipmentUpdate):
    check_statuses(changes.tracking_history)
    record = store.update(tracking_number, changes)
    if record is None:
        return not_found_response()
    return {"success": True, "shipment": record.to_wire()}


@app.post("/my-route/shipments/{tracking_number}/history")
async def add_tracking_event(tracking_number: str, event: TrackingEvent):
    check_statuses([event])
    record = store.add_event(tracking_number, event)
    if record is None:
        return not_found_response()
    return {"success": True, "shipment": record.to_wire()}


@app.delete("/my-route/shipments/{tracking_number}")
async def delete_shipment(tracking_number: str):
    if not store.delete(tracking_number):
        return not_found_response()
    return {"success": True}


@app.get("/api/track")
async def track_shipment(
    q: str = Query("", description="Tracking number, complete or partial"),
    mode: LookupMode = Query(LookupMode.EXACT, description="exact or substring"),
):
    """
    Tracking page lookup.

    Returns the session snapshot: state, message and classified shipment views.
    Each request gets a fresh session, so recent searches are left to the client.
    """
    session = TrackingSession(mode=mode)
    await track(session, get_source(), q, delay=FETCH_DELAY_SECONDS)

    snapshot = session.snapshot(include_recent=False)
    if session.state == SessionState.ERRORED:
        status_code = 400 if session.error_kind == "validation" else 503
        return JSONResponse(content=snapshot, status_code=status_code)
    return snapshot


async def run_bulk_lookup(content: bytes, filename: str) -> BulkLookupReport:
    processor = BulkLookupProcessor(content, filename)
    try:
        processor.load()
        records = await get_source().fetch_all()
        report = processor.lookup(records)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.user_message)
    except UpstreamFailure as e:
        logger.error(f"Bulk lookup could not fetch shipments: {e.detail}")
        raise HTTPException(status_code=503, detail=e.user_message)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    except Exception as e:
        logger.error(f"Error processing file: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error processing file")

    logger.info(f"Bulk lookup for {filename}: {report.found_count} found, {report.problem_count} with problems")
    return report


@app.post("/api/track/bulk", response_model=BulkLookupReport)
async def bulk_track(file: UploadFile = File(..., description="Excel or CSV file to process")):
    """
    Look up every tracking number listed in an uploaded file

    Expected columns:
    - TrackingNumber
    """
    content = await file.read()
    return await run_bulk_lookup(content, file.filename)


@app.post("/api/track/bulk-base64", response_model=BulkLookupReport)
async def bulk_track_base64(data: FileUploadBase64):
    """
    Same as /api/track/bulk, with the file sent as base64 JSON
    """
    try:
        file_content = base64.b64decode(data.file, validate=True)
    except (binascii.Error, ValueError) as e:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid base64 encoding: {str(e)}"
        )
    return await run_bulk_lookup(file_content, data.filename)


if __name__ == "__main__":
    import uvicorn

    # Run the application
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
