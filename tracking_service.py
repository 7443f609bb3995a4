"""
Drives a TrackingSession through one lookup against a shipment source
"""
import asyncio
import logging
from typing import List, Optional, Union

import aiohttp

from config import FETCH_DELAY_SECONDS
from errors import UpstreamFailure
from lookup_resolver import LookupMode
from models import ShipmentRecord
from shipment_store import ShipmentStore
from tracking_api import fetch_shipments
from tracking_session import TrackingSession

logger = logging.getLogger(__name__)


class ShipmentSource:
    """Returns a fresh snapshot of all shipments on every call"""

    name = "source"

    async def fetch_all(self) -> List[ShipmentRecord]:
        raise NotImplementedError


class StoreSource(ShipmentSource):
    name = "store"

    def __init__(self, store: ShipmentStore):
        self.store = store

    async def fetch_all(self) -> List[ShipmentRecord]:
        return self.store.list()


class HttpSource(ShipmentSource):
    """Remote shipments API. Opens a short-lived aiohttp session per fetch unless one is given."""

    name = "http"

    def __init__(self, base_url: str, session: Optional[aiohttp.ClientSession] = None):
        self.base_url = base_url
        self.session = session

    async def fetch_all(self) -> List[ShipmentRecord]:
        if self.session is not None:
            return await fetch_shipments(self.session, self.base_url)
        async with aiohttp.ClientSession() as session:
            return await fetch_shipments(session, self.base_url)


async def track(session: TrackingSession, source: ShipmentSource, query: str,
                mode: Optional[Union[LookupMode, str]] = None,
                delay: float = FETCH_DELAY_SECONDS) -> TrackingSession:
    """
    Submit a query, fetch a snapshot and feed the outcome back into the session.

    Args:
        session: State holder to update
        source: Where the shipments come from
        query: User input
        mode: Lookup mode override
        delay: Seconds to stay in LOADING before fetching

    Returns:
        The same session, in LOADED, EMPTY or ERRORED state (or LOADING if a
        newer query superseded this one)
    """
    token = session.submit_query(query, mode)
    if not token:
        return session

    if delay > 0:
        await asyncio.sleep(delay)

    try:
        records = await source.fetch_all()
    except UpstreamFailure as e:
        logger.error(f"Fetching shipments from {source.name} failed: {e.detail}")
        session.receive_error(e, token)
        return session
    except Exception as e:
        logger.error(f"Unexpected error fetching shipments from {source.name}: {e}", exc_info=True)
        session.receive_error(e, token)
        return session

    session.receive_results(records, token)
    return session
