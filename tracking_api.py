"""
Tracking API module for remote shipment sources
Calls the shipments API and validates its responses
"""
import asyncio
import json
import logging
from typing import Any, List, Optional
from urllib.parse import quote

import aiohttp

from config import (
    MAX_RETRIES,
    RETRY_BACKOFF_FACTOR,
    RETRY_DELAY,
    SHIPMENTS_PATH,
    TRACKING_API_TIMEOUT,
)
from errors import UpstreamFailure
from models import ShipmentRecord, parse_shipment_payload, parse_shipments_payload

logger = logging.getLogger(__name__)

HEADERS = {
    "accept": "application/json, text/plain, */*",
}


def _retry_delay(retry_count: int) -> float:
    return RETRY_DELAY * (RETRY_BACKOFF_FACTOR ** retry_count)


async def _get_json(session: aiohttp.ClientSession, url: str, allow_not_found: bool = False,
                    retry_count: int = 0) -> Optional[Any]:
    """
    GET a JSON document, retrying transient failures with exponential backoff.

    Args:
        session: aiohttp session
        url: Absolute URL
        allow_not_found: Return None on HTTP 404 instead of failing

    Returns:
        Decoded JSON, or None for an allowed 404

    Raises:
        UpstreamFailure: on a non-retryable status or once retries are exhausted
    """
    try:
        async with session.get(
            url,
            headers=HEADERS,
            timeout=aiohttp.ClientTimeout(total=TRACKING_API_TIMEOUT)
        ) as response:
            if response.status == 404 and allow_not_found:
                return None

            if response.status != 200:
                # Error envelopes carry {success: false, message, error}; log the detail only
                text = await response.text()
                logger.error(f"Shipments API error for {url}: HTTP {response.status}: {text[:200]}")
                raise UpstreamFailure(f"HTTP {response.status} from shipments API",
                                      detail=f"HTTP {response.status}: {text[:1000]}")

            text = await response.text()
            if not text or not text.strip():
                raise ValueError("Empty response from API")
            return json.loads(text)

    except (json.JSONDecodeError, ValueError, asyncio.TimeoutError, aiohttp.ClientError) as e:
        if retry_count < MAX_RETRIES:
            delay = _retry_delay(retry_count)
            logger.warning(f"{type(e).__name__} fetching {url}, retrying in {delay}s (attempt {retry_count + 1}/{MAX_RETRIES})")
            await asyncio.sleep(delay)
            return await _get_json(session, url, allow_not_found, retry_count + 1)

        logger.error(f"Failed to fetch {url} after {MAX_RETRIES} retries: {type(e).__name__}: {e}")
        raise UpstreamFailure("Shipments API unavailable", detail=f"{type(e).__name__}: {e}") from e


async def fetch_shipments(session: aiohttp.ClientSession, base_url: str) -> List[ShipmentRecord]:
    """
    Fetch every shipment from ``{base_url}/my-route/shipments``

    Raises:
        UpstreamFailure: if the source failed or returned malformed data
    """
    url = f"{base_url.rstrip('/')}{SHIPMENTS_PATH}"
    payload = await _get_json(session, url)
    records = parse_shipments_payload(payload)
    logger.info(f"Fetched {len(records)} shipments from {url}")
    return records


async def fetch_shipment(session: aiohttp.ClientSession, base_url: str,
                         tracking_number: str) -> Optional[ShipmentRecord]:
    """
    Fetch one shipment by tracking number.

    Returns:
        The shipment, or None if the API answered 404
    """
    url = f"{base_url.rstrip('/')}{SHIPMENTS_PATH}/{quote(tracking_number.strip(), safe='')}"
    payload = await _get_json(session, url, allow_not_found=True)
    if payload is None:
        logger.info(f"Shipment {tracking_number} not found at {base_url}")
        return None
    return parse_shipment_payload(payload)
