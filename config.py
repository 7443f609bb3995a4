"""
Configuration settings for the Shipment Tracking Service
"""
import os


# Local shipment store seed data (JSON list or {"shipments": [...]})
SHIPMENTS_SEED_FILE = os.getenv("SHIPMENTS_SEED_FILE", "")

# Remote shipments API. When set, tracking lookups fetch from it instead of the local store
SHIPMENTS_SOURCE_URL = os.getenv("SHIPMENTS_SOURCE_URL", "")

# Delay before the shipment collection is fetched (drives the loading state only)
FETCH_DELAY_SECONDS = float(os.getenv("FETCH_DELAY_SECONDS", "0"))

# Tracking API Configuration
TRACKING_API_TIMEOUT = int(os.getenv("TRACKING_API_TIMEOUT", "30"))  # seconds
SHIPMENTS_PATH = "/my-route/shipments"

# API Retry Configuration
MAX_RETRIES = 3  # Maximum number of retry attempts for failed API calls
RETRY_DELAY = 1  # Initial delay in seconds before retry (will use exponential backoff)
RETRY_BACKOFF_FACTOR = 2  # Multiply delay by this factor on each retry

# Tracking number format: SHIP-XXXXXXXX
TRACKING_NUMBER_PREFIX = "SHIP-"
TRACKING_CODE_LENGTH = 8
TRACKING_NUMBER_MAX_ATTEMPTS = 100

# Lookup
DEFAULT_LOOKUP_MODE = os.getenv("DEFAULT_LOOKUP_MODE", "exact")
RECENT_SEARCHES_CAPACITY = 5

# Free-text description keywords that flag a shipment for attention
ATTENTION_PATTERNS = ("hold", "customs", "lost", "delay")
LEGACY_ATTENTION_PATTERNS = ("hold",)

# User-facing messages
EMPTY_QUERY_MESSAGE = "Please enter a tracking number."
NOT_FOUND_MESSAGE = "No shipments match that tracking number."
UPSTREAM_FAILURE_MESSAGE = "We couldn't load shipment data right now. Please try again later."

# Bulk lookup spreadsheet column
BULK_TRACKING_COLUMN = "TrackingNumber"
BULK_ALLOWED_EXTENSIONS = (".xlsx", ".xls", ".csv")

# Logging settings
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
