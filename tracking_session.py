"""
State holder for one tracking page.

    IDLE -> submit_query -> LOADING -> receive_results -> LOADED | EMPTY
                                    -> receive_error   -> ERRORED
    submit_query with a blank query -> ERRORED (validation)

Each submit_query returns a token. Results or errors carrying an older
token are dropped, so the last submitted query wins.
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from config import DEFAULT_LOOKUP_MODE, NOT_FOUND_MESSAGE
from errors import TrackingError, UpstreamFailure, ValidationError
from lookup_resolver import LookupMode, normalize_query, resolve
from models import ShipmentRecord
from recent_searches import RecentSearches
from shipment_view import ShipmentView, build_shipment_view

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    EMPTY = "empty"
    ERRORED = "errored"


class TrackingSession:
    """Search text, loading flag, results and recent searches for one user"""

    def __init__(self, mode: Union[LookupMode, str] = DEFAULT_LOOKUP_MODE,
                 recent: Optional[RecentSearches] = None):
        self.mode = LookupMode(mode)
        self.recent = recent if recent is not None else RecentSearches()
        self.state = SessionState.IDLE
        self.query = ""
        self.results: List[ShipmentRecord] = []
        self.message: Optional[str] = None
        self.error_kind: Optional[str] = None
        self._token = 0

    def submit_query(self, query: str, mode: Optional[Union[LookupMode, str]] = None) -> int:
        """
        Start a lookup.

        Returns:
            Token to pass to receive_results/receive_error, or 0 if the query
            was rejected
        """
        if mode is not None:
            self.mode = LookupMode(mode)

        self._token += 1
        self.results = []

        try:
            self.query = normalize_query(query)
        except ValidationError as e:
            self.query = ""
            self._fail("validation", e)
            return 0

        self.recent.add(self.query)
        self.state = SessionState.LOADING
        self.message = None
        self.error_kind = None
        return self._token

    def receive_results(self, records: Sequence[ShipmentRecord], token: int) -> bool:
        """
        Apply a fetched record snapshot to the pending query.

        Returns:
            False if the token is stale and the results were dropped
        """
        if not self._is_current(token):
            return False

        result = resolve(self.query, records, self.mode)
        self.results = result.records
        if result.found:
            self.state = SessionState.LOADED
            self.message = None
        else:
            self.state = SessionState.EMPTY
            self.message = NOT_FOUND_MESSAGE
        return True

    def receive_error(self, error: Exception, token: int) -> bool:
        if not self._is_current(token):
            return False

        if not isinstance(error, TrackingError):
            error = UpstreamFailure("Unexpected error while fetching shipments", detail=repr(error))
        kind = "validation" if isinstance(error, ValidationError) else "upstream"
        self._fail(kind, error)
        return True

    def _is_current(self, token: int) -> bool:
        if token != self._token or self.state != SessionState.LOADING:
            logger.info(f"Dropping stale response for token {token} (current {self._token})")
            return False
        return True

    def _fail(self, kind: str, error: TrackingError) -> None:
        self.state = SessionState.ERRORED
        self.error_kind = kind
        self.message = error.user_message
        self.results = []

    def views(self) -> List[ShipmentView]:
        return [build_shipment_view(record) for record in self.results]

    def snapshot(self, include_recent: bool = True) -> Dict[str, Any]:
        """Plain data for rendering. Stateless callers leave out the recent searches."""
        snapshot = {
            "state": self.state.value,
            "query": self.query,
            "mode": self.mode.value,
            "message": self.message,
            "errorKind": self.error_kind,
            "results": [view.to_wire() for view in self.views()],
        }
        if include_recent:
            snapshot["recentSearches"] = self.recent.items()
        return snapshot
