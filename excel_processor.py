"""
Bulk tracking lookup from uploaded spreadsheets
"""
import io
import logging
from typing import List, Optional, Sequence

import pandas as pd
from pydantic import BaseModel

from config import BULK_ALLOWED_EXTENSIONS, BULK_TRACKING_COLUMN
from description_heuristic import needs_attention
from errors import ValidationError
from lookup_resolver import LookupMode, resolve
from models import ShipmentRecord
from shipment_store import validate_tracking_number_format
from status_normalizer import latest_status

logger = logging.getLogger(__name__)


class BulkLookupRow(BaseModel):
    """Lookup outcome for one spreadsheet row"""
    tracking_number: str
    found: bool
    # False only for blank cells, which are not looked up
    valid: bool = True
    # Matches the SHIP-XXXXXXXX format; informational, lookup does not depend on it
    well_formed: bool = False
    latest_status: Optional[str] = None
    latest_label: Optional[str] = None
    is_problem: bool = False
    needs_attention: bool = False


class BulkLookupReport(BaseModel):
    total_records: int
    valid_tracking_numbers: List[str]
    invalid_tracking_numbers: List[str]
    found_count: int
    problem_count: int
    rows: List[BulkLookupRow]


class BulkLookupProcessor:
    """Look up every tracking number listed in an Excel or CSV file"""

    def __init__(self, content: bytes, filename: str, column: str = BULK_TRACKING_COLUMN):
        """
        Initialize processor

        Args:
            content: Raw file bytes
            filename: Original filename, used to pick the reader
            column: Column holding tracking numbers
        """
        self.content = content
        self.filename = filename
        self.column = column
        self.df: Optional[pd.DataFrame] = None

    def load(self) -> pd.DataFrame:
        """
        Read the file into a DataFrame

        Raises:
            ValidationError: for unsupported files or a missing tracking number column
        """
        name = (self.filename or "").lower()
        if not name.endswith(BULK_ALLOWED_EXTENSIONS):
            raise ValidationError(
                f"Unsupported file type: {self.filename}",
                user_message="Unsupported file format. Please upload .xlsx, .xls, or .csv file",
            )

        buffer = io.BytesIO(self.content)
        if name.endswith(".csv"):
            df = pd.read_csv(buffer, dtype=str)
        else:
            df = pd.read_excel(buffer, dtype=str)
        logger.info(f"Loaded {len(df)} rows from {self.filename}")

        if self.column not in df.columns:
            raise ValidationError(
                f"'{self.column}' column not found. Columns: {list(df.columns)}",
                user_message=f"The file must have a '{self.column}' column.",
            )

        self.df = df
        return df

    def get_tracking_numbers(self) -> List[str]:
        if self.df is None:
            self.load()
        return self.df[self.column].fillna("").astype(str).str.strip().tolist()

    def lookup(self, records: Sequence[ShipmentRecord]) -> BulkLookupReport:
        """
        Resolve each listed tracking number in exact mode against a record snapshot.

        Every input row yields one report row, in input order. Blank cells are
        reported as invalid and not looked up. Any other value goes to the
        resolver, which decides whether it exists; the SHIP-XXXXXXXX format
        is only reported via ``well_formed``.
        """
        tracking_numbers = self.get_tracking_numbers()
        valid = [tn for tn in tracking_numbers if tn]
        invalid = [tn for tn in tracking_numbers if not tn]
        logger.info(f"Total tracking numbers: {len(tracking_numbers)}, Valid: {len(valid)}, Invalid: {len(invalid)}")

        rows = []
        for tracking_number in tracking_numbers:
            if not tracking_number:
                rows.append(BulkLookupRow(tracking_number=tracking_number, found=False, valid=False))
                continue

            well_formed = validate_tracking_number_format(tracking_number.upper())
            result = resolve(tracking_number, records, LookupMode.EXACT)
            if not result.found:
                rows.append(BulkLookupRow(tracking_number=tracking_number, found=False, well_formed=well_formed))
                continue

            record = result.records[0]
            latest = latest_status(record.tracking_history)
            rows.append(BulkLookupRow(
                tracking_number=record.tracking_number,
                found=True,
                well_formed=well_formed,
                latest_status=latest.status if latest else None,
                latest_label=latest.normalized_label if latest else None,
                is_problem=latest.is_problem if latest else False,
                needs_attention=needs_attention(record.shipment_details.description),
            ))

        return BulkLookupReport(
            total_records=len(tracking_numbers),
            valid_tracking_numbers=valid,
            invalid_tracking_numbers=invalid,
            found_count=sum(1 for row in rows if row.found),
            problem_count=sum(1 for row in rows if row.is_problem),
            rows=rows,
        )
