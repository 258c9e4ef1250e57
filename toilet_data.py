"""
toilet_data.py
--------------
Turn the public conveniences table into typed Facility records.

Data assumptions
- The table is a list of rows, each row a list of text cells. Row 0 is the
  header; every other row is data. This is the shape the CSV conversion
  service returns (and what data_source.read_csv_table produces).
- Columns used: Location, Latitude, Longitude, Opening hours, Accessible,
  Baby change and, when present, Charge amount.
- Lat/Lon are WGS84 coordinates (decimal degrees).

Usage
-----
from toilet_data import load

toilets = load(table)
print(toilets[0].name, toilets[0].latitude, toilets[0].longitude)
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

# Header name -> Facility field. Matching is exact and case-sensitive.
REQUIRED_COLUMNS = {
    "name": "Location",
    "latitude": "Latitude",
    "longitude": "Longitude",
    "opening_hours": "Opening hours",
    "accessibility_info": "Accessible",
    "baby_change": "Baby change",
}
OPTIONAL_COLUMNS = {
    "charge_amount": "Charge amount",
}


class ToiletDataError(Exception):
    """Base class for failures that leave a cycle with no facilities."""


class FetchError(ToiletDataError):
    """Network failure or non-success response from the data source."""


class DecodeError(ToiletDataError):
    """Response body is not JSON shaped as an array of arrays of strings."""


class SchemaError(ToiletDataError):
    """The header row is missing one or more required columns."""

    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required column(s): {', '.join(self.missing)}")


@dataclass(frozen=True)
class Facility:
    name: str
    latitude: float
    longitude: float
    opening_hours: str
    accessibility_info: str
    baby_change: str
    charge_amount: str = ""


@dataclass(frozen=True)
class Schema:
    """Column positions resolved from one header row.

    Optional columns that are not in the header map to None.
    """
    indices: Dict[str, int]
    optional: Dict[str, Optional[int]]

    @property
    def min_row_length(self) -> int:
        return max(self.indices.values()) + 1


@dataclass
class LoadReport:
    facilities: List[Facility] = field(default_factory=list)
    skipped_rows: int = 0
    schema_error: Optional[SchemaError] = None


def resolve_schema(header: Sequence[str]) -> Schema:
    """Map required and optional column names to their header positions.

    The first cell equal to a column name wins. Raises SchemaError naming
    every required column that is absent.
    """
    header = list(header)
    indices: Dict[str, int] = {}
    missing = []
    for attr, column in REQUIRED_COLUMNS.items():
        if column in header:
            indices[attr] = header.index(column)
        else:
            missing.append(column)
    if missing:
        raise SchemaError(missing)

    optional = {
        attr: (header.index(column) if column in header else None)
        for attr, column in OPTIONAL_COLUMNS.items()
    }
    return Schema(indices=indices, optional=optional)


def _parse_coordinate(text: str) -> Optional[float]:
    # bare numbers only: no digit separators, no padding
    if not isinstance(text, str) or "_" in text or text != text.strip():
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def _is_blank(row: Sequence[str]) -> bool:
    return all(not str(cell).strip() for cell in row)


def _row_to_facility(row: Sequence[str], schema: Schema) -> Optional[Facility]:
    if len(row) < schema.min_row_length or _is_blank(row):
        return None

    idx = schema.indices
    lat = _parse_coordinate(row[idx["latitude"]])
    lon = _parse_coordinate(row[idx["longitude"]])
    if lat is None or lon is None:
        return None

    charge_idx = schema.optional["charge_amount"]
    charge = row[charge_idx] if charge_idx is not None and charge_idx < len(row) else ""

    return Facility(
        name               = row[idx["name"]],
        latitude           = lat,
        longitude          = lon,
        opening_hours      = row[idx["opening_hours"]],
        accessibility_info = row[idx["accessibility_info"]],
        baby_change        = row[idx["baby_change"]],
        charge_amount      = charge,
    )


def parse_table(raw_table: Sequence[Sequence[str]]) -> LoadReport:
    """Parse a header-plus-rows table, keeping a count of what was dropped."""
    report = LoadReport()
    if not raw_table:
        report.schema_error = SchemaError(list(REQUIRED_COLUMNS.values()))
        logger.warning("Table is empty; no header row to resolve")
        return report

    try:
        schema = resolve_schema(raw_table[0])
    except SchemaError as e:
        logger.warning("%s", e)
        report.schema_error = e
        return report

    for row in raw_table[1:]:
        facility = _row_to_facility(row, schema)
        if facility is None:
            report.skipped_rows += 1
            continue
        report.facilities.append(facility)

    if report.skipped_rows:
        logger.debug("Skipped %d row(s) without usable coordinates", report.skipped_rows)
    logger.info("Loaded %d facilities", len(report.facilities))
    return report


def load(raw_table: Sequence[Sequence[str]]) -> List[Facility]:
    """Return one Facility per usable data row, in input order.

    A header missing any required column yields an empty list rather than
    an exception.
    """
    return parse_table(raw_table).facilities
