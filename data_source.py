"""
data_source.py
--------------
Fetch the public conveniences table and hand it to the loader.

The dataset is a CSV published by Calderdale Council. The default URL goes
through a conversion service that returns the CSV as a JSON array of arrays
of strings (row 0 is the header). read_csv_table() reads a CSV directly
instead, from a local path or a URL.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd
import requests

from toilet_data import (
    DecodeError,
    Facility,
    FetchError,
    SchemaError,
    ToiletDataError,
    parse_table,
)

logger = logging.getLogger(__name__)

SOURCE_CSV_URL = "https://dataworks.calderdale.gov.uk/download/20qn9/3ge/public-conveniences.csv"
CONVERTER_URL = "http://35.225.28.134:8080/api/csv/read"
DEFAULT_DATA_URL = f"{CONVERTER_URL}?filePath={SOURCE_CSV_URL}"

REQUEST_TIMEOUT = 30  # seconds


@dataclass
class FetchResult:
    """Outcome of one fetch-and-load cycle.

    facilities is empty whenever error is set.
    """
    facilities: List[Facility] = field(default_factory=list)
    error: Optional[ToiletDataError] = None
    skipped_rows: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> str:
        if isinstance(self.error, SchemaError):
            return "schema_error"
        if isinstance(self.error, DecodeError):
            return "decode_error"
        if isinstance(self.error, FetchError):
            return "fetch_error"
        return "ok" if self.error is None else "error"


def _validate_table(data) -> List[List[str]]:
    if not isinstance(data, list):
        raise DecodeError(f"Expected a JSON array of rows, got {type(data).__name__}")
    for i, row in enumerate(data):
        if not isinstance(row, list):
            raise DecodeError(f"Row {i} is not an array")
        if not all(isinstance(cell, str) for cell in row):
            raise DecodeError(f"Row {i} contains non-string cells")
    return data


def fetch_table(url: str = DEFAULT_DATA_URL, timeout: float = REQUEST_TIMEOUT) -> List[List[str]]:
    """
    GET the JSON table at url.

    Raises
    ------
    FetchError
        On connection problems, timeouts or a non-2xx response.
    DecodeError
        If the body is not JSON or not an array of arrays of strings.
    """
    logger.info("Fetching toilet data from %s", url)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(str(e)) from e

    try:
        data = response.json()
    except ValueError as e:
        raise DecodeError(f"Response is not valid JSON: {e}") from e

    return _validate_table(data)


def read_csv_table(path: str) -> List[List[str]]:
    """Read a CSV (path or URL) into a header-plus-rows table of strings."""
    try:
        df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False, engine="c")
    except pd.errors.ParserError:
        # ragged rows; keep rows longer than the header, cut to the header width
        width = pd.read_csv(path, header=None, dtype=str, keep_default_na=False, nrows=1).shape[1]
        df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False,
                         engine="python", on_bad_lines=lambda line: line[:width])
    return df.fillna("").values.tolist()


def fetch_facilities(url: str = DEFAULT_DATA_URL, timeout: float = REQUEST_TIMEOUT,
                     fetch=fetch_table) -> FetchResult:
    """Fetch and load in one step. Never raises ToiletDataError."""
    try:
        table = fetch(url, timeout=timeout)
    except ToiletDataError as e:
        logger.error("Could not fetch toilet data: %s", e)
        return FetchResult(error=e)

    report = parse_table(table)
    if report.schema_error is not None:
        return FetchResult(error=report.schema_error)
    return FetchResult(facilities=report.facilities, skipped_rows=report.skipped_rows)
