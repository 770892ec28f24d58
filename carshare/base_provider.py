"""
Base provider with common tariff-table and time-window helpers.
Provider-specific pricing classes inherit from this.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, time, timedelta
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from .errors import TariffFormatError, TripError
from .models import PriceOption, TimeLimitation, TripInput

logger = logging.getLogger(__name__)

_THOUSANDS_SEPARATORS = (" ", "\xa0", "\u202f")


def normalize_header(header: str) -> str:
    """Lower-case a column header and collapse runs of whitespace."""
    return " ".join(str(header).split()).lower()


def read_table(path: Path, column_aliases: Dict[str, str]) -> pd.DataFrame:
    """
    Read an exported TSV as strings with trimmed cells.

    Columns are renamed through ``column_aliases`` (normalized header -> field).
    Missing cells become empty strings.
    """
    try:
        df = pd.read_csv(path, sep="\t", dtype=str, keep_default_na=False, encoding="utf-8")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise TariffFormatError(f"{path.name}: cannot read table: {e}") from e

    renames = {}
    for column in df.columns:
        key = normalize_header(column)
        if key not in column_aliases:
            raise TariffFormatError(f"{path.name}: unexpected column {column!r}")
        renames[column] = column_aliases[key]
    df = df.rename(columns=renames)

    missing = sorted(set(column_aliases.values()) - set(df.columns))
    if missing:
        raise TariffFormatError(f"{path.name}: missing columns {missing}")

    for column in df.columns:
        df[column] = df[column].str.strip()
    logger.debug(f"Read {len(df)} rows from {path}")
    return df


def parse_czk(value: str) -> Optional[float]:
    """Parse a price with decimal comma and space thousands separators; '' -> None."""
    cleaned = (value or "").strip()
    if not cleaned:
        return None
    for sep in _THOUSANDS_SEPARATORS:
        cleaned = cleaned.replace(sep, "")
    cleaned = cleaned.replace(",", ".")
    try:
        return float(cleaned)
    except ValueError:
        raise TariffFormatError(f"not a price: {value!r}") from None


def minutes_in_window(begin: datetime, end: datetime, start: time, stop: time) -> float:
    """Minutes of [begin, end) that fall into the daily window [start, stop)."""
    total = timedelta()
    day = begin.date() - timedelta(days=1)
    while day <= end.date():
        window_start = datetime.combine(day, start)
        window_end = datetime.combine(day, stop)
        if window_end <= window_start:
            window_end += timedelta(days=1)
        overlap = min(end, window_end) - max(begin, window_start)
        if overlap > timedelta():
            total += overlap
        day += timedelta(days=1)
    return total.total_seconds() / 60


def fits_time_limitation(begin: datetime, end: datetime, limitation: TimeLimitation) -> bool:
    """True if the whole of [begin, end] lies in a single weekly window."""
    days_back = (begin.weekday() - limitation.start.weekday) % 7
    window_start = datetime.combine(begin.date() - timedelta(days=days_back), limitation.start.time)
    if window_start > begin:
        window_start -= timedelta(days=7)

    days_forward = (limitation.end.weekday - limitation.start.weekday) % 7
    window_end = datetime.combine(window_start.date() + timedelta(days=days_forward),
                                  limitation.end.time)
    if window_end <= window_start:
        window_end += timedelta(days=7)

    return window_start <= begin and end <= window_end


def validate_trip(trip: TripInput):
    if trip.end <= trip.begin:
        raise TripError(f"Trip end {trip.end} is not after its begin {trip.begin}")
    if trip.km < 0:
        raise TripError(f"Trip distance cannot be negative: {trip.km} km")


class BaseProvider(ABC):
    """Abstract base class for car-sharing providers."""

    # Subclasses should set these
    provider_name: str = ""
    provider_slug: str = ""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    @property
    def name(self) -> str:
        return self.provider_name

    @abstractmethod
    def calculate(self, trip: TripInput) -> List[PriceOption]:
        """Price a trip. Must be implemented by subclasses."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(enabled={self.enabled})"
