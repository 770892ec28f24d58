"""
Data models for tariffs, trips and price quotes.
Tariff objects are built once from the exported tables and never mutated.
"""

import math
from dataclasses import dataclass, field, asdict
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Dict, List, Optional

from .config import DEFAULT_TRIP_KM, DEFAULT_TRIP_MINUTES, TRIP_START_ROUNDING_MINUTES


class TariffKind(Enum):
    """Tariff tiers; the value doubles as the exported file stem."""

    BASIC = "basic"
    ACTIVE = "active"
    BUSINESS = "business"

    @classmethod
    def default(cls) -> "TariffKind":
        return cls.BASIC

    @property
    def file_name(self) -> str:
        return f"{self.value}.tsv"

    def __str__(self) -> str:
        return self.value


class CarType(Enum):
    """Car categories priced separately in every tariff."""

    LEGEND = "Legend"
    FANCY = "Fancy"
    BOSS = "Boss"

    @property
    def order(self) -> int:
        return list(CarType).index(self)

    def __lt__(self, other):
        if not isinstance(other, CarType):
            return NotImplemented
        return self.order < other.order

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PerMinuteTariff:
    """Per-minute rate valid daily between start and end (wraps past midnight)."""
    start: time
    end: time
    per_minute_czk: float

    @property
    def wraps_midnight(self) -> bool:
        return self.end <= self.start


@dataclass(frozen=True)
class WeekdayTime:
    weekday: int  # 0 = Monday ... 6 = Sunday
    time: time


@dataclass(frozen=True)
class TimeLimitation:
    """Weekly window a package may be used in, e.g. Friday 16:00 to Monday 10:00."""
    start: WeekdayTime
    end: WeekdayTime


@dataclass(frozen=True)
class Package:
    name: str
    duration: timedelta
    kilometers: float
    czk: float
    time_limitation: Optional[TimeLimitation] = None


@dataclass
class PerCarTariff:
    per_minute: List[PerMinuteTariff] = field(default_factory=list)
    packages: List[Package] = field(default_factory=list)


@dataclass
class Tariff:
    kind: TariffKind
    per_car_type: Dict[CarType, PerCarTariff]
    per_km_czk: float
    airport_enter_czk: float
    airport_leave_czk: float


@dataclass
class TripInput:
    """A planned trip: distance and the rental window."""
    km: float
    begin: datetime
    end: datetime
    airport_enter: bool = False
    airport_leave: bool = False

    @classmethod
    def default(cls, now: Optional[datetime] = None) -> "TripInput":
        """Next 5-minute mark from now, one hour long, 10 km."""
        now = now or datetime.now()
        step = TRIP_START_ROUNDING_MINUTES * 60
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        seconds = (now - midnight).total_seconds()
        begin = midnight + timedelta(seconds=math.ceil(seconds / step) * step)
        return cls(
            km=DEFAULT_TRIP_KM,
            begin=begin,
            end=begin + timedelta(minutes=DEFAULT_TRIP_MINUTES),
        )

    @property
    def duration(self) -> timedelta:
        return self.end - self.begin


@dataclass
class PriceOption:
    """One way of paying for a trip with a given provider and car type."""
    provider: str
    tariff: str
    car_type: str
    option: str
    czk: float
    notes: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class SourceInfo:
    """Provenance information for a downloaded vendor document."""
    url: str
    doc_type: str
    provider: str
    local_path: str = ""
    sha256: str = ""
    download_date: str = ""
    file_size_bytes: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CheckResult:
    check: str
    ok: bool
    detail: str = ""

    def to_dict(self) -> dict:
        return asdict(self)
