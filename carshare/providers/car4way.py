"""
car4way tariff loader and trip pricing.

Reads the three tables exported by hand from the car4way price list
(basic.tsv, active.tsv, business.tsv) and prices trips against them.

Exported table format (one row per item, one price column per car type):
- "Denní: 6:00 - 20:00 Po-Ne"      per-minute day rate
- "Noční: 20:00 - 6:00 Po-Ne"      per-minute night rate
- "Výhodné balíčky"                section heading, no prices
- "3 hodiny + 50 km", "2 dny + 400 km", "Víkend + 200 km"   packages
- "Km nad rámec balíčků"           single value: price per km above package
- "Letiště Praha - příjezd/výjezd" single value: airport fees
"""

import logging
import math
import re
from datetime import time, timedelta
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .. import config
from ..base_provider import (
    BaseProvider,
    fits_time_limitation,
    minutes_in_window,
    normalize_header,
    parse_czk,
    read_table,
    validate_trip,
)
from ..errors import TariffFormatError
from ..models import (
    CarType,
    Package,
    PerCarTariff,
    PerMinuteTariff,
    PriceOption,
    Tariff,
    TariffKind,
    TimeLimitation,
    TripInput,
    WeekdayTime,
)

logger = logging.getLogger(__name__)

# Keep the times and the patterns in sync
DAY_START = time(6, 0)
NIGHT_START = time(20, 0)
WEEKEND_START = WeekdayTime(weekday=4, time=time(16, 0))  # Friday
WEEKEND_END = WeekdayTime(weekday=0, time=time(10, 0))  # Monday
WEEKEND_KM = 200.0

DAY_MINUTE_TARIFF_RE = re.compile(r"Denní: 6:00 - 20:00 Po-Ne")
NIGHT_MINUTE_TARIFF_RE = re.compile(r"Noční: 20:00 - 6:00 Po-Ne")
HOUR_PACKAGE_RE = re.compile(r"([0-9]+) hodiny? \+ ([0-9]+) km")
DAY_PACKAGE_RE = re.compile(r"([0-9]+) (?:den|dn[yí]) \+ ([0-9]+) km")

PACKAGES_HEADING = "Výhodné balíčky"
WEEKEND_PACKAGE = "Víkend + 200 km"
PER_KM_ITEM = "Km nad rámec balíčků"
AIRPORT_ENTER_ITEM = "Letiště Praha - příjezd"
AIRPORT_LEAVE_ITEM = "Letiště Praha - výjezd"

PRICE_COLUMNS = {
    CarType.LEGEND: "legend",
    CarType.FANCY: "fancy",
    CarType.BOSS: "boss",
}

# Normalized exported header -> field name
COLUMN_ALIASES = {
    normalize_header("Minutový tarif  (km v ceně)"): "item",
    normalize_header("Legend Fabia"): "legend",
    normalize_header("Fancy  Scala, Karoq, Octavia, Caddy Van"): "fancy",
    normalize_header("Boss Superb / Kodiaq"): "boss",
    "item": "item",
    "legend": "legend",
    "fancy": "fancy",
    "boss": "boss",
}


class _TariffBuilder:
    """Collects rows of one exported table into a Tariff."""

    def __init__(self, kind: TariffKind, source: str):
        self.kind = kind
        self.source = source
        self.day_tariff: Dict[CarType, PerMinuteTariff] = {}
        self.night_tariff: Dict[CarType, PerMinuteTariff] = {}
        self.packages: Dict[CarType, List[Package]] = {car_type: [] for car_type in CarType}
        self.per_km_czk: Optional[float] = None
        self.airport_enter_czk: Optional[float] = None
        self.airport_leave_czk: Optional[float] = None

    def add_row(self, row: dict):
        item = row["item"]
        logger.debug(f"{self.source}: {row}")

        if DAY_MINUTE_TARIFF_RE.search(item):
            self._minute_tariff(row, self.day_tariff, DAY_START, NIGHT_START)
        elif NIGHT_MINUTE_TARIFF_RE.search(item):
            self._minute_tariff(row, self.night_tariff, NIGHT_START, DAY_START)
        elif item == PACKAGES_HEADING:
            pass
        elif HOUR_PACKAGE_RE.search(item):
            match = HOUR_PACKAGE_RE.search(item)
            self._package(row, timedelta(hours=int(match.group(1))), float(match.group(2)))
        elif DAY_PACKAGE_RE.search(item):
            match = DAY_PACKAGE_RE.search(item)
            self._package(row, timedelta(days=int(match.group(1))), float(match.group(2)))
        elif item == WEEKEND_PACKAGE:
            # Friday 16:00 -> Monday 10:00
            self._package(
                row,
                timedelta(hours=8 + 24 + 24 + 10),
                WEEKEND_KM,
                TimeLimitation(start=WEEKEND_START, end=WEEKEND_END),
            )
        elif item == PER_KM_ITEM:
            self.per_km_czk = self._only(row, "per km price")
        elif item == AIRPORT_ENTER_ITEM:
            self.airport_enter_czk = self._only(row, "airport entry")
        elif item == AIRPORT_LEAVE_ITEM:
            self.airport_leave_czk = self._only(row, "airport leave")
        else:
            raise TariffFormatError(f"{self.source}: the item {item!r} doesn't match any pattern")

    def _prices(self, row: dict) -> Dict[CarType, Optional[float]]:
        prices = {}
        for car_type, column in PRICE_COLUMNS.items():
            try:
                prices[car_type] = parse_czk(row[column])
            except TariffFormatError as e:
                raise TariffFormatError(f"{self.source}: item {row['item']!r}: {e}") from None
        return prices

    def _all_prices(self, row: dict) -> Dict[CarType, float]:
        prices = self._prices(row)
        if any(czk is None for czk in prices.values()):
            raise TariffFormatError(
                f"{self.source}: all columns should have a valid price for item {row['item']!r}"
            )
        return prices

    def _only(self, row: dict, what: str) -> float:
        values = [czk for czk in self._prices(row).values() if czk is not None]
        if len(values) != 1:
            raise TariffFormatError(
                f"{self.source}: expected exactly one value for {what} "
                f"(item {row['item']!r}), got {len(values)}"
            )
        return values[0]

    def _minute_tariff(self, row: dict, target: Dict[CarType, PerMinuteTariff],
                       start: time, end: time):
        for car_type, czk in self._all_prices(row).items():
            target[car_type] = PerMinuteTariff(start=start, end=end, per_minute_czk=czk)

    def _package(self, row: dict, duration: timedelta, kilometers: float,
                 time_limitation: Optional[TimeLimitation] = None):
        for car_type, czk in self._all_prices(row).items():
            self.packages[car_type].append(Package(
                name=row["item"],
                duration=duration,
                kilometers=kilometers,
                czk=czk,
                time_limitation=time_limitation,
            ))

    def build(self) -> Tariff:
        per_car_type = {}
        for car_type in CarType:
            if car_type not in self.day_tariff:
                raise TariffFormatError(f"{self.source}: no day minute tariff price for {car_type}")
            if car_type not in self.night_tariff:
                raise TariffFormatError(f"{self.source}: no night minute tariff price for {car_type}")
            per_car_type[car_type] = PerCarTariff(
                per_minute=[self.day_tariff[car_type], self.night_tariff[car_type]],
                packages=self.packages[car_type],
            )

        for value, what in [
            (self.per_km_czk, "per km price"),
            (self.airport_enter_czk, "czk to enter airport"),
            (self.airport_leave_czk, "czk to leave airport"),
        ]:
            if value is None:
                raise TariffFormatError(f"{self.source}: {what} not parsed")

        return Tariff(
            kind=self.kind,
            per_car_type=per_car_type,
            per_km_czk=self.per_km_czk,
            airport_enter_czk=self.airport_enter_czk,
            airport_leave_czk=self.airport_leave_czk,
        )


def load_tariff(kind: TariffKind, path: Path) -> Tariff:
    """Load one exported tariff table."""
    path = Path(path)
    logger.debug(f"Loading {kind} tariff from {path}")
    builder = _TariffBuilder(kind, source=path.name)
    for row in read_table(path, COLUMN_ALIASES).to_dict(orient="records"):
        builder.add_row(row)
    return builder.build()


def load_tariffs(data_dir: Optional[Path] = None) -> Dict[TariffKind, Tariff]:
    """Load all three tariffs; the bundled directory is loaded once per process."""
    if data_dir is None:
        return _load_bundled_tariffs()
    return _load_tariff_dir(Path(data_dir))


@lru_cache(maxsize=1)
def _load_bundled_tariffs() -> Dict[TariffKind, Tariff]:
    return _load_tariff_dir(config.CAR4WAY_DATA_DIR)


def _load_tariff_dir(data_dir: Path) -> Dict[TariffKind, Tariff]:
    tariffs = {}
    for kind in TariffKind:
        tariffs[kind] = load_tariff(kind, data_dir / kind.file_name)
    logger.info(f"Loaded {len(tariffs)} car4way tariffs from {data_dir}")
    return tariffs


class Car4wayProvider(BaseProvider):
    provider_name = "car4way"
    provider_slug = "car4way"

    def __init__(self, tariff: Optional[TariffKind] = None,
                 car_types: Optional[Iterable[CarType]] = None,
                 enabled: bool = True,
                 tariffs: Optional[Dict[TariffKind, Tariff]] = None):
        super().__init__(enabled=enabled)
        self.tariff = tariff or TariffKind.default()
        self.car_types = set(CarType) if car_types is None else set(car_types)
        self._tariffs = tariffs

    @property
    def tariffs(self) -> Dict[TariffKind, Tariff]:
        if self._tariffs is None:
            self._tariffs = load_tariffs()
        return self._tariffs

    def calculate(self, trip: TripInput) -> List[PriceOption]:
        validate_trip(trip)
        tariff = self.tariffs[self.tariff]
        fees = 0.0
        if trip.airport_enter:
            fees += tariff.airport_enter_czk
        if trip.airport_leave:
            fees += tariff.airport_leave_czk

        options = []
        for car_type in sorted(self.car_types):
            per_car = tariff.per_car_type[car_type]
            options.append(self._per_minute_option(trip, tariff, car_type, per_car, fees))
            for package in per_car.packages:
                option = self._package_option(trip, tariff, car_type, package, fees)
                if option is not None:
                    options.append(option)
        return options

    def _option(self, tariff: Tariff, car_type: CarType, option: str, czk: float,
                notes: str = "") -> PriceOption:
        return PriceOption(
            provider=self.provider_name,
            tariff=str(tariff.kind),
            car_type=str(car_type),
            option=option,
            czk=round(czk, 2),
            notes=notes,
        )

    def _per_minute_option(self, trip: TripInput, tariff: Tariff, car_type: CarType,
                           per_car: PerCarTariff, fees: float) -> PriceOption:
        czk = fees
        parts = []
        for rate in per_car.per_minute:
            minutes = minutes_in_window(trip.begin, trip.end, rate.start, rate.end)
            if minutes:
                czk += minutes * rate.per_minute_czk
                parts.append(f"{minutes:g} min x {rate.per_minute_czk:g}")
        return self._option(tariff, car_type, "per-minute", czk, notes=", ".join(parts))

    def _package_option(self, trip: TripInput, tariff: Tariff, car_type: CarType,
                        package: Package, fees: float) -> Optional[PriceOption]:
        if package.time_limitation is not None:
            if not fits_time_limitation(trip.begin, trip.end, package.time_limitation):
                return None
            count = 1
        else:
            count = max(1, math.ceil(trip.duration / package.duration))

        extra_km = max(0.0, trip.km - count * package.kilometers)
        czk = count * package.czk + extra_km * tariff.per_km_czk + fees
        notes = f"{count}x {package.name}"
        if extra_km:
            notes += f", {extra_km:g} km x {tariff.per_km_czk:g}"
        return self._option(tariff, car_type, package.name, czk, notes=notes)
