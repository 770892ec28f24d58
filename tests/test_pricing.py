from datetime import datetime, time

import pytest

from carshare.base_provider import fits_time_limitation, minutes_in_window
from carshare.errors import TripError
from carshare.models import CarType, TariffKind, TimeLimitation, TripInput
from carshare.providers.car4way import WEEKEND_END, WEEKEND_START, Car4wayProvider

WEEKEND = TimeLimitation(start=WEEKEND_START, end=WEEKEND_END)


@pytest.fixture
def legend(bundled_tariffs):
    return Car4wayProvider(car_types=[CarType.LEGEND], tariffs=bundled_tariffs)


def _by_option(options):
    return {o.option: o for o in options}


def test_minutes_in_window_spans_days() -> None:
    begin = datetime(2026, 10, 12, 0, 0)
    end = datetime(2026, 10, 14, 0, 0)
    assert minutes_in_window(begin, end, time(6), time(20)) == 2 * 14 * 60
    assert minutes_in_window(begin, end, time(20), time(6)) == 20 * 60


def test_minutes_in_window_previous_evening() -> None:
    begin = datetime(2026, 10, 14, 2, 0)
    end = datetime(2026, 10, 14, 3, 30)
    assert minutes_in_window(begin, end, time(20), time(6)) == 90
    assert minutes_in_window(begin, end, time(6), time(20)) == 0


def test_one_hour_daytime_trip(legend) -> None:
    trip = TripInput(km=10, begin=datetime(2026, 10, 14, 10, 0), end=datetime(2026, 10, 14, 11, 0))
    options = _by_option(legend.calculate(trip))
    assert options["per-minute"].czk == 414.0
    assert options["3 hodiny + 50 km"].czk == 449.0
    assert options["6 hodin + 100 km"].czk == 699.0
    assert options["1 den + 150 km"].czk == 999.0
    assert options["2 dny + 300 km"].czk == 1899.0
    # Wednesday: no weekend package
    assert "Víkend + 200 km" not in options
    assert all(o.car_type == "Legend" and o.tariff == "basic" for o in options.values())


def test_trip_across_night_start(legend) -> None:
    trip = TripInput(km=5, begin=datetime(2026, 10, 14, 19, 30), end=datetime(2026, 10, 14, 21, 0))
    assert _by_option(legend.calculate(trip))["per-minute"].czk == 501.0


def test_trip_across_midnight(legend) -> None:
    trip = TripInput(km=5, begin=datetime(2026, 10, 14, 23, 0), end=datetime(2026, 10, 15, 7, 0))
    assert _by_option(legend.calculate(trip))["per-minute"].czk == 2472.0


def test_package_count_and_overage(legend) -> None:
    trip = TripInput(km=120, begin=datetime(2026, 10, 14, 8, 0), end=datetime(2026, 10, 14, 15, 0))
    options = _by_option(legend.calculate(trip))
    assert options["3 hodiny + 50 km"].czk == 3 * 449.0
    assert options["3 hodiny + 50 km"].notes.startswith("3x")
    assert options["6 hodin + 100 km"].czk == 2 * 699.0
    assert options["1 den + 150 km"].czk == 999.0

    trip.km = 200
    options = _by_option(legend.calculate(trip))
    assert options["1 den + 150 km"].czk == 1294.0
    assert "50 km x 5.9" in options["1 den + 150 km"].notes


def test_weekend_package_inside_window(legend) -> None:
    trip = TripInput(km=250, begin=datetime(2026, 10, 16, 17, 0), end=datetime(2026, 10, 18, 20, 0))
    options = _by_option(legend.calculate(trip))
    assert options["Víkend + 200 km"].czk == 1785.0


def test_weekend_package_outside_window(legend) -> None:
    early = TripInput(km=10, begin=datetime(2026, 10, 16, 15, 0), end=datetime(2026, 10, 17, 12, 0))
    late = TripInput(km=10, begin=datetime(2026, 10, 17, 9, 0), end=datetime(2026, 10, 19, 11, 0))
    assert "Víkend + 200 km" not in _by_option(legend.calculate(early))
    assert "Víkend + 200 km" not in _by_option(legend.calculate(late))


def test_fits_time_limitation_edges() -> None:
    assert fits_time_limitation(datetime(2026, 10, 16, 16, 0), datetime(2026, 10, 19, 10, 0), WEEKEND)
    assert fits_time_limitation(datetime(2026, 10, 19, 8, 0), datetime(2026, 10, 19, 9, 0), WEEKEND)
    assert not fits_time_limitation(datetime(2026, 10, 19, 9, 0), datetime(2026, 10, 19, 10, 1), WEEKEND)
    assert not fits_time_limitation(datetime(2026, 10, 14, 9, 0), datetime(2026, 10, 14, 10, 0), WEEKEND)


def test_airport_fees_apply_to_every_option(legend) -> None:
    trip = TripInput(km=10, begin=datetime(2026, 10, 14, 10, 0), end=datetime(2026, 10, 14, 11, 0),
                     airport_enter=True, airport_leave=True)
    options = _by_option(legend.calculate(trip))
    assert options["per-minute"].czk == 714.0
    assert options["3 hodiny + 50 km"].czk == 749.0


def test_car_type_and_tariff_selection(bundled_tariffs) -> None:
    trip = TripInput(km=10, begin=datetime(2026, 10, 14, 10, 0), end=datetime(2026, 10, 14, 11, 0))
    boss = Car4wayProvider(car_types=[CarType.BOSS], tariffs=bundled_tariffs)
    assert {o.car_type for o in boss.calculate(trip)} == {"Boss"}

    active = Car4wayProvider(tariff=TariffKind.ACTIVE, car_types=[CarType.LEGEND],
                             tariffs=bundled_tariffs)
    assert _by_option(active.calculate(trip))["per-minute"].czk == 354.0

    every = Car4wayProvider(tariffs=bundled_tariffs).calculate(trip)
    assert [o.car_type for o in every if o.option == "per-minute"] == ["Legend", "Fancy", "Boss"]


def test_invalid_trips(legend) -> None:
    with pytest.raises(TripError):
        legend.calculate(TripInput(km=10, begin=datetime(2026, 10, 14, 11), end=datetime(2026, 10, 14, 11)))
    with pytest.raises(TripError):
        legend.calculate(TripInput(km=-1, begin=datetime(2026, 10, 14, 10), end=datetime(2026, 10, 14, 11)))


def test_default_trip_rounds_up_to_five_minutes() -> None:
    trip = TripInput.default(now=datetime(2026, 10, 18, 10, 2, 30))
    assert trip.begin == datetime(2026, 10, 18, 10, 5)
    assert trip.end == datetime(2026, 10, 18, 11, 5)
    assert trip.km == 10.0

    assert TripInput.default(now=datetime(2026, 10, 18, 10, 5)).begin == datetime(2026, 10, 18, 10, 5)
    assert TripInput.default(now=datetime(2026, 10, 18, 23, 58)).begin == datetime(2026, 10, 19, 0, 0)
