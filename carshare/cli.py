"""Typer-based command line interface for the tariff tables.

Commands
--------
quote    price a trip with every enabled provider, cheapest first
tariffs  summarise the loaded tariff tables
fetch    download the vendor price-list PDF
verify   check the exported tables and the vendor URL
set-url  point a provider at a new price-list document

Exit codes
----------
0 success
2 invalid input
3 I/O or download failure
4 tariff table format error
5 verification failure
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer

from . import config
from .downloader import SourceDownloader
from .errors import SourceError, TariffFormatError, TripError
from .models import CarType, TariffKind, TripInput
from .providers import get_provider
from .providers.car4way import load_tariffs
from .quotes import cheapest, options_frame, quote
from .sources import SourceRegistry
from .verify import all_ok, save_report, verify_provider

logger = logging.getLogger(__name__)

EXIT_INPUT = 2
EXIT_IO = 3
EXIT_FORMAT = 4
EXIT_VERIFY = 5

DATETIME_FORMATS = ["%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M:%S"]

app = typer.Typer(
    name="carshare",
    help="Car-sharing tariff tables: trip quotes, source URL upkeep and checks.",
)


def _safe_exit(code: int, msg: Optional[str] = None) -> None:
    """Exit the CLI with ``code`` emitting ``msg`` to stderr if provided."""
    if msg:
        typer.echo(msg, err=True)
    raise typer.Exit(code)


def _parse_tariff(value: str) -> TariffKind:
    try:
        return TariffKind(value.lower())
    except ValueError:
        choices = ", ".join(kind.value for kind in TariffKind)
        _safe_exit(EXIT_INPUT, f"Unknown tariff {value!r}, choose from: {choices}")


def _parse_car_types(values: List[str]) -> Optional[List[CarType]]:
    if not values:
        return None
    by_name = {car_type.value.lower(): car_type for car_type in CarType}
    car_types = []
    for value in values:
        if value.lower() not in by_name:
            choices = ", ".join(car_type.value for car_type in CarType)
            _safe_exit(EXIT_INPUT, f"Unknown car type {value!r}, choose from: {choices}")
        car_types.append(by_name[value.lower()])
    return car_types


def _sample_notice(data_dir: Optional[Path] = None) -> None:
    """Warn on stderr when quoting from the bundled sample tables."""
    used = Path(data_dir) if data_dir else config.CAR4WAY_DATA_DIR
    if used.resolve() == config.BUNDLED_CAR4WAY_DIR.resolve():
        typer.echo(config.SAMPLE_TABLES_NOTICE, err=True)


@app.callback()
def _main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging.")) -> None:
    logging.getLogger("carshare").setLevel(logging.DEBUG if verbose else logging.INFO)


@app.command("quote")
def quote_cmd(
    km: Optional[float] = typer.Option(None, "--km", help="Planned distance in km."),
    begin: Optional[datetime] = typer.Option(None, "--begin", formats=DATETIME_FORMATS,
                                             help="Rental start, e.g. 2026-10-16T18:00."),
    end: Optional[datetime] = typer.Option(None, "--end", formats=DATETIME_FORMATS,
                                           help="Rental end."),
    tariff: str = typer.Option(TariffKind.default().value, "--tariff", help="basic, active or business."),
    car_type: List[str] = typer.Option([], "--car-type", help="Limit to car types (repeatable)."),
    airport_enter: bool = typer.Option(False, "--airport-enter", help="Trip ends at the airport."),
    airport_leave: bool = typer.Option(False, "--airport-leave", help="Trip starts at the airport."),
    csv_path: Optional[Path] = typer.Option(None, "--csv", help="Also save options as CSV."),
) -> None:
    """Price a trip with every enabled provider."""
    trip = TripInput.default()
    if begin is not None:
        duration = trip.duration
        trip.begin = begin
        trip.end = begin + duration
    if end is not None:
        trip.end = end
    if km is not None:
        trip.km = km
    trip.airport_enter = airport_enter
    trip.airport_leave = airport_leave

    provider = get_provider(
        "car4way",
        tariff=_parse_tariff(tariff),
        car_types=_parse_car_types(car_type),
    )

    try:
        options = quote(trip, [provider])
    except TripError as e:
        _safe_exit(EXIT_INPUT, str(e))
    except FileNotFoundError as e:
        _safe_exit(EXIT_IO, str(e))
    except TariffFormatError as e:
        _safe_exit(EXIT_FORMAT, str(e))

    _sample_notice()
    typer.echo(f"Trip: {trip.km:g} km, {trip.begin:%Y-%m-%d %H:%M} -> {trip.end:%Y-%m-%d %H:%M} "
               f"({trip.duration})")
    if not options:
        typer.echo("No options.")
        return

    frame = options_frame(options)
    typer.echo(frame.to_string(index=False))
    best = cheapest(options)
    typer.echo(f"Cheapest: {best.provider} {best.tariff} {best.car_type} {best.option} "
               f"= {best.czk:.2f} CZK")

    if csv_path is not None:
        try:
            csv_path.parent.mkdir(parents=True, exist_ok=True)
            frame.to_csv(csv_path, index=False)
        except OSError as e:
            _safe_exit(EXIT_IO, f"Cannot write {csv_path}: {e}")


@app.command("tariffs")
def tariffs_cmd(
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", help="Directory with the exported TSVs."),
) -> None:
    """Summarise the loaded tariff tables."""
    try:
        tariffs = load_tariffs(data_dir)
    except FileNotFoundError as e:
        _safe_exit(EXIT_IO, str(e))
    except TariffFormatError as e:
        _safe_exit(EXIT_FORMAT, str(e))

    _sample_notice(data_dir)
    for kind, tariff in tariffs.items():
        typer.echo(f"== {kind} ==")
        typer.echo(f"  per km above package: {tariff.per_km_czk:g} CZK")
        typer.echo(f"  airport entry/leave: {tariff.airport_enter_czk:g} / {tariff.airport_leave_czk:g} CZK")
        for car_type, per_car in tariff.per_car_type.items():
            rates = ", ".join(
                f"{rate.start:%H:%M}-{rate.end:%H:%M} {rate.per_minute_czk:g}/min"
                for rate in per_car.per_minute
            )
            typer.echo(f"  {car_type}: {rates}; {len(per_car.packages)} packages")


@app.command("fetch")
def fetch_cmd(
    provider: str = typer.Option("car4way", "--provider"),
    registry_path: Optional[Path] = typer.Option(None, "--registry", help="Source URL registry JSON."),
    out_dir: Optional[Path] = typer.Option(None, "--out-dir", help="Download directory."),
) -> None:
    """Download the vendor price-list PDF."""
    try:
        entry = SourceRegistry(registry_path).get_source(provider)
        manifest = out_dir / "download_manifest.json" if out_dir else None
        source = SourceDownloader(base_dir=out_dir, manifest_path=manifest).download(
            url=entry["url"],
            provider_slug=provider,
            doc_type=entry.get("doc_type", "price_list"),
            provider_name=entry.get("provider_name", provider),
        )
    except SourceError as e:
        _safe_exit(EXIT_INPUT, str(e))
    except (OSError, json.JSONDecodeError) as e:
        _safe_exit(EXIT_IO, str(e))

    if source is None:
        _safe_exit(EXIT_IO, f"Failed to download {entry['url']}")
    typer.echo(f"{source.local_path} sha256={source.sha256}")


@app.command("verify")
def verify_cmd(
    provider: str = typer.Option("car4way", "--provider"),
    registry_path: Optional[Path] = typer.Option(None, "--registry", help="Source URL registry JSON."),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", help="Directory with the exported TSVs."),
    offline: bool = typer.Option(False, "--offline", help="Skip the URL check."),
    pdf: Optional[Path] = typer.Option(None, "--pdf", help="Downloaded price list to open."),
    report: Optional[Path] = typer.Option(None, "--report", help="Save the checks as CSV."),
) -> None:
    """Check that the exported tables exist and load and that the URL answers."""
    try:
        results = verify_provider(
            provider,
            registry=SourceRegistry(registry_path),
            data_dir=data_dir,
            check_remote=not offline,
            pdf_path=pdf,
        )
    except SourceError as e:
        _safe_exit(EXIT_INPUT, str(e))
    except (OSError, json.JSONDecodeError) as e:
        _safe_exit(EXIT_IO, str(e))

    for r in results:
        typer.echo(f"{'OK  ' if r.ok else 'FAIL'} {r.check}: {r.detail}")
    if report is not None:
        try:
            save_report(results, report)
        except OSError as e:
            _safe_exit(EXIT_IO, f"Cannot write {report}: {e}")
    if not all_ok(results):
        _safe_exit(EXIT_VERIFY, "Verification failed")


@app.command("set-url")
def set_url_cmd(
    url: str = typer.Argument(..., help="New price-list URL."),
    provider: str = typer.Option("car4way", "--provider"),
    registry_path: Optional[Path] = typer.Option(None, "--registry", help="Source URL registry JSON."),
) -> None:
    """Point a provider at a new price-list document."""
    try:
        entry = SourceRegistry(registry_path).set_url(provider, url)
    except SourceError as e:
        _safe_exit(EXIT_INPUT, str(e))
    except (OSError, json.JSONDecodeError) as e:
        _safe_exit(EXIT_IO, str(e))
    typer.echo(f"{provider}: {entry['url']}")


def main():
    """Entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    app()


if __name__ == "__main__":
    main()
