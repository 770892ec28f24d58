"""
Checks that the exported tariff tables and their vendor source are in order:
every table named in the registry exists and loads, the registered URL
still answers, and a downloaded price list opens as a PDF.
"""

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd
import pdfplumber

from . import config
from .downloader import check_url
from .errors import TariffFormatError
from .models import CheckResult, TariffKind
from .providers.car4way import load_tariff
from .sources import SourceRegistry

logger = logging.getLogger(__name__)


def _check_files(entry: dict, data_dir: Path) -> List[CheckResult]:
    results = []
    for file_name in entry.get("tariff_files", []):
        path = data_dir / file_name
        if not path.exists():
            results.append(CheckResult(f"file:{file_name}", False, f"missing: {path}"))
            continue
        results.append(CheckResult(f"file:{file_name}", True, str(path)))

        try:
            kind = TariffKind(Path(file_name).stem)
        except ValueError:
            results.append(CheckResult(f"load:{file_name}", False, "not a known tariff name"))
            continue
        try:
            load_tariff(kind, path)
        except TariffFormatError as e:
            results.append(CheckResult(f"load:{file_name}", False, str(e)))
        else:
            results.append(CheckResult(f"load:{file_name}", True, f"{kind} tariff loads"))
    return results


def _check_url(url: str) -> CheckResult:
    status, content_type, final_url = check_url(url)
    if status is None:
        return CheckResult("url", False, f"{url}: {content_type}")
    detail = f"{final_url}: HTTP {status} {content_type}".strip()
    return CheckResult("url", status < 400, detail)


def _check_pdf(pdf_path: Path) -> CheckResult:
    if not pdf_path.exists():
        return CheckResult("pdf", False, f"missing: {pdf_path}")
    try:
        with pdfplumber.open(pdf_path) as pdf:
            pages = len(pdf.pages)
    except Exception as e:
        logger.error(f"Cannot open {pdf_path}: {e}")
        return CheckResult("pdf", False, f"{pdf_path.name}: {e}")
    return CheckResult("pdf", pages > 0, f"{pdf_path.name}: {pages} pages")


def verify_provider(provider_slug: str = "car4way",
                    registry: Optional[SourceRegistry] = None,
                    data_dir: Optional[Path] = None,
                    check_remote: bool = True,
                    pdf_path: Optional[Path] = None) -> List[CheckResult]:
    """Run all checks for one provider."""
    registry = registry or SourceRegistry()
    data_dir = Path(data_dir) if data_dir else config.CAR4WAY_DATA_DIR
    entry = registry.get_source(provider_slug)

    results = _check_files(entry, data_dir)
    if check_remote:
        results.append(_check_url(entry["url"]))
    if pdf_path is not None:
        results.append(_check_pdf(Path(pdf_path)))

    for r in results:
        log = logger.info if r.ok else logger.warning
        log(f"{provider_slug} {r.check}: {'OK' if r.ok else 'FAIL'} ({r.detail})")
    return results


def all_ok(results: List[CheckResult]) -> bool:
    return all(r.ok for r in results)


def save_report(results: List[CheckResult], path: Optional[Path] = None) -> Path:
    """Save check results as CSV."""
    path = Path(path) if path else config.VERIFY_REPORT_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame([r.to_dict() for r in results], columns=["check", "ok", "detail"]).to_csv(
        path, index=False
    )
    logger.info(f"Verify report saved: {path} ({len(results)} checks)")
    return path
