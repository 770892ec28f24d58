"""
Configuration and path management for the carshare package.
Bundled data lives inside the package; downloads go under the project root.
"""

import os
from pathlib import Path

# Package dir and project root: one level up from carshare/
_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = _THIS_DIR.parent

# ── Exported tariff tables ────────────────────────────────────────────────────

# Hand-exported TSVs, one directory per provider
PROVIDER_DATA_DIR = _THIS_DIR / "provider_data"
BUNDLED_CAR4WAY_DIR = PROVIDER_DATA_DIR / "car4way"
CAR4WAY_DATA_DIR = Path(os.environ.get("CARSHARE_DATA_DIR", BUNDLED_CAR4WAY_DIR))

# The bundled tables hold sample prices in the exported layout
SAMPLE_TABLES_NOTICE = (
    "Note: the bundled car4way tables contain sample prices, not a current price list. "
    "Export the real tables and point CARSHARE_DATA_DIR at them."
)

CAR4WAY_TARIFF_FILES = ["basic.tsv", "active.tsv", "business.tsv"]

# ── Vendor source documents ───────────────────────────────────────────────────

SOURCE_URLS_FILE = _THIS_DIR / "source_urls.json"

DOWNLOADS_DIR = PROJECT_ROOT / "data" / "sources"
DOWNLOAD_MANIFEST_FILE = DOWNLOADS_DIR / "download_manifest.json"

# ── Outputs ───────────────────────────────────────────────────────────────────

OUTPUTS_DIR = PROJECT_ROOT / "outputs"
VERIFY_REPORT_FILE = OUTPUTS_DIR / "verify_report.csv"

# ── Trip defaults ─────────────────────────────────────────────────────────────

DEFAULT_TRIP_KM = 10.0
DEFAULT_TRIP_MINUTES = 60
TRIP_START_ROUNDING_MINUTES = 5

# ── HTTP settings ─────────────────────────────────────────────────────────────

REQUEST_TIMEOUT = 60
HEAD_TIMEOUT = 15
REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (carshare tariff tooling)",
    "Accept": "application/pdf,text/html,application/xhtml+xml",
}
