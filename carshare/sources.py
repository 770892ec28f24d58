"""
URL registry for vendor price-list documents.
Maps provider slugs to the document the tariff tables are exported from.
Stored as JSON for easy manual editing and version control.
"""

import json
import logging
import time
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import urlparse

from .config import CAR4WAY_TARIFF_FILES, SOURCE_URLS_FILE
from .errors import SourceError

logger = logging.getLogger(__name__)


def _default_registry() -> Dict[str, dict]:
    """Initial registry; refresh the URL whenever the vendor publishes a new price list."""
    return {
        "car4way": {
            "provider_name": "car4way",
            "url": "https://www.car4way.cz/cenik",
            "doc_type": "price_list",
            "tariff_files": list(CAR4WAY_TARIFF_FILES),
            "updated": "",
        },
    }


def validate_url(url: str) -> str:
    url = (url or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise SourceError(f"Not an http(s) URL: {url!r}")
    return url


class SourceRegistry:
    """Manages the vendor document URLs."""

    def __init__(self, registry_path: Optional[Path] = None):
        self.path = registry_path or SOURCE_URLS_FILE
        self.data = self._load()

    def _load(self) -> Dict[str, dict]:
        if self.path.exists():
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        logger.info("No registry file found, using defaults")
        data = _default_registry()
        self._save(data)
        return data

    def _save(self, data: Optional[dict] = None):
        data = data or self.data
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        logger.info(f"Registry saved to {self.path}")

    def get_source(self, provider_slug: str) -> dict:
        if provider_slug not in self.data:
            raise SourceError(f"No source registered for provider {provider_slug!r}")
        return self.data[provider_slug]

    def get_all_providers(self) -> List[str]:
        return list(self.data.keys())

    def set_url(self, provider_slug: str, url: str) -> dict:
        """Point a provider at a new price-list document."""
        entry = self.get_source(provider_slug)
        url = validate_url(url)
        if entry.get("url") == url:
            logger.info(f"{provider_slug}: URL unchanged")
            return entry
        logger.info(f"{provider_slug}: {entry.get('url')} -> {url}")
        entry["url"] = url
        entry["updated"] = time.strftime("%Y-%m-%d")
        self._save()
        return entry
