"""
PDF downloader with manifest tracking.
Downloads vendor price lists, computes SHA256 hashes, and maintains a manifest
so we never re-download the same file.
"""

import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Optional, Tuple

import requests

from .config import (
    DOWNLOAD_MANIFEST_FILE,
    DOWNLOADS_DIR,
    HEAD_TIMEOUT,
    REQUEST_HEADERS,
    REQUEST_TIMEOUT,
)
from .models import SourceInfo

logger = logging.getLogger(__name__)


def _compute_sha256(file_path: Path) -> str:
    h = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def check_url(url: str, timeout: int = HEAD_TIMEOUT) -> Tuple[Optional[int], str, str]:
    """Check if a URL is accessible. Returns (status_code, content_type, final_url)."""
    try:
        resp = requests.head(url, headers=REQUEST_HEADERS, timeout=timeout, allow_redirects=True)
        return resp.status_code, resp.headers.get("Content-Type", ""), resp.url
    except requests.RequestException as e:
        return None, str(e), url


class SourceDownloader:
    """Downloads vendor PDFs and tracks them in a manifest."""

    def __init__(self, base_dir: Optional[Path] = None,
                 manifest_path: Optional[Path] = None):
        self.base_dir = base_dir or DOWNLOADS_DIR
        self.manifest_path = manifest_path or DOWNLOAD_MANIFEST_FILE
        self.manifest = self._load_manifest()

    def _load_manifest(self) -> dict:
        if self.manifest_path.exists():
            with open(self.manifest_path, "r") as f:
                return json.load(f)
        return {"downloads": []}

    def _save_manifest(self):
        self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.manifest_path, "w") as f:
            json.dump(self.manifest, f, indent=2)

    def _find_entry(self, url: str, provider_slug: str) -> Optional[dict]:
        """Manifest entry for this URL whose file still exists."""
        for entry in self.manifest["downloads"]:
            if entry["url"] == url and entry["provider_slug"] == provider_slug:
                if Path(entry["local_path"]).exists():
                    return entry
        return None

    def download(self, url: str, provider_slug: str, doc_type: str,
                 provider_name: str) -> Optional[SourceInfo]:
        """Download a price-list PDF. Returns SourceInfo or None on failure."""

        existing = self._find_entry(url, provider_slug)
        if existing:
            local = Path(existing["local_path"])
            logger.info(f"Already downloaded: {local}")
            return SourceInfo(
                url=url,
                doc_type=doc_type,
                provider=provider_name,
                local_path=str(local),
                sha256=_compute_sha256(local),
                download_date=existing.get("download_date", ""),
                file_size_bytes=local.stat().st_size,
            )

        provider_dir = self.base_dir / provider_slug
        provider_dir.mkdir(parents=True, exist_ok=True)

        # Filename from URL, dated when the URL does not name a PDF
        url_filename = url.rstrip("/").split("/")[-1].split("?")[0]
        if not url_filename.lower().endswith(".pdf"):
            url_filename = f"{provider_slug}_{doc_type}_{time.strftime('%Y%m%d')}.pdf"
        local_path = provider_dir / url_filename

        logger.info(f"Downloading: {url}")
        try:
            resp = requests.get(url, headers=REQUEST_HEADERS, timeout=REQUEST_TIMEOUT,
                                stream=True, allow_redirects=True)
            resp.raise_for_status()

            first_chunk = None
            with open(local_path, "wb") as f:
                for chunk in resp.iter_content(chunk_size=8192):
                    if first_chunk is None:
                        first_chunk = chunk
                    f.write(chunk)

            if not first_chunk or first_chunk[:5] != b"%PDF-":
                head = first_chunk[:20] if first_chunk else b""
                logger.warning(f"Downloaded file is not a PDF (starts with {head}). Removing.")
                local_path.unlink(missing_ok=True)
                return None

        except requests.RequestException as e:
            logger.error(f"Failed to download {url}: {e}")
            local_path.unlink(missing_ok=True)
            return None

        sha = _compute_sha256(local_path)
        file_size = local_path.stat().st_size
        download_date = time.strftime("%Y-%m-%d %H:%M:%S")

        self.manifest["downloads"].append({
            "url": url,
            "provider_slug": provider_slug,
            "provider_name": provider_name,
            "doc_type": doc_type,
            "local_path": str(local_path),
            "sha256": sha,
            "file_size_bytes": file_size,
            "download_date": download_date,
        })
        self._save_manifest()

        logger.info(f"Downloaded {file_size / 1024:.1f} kB -> {local_path.name}")

        return SourceInfo(
            url=url,
            doc_type=doc_type,
            provider=provider_name,
            local_path=str(local_path),
            sha256=sha,
            download_date=download_date,
            file_size_bytes=file_size,
        )
