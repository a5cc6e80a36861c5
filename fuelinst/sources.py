"""
GridBridge UK - Elexon FUELINST Source

Fetches raw FUELINST payloads for the codecs. One attempt per call with a
fixed timeout; retry and caching policy belong to the caller.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from .errors import FetchError

logger = logging.getLogger(__name__)

# ============================================================================
# API ENDPOINTS
# ============================================================================

ELEXON_INSIGHTS_BASE = "https://data.elexon.co.uk/bmrs/api/v1"
FUELINST_STREAM_ENDPOINT = "/datasets/FUELINST/stream"


def _iso_minute(when: datetime) -> str:
    return when.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%MZ")


class ElexonFuelinstSource:
    """Elexon Insights client for instantaneous generation by fuel type."""

    def __init__(
        self,
        base_url: str = ELEXON_INSIGHTS_BASE,
        timeout: float = 60,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, url: str, params: Optional[dict] = None, accept: str = "application/json") -> requests.Response:
        try:
            resp = self.session.get(
                url, params=params, timeout=self.timeout, headers={"Accept": accept}
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"request to {url} failed ({e})") from e
        return resp

    def fetch_stream(self, start: datetime, end: datetime) -> str:
        """Raw JSON text for FUELINST records with start times in [start, end]."""
        if end < start:
            raise ValueError(f"end {end} is before start {start}")
        params = {"from": _iso_minute(start), "to": _iso_minute(end)}
        logger.info("Fetching Elexon FUELINST stream %s to %s", params["from"], params["to"])
        return self._get(f"{self.base_url}{FUELINST_STREAM_ENDPOINT}", params=params).text

    def fetch_legacy_csv(self, url: str) -> str:
        """Raw legacy CSV envelope text from ``url``."""
        logger.info("Fetching legacy FUELINST CSV from %s", url)
        return self._get(url.strip(), accept="text/csv").text
