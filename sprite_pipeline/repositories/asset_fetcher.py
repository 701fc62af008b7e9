from __future__ import annotations
from pathlib import Path
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname
import logging

import requests

from ..config import Settings
from ..errors import AssetNotFoundError, FetchError

logger = logging.getLogger(__name__)

_REMOTE_SCHEMES = ("http://", "https://")


class AssetFetcher:
    """
    Handles raw byte retrieval for a locator.  No decoding here.

    * local paths and ``file://`` URLs are read from disk
    * ``http(s)://`` URLs go through ``requests``
    """

    def __init__(self, timeout: float | None = None, session: requests.Session | None = None):
        self.timeout = timeout if timeout is not None else Settings.from_env().fetch_timeout
        self.session = session or requests.Session()

    def fetch(self, locator: str) -> bytes:
        if locator.startswith(_REMOTE_SCHEMES):
            return self._fetch_remote(locator)
        return self._fetch_local(self._to_path(locator))

    @staticmethod
    def _to_path(locator: str) -> Path:
        if locator.startswith("file://"):
            return Path(url2pathname(unquote(urlparse(locator).path)))
        return Path(locator)

    @staticmethod
    def _fetch_local(path: Path) -> bytes:
        if not path.is_file():
            raise AssetNotFoundError(f"Image not found: {path}")
        try:
            return path.read_bytes()
        except OSError as err:
            raise FetchError(f"Could not read {path}: {err}") from err

    def _fetch_remote(self, url: str) -> bytes:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as err:
            raise FetchError(f"Request failed for {url}: {err}") from err

        if response.status_code in (404, 410):
            raise AssetNotFoundError(f"Image not found: {url} (HTTP {response.status_code})")
        try:
            response.raise_for_status()
        except requests.HTTPError as err:
            raise FetchError(f"Request failed for {url}: {err}") from err

        logger.debug(f"Fetched {len(response.content)} bytes from {url}")
        return response.content
