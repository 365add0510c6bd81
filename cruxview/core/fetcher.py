from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Protocol

import requests

from .decoder import decode_stream
from .errors import DecodeError, TransportError
from .pointcloud import PointCloudBatchSet
from .utils import get_logger

_log = get_logger()


class Fetcher(Protocol):
    def fetch(self, url: str) -> bytes: ...


@dataclass
class RemoteFetcher:
    """Blocking HTTP GET returning the whole response body.

    Only ever called from load worker threads; each call uses its own
    throwaway session.
    """
    timeout_s: Optional[float] = None

    def fetch(self, url: str) -> bytes:
        try:
            with requests.Session() as session:
                response = session.get(url, timeout=self.timeout_s)
                response.raise_for_status()
                body = response.content
        except requests.RequestException as exc:
            raise TransportError(f"GET {url} failed: {exc}", url=url) from exc
        _log.debug("Fetched %d bytes from %s", len(body), url)
        return body


def fetch_and_decode(url: str, fetcher: Fetcher) -> PointCloudBatchSet:
    payload = fetcher.fetch(url)
    try:
        return decode_stream(payload)
    except DecodeError as exc:
        exc.url = url
        raise
