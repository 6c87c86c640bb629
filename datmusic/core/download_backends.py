"""
Download backend implementations.
Native requests backend streams media bodies and answers size probes.
"""
from __future__ import annotations

from typing import Iterator, Optional

import requests


class DownloadBackend:
    name = "base"

    def stream(self, url: str) -> Iterator[bytes]:
        raise NotImplementedError

    def content_length(self, url: str) -> Optional[int]:
        raise NotImplementedError


class NativeRequestsBackend(DownloadBackend):
    name = "native"

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 60.0,
        chunk_size: int = 64 * 1024,
        user_agent: str = "",
    ):
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers.update({"User-Agent": user_agent})
        self.timeout = float(timeout)
        self.chunk_size = int(chunk_size)

    def stream(self, url: str) -> Iterator[bytes]:
        """Yield body chunks; raises requests errors on non-2xx or network failure."""
        with self.session.get(url, stream=True, timeout=self.timeout) as response:
            response.raise_for_status()
            for chunk in response.iter_content(chunk_size=self.chunk_size):
                if chunk:
                    yield chunk

    def content_length(self, url: str) -> Optional[int]:
        response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
        response.raise_for_status()
        raw = response.headers.get("Content-Length")
        if raw is None or not str(raw).strip().isdigit():
            return None
        return int(raw)
