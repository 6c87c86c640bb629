"""
HTTP Transport
requests.Session configured with a fixed browser identity and the identity's cookie jar
"""
from http.cookiejar import CookieJar
from typing import Optional
from urllib.parse import urljoin

import requests


class Transport:
    def __init__(
        self,
        base_url: str,
        user_agent: str,
        cookie_jar: Optional[CookieJar] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = float(timeout)
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": user_agent})
        if cookie_jar is not None:
            self.session.cookies = cookie_jar

    @property
    def cookie_jar(self) -> CookieJar:
        return self.session.cookies

    def url(self, path: str) -> str:
        """Absolute URL for a site-relative path; absolute URLs pass through."""
        return urljoin(self.base_url, path or "")

    def get(self, path: str, params: Optional[dict] = None, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        return self.session.get(self.url(path), params=params, **kwargs)

    def post(self, path: str, data: Optional[dict] = None, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        return self.session.post(self.url(path), data=data, **kwargs)

    def head(self, path: str, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        kwargs.setdefault("allow_redirects", True)
        return self.session.head(self.url(path), **kwargs)
