"""
VK Audio Search Source
Session-authenticated search with result caching and bounded re-login.
"""
from typing import Any, Dict, List, Optional, Tuple
import logging

from ..core.errors import AuthenticationExhausted
from ..core.event_bus import EventBus, Events
from ..core.result_cache import ResultCache
from ..models.audio_item import AudioItem
from ..models.search_query import SearchQuery
from ..services.authenticator import Authenticator
from ..services.transport import Transport
from .base import BaseSource
from .page_parser import AudioPageParser

logger = logging.getLogger(__name__)


class VkAudioSource(BaseSource):
    """Searches the mobile site's audio section on behalf of callers."""

    name = "VK Audio"
    SEARCH_PATH = "audio"

    def __init__(
        self,
        transport: Transport,
        authenticator: Authenticator,
        result_cache: ResultCache,
        parser: AudioPageParser,
        event_bus: Optional[EventBus] = None,
        page_size: int = 50,
        auth_max_attempts: int = 3,
        public_url: str = "",
    ):
        self.transport = transport
        self.authenticator = authenticator
        self.result_cache = result_cache
        self.parser = parser
        self.event_bus = event_bus or EventBus()
        self.page_size = int(page_size)
        self.auth_max_attempts = max(1, int(auth_max_attempts))
        self.public_url = public_url

    def search(self, query: str, page: int = 0) -> List[Dict[str, Any]]:
        cache_key, items = self.search_items(query, page)
        return self.transform(cache_key, items)

    def search_items(self, query: str, page: int = 0) -> Tuple[str, List[AudioItem]]:
        """Cached items for (query, page), scraping and caching them on a miss."""
        search_query = SearchQuery.create(query, page)
        cache_key = self.result_cache.key_for(search_query)

        cached = self.result_cache.get(cache_key)
        if cached is not None:
            logger.debug("Search cache hit for %s", cache_key)
            self.event_bus.emit(Events.SEARCH_CACHE_HIT, {"cache_key": cache_key, "count": len(cached)})
            return cache_key, cached

        response = self._authenticated_search(search_query)

        items = self.parser.parse(response.text)
        self.result_cache.put(cache_key, items)
        self.event_bus.emit(Events.SEARCH_COMPLETED, {"cache_key": cache_key, "count": len(items)})
        logger.info("Search %r page %d returned %d items", search_query.query, search_query.page, len(items))
        return cache_key, items

    def transform(self, cache_key: str, items: List[AudioItem]) -> List[Dict[str, Any]]:
        return [item.to_public(cache_key, self.public_url) for item in items]

    def _authenticated_search(self, search_query: SearchQuery):
        attempts = 0
        if not self.authenticator.has_session():
            attempts = self._relogin(attempts)

        while True:
            response = self._request_search(search_query)

            if self.authenticator.requires_challenge(response):
                self.authenticator.solve_challenge(response)

            if self.authenticator.is_authenticated(response):
                return response

            # Session is gone or the check just completed; log in and search again.
            attempts = self._relogin(attempts)

    def _relogin(self, attempts: int) -> int:
        if attempts >= self.auth_max_attempts:
            raise AuthenticationExhausted(
                f"Still logged out after {attempts} login attempts."
            )
        self.authenticator.login()
        return attempts + 1

    def _request_search(self, search_query: SearchQuery):
        response = self.transport.get(self.SEARCH_PATH, params={
            "act": "search",
            "q": search_query.query,
            "offset": search_query.offset(self.page_size),
        })
        response.raise_for_status()
        return response
