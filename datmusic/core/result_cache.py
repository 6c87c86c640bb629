"""
Result Cache
Maps a search cache key to its ordered list of audio items for a fixed TTL.
The cached set is the only way to resolve an item id afterwards.
"""
from typing import List, Optional

from ..models.audio_item import AudioItem
from ..models.search_query import SearchQuery
from ..utils.hashing import ensure_algorithm
from .cache_store import CacheStore


class ResultCache:
    def __init__(self, store: CacheStore, ttl_seconds: float, hash_algorithm: str = "md5"):
        self.store = store
        self.ttl_seconds = float(ttl_seconds)
        self.hash_algorithm = ensure_algorithm(hash_algorithm)

    def key_for(self, query: SearchQuery) -> str:
        return query.cache_key(self.hash_algorithm)

    def get(self, cache_key: str) -> Optional[List[AudioItem]]:
        data = self.store.get(cache_key)
        if data is None:
            return None
        return [AudioItem.from_dict(row) for row in data if isinstance(row, dict)]

    def put(self, cache_key: str, items: List[AudioItem]) -> None:
        self.store.put(cache_key, [item.to_dict() for item in items], self.ttl_seconds)

    def find(self, cache_key: str, item_id: str) -> Optional[AudioItem]:
        """Item with the given id from a live result set, else None"""
        items = self.get(cache_key)
        if not items:
            return None
        for item in items:
            if item.id == item_id:
                return item
        return None
