"""
Search Query Model
Normalized (query, page) pair and the cache key derived from it
"""
from dataclasses import dataclass

from ..utils.hashing import make_hash


@dataclass(frozen=True)
class SearchQuery:
    """Normalized search request"""
    query: str
    page: int = 0

    @classmethod
    def create(cls, query: str, page=0) -> "SearchQuery":
        try:
            page_number = int(page or 0)
        except (TypeError, ValueError):
            page_number = 0
        return cls(query=str(query or "").strip(), page=max(0, page_number))

    def offset(self, page_size: int = 50) -> int:
        """Upstream result offset for this page"""
        return self.page * int(page_size)

    def cache_key(self, algorithm: str) -> str:
        """Stable key: hash of query text followed by the page number"""
        return make_hash(algorithm, f"{self.query}{self.page}")
