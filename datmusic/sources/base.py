"""
Source SDK
Base interface for audio search sources.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List


class BaseSource(ABC):
    """
    Stable source contract for the search engine and the web layer.
    """
    name = "UnnamedSource"

    @abstractmethod
    def search(self, query: str, page: int = 0) -> List[Dict[str, Any]]:
        """Return public search results for a query."""
        raise NotImplementedError
