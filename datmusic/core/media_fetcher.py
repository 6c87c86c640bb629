"""
Media Fetcher
Resolves cached items and downloads their media into content-addressed storage.

Item resolution is bound to the cached result set: once it expires, lookups
fail with NotFound instead of scraping again.
"""
from pathlib import Path
from typing import Optional
import logging

import requests

from ..models.audio_item import AudioItem
from ..utils.file_utils import audio_filename
from ..utils.hashing import ensure_algorithm, make_hash
from .blob_storage import FileBlobStorage
from .cache_store import CacheStore
from .download_backends import DownloadBackend
from .errors import DownloadFailed, InvalidMedia, NotFound
from .event_bus import EventBus, Events
from .result_cache import ResultCache

logger = logging.getLogger(__name__)


class MediaFetcher:
    """Downloads, validates and serves audio files for cached search results"""

    HTML_MARKER = b"<html"
    STATIC_PREFIX = "mp3"

    def __init__(
        self,
        result_cache: ResultCache,
        storage: FileBlobStorage,
        backend: DownloadBackend,
        byte_cache: CacheStore,
        hash_algorithm: str = "md5",
        min_media_bytes: int = 170,
        event_bus: Optional[EventBus] = None,
    ):
        self.result_cache = result_cache
        self.storage = storage
        self.backend = backend
        self.byte_cache = byte_cache
        self.hash_algorithm = ensure_algorithm(hash_algorithm)
        self.min_media_bytes = int(min_media_bytes)
        self.event_bus = event_bus or EventBus()

    def resolve(self, cache_key: str, item_id: str) -> AudioItem:
        item = self.result_cache.find(cache_key, item_id)
        if item is None:
            raise NotFound("Audio item not found in live search results.")
        return item

    def storage_name(self, item: AudioItem) -> str:
        return f"{make_hash(self.hash_algorithm, item.id)}.mp3"

    def download_name(self, item: AudioItem) -> str:
        return audio_filename(item.artist, item.title)

    def static_path(self, item: AudioItem) -> str:
        return f"{self.STATIC_PREFIX}/{self.storage_name(item)}"

    def fetch_or_serve(self, item: AudioItem) -> Path:
        """Local path of the item's media, downloading it once if needed."""
        name = self.storage_name(item)
        if self.storage.exists(name):
            return self.storage.path(name)

        if not item.mp3:
            raise DownloadFailed("Audio item has no media URL.")

        try:
            path = self.storage.write_stream(
                name,
                self.backend.stream(item.mp3),
                validate=lambda tmp_path: self._validate(tmp_path, item),
            )
        except (requests.RequestException, OSError) as e:
            logger.warning("Media download failed for %s: %s", item.id, e)
            raise DownloadFailed(f"Media download failed: {e}") from e

        logger.info("Stored media %s (%d bytes)", name, self.storage.size(name))
        self.event_bus.emit(Events.MEDIA_DOWNLOADED, {"id": item.id, "name": name})
        return path

    def download(self, cache_key: str, item_id: str) -> Path:
        return self.fetch_or_serve(self.resolve(cache_key, item_id))

    def stream(self, cache_key: str, item_id: str) -> str:
        """Public static path to redirect stream requests to"""
        item = self.resolve(cache_key, item_id)
        self.fetch_or_serve(item)
        return self.static_path(item)

    def byte_length(self, cache_key: str, item_id: str) -> int:
        """Upstream content length, memoized forever once observed"""
        def produce() -> int:
            item = self.resolve(cache_key, item_id)
            try:
                length = self.backend.content_length(item.mp3)
            except requests.RequestException as e:
                raise DownloadFailed(f"Size lookup failed: {e}") from e
            if length is None:
                raise DownloadFailed("Upstream did not report a content length.")
            return length

        return int(self.byte_cache.remember(f"{item_id}{cache_key}", None, produce))

    def _validate(self, path: Path, item: AudioItem):
        # Upstream sometimes answers the media URL with a small HTML error page.
        # Runs on the unpublished temporary file; raising discards it.
        if path.stat().st_size >= self.min_media_bytes:
            return
        with open(path, "rb") as f:
            head = f.read(self.min_media_bytes)
        if self.HTML_MARKER in head.lower():
            logger.warning("Rejected HTML error page served as media for %s", item.id)
            self.event_bus.emit(Events.MEDIA_REJECTED, {"id": item.id})
            raise InvalidMedia("Upstream returned an error page instead of audio.")
