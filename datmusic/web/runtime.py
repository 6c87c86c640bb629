"""Runtime bootstrap for the datmusic web API."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional

from ..core.blob_storage import FileBlobStorage
from ..core.cache_store import CacheStore, MemoryCacheStore, SqliteCacheStore
from ..core.download_backends import NativeRequestsBackend
from ..core.event_bus import EventBus
from ..core.media_fetcher import MediaFetcher
from ..core.result_cache import ResultCache
from ..core.settings_manager import SettingsManager
from ..services.authenticator import Authenticator
from ..services.credentials import CredentialStore
from ..services.session_store import SessionStore
from ..services.transport import Transport
from ..sources.page_parser import AudioPageParser
from ..sources.vk_audio import VkAudioSource

logger = logging.getLogger(__name__)
event_logger = logging.getLogger("datmusic.events")


@dataclass
class DatmusicRuntime:
    """Shared service graph used by web endpoints."""

    settings: SettingsManager
    event_bus: EventBus
    cache_store: CacheStore
    result_cache: ResultCache
    credentials: CredentialStore
    session_store: SessionStore
    media_fetcher: MediaFetcher

    def close(self) -> None:
        self.cache_store.close()

    def audio_source(self, public_url: Optional[str] = None) -> VkAudioSource:
        """Fresh engine for one request: random identity, own transport and authenticator."""
        settings = self.settings
        identity = self.credentials.select()
        jar = self.session_store.load(identity)
        transport = Transport(
            base_url=str(settings.get("base_url", "https://m.vk.com")),
            user_agent=str(settings.get("user_agent", SettingsManager.DEFAULT_USER_AGENT)),
            cookie_jar=jar,
            timeout=float(settings.get("request_timeout_seconds", 15.0) or 15.0),
        )
        authenticator = Authenticator(
            transport=transport,
            identity=identity,
            session_store=self.session_store,
            event_bus=self.event_bus,
            cookie_jar=jar,
        )
        configured_url = str(settings.get("public_url", "") or "")
        return VkAudioSource(
            transport=transport,
            authenticator=authenticator,
            result_cache=self.result_cache,
            parser=AudioPageParser(str(settings.get("hash_id", "md5"))),
            event_bus=self.event_bus,
            page_size=int(settings.get("page_size", 50) or 50),
            auth_max_attempts=int(settings.get("auth_max_attempts", 3) or 3),
            public_url=configured_url or (public_url or ""),
        )


def _log_event(event_type: str, data: Any) -> None:
    event_logger.debug("%s %s", event_type, data or {})


def build_cache_store(settings: SettingsManager) -> CacheStore:
    backend = str(settings.get("cache_backend", "sqlite") or "sqlite").strip().lower()
    if backend == "memory":
        return MemoryCacheStore()
    return SqliteCacheStore(settings.settings_dir)


def build_runtime(settings: Optional[SettingsManager] = None) -> DatmusicRuntime:
    """Create and wire core services."""

    settings = settings or SettingsManager()
    event_bus = EventBus()
    event_bus.subscribe_all(_log_event)

    cache_store = build_cache_store(settings)
    purged = cache_store.purge_expired()
    if purged:
        logger.info("Purged %d expired cache entries", purged)
    result_cache = ResultCache(
        cache_store,
        ttl_seconds=float(settings.get("cache_ttl_seconds", 86400) or 86400),
        hash_algorithm=str(settings.get("hash_cache", "md5")),
    )
    session_store = SessionStore(
        settings.cookie_path_template(),
        hash_algorithm=str(settings.get("hash_cache", "md5")),
    )
    backend = NativeRequestsBackend(
        timeout=float(settings.get("download_timeout_seconds", 60.0) or 60.0),
        user_agent=str(settings.get("user_agent", SettingsManager.DEFAULT_USER_AGENT)),
    )
    media_fetcher = MediaFetcher(
        result_cache=result_cache,
        storage=FileBlobStorage(settings.mp3_folder()),
        backend=backend,
        byte_cache=cache_store,
        hash_algorithm=str(settings.get("hash_mp3", "md5")),
        min_media_bytes=int(settings.get("min_media_bytes", 170) or 170),
        event_bus=event_bus,
    )

    return DatmusicRuntime(
        settings=settings,
        event_bus=event_bus,
        cache_store=cache_store,
        result_cache=result_cache,
        credentials=CredentialStore.from_settings(settings),
        session_store=session_store,
        media_fetcher=media_fetcher,
    )
