"""
Settings Manager
Loads service settings from the data directory
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import threading

logger = logging.getLogger(__name__)


class SettingsManager:
    """Read-only service settings: settings.json over defaults, then environment"""

    DEFAULT_USER_AGENT = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_12_1) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/55.0.2883.95 Safari/537.36"
    )

    DEFAULT_SETTINGS = {
        # Accounts: list of [login, secret]; login is the account phone number.
        "accounts": [],

        # Upstream
        "base_url": "https://m.vk.com",
        "user_agent": DEFAULT_USER_AGENT,
        "request_timeout_seconds": 15.0,
        "page_size": 50,
        "auth_max_attempts": 3,

        # Storage (relative paths resolve under the data directory)
        "cookie_path": "cookies/{hash}.cookie",
        "mp3_path": "mp3",

        # Cache
        "cache_backend": "sqlite",  # "sqlite" | "memory"
        "cache_ttl_seconds": 24 * 3600,

        # Hash algorithms (any hashlib name)
        "hash_id": "md5",
        "hash_cache": "md5",
        "hash_mp3": "md5",

        # Media
        "download_timeout_seconds": 60.0,
        "min_media_bytes": 170,

        # Public links; empty means "use the incoming request's base URL".
        "public_url": "",
    }

    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        if data_dir is None:
            data_dir = str(os.environ.get("DATMUSIC_DATA_DIR", "") or "").strip()
        self.settings_dir = Path(data_dir).expanduser() if data_dir else (Path.home() / ".datmusic")
        self.settings_dir.mkdir(parents=True, exist_ok=True)
        self.settings_file = self.settings_dir / "settings.json"

        self._lock = threading.RLock()
        self._settings: Dict[str, Any] = {}
        self._load()

    def _load(self):
        """Load settings from file, then apply environment overrides"""
        with self._lock:
            if self.settings_file.exists():
                try:
                    with open(self.settings_file, 'r', encoding='utf-8') as f:
                        loaded = json.load(f)
                    if not isinstance(loaded, dict):
                        raise ValueError("settings root must be an object")
                    # Merge with defaults (adds new keys if they don't exist)
                    self._settings = {**self.DEFAULT_SETTINGS, **loaded}
                except (OSError, ValueError) as e:
                    logger.error("Error loading settings from %s: %s", self.settings_file, e)
                    self._settings = self.DEFAULT_SETTINGS.copy()
            else:
                self._settings = self.DEFAULT_SETTINGS.copy()

            self._settings["accounts"] = self._normalize_accounts(self._settings.get("accounts"))
            self._apply_env_overrides()

    def _apply_env_overrides(self):
        raw_accounts = str(os.environ.get("DATMUSIC_ACCOUNTS", "") or "").strip()
        if raw_accounts:
            pairs = []
            for chunk in raw_accounts.split(","):
                login, sep, secret = chunk.strip().partition(":")
                if sep and login.strip() and secret:
                    pairs.append([login.strip(), secret])
            if pairs:
                self._settings["accounts"] = pairs
        public_url = str(os.environ.get("DATMUSIC_PUBLIC_URL", "") or "").strip()
        if public_url:
            self._settings["public_url"] = public_url

    @staticmethod
    def _normalize_accounts(value: Any) -> List[List[str]]:
        out: List[List[str]] = []
        if not isinstance(value, (list, tuple)):
            return out
        for entry in value:
            if isinstance(entry, dict):
                login, secret = entry.get("login"), entry.get("secret")
            elif isinstance(entry, (list, tuple)) and len(entry) >= 2:
                login, secret = entry[0], entry[1]
            else:
                continue
            login = str(login or "").strip()
            secret = str(secret or "")
            if login and secret:
                out.append([login, secret])
        return out

    def resolve_path(self, value: Union[str, Path]) -> Path:
        """Expand a configured path; relative paths live under the data directory."""
        path = Path(str(value or "")).expanduser()
        if not path.is_absolute():
            path = self.settings_dir / path
        return path

    def cookie_path_template(self) -> str:
        template = str(self.get("cookie_path", self.DEFAULT_SETTINGS["cookie_path"]) or "")
        if "{hash}" not in template:
            template = self.DEFAULT_SETTINGS["cookie_path"]
        return str(self.resolve_path(template))

    def mp3_folder(self) -> Path:
        folder = self.resolve_path(self.get("mp3_path", "mp3") or "mp3")
        folder.mkdir(parents=True, exist_ok=True)
        return folder

    def accounts(self) -> List[Tuple[str, str]]:
        return [(login, secret) for login, secret in self._normalize_accounts(self.get("accounts", []))]

    def get(self, key: str, default=None) -> Any:
        """Get a setting value"""
        with self._lock:
            return self._settings.get(key, default)
