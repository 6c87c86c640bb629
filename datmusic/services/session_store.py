"""
Session Store
Persists one cookie jar per identity so sessions survive restarts.
The file name is a hash of the login; stale sessions are detected, never purged here.
"""
from __future__ import annotations

import logging
import os
import tempfile
from http.cookiejar import LoadError, LWPCookieJar
from pathlib import Path

from ..utils.hashing import ensure_algorithm, make_hash
from .credentials import Identity

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, path_template: str, hash_algorithm: str = "md5"):
        if "{hash}" not in path_template:
            raise ValueError("cookie path template must contain {hash}")
        self.path_template = path_template
        self.hash_algorithm = ensure_algorithm(hash_algorithm)

    def key_for(self, identity: Identity) -> str:
        return make_hash(self.hash_algorithm, identity.login)

    def path_for(self, identity: Identity) -> Path:
        return Path(self.path_template.format(hash=self.key_for(identity)))

    def exists(self, identity: Identity) -> bool:
        return self.path_for(identity).is_file()

    def load(self, identity: Identity) -> LWPCookieJar:
        """Cookie jar bound to the identity's file, pre-filled when one was saved."""
        path = self.path_for(identity)
        jar = LWPCookieJar(str(path))
        if path.is_file():
            try:
                jar.load(ignore_discard=True, ignore_expires=True)
            except (LoadError, OSError) as e:
                # An unreadable jar is treated like a missing one; next login overwrites it.
                logger.warning("Ignoring unreadable session file %s: %s", path.name, e)
                jar.clear()
        return jar

    def save(self, jar: LWPCookieJar) -> Path:
        """Write the jar next to its target and rename it into place."""
        path = Path(jar.filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        os.close(fd)
        try:
            jar.save(tmp_name, ignore_discard=True, ignore_expires=True)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.remove(tmp_name)
            except FileNotFoundError:
                pass
            raise
        return path
