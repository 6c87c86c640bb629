"""
Hash helpers
Stable hex digests used for item ids, cache keys, cookie and media file names.
"""
import hashlib

from ..core.errors import ConfigurationError


def ensure_algorithm(algorithm: str) -> str:
    """Return the normalized algorithm name or raise ConfigurationError."""
    name = str(algorithm or "").strip().lower()
    if name not in hashlib.algorithms_available:
        raise ConfigurationError(f"Unsupported hash algorithm: {algorithm!r}")
    return name


def make_hash(algorithm: str, value: str) -> str:
    """Hex digest of a text value with the configured algorithm."""
    digest = hashlib.new(ensure_algorithm(algorithm), str(value).encode("utf-8"))
    if digest.name.startswith("shake_"):
        return digest.hexdigest(32)
    return digest.hexdigest()
