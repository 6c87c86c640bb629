"""
Audio Item Model
Represents one scraped audio track; identity is the hash of its media URL
"""
from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class AudioItem:
    """Audio search result"""
    id: str
    artist: str
    title: str
    duration: int  # seconds
    mp3: str  # private media URL, never returned to callers

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AudioItem":
        try:
            duration = int(data.get("duration") or 0)
        except (TypeError, ValueError):
            duration = 0
        return cls(
            id=str(data.get("id") or ""),
            artist=str(data.get("artist") or ""),
            title=str(data.get("title") or ""),
            duration=duration,
            mp3=str(data.get("mp3") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Cache representation, including private fields"""
        return asdict(self)

    def to_public(self, cache_key: str, base_url: str = "") -> Dict[str, Any]:
        """Response representation: private fields dropped, links attached"""
        base = (base_url or "").rstrip("/")
        return {
            "artist": self.artist,
            "title": self.title,
            "duration": self.duration,
            "download": f"{base}/{cache_key}/{self.id}",
            "stream": f"{base}/stream/{cache_key}/{self.id}",
        }
