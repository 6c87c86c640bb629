"""
Audio Page Parser
Extracts audio items from the mobile site's search results markup.

Each ``.audio_item`` is re-parsed on its own so broken nested markup in one
item can't leak into the next. Missing pieces degrade to "" / 0 instead of
dropping the page.
"""
from typing import List, Optional

from bs4 import BeautifulSoup

from ..models.audio_item import AudioItem
from ..utils.hashing import ensure_algorithm, make_hash


class AudioPageParser:
    ITEM_SELECTOR = ".audio_item"
    ARTIST_SELECTOR = ".ai_artist"
    TITLE_SELECTOR = ".ai_title"
    DURATION_SELECTOR = ".ai_dur"
    DURATION_ATTR = "data-dur"
    MEDIA_SELECTOR = "input[type=hidden]"

    def __init__(self, hash_algorithm: str = "md5"):
        self.hash_algorithm = ensure_algorithm(hash_algorithm)

    def parse(self, html_content) -> List[AudioItem]:
        soup = BeautifulSoup(html_content or "", "html.parser")
        return [self._parse_item(node.decode_contents()) for node in soup.select(self.ITEM_SELECTOR)]

    def item_id(self, media_url: str) -> str:
        return make_hash(self.hash_algorithm, media_url)

    def _parse_item(self, fragment: str) -> AudioItem:
        audio = BeautifulSoup(fragment, "html.parser")
        mp3 = self._attr(audio, self.MEDIA_SELECTOR, "value")
        return AudioItem(
            id=self.item_id(mp3),
            artist=self._text(audio, self.ARTIST_SELECTOR),
            title=self._text(audio, self.TITLE_SELECTOR),
            duration=self._int(self._attr(audio, self.DURATION_SELECTOR, self.DURATION_ATTR)),
            mp3=mp3,
        )

    @staticmethod
    def _text(soup: BeautifulSoup, selector: str) -> str:
        node = soup.select_one(selector)
        if node is None:
            return ""
        return " ".join(node.get_text().split())

    @staticmethod
    def _attr(soup: BeautifulSoup, selector: str, attr: str) -> str:
        node = soup.select_one(selector)
        if node is None:
            return ""
        value: Optional[str] = node.get(attr)
        return str(value or "").strip()

    @staticmethod
    def _int(raw: str) -> int:
        try:
            return int(float(raw))
        except (TypeError, ValueError):
            return 0
