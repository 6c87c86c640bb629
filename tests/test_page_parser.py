import unittest

from datmusic.sources.page_parser import AudioPageParser
from datmusic.utils.hashing import make_hash


def _item_html(artist, title, duration, mp3):
    return (
        '<div class="audio_item ai_has_btn">'
        '<div class="ai_info">'
        f'<span class="ai_artist">{artist}</span>'
        f'<span class="ai_title">{title}</span>'
        f'<div class="ai_dur" data-dur="{duration}">3:23</div>'
        '</div>'
        f'<input type="hidden" value="{mp3}">'
        '</div>'
    )


class TestAudioPageParser(unittest.TestCase):
    def setUp(self):
        self.parser = AudioPageParser("md5")

    def test_parses_all_fields(self):
        html = "<html><body>" + _item_html(
            "Imagine Dragons", "Believer", 204, "https://cs1.example/a.mp3?extra=1"
        ) + "</body></html>"
        items = self.parser.parse(html)
        self.assertEqual(len(items), 1)
        item = items[0]
        self.assertEqual(item.artist, "Imagine Dragons")
        self.assertEqual(item.title, "Believer")
        self.assertEqual(item.duration, 204)
        self.assertEqual(item.mp3, "https://cs1.example/a.mp3?extra=1")
        self.assertEqual(item.id, make_hash("md5", "https://cs1.example/a.mp3?extra=1"))

    def test_keeps_page_order(self):
        html = "".join(_item_html(f"A{i}", f"T{i}", i, f"https://cs.example/{i}.mp3") for i in range(5))
        items = self.parser.parse(html)
        self.assertEqual([i.title for i in items], ["T0", "T1", "T2", "T3", "T4"])

    def test_id_depends_only_on_media_url(self):
        url = "https://cs.example/same.mp3"
        plain = self.parser.parse(_item_html("X", "Y", 1, url))[0]
        nested = self.parser.parse(
            '<ul><li><div class="audio_item"><b><span class="ai_artist">Other</span></b>'
            f'<input type="hidden" value="{url}"></div></li></ul>'
        )[0]
        self.assertEqual(plain.id, nested.id)

    def test_nested_markup_collapses_whitespace(self):
        html = (
            '<div class="audio_item"><span class="ai_artist"> Imagine\n  <em>Dragons</em> </span>'
            '<span class="ai_title">Thunder &amp; Lightning</span></div>'
        )
        item = self.parser.parse(html)[0]
        self.assertEqual(item.artist, "Imagine Dragons")
        self.assertEqual(item.title, "Thunder & Lightning")

    def test_missing_fields_degrade_to_empty_values(self):
        items = self.parser.parse('<div class="audio_item"><span>nothing useful</span></div>')
        self.assertEqual(len(items), 1)
        item = items[0]
        self.assertEqual(item.artist, "")
        self.assertEqual(item.title, "")
        self.assertEqual(item.duration, 0)
        self.assertEqual(item.mp3, "")

    def test_non_numeric_duration_is_zero(self):
        item = self.parser.parse(_item_html("A", "B", "abc", "https://cs.example/x.mp3"))[0]
        self.assertEqual(item.duration, 0)

    def test_page_without_items_is_empty(self):
        self.assertEqual(self.parser.parse("<html><body>Ничего не найдено</body></html>"), [])
        self.assertEqual(self.parser.parse(""), [])


if __name__ == "__main__":
    unittest.main()
