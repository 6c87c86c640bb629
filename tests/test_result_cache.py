import unittest

from datmusic.core.cache_store import MemoryCacheStore
from datmusic.core.errors import ConfigurationError
from datmusic.core.result_cache import ResultCache
from datmusic.models.audio_item import AudioItem
from datmusic.models.search_query import SearchQuery
from datmusic.utils.hashing import make_hash


class _Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _items(n=3):
    return [
        AudioItem(id=f"id{i}", artist=f"Artist {i}", title=f"Title {i}", duration=100 + i, mp3=f"https://cs/{i}.mp3")
        for i in range(n)
    ]


class TestSearchQuery(unittest.TestCase):
    def test_cache_key_is_hash_of_query_and_page(self):
        key = SearchQuery.create("imagine dragons", 0).cache_key("md5")
        self.assertEqual(key, make_hash("md5", "imagine dragons0"))

    def test_cache_key_is_deterministic(self):
        a = SearchQuery.create("  imagine dragons ", "2").cache_key("sha1")
        b = SearchQuery.create("imagine dragons", 2).cache_key("sha1")
        self.assertEqual(a, b)
        self.assertNotEqual(a, SearchQuery.create("imagine dragons", 3).cache_key("sha1"))

    def test_invalid_page_normalizes_to_zero(self):
        self.assertEqual(SearchQuery.create("q", "abc").page, 0)
        self.assertEqual(SearchQuery.create("q", -4).page, 0)
        self.assertEqual(SearchQuery.create("q", 3).offset(50), 150)


class TestResultCache(unittest.TestCase):
    def setUp(self):
        self.clock = _Clock()
        self.cache = ResultCache(MemoryCacheStore(clock=self.clock), ttl_seconds=60, hash_algorithm="md5")

    def test_round_trip_keeps_order_and_private_fields(self):
        key = self.cache.key_for(SearchQuery.create("q", 0))
        self.cache.put(key, _items())
        loaded = self.cache.get(key)
        self.assertEqual([i.id for i in loaded], ["id0", "id1", "id2"])
        self.assertEqual(loaded[1].mp3, "https://cs/1.mp3")

    def test_empty_result_set_is_still_a_hit(self):
        self.cache.put("k", [])
        self.assertEqual(self.cache.get("k"), [])
        self.assertIsNone(self.cache.find("k", "id0"))

    def test_find_and_expiry(self):
        self.cache.put("k", _items())
        self.assertEqual(self.cache.find("k", "id2").title, "Title 2")
        self.assertIsNone(self.cache.find("k", "nope"))
        self.clock.now += 61
        self.assertIsNone(self.cache.get("k"))
        self.assertIsNone(self.cache.find("k", "id2"))

    def test_unknown_algorithm_is_configuration_error(self):
        with self.assertRaises(ConfigurationError):
            ResultCache(MemoryCacheStore(), ttl_seconds=1, hash_algorithm="nope")


if __name__ == "__main__":
    unittest.main()
