import hashlib
import unittest
from http.cookiejar import LWPCookieJar

from datmusic.core.errors import ConfigurationError
from datmusic.core.event_bus import EventBus, Events
from datmusic.services.transport import Transport
from datmusic.utils.file_utils import audio_filename, sanitize_filename
from datmusic.utils.hashing import ensure_algorithm, make_hash


class TestHashing(unittest.TestCase):
    def test_matches_hashlib(self):
        self.assertEqual(make_hash("md5", "abc"), hashlib.md5(b"abc").hexdigest())
        self.assertEqual(make_hash("SHA256", "abc"), hashlib.sha256(b"abc").hexdigest())

    def test_unknown_algorithm(self):
        with self.assertRaises(ConfigurationError):
            ensure_algorithm("crc-nope")
        with self.assertRaises(ConfigurationError):
            make_hash("", "abc")


class TestFileUtils(unittest.TestCase):
    def test_sanitize_filename(self):
        self.assertEqual(sanitize_filename('a<b>c:"d"'), "a_b_c__d_")
        self.assertEqual(sanitize_filename("  spaced \t out.mp3 "), "spaced out.mp3")
        self.assertEqual(sanitize_filename("CON.mp3"), "_CON.mp3")
        self.assertEqual(sanitize_filename("..."), "unnamed")

    def test_long_names_keep_extension(self):
        name = audio_filename("x" * 300, "y")
        self.assertTrue(name.endswith(".mp3"))
        self.assertLessEqual(len(name), 255)

    def test_audio_filename_with_missing_parts(self):
        self.assertEqual(audio_filename("", "Title"), "Title.mp3")
        self.assertEqual(audio_filename("", ""), "unnamed.mp3")


class _Session:
    def __init__(self):
        self.headers = {}
        self.cookies = None
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))

    def head(self, url, **kwargs):
        self.calls.append(("HEAD", url, kwargs))


class TestTransport(unittest.TestCase):
    def setUp(self):
        self.session = _Session()
        self.jar = LWPCookieJar()
        self.transport = Transport("https://m.vk.com", "UA/1.0", cookie_jar=self.jar, timeout=7, session=self.session)

    def test_session_identity(self):
        self.assertEqual(self.session.headers["User-Agent"], "UA/1.0")
        self.assertNotIn("Accept-Language", self.session.headers)
        self.assertIs(self.transport.cookie_jar, self.jar)

    def test_urls_resolve_against_base(self):
        self.assertEqual(self.transport.url("audio"), "https://m.vk.com/audio")
        self.assertEqual(self.transport.url("/login.php?act=x"), "https://m.vk.com/login.php?act=x")
        self.assertEqual(self.transport.url("https://login.vk.com/?act=login"), "https://login.vk.com/?act=login")

    def test_requests_carry_default_timeout(self):
        self.transport.get("audio", params={"q": "x"})
        self.transport.post("login", data={"email": "1"}, timeout=3)
        self.transport.head("audio")
        get, post, head = self.session.calls
        self.assertEqual(get[2]["timeout"], 7.0)
        self.assertEqual(get[2]["params"], {"q": "x"})
        self.assertEqual(post[2]["timeout"], 3)
        self.assertTrue(head[2]["allow_redirects"])


class TestEventBus(unittest.TestCase):
    def test_handler_errors_do_not_stop_delivery(self):
        bus = EventBus()
        seen = []

        def broken(event, data):
            raise RuntimeError("boom")

        bus.subscribe(Events.SEARCH_COMPLETED, broken)
        bus.subscribe(Events.SEARCH_COMPLETED, lambda event, data: seen.append((event, data)))
        with self.assertLogs("datmusic.core.event_bus", level="ERROR"):
            bus.emit(Events.SEARCH_COMPLETED, {"count": 1})
        self.assertEqual(seen, [(Events.SEARCH_COMPLETED, {"count": 1})])

    def test_unsubscribe(self):
        bus = EventBus()
        seen = []
        handler = lambda event, data: seen.append(event)
        bus.subscribe_all(handler)
        bus.unsubscribe(Events.LOGIN_STARTED, handler)
        bus.emit(Events.LOGIN_STARTED)
        bus.emit(Events.AUTH_FAILED)
        self.assertEqual(seen, [Events.AUTH_FAILED])


if __name__ == "__main__":
    unittest.main()
