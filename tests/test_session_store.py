import tempfile
import unittest
from http.cookiejar import Cookie
from pathlib import Path

from datmusic.core.errors import ConfigurationError
from datmusic.services.credentials import CredentialStore, Identity
from datmusic.services.session_store import SessionStore
from datmusic.utils.hashing import make_hash


def _cookie(name, value):
    return Cookie(
        version=0, name=name, value=value, port=None, port_specified=False,
        domain=".vk.com", domain_specified=True, domain_initial_dot=True,
        path="/", path_specified=True, secure=True, expires=None, discard=True,
        comment=None, comment_url=None, rest={}, rfc2109=False,
    )


class TestSessionStore(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.template = str(Path(self._tmp.name) / "cookies" / "{hash}.cookie")
        self.store = SessionStore(self.template, "md5")
        self.identity = Identity("79123456745", "secret")

    def test_path_uses_hash_of_login(self):
        expected = Path(self._tmp.name) / "cookies" / f"{make_hash('md5', '79123456745')}.cookie"
        self.assertEqual(self.store.path_for(self.identity), expected)
        self.assertEqual(self.store.path_for(Identity("79123456745", "other")), expected)

    def test_missing_session_loads_empty_jar(self):
        self.assertFalse(self.store.exists(self.identity))
        jar = self.store.load(self.identity)
        self.assertEqual(len(jar), 0)
        self.assertEqual(jar.filename, str(self.store.path_for(self.identity)))

    def test_save_and_reload_session_cookies(self):
        jar = self.store.load(self.identity)
        jar.set_cookie(_cookie("remixsid", "abc"))
        self.store.save(jar)
        self.assertTrue(self.store.exists(self.identity))

        reloaded = self.store.load(self.identity)
        self.assertEqual({c.name: c.value for c in reloaded}, {"remixsid": "abc"})
        leftovers = [p.name for p in self.store.path_for(self.identity).parent.iterdir() if p.name.endswith(".tmp")]
        self.assertEqual(leftovers, [])

    def test_corrupt_session_file_loads_empty(self):
        path = self.store.path_for(self.identity)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("garbage", encoding="utf-8")
        self.assertEqual(len(self.store.load(self.identity)), 0)

    def test_template_requires_hash_placeholder(self):
        with self.assertRaises(ValueError):
            SessionStore("/tmp/cookie.txt")


class TestCredentialStore(unittest.TestCase):
    def test_select_uses_chooser(self):
        store = CredentialStore([("111", "a"), ("222", "b")], chooser=lambda seq: seq[-1])
        self.assertEqual(store.select(), Identity("222", "b"))
        self.assertEqual(len(store), 2)

    def test_blank_entries_are_skipped(self):
        store = CredentialStore([("", "a"), ("333", "")])
        self.assertEqual(len(store), 0)
        with self.assertRaises(ConfigurationError):
            store.select()

    def test_secret_not_in_repr(self):
        self.assertNotIn("hunter2", repr(Identity("79000000000", "hunter2")))

    def test_phone_digits(self):
        self.assertEqual(Identity("+7 (912) 345-67-45", "x").phone_digits, "79123456745")


if __name__ == "__main__":
    unittest.main()
