"""
Authenticator
Login and security-check state machine for the mobile site.

Only the phone-digit security check is handled: the page shows the country
code and the last digits of the account phone, and expects the digits in
between. Any other check fails with UnsupportedChallenge.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional
import html
import logging
import re

from bs4 import BeautifulSoup

from ..core.errors import FormNotFound, UnsupportedChallenge
from ..core.event_bus import EventBus, Events
from .credentials import Identity
from .session_store import SessionStore
from .transport import Transport

logger = logging.getLogger(__name__)


class AuthState(Enum):
    """Authentication state"""
    UNAUTHENTICATED = "unauthenticated"
    LOGGING_IN = "logging_in"
    CHALLENGE_PENDING = "challenge_pending"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class Authenticator:
    LOGIN_PATH = "login"
    LOGGED_IN_MARKER = "https://login.vk.com/?act=logout"
    CHALLENGE_MARKER = "login.php?act=security_check"
    PHONE_CHALLENGE_MARKER = "все недостающие цифры номера"
    FORM_ACTION_RE = re.compile(r'<form method="post" action="([^"]+)"', re.DOTALL)

    def __init__(
        self,
        transport: Transport,
        identity: Identity,
        session_store: SessionStore,
        event_bus: Optional[EventBus] = None,
        cookie_jar=None,
    ):
        self.transport = transport
        self.identity = identity
        self.session_store = session_store
        self.event_bus = event_bus or EventBus()
        self.cookie_jar = cookie_jar if cookie_jar is not None else transport.cookie_jar
        self.state = AuthState.UNAUTHENTICATED
        self.logins = 0

    def has_session(self) -> bool:
        return self.session_store.exists(self.identity)

    def login(self):
        """Submit the login form with the identity's credentials and persist cookies."""
        self.state = AuthState.LOGGING_IN
        self.logins += 1
        self.event_bus.emit(Events.LOGIN_STARTED, {"attempt": self.logins})
        logger.info("Logging in (attempt %d)", self.logins)

        login_response = self.transport.get(self.LOGIN_PATH)
        action = self.extract_form_url(login_response.text)
        if not action:
            self._fail("Login form not found.")
            raise FormNotFound("Login form not found on login page.")

        self.transport.post(action, data={
            "email": self.identity.login,
            "pass": self.identity.secret,
        })
        self._persist()
        self.event_bus.emit(Events.LOGIN_SUBMITTED, {"attempt": self.logins})

    def is_authenticated(self, response) -> bool:
        """True when the page carries the logged-in marker."""
        ok = self.LOGGED_IN_MARKER in (response.text or "")
        if ok:
            self.state = AuthState.AUTHENTICATED
        return ok

    def requires_challenge(self, response) -> bool:
        return self.CHALLENGE_MARKER in (response.text or "")

    def solve_challenge(self, response):
        """Complete the phone-digit security check shown in ``response``."""
        body = response.text or ""
        self.state = AuthState.CHALLENGE_PENDING
        self.event_bus.emit(Events.CHALLENGE_DETECTED, {"url": getattr(response, "url", "")})
        logger.info("Security check requested")

        if self.PHONE_CHALLENGE_MARKER not in body:
            self._fail("Unsupported security check.")
            raise UnsupportedChallenge("Only the phone number security check is supported.")

        code = self.compute_security_code(body)
        if code is None:
            self._fail("Security check prefixes not found.")
            raise UnsupportedChallenge("Phone number security check markup not recognized.")

        action = self.extract_form_url(body)
        if not action:
            self._fail("Security check form not found.")
            raise FormNotFound("Security check form not found.")

        self.transport.post(action, data={"code": code})
        self._persist()
        self.event_bus.emit(Events.CHALLENGE_SUBMITTED, {})

    def compute_security_code(self, body: str) -> Optional[str]:
        """
        Middle digits of the account phone number.

        The first ``.field_prefix`` holds the country code ("+7"), the second the
        trailing digits ("45"); the code is what lies between them.
        """
        soup = BeautifulSoup(body, "html.parser")
        prefixes = soup.select(".field_prefix")
        if len(prefixes) < 2:
            return None
        left = len(re.sub(r"\D", "", prefixes[0].get_text()))
        right = len(re.sub(r"\D", "", prefixes[1].get_text()))
        digits = self.identity.phone_digits
        if left + right >= len(digits):
            return None
        return digits[left:len(digits) - right]

    @classmethod
    def extract_form_url(cls, body: str) -> Optional[str]:
        match = cls.FORM_ACTION_RE.search(body or "")
        if not match:
            return None
        return html.unescape(match.group(1))

    def _persist(self):
        self.session_store.save(self.cookie_jar)

    def _fail(self, reason: str):
        self.state = AuthState.FAILED
        self.event_bus.emit(Events.AUTH_FAILED, {"reason": reason})
        logger.warning("Authentication failed: %s", reason)
