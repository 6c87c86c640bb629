"""
Credential Store
Pool of upstream accounts; each engine instance picks one at random
"""
import random
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Sequence, Tuple

from ..core.errors import ConfigurationError


@dataclass(frozen=True)
class Identity:
    """Upstream account: phone-number login and its password"""
    login: str
    secret: str = field(repr=False)

    @property
    def phone_digits(self) -> str:
        return "".join(ch for ch in self.login if ch.isdigit())


class CredentialStore:
    def __init__(self, accounts: Iterable[Tuple[str, str]], chooser: Callable[[Sequence], object] = random.choice):
        self._identities: List[Identity] = [
            Identity(login=str(login).strip(), secret=str(secret))
            for login, secret in accounts
            if str(login or "").strip() and secret
        ]
        self._chooser = chooser

    @classmethod
    def from_settings(cls, settings) -> "CredentialStore":
        return cls(settings.accounts())

    def __len__(self) -> int:
        return len(self._identities)

    def select(self) -> Identity:
        if not self._identities:
            raise ConfigurationError("No upstream accounts configured.")
        return self._chooser(self._identities)
