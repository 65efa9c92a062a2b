# devkeyring/keyring.py

import enum
import logging
from typing import Dict, Iterator

from .core import DerivationError
from .schemes import KeyPair, SchemeLike, get_scheme

logger = logging.getLogger(__name__)


class Keyring(enum.Enum):
    """
    Set of named test accounts.

    Every account derives its key pair from the seed string ``//<Label>``,
    so the keys are the same on every run and on every machine.
    """

    Alice = "Alice"
    Bob = "Bob"
    Charlie = "Charlie"
    Dave = "Dave"
    Eve = "Eve"
    Ferdie = "Ferdie"
    One = "One"
    Two = "Two"

    def __str__(self) -> str:
        return self.value

    def to_seed(self) -> str:
        return f"//{self.value}"

    def pair(self, scheme: SchemeLike = None) -> KeyPair:
        """
        Derive the key pair afresh. Derivation of these fixed seed strings
        cannot fail unless the crypto backend is broken.
        """
        backend = get_scheme(scheme)
        try:
            return backend.derive_from_string(self.to_seed(), None)
        except DerivationError as exc:
            logger.error("%s derivation failed for %s: %s", backend.name, self.to_seed(), exc)
            raise AssertionError("static values are known good") from exc

    def public(self, scheme: SchemeLike = None) -> bytes:
        return self.pair(scheme).public

    def sign(self, message: bytes, scheme: SchemeLike = None) -> bytes:
        backend = get_scheme(scheme)
        return backend.sign(self.pair(backend), message)

    @classmethod
    def iter(cls) -> Iterator["Keyring"]:
        """Iterate over all test accounts in declaration order."""
        return iter(cls)

    @classmethod
    def from_name(cls, name: str) -> "Keyring":
        for member in cls:
            if member.value.lower() == name.lower():
                return member
        raise ValueError(
            f"unknown test account {name!r}, expected one of {', '.join(m.value for m in cls)}"
        )

    @classmethod
    def all_public(cls, scheme: SchemeLike = None) -> Dict["Keyring", bytes]:
        backend = get_scheme(scheme)
        return {member: member.public(backend) for member in cls}
