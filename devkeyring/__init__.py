# devkeyring/__init__.py

from .core import (
    DEV_PHRASE,
    DerivationError,
    derive_seed,
    hkdf_sha256,
    parse_secret_uri,
)
from .keyring import Keyring
from .schemes import (
    EcdsaScheme,
    Ed25519Scheme,
    KeyDerivation,
    KeyPair,
    available_schemes,
    get_scheme,
)

__all__ = [
    "DEV_PHRASE",
    "DerivationError",
    "derive_seed",
    "hkdf_sha256",
    "parse_secret_uri",
    "Keyring",
    "EcdsaScheme",
    "Ed25519Scheme",
    "KeyDerivation",
    "KeyPair",
    "available_schemes",
    "get_scheme",
]
