# devkeyring/schemes.py

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, Tuple, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)
from nacl import signing
from nacl.exceptions import BadSignatureError
from nacl.exceptions import ValueError as NaclValueError

from .core import DerivationError, derive_seed

logger = logging.getLogger(__name__)

# Order of the secp256k1 group.
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

DEFAULT_SCHEME = "ecdsa"


@dataclass(frozen=True)
class KeyPair:
    """Secret seed and public key derived by one scheme."""

    scheme: str
    secret: bytes = field(repr=False)
    public: bytes

    def to_raw_vec(self) -> bytes:
        return self.secret


class KeyDerivation(Protocol):
    name: str

    def derive_from_string(self, suri: str, password: Optional[str] = None) -> KeyPair:
        ...

    def sign(self, pair: KeyPair, message: bytes) -> bytes:
        ...

    def verify(self, signature: bytes, message: bytes, public: bytes) -> bool:
        ...


def _check_pair(scheme: str, pair: KeyPair) -> None:
    if pair.scheme != scheme:
        raise ValueError(f"{pair.scheme} key pair cannot sign with {scheme}")


class EcdsaScheme:
    """
    secp256k1 ECDSA over SHA-256.

    - public keys: compressed SEC1 points, 33 bytes
    - signatures: r || s, 64 bytes big-endian
    """

    name = "ecdsa"
    domain = b"Secp256k1HDKD"

    @staticmethod
    def _private_key(secret: bytes) -> ec.EllipticCurvePrivateKey:
        scalar = int.from_bytes(secret, "big")
        if not 0 < scalar < SECP256K1_N:
            raise DerivationError("seed is not a valid secp256k1 scalar")
        return ec.derive_private_key(scalar, ec.SECP256K1())

    def derive_from_string(self, suri: str, password: Optional[str] = None) -> KeyPair:
        secret = derive_seed(suri, password, self.domain)
        public = self._private_key(secret).public_key().public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.CompressedPoint,
        )
        logger.debug("%s public key %s", self.name, public.hex())
        return KeyPair(self.name, secret, public)

    def sign(self, pair: KeyPair, message: bytes) -> bytes:
        _check_pair(self.name, pair)
        # RFC 6979 nonces: same key and message, same signature
        der = self._private_key(pair.secret).sign(
            bytes(message),
            ec.ECDSA(hashes.SHA256(), deterministic_signing=True),
        )
        r, s = decode_dss_signature(der)
        return r.to_bytes(32, "big") + s.to_bytes(32, "big")

    def verify(self, signature: bytes, message: bytes, public: bytes) -> bool:
        if len(signature) != 64:
            return False

        try:
            pub = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), bytes(public))
        except ValueError:
            return False

        der = encode_dss_signature(
            int.from_bytes(signature[:32], "big"),
            int.from_bytes(signature[32:], "big"),
        )
        try:
            pub.verify(der, bytes(message), ec.ECDSA(hashes.SHA256()))
        except InvalidSignature:
            return False
        return True


class Ed25519Scheme:
    """Ed25519 through PyNaCl, 32-byte public keys."""

    name = "ed25519"
    domain = b"Ed25519HDKD"

    def derive_from_string(self, suri: str, password: Optional[str] = None) -> KeyPair:
        secret = derive_seed(suri, password, self.domain)
        public = signing.SigningKey(secret).verify_key.encode()
        logger.debug("%s public key %s", self.name, public.hex())
        return KeyPair(self.name, secret, public)

    def sign(self, pair: KeyPair, message: bytes) -> bytes:
        _check_pair(self.name, pair)
        return signing.SigningKey(pair.secret).sign(bytes(message)).signature

    def verify(self, signature: bytes, message: bytes, public: bytes) -> bool:
        try:
            vk = signing.VerifyKey(bytes(public))
            vk.verify(bytes(message), bytes(signature))
        except (BadSignatureError, NaclValueError):
            return False
        return True


_SCHEMES: Dict[str, KeyDerivation] = {
    EcdsaScheme.name: EcdsaScheme(),
    Ed25519Scheme.name: Ed25519Scheme(),
}

SchemeLike = Union[str, KeyDerivation, None]


def available_schemes() -> Tuple[str, ...]:
    return tuple(_SCHEMES)


def get_scheme(scheme: SchemeLike = None) -> KeyDerivation:
    """
    Resolve a scheme object from a name, an object or ``None``.

    ``None`` always means ECDSA, so key material never depends on process
    state.
    """
    if scheme is None:
        scheme = DEFAULT_SCHEME

    if isinstance(scheme, str):
        try:
            return _SCHEMES[scheme.lower()]
        except KeyError:
            raise ValueError(
                f"unknown scheme {scheme!r}, expected one of {', '.join(_SCHEMES)}"
            ) from None

    return scheme
