# devkeyring/core.py

import hashlib
import logging
import re
import unicodedata
from typing import NamedTuple, Optional, Tuple

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

logger = logging.getLogger(__name__)

# Well-known development phrase, used when a secret URI has no phrase part.
DEV_PHRASE = "bottom drive obey lake curtain smoke basket hold race lonely fit walk"

JUNCTION_ID_LEN = 32

_SURI_RE = re.compile(
    r"(?P<phrase>[\w ]+)?(?P<path>(?://?[^/]+)*)(?:///(?P<password>.*))?"
)
_JUNCTION_RE = re.compile(r"/(/?[^/]+)")
_U64_RE = re.compile(r"[0-9]+")


class DerivationError(ValueError):
    """Raised when a secret URI cannot be turned into key material."""


# ---------- HKDF (SHA-256) ----------

def hkdf_sha256(ikm: bytes, salt: bytes, info: bytes, length: int = 32) -> bytes:
    """
    HKDF-SHA256 (RFC 5869) used for every hard junction:

    - IKM: the parent 32-byte seed
    - Salt: the scheme domain, b"Secp256k1HDKD" or b"Ed25519HDKD"
    - Info: the 32-byte junction chain code
    - Output length: 32 bytes

    An empty salt means HashLen zero bytes.
    """
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=salt or None,
        info=info,
    )
    return hkdf.derive(ikm)


# ---------- Junctions ----------

def _compact_len(n: int) -> bytes:
    # SCALE compact encoding, enough for any realistic junction name
    if n < 1 << 6:
        return bytes([n << 2])
    if n < 1 << 14:
        return ((n << 2) | 0b01).to_bytes(2, "little")
    if n < 1 << 30:
        return ((n << 2) | 0b10).to_bytes(4, "little")
    raise DerivationError("junction too long")


def encode_junction(text: str) -> bytes:
    """
    Encode junction text the way it is fed into the chain code.

    Decimal text that fits in a u64 is encoded as 8 little-endian bytes,
    anything else as a length-prefixed UTF-8 string.
    """
    if _U64_RE.fullmatch(text) and int(text) < 1 << 64:
        return int(text).to_bytes(8, "little")
    raw = text.encode("utf-8")
    return _compact_len(len(raw)) + raw


class DeriveJunction(NamedTuple):
    chain_code: bytes
    hard: bool

    @classmethod
    def from_text(cls, text: str, hard: bool) -> "DeriveJunction":
        encoded = encode_junction(text)
        if len(encoded) > JUNCTION_ID_LEN:
            chain_code = hashlib.blake2b(encoded, digest_size=JUNCTION_ID_LEN).digest()
        else:
            chain_code = encoded.ljust(JUNCTION_ID_LEN, b"\x00")
        return cls(chain_code, hard)


class SecretUri(NamedTuple):
    phrase: Optional[str]
    junctions: Tuple[DeriveJunction, ...]
    password: Optional[str]


def parse_secret_uri(suri: str) -> SecretUri:
    """
    Split a secret URI of the form ``phrase//hard/soft///password``.

    Every part is optional: ``//Alice`` has no phrase and one hard junction.
    """
    m = _SURI_RE.fullmatch(suri)
    if m is None:
        raise DerivationError(f"invalid secret URI: {suri!r}")

    junctions = []
    for part in _JUNCTION_RE.findall(m.group("path") or ""):
        if part.startswith("/"):
            junctions.append(DeriveJunction.from_text(part[1:], hard=True))
        else:
            junctions.append(DeriveJunction.from_text(part, hard=False))

    phrase = m.group("phrase")
    if phrase is not None and not phrase.strip():
        phrase = None

    return SecretUri(phrase=phrase, junctions=tuple(junctions), password=m.group("password"))


# ---------- Seeds ----------

def root_seed(phrase: Optional[str], password: Optional[str] = None) -> bytes:
    """
    Turn the phrase part of a secret URI into a 32-byte root seed.

    A ``0x`` prefixed phrase is taken as the raw seed in hex. Any other
    phrase is normalised and stretched with PBKDF2-HMAC-SHA512.
    """
    if phrase is None:
        phrase = DEV_PHRASE

    phrase = phrase.strip()
    if phrase.startswith("0x"):
        try:
            seed = bytes.fromhex(phrase[2:])
        except ValueError as exc:
            raise DerivationError("seed is not valid hex") from exc
        if len(seed) != 32:
            raise DerivationError("hex seed must be 32 bytes (64 hex chars)")
        return seed

    normalized = unicodedata.normalize("NFKD", " ".join(phrase.split()))
    salt = b"mnemonic" + unicodedata.normalize("NFKD", password or "").encode("utf-8")
    return hashlib.pbkdf2_hmac("sha512", normalized.encode("utf-8"), salt, 2048)[:32]


def derive_hard(seed: bytes, junction: DeriveJunction, domain: bytes) -> bytes:
    if not junction.hard:
        raise DerivationError("soft derivation is not supported")
    return hkdf_sha256(ikm=seed, salt=domain, info=junction.chain_code, length=32)


def derive_seed(suri: str, password: Optional[str], domain: bytes) -> bytes:
    """
    Deterministically derive a 32-byte secret seed from a secret URI.

    ``password`` overrides any ``///password`` given in the URI itself.
    ``domain`` separates the derivation trees of different schemes.
    """
    uri = parse_secret_uri(suri)
    if password is None:
        password = uri.password

    seed = root_seed(uri.phrase, password)
    for junction in uri.junctions:
        seed = derive_hard(seed, junction, domain)

    logger.debug(
        "derived seed for %s (%d junctions, dev phrase: %s)",
        domain.decode("ascii", "replace"),
        len(uri.junctions),
        uri.phrase is None,
    )
    return seed
