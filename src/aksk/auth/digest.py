"""Canonicalization, hashing and transport encodings for AKSK signatures."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
from collections.abc import Callable, Iterable
from typing import Any, Protocol, Union

from aksk.auth.errors import ConfigurationError

HashConstructor = Callable[[], Any]
HashSpec = Union[str, HashConstructor]


class Encoding(Protocol):
    """Reversible bytes <-> str transport encoding."""

    name: str

    def encode(self, data: bytes) -> str: ...

    def decode(self, value: str) -> bytes:
        """Decode ``value``, raising ``ValueError`` when it is malformed."""
        ...


class HexEncoding:
    """Lowercase hexadecimal."""

    name = "hex"

    def encode(self, data: bytes) -> str:
        return data.hex()

    def decode(self, value: str) -> bytes:
        # unhexlify rejects whitespace, unlike bytes.fromhex
        try:
            return binascii.unhexlify(value.encode("ascii"))
        except UnicodeEncodeError as exc:
            raise ValueError("non-ascii hex string") from exc


class Base64Encoding:
    """Standard or URL-safe base64, padded or raw."""

    def __init__(self, urlsafe: bool = False, padded: bool = True) -> None:
        self._altchars = b"-_" if urlsafe else None
        self._padded = padded
        self.name = ("base64url" if urlsafe else "base64") + ("" if padded else "-raw")

    def encode(self, data: bytes) -> str:
        encoded = base64.b64encode(data, altchars=self._altchars).decode("ascii")
        return encoded if self._padded else encoded.rstrip("=")

    def decode(self, value: str) -> bytes:
        if not self._padded:
            if "=" in value:
                raise ValueError("unexpected padding in raw base64")
            value += "=" * (-len(value) % 4)
        try:
            return base64.b64decode(value.encode("ascii"), altchars=self._altchars, validate=True)
        except UnicodeEncodeError as exc:
            raise ValueError("non-ascii base64 string") from exc


_ENCODINGS: dict[str, Callable[[], Encoding]] = {
    "hex": HexEncoding,
    "base64": lambda: Base64Encoding(),
    "base64url": lambda: Base64Encoding(urlsafe=True),
    "base64-raw": lambda: Base64Encoding(padded=False),
    "base64url-raw": lambda: Base64Encoding(urlsafe=True, padded=False),
}


def get_encoding(name: str) -> Encoding:
    """Resolve an encoding by name."""
    try:
        return _ENCODINGS[name]()
    except KeyError:
        raise ConfigurationError(f"Unknown encoding: {name}") from None


def canonicalize(elements: Iterable[str]) -> bytes:
    """Sort elements, join them without separators and encode as UTF-8.

    Code point order matches the byte order of the UTF-8 encoding, so
    signers in other languages sorting raw bytes agree with this one.
    """
    return "".join(sorted(elements)).encode("utf-8")


class DigestEngine:
    """Hash function plus transport encoding shared by signer and verifier."""

    def __init__(self, hash_func: HashSpec = "sha256", encoding: Encoding | None = None) -> None:
        if isinstance(hash_func, str):
            try:
                probe = hashlib.new(hash_func)
            except ValueError:
                raise ConfigurationError(f"Unknown hash algorithm: {hash_func}") from None
            if probe.digest_size == 0:
                # shake_* need an output length
                raise ConfigurationError(f"Variable-length hash not supported: {hash_func}")
        elif not callable(hash_func):
            raise ConfigurationError("hash_func must be an algorithm name or a hash constructor")
        self._hash_func = hash_func
        self._encoding = encoding or HexEncoding()

    @property
    def hash_func(self) -> HashSpec:
        return self._hash_func

    @property
    def encoding(self) -> Encoding:
        return self._encoding

    @property
    def hash_name(self) -> str:
        if isinstance(self._hash_func, str):
            return self._hash_func
        return str(self._hash_func().name)

    def hash(self, data: bytes) -> bytes:
        """Digest raw bytes with the configured hash."""
        if isinstance(self._hash_func, str):
            h = hashlib.new(self._hash_func)
        else:
            h = self._hash_func()
        h.update(data)
        return bytes(h.digest())

    def mac(self, key: str | bytes, elements: Iterable[str]) -> bytes:
        """HMAC over the canonical form of ``elements``."""
        if isinstance(key, str):
            key = key.encode("utf-8")
        return hmac.new(key, canonicalize(elements), self._hash_func).digest()

    def encode(self, data: bytes) -> str:
        return self._encoding.encode(data)

    def decode(self, value: str) -> bytes:
        return self._encoding.decode(value)

    def with_hash(self, hash_func: HashSpec) -> DigestEngine:
        return DigestEngine(hash_func, self._encoding)

    def with_encoding(self, encoding: Encoding) -> DigestEngine:
        return DigestEngine(self._hash_func, encoding)
