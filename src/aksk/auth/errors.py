"""AKSK error taxonomy."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Reasons a request fails signing or verification."""

    IDENTIFIER_EMPTY = "identifier-empty"
    SECRET_EMPTY = "secret-empty"
    SECRET_NOT_FOUND = "secret-not-found"
    TIMESTAMP_EMPTY = "timestamp-empty"
    TIMESTAMP_MALFORMED = "timestamp-malformed"
    TIMESTAMP_EXPIRED = "timestamp-expired"
    TIMESTAMP_FUTURE_SKEW = "timestamp-future-skew"
    SIGNATURE_EMPTY = "signature-empty"
    SIGNATURE_DECODE_FAILURE = "signature-decode-failure"
    SIGNATURE_MISMATCH = "signature-mismatch"
    BODY_DIGEST_MISSING = "body-digest-missing"
    BODY_DIGEST_DECODE_FAILURE = "body-digest-decode-failure"
    BODY_DIGEST_MISMATCH = "body-digest-mismatch"
    BODY_READ_FAILURE = "body-read-failure"
    RANDOM_SOURCE_FAILURE = "random-source-failure"


# Decode failures and mismatches share one message so a forged request
# learns nothing about which part was wrong.
_PUBLIC_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.IDENTIFIER_EMPTY: "missing access key",
    ErrorKind.SECRET_EMPTY: "invalid access key",
    ErrorKind.SECRET_NOT_FOUND: "invalid access key",
    ErrorKind.TIMESTAMP_EMPTY: "missing request timestamp",
    ErrorKind.TIMESTAMP_MALFORMED: "invalid request timestamp",
    ErrorKind.TIMESTAMP_EXPIRED: "request timestamp expired",
    ErrorKind.TIMESTAMP_FUTURE_SKEW: "invalid request timestamp",
    ErrorKind.SIGNATURE_EMPTY: "missing request signature",
    ErrorKind.SIGNATURE_DECODE_FAILURE: "invalid request signature",
    ErrorKind.SIGNATURE_MISMATCH: "invalid request signature",
    ErrorKind.BODY_DIGEST_MISSING: "invalid request body",
    ErrorKind.BODY_DIGEST_DECODE_FAILURE: "invalid request body",
    ErrorKind.BODY_DIGEST_MISMATCH: "invalid request body",
    ErrorKind.BODY_READ_FAILURE: "invalid request body",
    ErrorKind.RANDOM_SOURCE_FAILURE: "failed to generate request nonce",
}


class AkskError(Exception):
    """Signing or verification failure.

    ``message`` is safe to return to a client; ``detail`` is for logs only.
    """

    def __init__(self, kind: ErrorKind, detail: str | None = None) -> None:
        self.kind = kind
        self.message = _PUBLIC_MESSAGES[kind]
        self.detail = detail
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"AkskError({self.kind.value!r})"

    def to_dict(self) -> dict[str, str]:
        return {"message": self.message}


class ConfigurationError(Exception):
    """Misuse of the configuration API, raised at setup time."""

    pass
