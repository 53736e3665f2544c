"""AKSK signing and verification."""

from aksk.auth.config import AuthConfig, DiscardLogger, default_config
from aksk.auth.digest import (
    Base64Encoding,
    DigestEngine,
    Encoding,
    HexEncoding,
    canonicalize,
    get_encoding,
)
from aksk.auth.errors import AkskError, ConfigurationError, ErrorKind
from aksk.auth.headers import (
    AUTH_HEADERS,
    HEADER_ACCESS_KEY,
    HEADER_BODY_HASH,
    HEADER_NONCE,
    HEADER_SIGNATURE,
    HEADER_TIMESTAMP,
)
from aksk.auth.signer import RequestSigner, SignedRequest, new_request_func, sign_request
from aksk.auth.store import CallableSecretStore, SecretStore, StaticSecretStore
from aksk.auth.verifier import SignedHeaders, Verifier, check_body, validate_timestamp

__all__ = [
    # Config
    "AuthConfig",
    "DiscardLogger",
    "default_config",
    # Digest
    "Base64Encoding",
    "DigestEngine",
    "Encoding",
    "HexEncoding",
    "canonicalize",
    "get_encoding",
    # Errors
    "AkskError",
    "ConfigurationError",
    "ErrorKind",
    # Headers
    "AUTH_HEADERS",
    "HEADER_ACCESS_KEY",
    "HEADER_BODY_HASH",
    "HEADER_NONCE",
    "HEADER_SIGNATURE",
    "HEADER_TIMESTAMP",
    # Signer
    "RequestSigner",
    "SignedRequest",
    "new_request_func",
    "sign_request",
    # Store
    "CallableSecretStore",
    "SecretStore",
    "StaticSecretStore",
    # Verifier
    "SignedHeaders",
    "Verifier",
    "check_body",
    "validate_timestamp",
]
