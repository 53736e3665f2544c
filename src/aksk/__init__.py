"""
aksk: Access-key/secret-key request authentication for HTTP services.

Shared-secret HMAC signing for service-to-service calls: a signer for the
calling side, a verifier and starlette middleware for the receiving side.
"""

__version__ = "1.0.0"

from aksk.auth.config import AuthConfig, default_config
from aksk.auth.errors import AkskError, ConfigurationError, ErrorKind
from aksk.auth.signer import RequestSigner, SignedRequest, new_request_func, sign_request
from aksk.auth.store import StaticSecretStore
from aksk.auth.verifier import SignedHeaders, Verifier

__all__ = [
    "AkskError",
    "AuthConfig",
    "ConfigurationError",
    "ErrorKind",
    "RequestSigner",
    "SignedHeaders",
    "SignedRequest",
    "StaticSecretStore",
    "Verifier",
    "default_config",
    "new_request_func",
    "sign_request",
]
