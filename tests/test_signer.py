"""Tests for request signing."""

import hashlib
import time
from unittest.mock import patch

import pytest

from aksk.auth.config import AuthConfig
from aksk.auth.digest import Base64Encoding, DigestEngine
from aksk.auth.errors import AkskError, ErrorKind
from aksk.auth.headers import (
    HEADER_ACCESS_KEY,
    HEADER_BODY_HASH,
    HEADER_NONCE,
    HEADER_SIGNATURE,
    HEADER_TIMESTAMP,
)
from aksk.auth.signer import RequestSigner, new_request_func, sign_request
from aksk.auth.verifier import Verifier

from conftest import ACCESS_KEY, SECRET_KEY

BODY = b'{"param":"a"}'


class TestRequestSigner:
    """Test signer construction and header generation."""

    def test_empty_access_key(self):
        with pytest.raises(AkskError) as exc_info:
            RequestSigner("", SECRET_KEY)
        assert exc_info.value.kind == ErrorKind.IDENTIFIER_EMPTY

    def test_empty_secret_key(self):
        with pytest.raises(AkskError) as exc_info:
            RequestSigner(ACCESS_KEY, "")
        assert exc_info.value.kind == ErrorKind.SECRET_EMPTY

    def test_repr_hides_secret(self):
        assert SECRET_KEY not in repr(RequestSigner(ACCESS_KEY, SECRET_KEY))

    def test_headers_present(self, config):
        signed = RequestSigner(ACCESS_KEY, SECRET_KEY, config).sign("post", "http://localhost/e", BODY)

        assert signed.method == "POST"
        assert signed.url == "http://localhost/e"
        assert signed.body == BODY
        assert signed.headers[HEADER_ACCESS_KEY] == ACCESS_KEY
        assert signed.headers[HEADER_BODY_HASH] == hashlib.sha256(BODY).hexdigest()
        assert abs(int(signed.headers[HEADER_TIMESTAMP]) - time.time()) < 5
        assert len(signed.headers[HEADER_SIGNATURE]) == 64

    def test_signature_covers_sorted_fields(self, config):
        signed = RequestSigner(ACCESS_KEY, SECRET_KEY, config).sign("POST", "/e", BODY)
        h = signed.headers
        expected = config.digest.mac(
            SECRET_KEY,
            [h[HEADER_BODY_HASH], h[HEADER_TIMESTAMP], h[HEADER_NONCE], ACCESS_KEY],
        )
        assert h[HEADER_SIGNATURE] == expected.hex()

    def test_empty_body_has_no_hash(self, config):
        signed = RequestSigner(ACCESS_KEY, SECRET_KEY, config).sign("GET", "/e")
        assert HEADER_BODY_HASH not in signed.headers

    def test_nonce_is_encoded_random_bytes(self, config):
        signer = RequestSigner(ACCESS_KEY, SECRET_KEY, config)
        first = signer.sign("GET", "/e").headers[HEADER_NONCE]
        second = signer.sign("GET", "/e").headers[HEADER_NONCE]
        assert len(bytes.fromhex(first)) == 6
        assert first != second

    def test_nonce_length_configurable(self):
        config = AuthConfig(nonce_bytes=8)
        nonce = RequestSigner(ACCESS_KEY, SECRET_KEY, config).sign("GET", "/e").headers[HEADER_NONCE]
        assert len(bytes.fromhex(nonce)) == 8

    def test_identical_requests_get_distinct_signatures(self, config):
        signer = RequestSigner(ACCESS_KEY, SECRET_KEY, config)
        a = signer.sign("POST", "/e", BODY).headers[HEADER_SIGNATURE]
        b = signer.sign("POST", "/e", BODY).headers[HEADER_SIGNATURE]
        assert a != b

    def test_str_body_encoded_utf8(self, config):
        signed = RequestSigner(ACCESS_KEY, SECRET_KEY, config).sign("POST", "/e", '{"k":"é"}')
        assert signed.body == '{"k":"é"}'.encode("utf-8")

    def test_random_source_failure(self, config):
        signer = RequestSigner(ACCESS_KEY, SECRET_KEY, config)
        with patch("aksk.auth.signer.secrets.token_bytes", side_effect=OSError("no entropy")):
            with pytest.raises(AkskError) as exc_info:
                signer.sign("GET", "/e")
        assert exc_info.value.kind == ErrorKind.RANDOM_SOURCE_FAILURE
        assert isinstance(exc_info.value.__cause__, OSError)


class TestRoundTrip:
    """Test signer output against the verifier."""

    @pytest.mark.parametrize(
        "body",
        [b"", BODY, b"  padded body  \n", "ünïcode".encode("utf-8"), bytes(range(256))],
    )
    def test_sign_then_verify(self, store, config, body):
        signed = sign_request(ACCESS_KEY, SECRET_KEY, "PUT", "http://localhost/x", body, config)
        Verifier(store, config=config).verify(signed.headers, lambda: signed.body)

    def test_md5_base64_raw(self, store):
        config = AuthConfig(digest=DigestEngine(hashlib.md5, Base64Encoding(padded=False)))
        signed = sign_request(ACCESS_KEY, SECRET_KEY, "POST", "/e", BODY, config)
        assert "=" not in signed.headers[HEADER_SIGNATURE]
        Verifier(store, config=config).verify(signed.headers, lambda: signed.body)

    def test_engine_mismatch_rejected(self, store):
        signer_config = AuthConfig(digest=DigestEngine("sha1"))
        signed = sign_request(ACCESS_KEY, SECRET_KEY, "POST", "/e", BODY, signer_config)
        with pytest.raises(AkskError) as exc_info:
            Verifier(store, config=AuthConfig()).verify(signed.headers, lambda: signed.body)
        assert exc_info.value.kind == ErrorKind.SIGNATURE_MISMATCH


class TestRequestFunc:
    def test_binds_credentials(self, store, config):
        request_func = new_request_func(ACCESS_KEY, SECRET_KEY, config)
        signed = request_func("POST", "http://localhost:8080/e", BODY)
        Verifier(store, config=config).verify(signed.headers, lambda: signed.body)

    def test_rejects_empty_credentials_up_front(self):
        with pytest.raises(AkskError):
            new_request_func(ACCESS_KEY, "")

    def test_uses_default_config(self, store):
        signed = sign_request(ACCESS_KEY, SECRET_KEY, "GET", "/e")
        Verifier(store).verify(signed.headers)
