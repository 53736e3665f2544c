"""AKSK transport header names."""

HEADER_ACCESS_KEY = "x-auth-accesskey"
# unix seconds, valid from 5 minutes behind to 1 minute ahead of the server
HEADER_TIMESTAMP = "x-auth-timestamp"
HEADER_SIGNATURE = "x-auth-signature"
# absent when the body is empty
HEADER_BODY_HASH = "x-auth-body-hash"
HEADER_NONCE = "x-auth-random-str"

AUTH_HEADERS = (
    HEADER_ACCESS_KEY,
    HEADER_TIMESTAMP,
    HEADER_SIGNATURE,
    HEADER_BODY_HASH,
    HEADER_NONCE,
)
