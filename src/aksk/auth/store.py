"""Secret key lookup."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Protocol, Union, runtime_checkable

from aksk.auth.errors import ConfigurationError


@runtime_checkable
class SecretStore(Protocol):
    """Resolve an access key to its secret; empty or None means unusable."""

    def get(self, access_key: str) -> str | None: ...


SecretLookup = Union[SecretStore, Callable[[str], Union[str, None]]]


class StaticSecretStore:
    """In-memory access key -> secret key map."""

    def __init__(self, keys: Mapping[str, str] | None = None) -> None:
        self._keys = dict(keys or {})

    def get(self, access_key: str) -> str | None:
        return self._keys.get(access_key)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, access_key: object) -> bool:
        return access_key in self._keys


class CallableSecretStore:
    """Adapt a plain ``access_key -> secret`` function."""

    def __init__(self, func: Callable[[str], str | None]) -> None:
        self._func = func

    def get(self, access_key: str) -> str | None:
        return self._func(access_key)


def as_secret_store(lookup: SecretLookup | Mapping[str, str] | None) -> SecretStore:
    """Normalize the accepted lookup shapes into a ``SecretStore``."""
    if lookup is None:
        raise ConfigurationError("A secret store is required")
    if isinstance(lookup, Mapping):
        return StaticSecretStore(lookup)
    if isinstance(lookup, SecretStore):
        return lookup
    if callable(lookup):
        return CallableSecretStore(lookup)
    raise ConfigurationError(f"Unsupported secret store: {type(lookup).__name__}")
