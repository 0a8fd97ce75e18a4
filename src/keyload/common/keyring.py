"""
A registry of decoded keys.

Consumers that need to refer to keys by name (e.g. a database driver that
pins a server public key by name) get a KeyRing handed to them, instead of
keys being registered in some process wide table.
"""

import logging
from collections.abc import Iterator

from keyload.common.config import ConfigurationError, KeyloadConfig, KeySource
from keyload.common.data import DecodedKey, KeyEncoding, PrivateKeyRSA, PublicKeyRSA
from keyload.decoder.errors import KeyDecodeError
from keyload.decoder.load import decode_key, load_key_file

logger = logging.getLogger(__name__)

AnyKey = PublicKeyRSA | PrivateKeyRSA


class KeyRing:
    """Named keys. Names are unique within one KeyRing."""

    NAME_SUFFIX = "_key"

    def __init__(self) -> None:
        self._keys: dict[str, AnyKey] = {}
        self._counter = 0

    def _next_name(self) -> str:
        while True:
            self._counter += 1
            name = f"{self._counter:08x}{self.NAME_SUFFIX}"
            if name not in self._keys:
                return name

    def add(self, key: AnyKey, name: str | None = None) -> str:
        """Add a key, under `name' or a generated unique name. Return the name used."""
        if name is None:
            name = self._next_name()
        elif name in self._keys:
            raise KeyError(f"A key named {name!r} is already registered")
        self._keys[name] = key
        logger.debug(f"Registered key {name}: {key}")
        return name

    def get(self, name: str) -> AnyKey | None:
        return self._keys.get(name)

    def __getitem__(self, name: str) -> AnyKey:
        return self._keys[name]

    def __contains__(self, name: object) -> bool:
        return name in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)


def load_key_source(source: KeySource) -> DecodedKey:
    """Decode the key a KeySource points at."""
    if source.pem is not None:
        return decode_key(source.pem.encode(), source.type, KeyEncoding.PEM)
    if source.file is not None:
        return load_key_file(source.file, source.type, source.encoding)
    raise ConfigurationError("Key source has neither inline PEM nor a file")


def load_keyring(config: KeyloadConfig) -> KeyRing:
    """
    Decode all keys in the configuration.

    A key that can't be loaded is fatal: ConfigurationError is raised, with
    the decoding error as the cause.
    """
    keyring = KeyRing()
    for name, source in config.keys.items():
        try:
            decoded = load_key_source(source)
        except (KeyDecodeError, OSError, RuntimeError) as exc:
            raise ConfigurationError(f"Failed loading key {name!r}: {exc}") from exc
        logger.info(f"Loaded key {name}: {decoded}")
        keyring.add(decoded.key, name=name)
    return keyring
