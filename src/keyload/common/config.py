"""Load and parse configuration."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from io import BufferedReader, StringIO
from typing import Any, Self

import yaml
from pydantic import Field, FilePath, model_validator

from keyload.common.data import FrozenBaseModel, KeyClass, KeyEncoding
from keyload.common.integrity import checksum_bytes2str

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Base exception for errors in the configuration."""


class KeySource(FrozenBaseModel):
    """
    Where to find one key.

    Example:
    -------
        keys:
          server:
            type: public
            pem: |
              -----BEGIN PUBLIC KEY-----
              MIIBIjANBgkqhkiG9w0BAQEFAAOCAQ8AMIIBCgKCAQEA...
              -----END PUBLIC KEY-----
          client:
            type: private
            file: /etc/keyload/client.der
            encoding: der
    """

    type: KeyClass
    pem: str | None = None
    file: FilePath | None = None
    # for files, None means PEM if the file contains a PEM block, DER otherwise
    encoding: KeyEncoding | None = None

    @model_validator(mode="after")
    def _check_one_source(self) -> Self:
        if (self.pem is None) == (self.file is None):
            raise ValueError("Exactly one of 'pem' and 'file' must be given")
        if self.pem is not None and self.encoding == KeyEncoding.DER:
            raise ValueError("Inline key material must be PEM")
        return self


class KeyloadConfig(FrozenBaseModel):
    """
    Configuration object.

    Holds configuration loaded from keyload.yaml.
    """

    """
    Named key sources.

    The names are used as the names of the keys in the KeyRing built from
    this configuration.
    """
    keys: Mapping[str, KeySource] = Field(default_factory=dict)

    @classmethod
    def from_yaml(cls, stream: BufferedReader | StringIO) -> KeyloadConfig:
        """Load configuration from a YAML stream."""
        try:
            config = yaml.safe_load(stream)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML: {exc}") from exc
        return cls.from_dict(config or {})

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> KeyloadConfig:
        if not isinstance(config, Mapping):
            raise ConfigurationError(
                f"Configuration must be a mapping, not {type(config).__name__}"
            )
        return cls.model_validate(dict(config))


def get_config(filename: str | None) -> KeyloadConfig:
    """Top-level function to load configuration, or return a default KeyloadConfig instance."""
    if not filename:
        # Always return a config, even if it is empty
        logger.warning(
            "No configuration filename provided, using default configuration."
        )
        return KeyloadConfig()
    with open(filename, "rb") as fd:
        config_bytes = fd.read()
        logger.info(
            "Loaded configuration from file %s %s",
            filename,
            checksum_bytes2str(config_bytes),
        )
        fd.seek(0)
        return KeyloadConfig.from_yaml(fd)
