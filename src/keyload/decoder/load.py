"""Top-level functions to decode RSA keys from DER or PEM data."""

import logging
import os
from pathlib import Path
from typing import cast

from keyload.common.data import (
    DecodedKey,
    KeyClass,
    KeyEncoding,
    PrivateKeyRSA,
    PublicKeyRSA,
)
from keyload.common.integrity import checksum_bytes2str
from keyload.decoder.pem import has_envelope, unwrap
from keyload.decoder.probe import probe

logger = logging.getLogger(__name__)

MAX_KEY_FILE_SIZE = 1024 * 1024


def decode_public_key_der(der: bytes) -> PublicKeyRSA:
    """Decode an RSA public key from SubjectPublicKeyInfo or RSAPublicKey DER."""
    return cast(PublicKeyRSA, probe(der, KeyClass.PUBLIC).key)


def decode_public_key_pem(data: bytes | str) -> PublicKeyRSA:
    """Decode an RSA public key from a PEM block labeled 'PUBLIC KEY' or 'RSA PUBLIC KEY'."""
    return decode_public_key_der(unwrap(data, KeyClass.PUBLIC))


def decode_private_key_der(der: bytes) -> PrivateKeyRSA:
    """Decode an RSA private key from PrivateKeyInfo or RSAPrivateKey DER."""
    return cast(PrivateKeyRSA, probe(der, KeyClass.PRIVATE).key)


def decode_private_key_pem(data: bytes | str) -> PrivateKeyRSA:
    """Decode an RSA private key from a PEM block labeled 'PRIVATE KEY' or 'RSA PRIVATE KEY'."""
    return decode_private_key_der(unwrap(data, KeyClass.PRIVATE))


def decode_key(
    data: bytes, key_class: KeyClass, encoding: KeyEncoding | None = None
) -> DecodedKey:
    """
    Decode a key, and report which container it was found in.

    When no encoding is given, data containing a PEM block is treated as PEM
    and anything else as DER.
    """
    if encoding is None:
        encoding = KeyEncoding.PEM if has_envelope(data) else KeyEncoding.DER
    if encoding == KeyEncoding.PEM:
        data = unwrap(data, key_class)
    return probe(data, key_class)


def load_key_file(
    filename: Path | str, key_class: KeyClass, encoding: KeyEncoding | None = None
) -> DecodedKey:
    """Load a key from a file. See decode_key() for how the encoding is chosen."""
    with open(filename, "rb") as fd:
        key_file_size = os.fstat(fd.fileno()).st_size
        if key_file_size > MAX_KEY_FILE_SIZE:
            raise RuntimeError(f"Key file exceeding maximum size of {MAX_KEY_FILE_SIZE} bytes")
        data = fd.read(MAX_KEY_FILE_SIZE)
    logger.info("Loaded key from file %s %s", filename, checksum_bytes2str(data))
    return decode_key(data, key_class, encoding)
