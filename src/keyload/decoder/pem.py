"""
PEM envelope handling.

The label of a PEM block is authoritative: it selects the key class, and a
block with a label we don't know is rejected without looking at its contents.
"""

import logging
import re

from Crypto.IO import PEM

from keyload.common.data import Envelope, KeyClass
from keyload.decoder.errors import MissingEnvelope, UnsupportedLabel

logger = logging.getLogger(__name__)

PEM_LABEL_PKIX_PUBLIC_KEY = "PUBLIC KEY"
PEM_LABEL_PKCS1_PUBLIC_KEY = "RSA PUBLIC KEY"
PEM_LABEL_PKCS8_PRIVATE_KEY = "PRIVATE KEY"
PEM_LABEL_PKCS1_PRIVATE_KEY = "RSA PRIVATE KEY"

PEM_LABELS: dict[KeyClass, tuple[str, ...]] = {
    KeyClass.PUBLIC: (PEM_LABEL_PKIX_PUBLIC_KEY, PEM_LABEL_PKCS1_PUBLIC_KEY),
    KeyClass.PRIVATE: (PEM_LABEL_PKCS8_PRIVATE_KEY, PEM_LABEL_PKCS1_PRIVATE_KEY),
}

# A block runs from BEGIN to the first END with no other BEGIN in between, so a
# BEGIN line without an END of its own is skipped. Text around blocks is ignored.
_PEM_BLOCK = re.compile(
    r"-----BEGIN ([^\r\n]*?)-----((?:(?!-----BEGIN ).)*?)-----END [^\r\n]*?-----", re.DOTALL
)


def has_envelope(data: bytes | str) -> bool:
    """Check if `data' looks like it contains a PEM block."""
    if isinstance(data, bytes):
        data = data.decode("latin-1")
    return _PEM_BLOCK.search(data) is not None


def decode_envelope(data: bytes | str) -> Envelope:
    """
    Decode the first PEM block found in `data'.

    Every reason for not finding a usable block (no markers, mismatching
    BEGIN/END labels, bad base64, encrypted block) results in MissingEnvelope.
    """
    if isinstance(data, bytes):
        # PEM is ASCII, latin-1 just keeps any binary junk from failing here
        data = data.decode("latin-1")
    m = _PEM_BLOCK.search(data)
    if not m:
        raise MissingEnvelope("no PEM BEGIN/END markers found")
    if not m.group(2).strip():
        raise MissingEnvelope(f"PEM block {m.group(1)!r} is empty")
    try:
        payload, label, _encrypted = PEM.decode(m.group(0))
    except ValueError as exc:
        # binascii.Error (bad base64) is a ValueError too
        raise MissingEnvelope(str(exc)) from exc
    if not payload:
        raise MissingEnvelope(f"PEM block {label!r} is empty")
    logger.debug(f"Found PEM block {label!r} with {len(payload)} bytes of data")
    return Envelope(label=label, payload=payload)


def unwrap(data: bytes | str, key_class: KeyClass) -> bytes:
    """Decode a PEM block and return its payload, if its label is one for `key_class'."""
    envelope = decode_envelope(data)
    accepted = PEM_LABELS[key_class]
    if envelope.label.upper() not in accepted:
        raise UnsupportedLabel(envelope.label, accepted)
    return envelope.payload
