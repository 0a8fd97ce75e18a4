"""Exceptions raised when key material can't be decoded."""

from collections.abc import Iterable, Mapping

from keyload.common.data import KeyClass


class KeyDecodeError(Exception):
    """Base class exception for all key decoding errors."""


class MissingEnvelope(KeyDecodeError):
    """No usable PEM block was found in the input."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"No PEM block found: {reason}")


class UnsupportedLabel(KeyDecodeError):
    """A PEM block was found, but its label is not one we accept."""

    def __init__(self, label: str, accepted: Iterable[str]):
        self.label = label
        self.accepted = tuple(accepted)
        _accepted = ", ".join(repr(x) for x in self.accepted)
        super().__init__(f"Unsupported PEM label {label!r}, expected one of {_accepted}")


class UnrecognizedFormat(KeyDecodeError):
    """
    The DER data matched none of the containers for the requested key class.

    `attempts' maps the name of each ASN.1 structure tried to the reason it didn't match.
    """

    def __init__(self, key_class: KeyClass, attempts: Mapping[str, str]):
        self.key_class = key_class
        self.attempts = dict(attempts)
        _tried = "; ".join(f"{shape}: {reason}" for shape, reason in self.attempts.items())
        super().__init__(f"Data is not an RSA {key_class.value} key ({_tried})")


class FormatMismatch(KeyDecodeError):
    """The data is a key container, but doesn't hold an RSA key of the requested class."""

    def __init__(self, shape: str, expected: str, found: str):
        self.shape = shape
        self.expected = expected
        self.found = found
        super().__init__(f"{shape} holds {found}, expected {expected}")


class MalformedEncoding(KeyDecodeError):
    """The data matched a container, but violates strict DER or the container's rules."""

    def __init__(self, shape: str, reason: str):
        self.shape = shape
        self.reason = reason
        super().__init__(f"Malformed {shape}: {reason}")
