"""
Figure out which container some DER data is, and extract the RSA key from it.

There is no reliable way to tell the containers apart short of decoding, so
the containers valid for the requested key class are tried in a fixed order:

  public keys:  SubjectPublicKeyInfo, then RSAPublicKey
  private keys: PrivateKeyInfo, then RSAPrivateKey

A container that doesn't match structurally moves on to the next one. Once a
container matches, any further problem (trailing data, non-canonical DER, a
non-RSA algorithm, a broken inner key) is an error for that container and no
other container is tried.
"""

import logging
from collections.abc import Callable, Sequence

from pyasn1.codec.der import decoder as der_decoder
from pyasn1.codec.der import encoder as der_encoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import univ

from keyload.common.data import (
    ContainerFormat,
    DecodedKey,
    KeyClass,
    OtherPrime,
    PrivateKeyRSA,
    PublicKeyRSA,
)
from keyload.decoder import asn1
from keyload.decoder.errors import FormatMismatch, MalformedEncoding, UnrecognizedFormat

logger = logging.getLogger(__name__)

DER_NULL = b"\x05\x00"


class _NoMatch(Exception):
    """The data is not structurally the ASN.1 type we tried to decode it as."""


def _decode_strict(
    der: bytes, shape: type[univ.Sequence], name: str | None = None
) -> univ.Sequence:
    """
    Decode `der' as exactly one `shape', in strict DER.

    Raises _NoMatch if the data doesn't fit the structure at all, and
    MalformedEncoding if it does but isn't acceptable DER.
    """
    _name = name or shape.__name__
    if not der:
        raise _NoMatch("no data")
    try:
        value, rest = der_decoder.decode(der, asn1Spec=shape())
    except PyAsn1Error as exc:
        raise _NoMatch(str(exc)) from exc
    if rest:
        raise MalformedEncoding(_name, f"{len(rest)} trailing byte(s) after the {_name}")
    # pyasn1 accepts some BER on input (e.g. long form lengths), so compare with a re-encoding
    try:
        canonical = der_encoder.encode(value)
    except PyAsn1Error as exc:
        raise MalformedEncoding(_name, f"can't be re-encoded as DER: {exc}") from exc
    if canonical != der:
        raise MalformedEncoding(_name, "not in canonical DER encoding")
    return value


def _positive(shape: str, field: str, value: univ.Integer) -> int:
    _int = int(value)
    if _int <= 0:
        raise MalformedEncoding(shape, f"{field} is zero or negative")
    return _int


def _check_rsa_algorithm(shape: str, algorithm: univ.Sequence) -> None:
    """Make sure an AlgorithmIdentifier says rsaEncryption, with NULL (or no) parameters."""
    if algorithm["algorithm"] != asn1.rsaEncryption:
        raise FormatMismatch(
            shape,
            expected=asn1.algorithm_name(asn1.rsaEncryption),
            found=asn1.algorithm_name(algorithm["algorithm"]),
        )
    params = algorithm.getComponentByName("parameters", default=None, instantiate=False)
    if params is not None and params.asOctets() != DER_NULL:
        raise MalformedEncoding(shape, "rsaEncryption parameters are not NULL")


#
# Public keys
#


def _public_key_from_pkcs1(value: univ.Sequence) -> PublicKeyRSA:
    _shape = ContainerFormat.PKCS1_PUBLIC.value
    return PublicKeyRSA(
        n=_positive(_shape, "modulus", value["modulus"]),
        e=_positive(_shape, "publicExponent", value["publicExponent"]),
    )


def decode_pkcs1_public(der: bytes) -> PublicKeyRSA:
    """Decode a bare PKCS#1 RSAPublicKey."""
    return _public_key_from_pkcs1(_decode_strict(der, asn1.RSAPublicKey))


def decode_pkix(der: bytes) -> PublicKeyRSA:
    """Decode an X.509 SubjectPublicKeyInfo holding an RSA public key."""
    _shape = ContainerFormat.PKIX.value
    spki = _decode_strict(der, asn1.SubjectPublicKeyInfo)
    _check_rsa_algorithm(_shape, spki["algorithm"])
    bits = spki["subjectPublicKey"]
    if len(bits) % 8:
        raise MalformedEncoding(_shape, "subjectPublicKey is not a whole number of octets")
    try:
        return decode_pkcs1_public(bits.asOctets())
    except _NoMatch as exc:
        raise MalformedEncoding(
            _shape, f"subjectPublicKey is not an RSAPublicKey: {exc}"
        ) from exc


#
# Private keys
#


def _private_key_from_pkcs1(value: univ.Sequence) -> PrivateKeyRSA:
    _shape = ContainerFormat.PKCS1_PRIVATE.value
    version = int(value["version"])
    if version not in (0, 1):
        raise MalformedEncoding(_shape, f"unsupported version {version}")

    # Only the CRT parameters present in the encoding are set, nothing is computed
    crt: dict[str, int] = {}
    for field, attr in zip(asn1.RSA_CRT_FIELDS, ["dp", "dq", "qinv"]):
        if field in value.componentType:
            crt[attr] = int(value[field])

    other_primes: list[OtherPrime] = []
    _infos = value.getComponentByName("otherPrimeInfos", default=None, instantiate=False)
    for info in _infos or []:
        other_primes += [
            OtherPrime(
                prime=_positive(_shape, "otherPrimeInfos prime", info["prime"]),
                exponent=int(info["exponent"]),
                coefficient=int(info["coefficient"]),
            )
        ]

    return PrivateKeyRSA(
        version=version,
        n=_positive(_shape, "modulus", value["modulus"]),
        e=_positive(_shape, "publicExponent", value["publicExponent"]),
        d=_positive(_shape, "privateExponent", value["privateExponent"]),
        p=_positive(_shape, "prime1", value["prime1"]),
        q=_positive(_shape, "prime2", value["prime2"]),
        other_primes=tuple(other_primes),
        **crt,
    )


def decode_pkcs1_private(der: bytes) -> PrivateKeyRSA:
    """
    Decode a bare PKCS#1 RSAPrivateKey.

    The CRT parameters are optional, so this tries each variant of the
    structure. They differ in the number of INTEGERs, so at most one can match.
    """
    first_reason = None
    for shape in asn1.RSA_PRIVATE_KEY_SHAPES:
        try:
            value = _decode_strict(der, shape, ContainerFormat.PKCS1_PRIVATE.value)
        except _NoMatch as exc:
            if first_reason is None:
                first_reason = exc
            continue
        return _private_key_from_pkcs1(value)
    raise _NoMatch(str(first_reason))


def decode_pkcs8(der: bytes) -> PrivateKeyRSA:
    """Decode a PKCS#8 PrivateKeyInfo holding an RSA private key."""
    _shape = ContainerFormat.PKCS8.value
    info = _decode_strict(der, asn1.PrivateKeyInfo)
    version = int(info["version"])
    if version not in (0, 1):
        raise MalformedEncoding(_shape, f"unsupported version {version}")
    _check_rsa_algorithm(_shape, info["privateKeyAlgorithm"])
    try:
        return decode_pkcs1_private(info["privateKey"].asOctets())
    except _NoMatch as exc:
        raise MalformedEncoding(_shape, f"privateKey is not an RSAPrivateKey: {exc}") from exc


#
# Dispatch
#

DecodeFunction = Callable[[bytes], PublicKeyRSA | PrivateKeyRSA]

# Containers to try, in order, for each key class
CONTAINERS: dict[KeyClass, Sequence[tuple[ContainerFormat, DecodeFunction]]] = {
    KeyClass.PUBLIC: [
        (ContainerFormat.PKIX, decode_pkix),
        (ContainerFormat.PKCS1_PUBLIC, decode_pkcs1_public),
    ],
    KeyClass.PRIVATE: [
        (ContainerFormat.PKCS8, decode_pkcs8),
        (ContainerFormat.PKCS1_PRIVATE, decode_pkcs1_private),
    ],
}


def probe(der: bytes, key_class: KeyClass) -> DecodedKey:
    """Decode `der' as the first container for `key_class' that matches it."""
    der = bytes(der)
    attempts: dict[str, str] = {}
    for container, decode in CONTAINERS[key_class]:
        try:
            key = decode(der)
        except _NoMatch as exc:
            logger.debug(f"Data is not a {container.value}: {exc}")
            attempts[container.value] = str(exc)
            continue
        logger.debug(f"Decoded RSA {key_class.value} key from {container.value}")
        return DecodedKey(format=container, key=key)
    raise UnrecognizedFormat(key_class, attempts)


def probe_public_key(der: bytes) -> DecodedKey:
    """Decode DER data as an RSA public key in either SubjectPublicKeyInfo or RSAPublicKey."""
    return probe(der, KeyClass.PUBLIC)


def probe_private_key(der: bytes) -> DecodedKey:
    """Decode DER data as an RSA private key in either PrivateKeyInfo or RSAPrivateKey."""
    return probe(der, KeyClass.PRIVATE)
