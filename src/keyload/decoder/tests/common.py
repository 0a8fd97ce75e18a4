"""Key material shared by the decoder tests."""

from functools import lru_cache

from Crypto.IO import PEM
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from pyasn1.codec.der import encoder as der_encoder
from pyasn1.type import univ

from keyload.decoder import asn1

_DER = serialization.Encoding.DER
_NO_ENCRYPTION = serialization.NoEncryption()


@lru_cache(maxsize=None)
def rsa_private_key(key_size: int = 2048) -> rsa.RSAPrivateKey:
    """Generate an RSA key once per test run."""
    return rsa.generate_private_key(public_exponent=65537, key_size=key_size)


def pkix_der(key: rsa.RSAPrivateKey) -> bytes:
    return key.public_key().public_bytes(
        _DER, serialization.PublicFormat.SubjectPublicKeyInfo
    )


def pkcs1_public_der(key: rsa.RSAPrivateKey) -> bytes:
    return key.public_key().public_bytes(_DER, serialization.PublicFormat.PKCS1)


def pkcs8_der(key: rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey) -> bytes:
    return key.private_bytes(_DER, serialization.PrivateFormat.PKCS8, _NO_ENCRYPTION)


def pkcs1_private_der(key: rsa.RSAPrivateKey) -> bytes:
    return key.private_bytes(
        _DER, serialization.PrivateFormat.TraditionalOpenSSL, _NO_ENCRYPTION
    )


def ec_private_key() -> ec.EllipticCurvePrivateKey:
    return ec.generate_private_key(ec.SECP256R1())


def ed25519_private_key() -> ed25519.Ed25519PrivateKey:
    return ed25519.Ed25519PrivateKey.generate()


def pem_wrap(label: str, der: bytes) -> str:
    """Put DER data in a PEM block with any label."""
    return PEM.encode(der, label)


def encode_rsa_private_key(
    shape: type[univ.Sequence] = asn1.RSAPrivateKey,
    other_primes: list[tuple[int, int, int]] | None = None,
    **fields: int,
) -> bytes:
    """
    Build an RSAPrivateKey that no regular encoder would produce.

    The integers don't have to make up a valid key, the decoder doesn't check that.
    """
    value = shape()
    for name, number in fields.items():
        value[name] = number
    if other_primes:
        infos = asn1.OtherPrimeInfos()
        for prime, exponent, coefficient in other_primes:
            info = asn1.OtherPrimeInfo()
            info["prime"] = prime
            info["exponent"] = exponent
            info["coefficient"] = coefficient
            infos.append(info)
        value["otherPrimeInfos"] = infos
    return der_encoder.encode(value)


def encode_pkcs8(
    private_key: bytes, algorithm: univ.ObjectIdentifier = asn1.rsaEncryption
) -> bytes:
    """Wrap an already encoded private key in a PrivateKeyInfo."""
    alg_id = asn1.AlgorithmIdentifier()
    alg_id["algorithm"] = algorithm
    alg_id["parameters"] = univ.Any(b"\x05\x00")
    info = asn1.PrivateKeyInfo()
    info["version"] = 0
    info["privateKeyAlgorithm"] = alg_id
    info["privateKey"] = private_key
    return der_encoder.encode(info)


def encode_pkix(public_key: bytes, params: bytes | None = b"\x05\x00") -> bytes:
    """Wrap an already encoded public key in a SubjectPublicKeyInfo."""
    alg_id = asn1.AlgorithmIdentifier()
    alg_id["algorithm"] = asn1.rsaEncryption
    if params is not None:
        alg_id["parameters"] = univ.Any(params)
    spki = asn1.SubjectPublicKeyInfo()
    spki["algorithm"] = alg_id
    spki["subjectPublicKey"] = univ.BitString.fromOctetString(public_key)
    return der_encoder.encode(spki)


# Four-prime key with small numbers
MULTI_PRIME_FIELDS = dict(
    version=1,
    modulus=3 * 5 * 7 * 11,
    publicExponent=7,
    privateExponent=103,
    prime1=3,
    prime2=5,
    exponent1=1,
    exponent2=3,
    coefficient=2,
)
MULTI_PRIME_OTHERS = [(11, 3, 6), (7, 1, 4)]
