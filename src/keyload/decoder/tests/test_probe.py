import unittest

import pytest
from cryptography.hazmat.primitives import serialization
from pyasn1.type import univ

from keyload.common.data import (
    ContainerFormat,
    KeyClass,
    OtherPrime,
    PrivateKeyRSA,
    PublicKeyRSA,
)
from keyload.decoder import asn1
from keyload.decoder.errors import FormatMismatch, MalformedEncoding, UnrecognizedFormat
from keyload.decoder.probe import probe_private_key, probe_public_key
from keyload.decoder.tests.common import (
    MULTI_PRIME_FIELDS,
    MULTI_PRIME_OTHERS,
    ec_private_key,
    ed25519_private_key,
    encode_pkcs8,
    encode_pkix,
    encode_rsa_private_key,
    pkcs1_private_der,
    pkcs1_public_der,
    pkcs8_der,
    pkix_der,
    rsa_private_key,
)


class Test_Probe_Public(unittest.TestCase):
    def setUp(self) -> None:
        self.key = rsa_private_key()
        self.expected = PublicKeyRSA.from_cryptography_key(self.key.public_key())

    def test_pkix(self) -> None:
        """Test SubjectPublicKeyInfo is found first"""
        decoded = probe_public_key(pkix_der(self.key))
        self.assertEqual(decoded.format, ContainerFormat.PKIX)
        self.assertEqual(decoded.key, self.expected)
        self.assertEqual(decoded.key_class, KeyClass.PUBLIC)

    def test_pkcs1(self) -> None:
        """Test fallback to RSAPublicKey"""
        decoded = probe_public_key(pkcs1_public_der(self.key))
        self.assertEqual(decoded.format, ContainerFormat.PKCS1_PUBLIC)
        self.assertEqual(decoded.key, self.expected)

    def test_pkix_without_parameters(self) -> None:
        """Test rsaEncryption with the parameters left out"""
        der = encode_pkix(pkcs1_public_der(self.key), params=None)
        self.assertEqual(probe_public_key(der).key, self.expected)

    def test_pkix_non_null_parameters(self) -> None:
        """Test rsaEncryption parameters that are not NULL"""
        der = encode_pkix(pkcs1_public_der(self.key), params=b"\x02\x01\x00")
        with pytest.raises(MalformedEncoding, match="parameters are not NULL"):
            probe_public_key(der)

    def test_pkix_ec_key(self) -> None:
        """Test that an EC key in a SubjectPublicKeyInfo is not accepted"""
        der = ec_private_key().public_key().public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
        )
        with pytest.raises(FormatMismatch) as exc:
            probe_public_key(der)
        self.assertEqual(exc.value.shape, "SubjectPublicKeyInfo")
        self.assertEqual(exc.value.found, "id-ecPublicKey")
        self.assertEqual(exc.value.expected, "rsaEncryption")

    def test_pkix_ed25519_key(self) -> None:
        """Test that an Ed25519 key in a SubjectPublicKeyInfo is not accepted"""
        der = ed25519_private_key().public_key().public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
        )
        with pytest.raises(FormatMismatch, match="id-Ed25519"):
            probe_public_key(der)

    def test_pkix_broken_inner_key(self) -> None:
        """Test a SubjectPublicKeyInfo where the BIT STRING isn't an RSAPublicKey"""
        der = encode_pkix(b"\x04\x03abc")
        with pytest.raises(MalformedEncoding, match="subjectPublicKey is not an RSAPublicKey"):
            probe_public_key(der)

    def test_pkix_inner_trailing_data(self) -> None:
        """Test a SubjectPublicKeyInfo with junk after the RSAPublicKey inside it"""
        der = encode_pkix(pkcs1_public_der(self.key) + b"\x00")
        with pytest.raises(MalformedEncoding, match="trailing"):
            probe_public_key(der)

    def test_empty(self) -> None:
        """Test empty input"""
        with pytest.raises(UnrecognizedFormat) as exc:
            probe_public_key(b"")
        self.assertEqual(
            exc.value.attempts,
            {"SubjectPublicKeyInfo": "no data", "RSAPublicKey": "no data"},
        )

    def test_garbage(self) -> None:
        """Test data that isn't ASN.1 at all"""
        with pytest.raises(UnrecognizedFormat):
            probe_public_key(b"this is not a key")

    def test_truncated(self) -> None:
        """Test DER with the end cut off"""
        with pytest.raises(UnrecognizedFormat):
            probe_public_key(pkix_der(self.key)[:-10])

    def test_trailing_data(self) -> None:
        """Test RSAPublicKey followed by an extra byte"""
        with pytest.raises(MalformedEncoding) as exc:
            probe_public_key(pkcs1_public_der(self.key) + b"\x00")
        self.assertEqual(exc.value.shape, "RSAPublicKey")

    def test_private_key_der(self) -> None:
        """Test that private keys are not accepted as public keys"""
        with pytest.raises(UnrecognizedFormat):
            probe_public_key(pkcs1_private_der(self.key))
        with pytest.raises(UnrecognizedFormat):
            probe_public_key(pkcs8_der(self.key))

    def test_non_canonical_integer(self) -> None:
        """Test an INTEGER with a superfluous leading zero byte"""
        canonical = bytes.fromhex("3007020200c5020103")
        self.assertEqual(probe_public_key(canonical).key, PublicKeyRSA(n=197, e=3))
        with pytest.raises(MalformedEncoding, match="canonical"):
            probe_public_key(bytes.fromhex("300802030000c5020103"))

    def test_non_canonical_length(self) -> None:
        """Test a SEQUENCE length in long form, where short form is required"""
        with pytest.raises(MalformedEncoding, match="canonical"):
            probe_public_key(bytes.fromhex("308107020200c5020103"))

    def test_negative_modulus(self) -> None:
        """Test a modulus that is negative"""
        with pytest.raises(MalformedEncoding, match="modulus"):
            probe_public_key(bytes.fromhex("30060201c5020103"))


class Test_Probe_Private(unittest.TestCase):
    def setUp(self) -> None:
        self.key = rsa_private_key()
        self.expected = PrivateKeyRSA.from_cryptography_key(self.key)

    def test_pkcs8(self) -> None:
        """Test PrivateKeyInfo is found first"""
        decoded = probe_private_key(pkcs8_der(self.key))
        self.assertEqual(decoded.format, ContainerFormat.PKCS8)
        self.assertEqual(decoded.key, self.expected)
        self.assertEqual(decoded.key_class, KeyClass.PRIVATE)

    def test_pkcs1(self) -> None:
        """Test fallback to RSAPrivateKey"""
        decoded = probe_private_key(pkcs1_private_der(self.key))
        self.assertEqual(decoded.format, ContainerFormat.PKCS1_PRIVATE)
        self.assertEqual(decoded.key, self.expected)

    def test_pkcs8_ec_key(self) -> None:
        """Test that an EC key in a PrivateKeyInfo is not accepted"""
        with pytest.raises(FormatMismatch) as exc:
            probe_private_key(pkcs8_der(ec_private_key()))
        self.assertEqual(exc.value.shape, "PrivateKeyInfo")
        self.assertIn("id-ecPublicKey", exc.value.found)

    def test_pkcs8_unknown_algorithm(self) -> None:
        """Test an algorithm OID we have no name for"""
        der = encode_pkcs8(
            pkcs1_private_der(self.key), algorithm=univ.ObjectIdentifier("1.2.3.4")
        )
        with pytest.raises(FormatMismatch, match="1.2.3.4"):
            probe_private_key(der)

    def test_pkcs8_broken_inner_key(self) -> None:
        """Test a PrivateKeyInfo where the OCTET STRING isn't an RSAPrivateKey"""
        der = encode_pkcs8(pkcs1_public_der(self.key))
        with pytest.raises(MalformedEncoding, match="privateKey is not an RSAPrivateKey"):
            probe_private_key(der)

    def test_pkcs8_multi_prime(self) -> None:
        """Test a multi-prime RSAPrivateKey inside a PrivateKeyInfo"""
        inner = encode_rsa_private_key(other_primes=MULTI_PRIME_OTHERS, **MULTI_PRIME_FIELDS)
        decoded = probe_private_key(encode_pkcs8(inner))
        self.assertEqual(decoded.format, ContainerFormat.PKCS8)
        self.assertEqual(decoded.key.num_primes, 4)

    def test_multi_prime(self) -> None:
        """Test that additional primes are kept, in the order they were encoded"""
        der = encode_rsa_private_key(other_primes=MULTI_PRIME_OTHERS, **MULTI_PRIME_FIELDS)
        key = probe_private_key(der).key
        self.assertEqual(
            key,
            PrivateKeyRSA(
                version=1,
                n=3 * 5 * 7 * 11,
                e=7,
                d=103,
                p=3,
                q=5,
                dp=1,
                dq=3,
                qinv=2,
                other_primes=(
                    OtherPrime(prime=11, exponent=3, coefficient=6),
                    OtherPrime(prime=7, exponent=1, coefficient=4),
                ),
            ),
        )

    def test_no_crt(self) -> None:
        """Test an RSAPrivateKey without any CRT parameters"""
        fields = {
            k: v for k, v in MULTI_PRIME_FIELDS.items() if k in asn1.RSA_PRIVATE_KEY_FIELDS
        }
        fields["version"] = 0
        der = encode_rsa_private_key(shape=asn1.RSAPrivateKeyNoCRT, **fields)
        key = probe_private_key(der).key
        self.assertEqual((key.dp, key.dq, key.qinv), (None, None, None))
        self.assertEqual(key.other_primes, ())

    def test_partial_crt(self) -> None:
        """Test an RSAPrivateKey with only the first CRT parameter"""
        fields = {
            k: v
            for k, v in MULTI_PRIME_FIELDS.items()
            if k in asn1.RSA_PRIVATE_KEY_FIELDS + ("exponent1",)
        }
        der = encode_rsa_private_key(shape=asn1.RSAPrivateKeyOneCRT, **fields)
        key = probe_private_key(der).key
        self.assertEqual((key.dp, key.dq, key.qinv), (1, None, None))

    def test_unsupported_version(self) -> None:
        """Test RSAPrivateKey version 2"""
        der = encode_rsa_private_key(**dict(MULTI_PRIME_FIELDS, version=2))
        with pytest.raises(MalformedEncoding, match="unsupported version 2"):
            probe_private_key(der)

    def test_trailing_data(self) -> None:
        """Test RSAPrivateKey followed by an extra byte"""
        with pytest.raises(MalformedEncoding) as exc:
            probe_private_key(pkcs1_private_der(self.key) + b"\x00")
        self.assertEqual(exc.value.shape, "RSAPrivateKey")

    def test_public_key_der(self) -> None:
        """Test that public keys are not accepted as private keys"""
        with pytest.raises(UnrecognizedFormat) as exc:
            probe_private_key(pkcs1_public_der(self.key))
        self.assertEqual(exc.value.key_class, KeyClass.PRIVATE)
        self.assertEqual(list(exc.value.attempts), ["PrivateKeyInfo", "RSAPrivateKey"])
        with pytest.raises(UnrecognizedFormat):
            probe_private_key(pkix_der(self.key))

    def test_empty(self) -> None:
        """Test empty input"""
        with pytest.raises(UnrecognizedFormat):
            probe_private_key(b"")

    def test_same_error_twice(self) -> None:
        """Test that decoding the same bad data gives the same error every time"""
        bad = pkcs1_private_der(self.key) + b"\x00"
        errors = []
        for _ in range(2):
            with pytest.raises(MalformedEncoding) as exc:
                probe_private_key(bad)
            errors += [(type(exc.value), str(exc.value))]
        self.assertEqual(errors[0], errors[1])
