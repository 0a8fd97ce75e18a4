"""
ASN.1 structures RSA keys are found in.

Public keys:

  SubjectPublicKeyInfo  (RFC 5280, "PUBLIC KEY")
  RSAPublicKey          (RFC 8017, "RSA PUBLIC KEY")

Private keys:

  PrivateKeyInfo        (RFC 5208 / RFC 5958, "PRIVATE KEY")
  RSAPrivateKey         (RFC 8017, "RSA PRIVATE KEY")

All four are a SEQUENCE on the outside, so they can only be told apart by
attempting a full decode against each of them.
"""

from pyasn1.type import constraint, namedtype, tag, univ

MAX = float("inf")

rsaEncryption = univ.ObjectIdentifier("1.2.840.113549.1.1.1")

# Algorithms that are not RSA (in the sense of rsaEncryption) but can show up
# in the same containers. Only used to produce readable errors.
ALGORITHM_NAMES = {
    "1.2.840.113549.1.1.1": "rsaEncryption",
    "1.2.840.113549.1.1.10": "id-RSASSA-PSS",
    "1.2.840.10040.4.1": "id-dsa",
    "1.2.840.10045.2.1": "id-ecPublicKey",
    "1.2.840.10046.2.1": "dhpublicnumber",
    "1.3.101.110": "id-X25519",
    "1.3.101.111": "id-X448",
    "1.3.101.112": "id-Ed25519",
    "1.3.101.113": "id-Ed448",
}


def algorithm_name(oid: univ.ObjectIdentifier) -> str:
    """Return a human readable name for an algorithm OID, or the dotted OID."""
    _dotted = str(oid)
    return ALGORITHM_NAMES.get(_dotted, _dotted)


#
# Containers
#


class AlgorithmIdentifier(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("algorithm", univ.ObjectIdentifier()),
        namedtype.OptionalNamedType("parameters", univ.Any()),
    )


class SubjectPublicKeyInfo(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("algorithm", AlgorithmIdentifier()),
        namedtype.NamedType("subjectPublicKey", univ.BitString()),
    )


class AttributeValues(univ.SetOf):
    componentType = univ.Any()


class Attribute(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("type", univ.ObjectIdentifier()),
        namedtype.NamedType("values", AttributeValues()),
    )


class Attributes(univ.SetOf):
    componentType = Attribute()


class PrivateKeyInfo(univ.Sequence):
    """
    PKCS#8 PrivateKeyInfo.

    Version 1 (OneAsymmetricKey from RFC 5958) adds the optional publicKey.
    """

    componentType = namedtype.NamedTypes(
        namedtype.NamedType("version", univ.Integer()),
        namedtype.NamedType("privateKeyAlgorithm", AlgorithmIdentifier()),
        namedtype.NamedType("privateKey", univ.OctetString()),
        namedtype.OptionalNamedType(
            "attributes",
            Attributes().subtype(
                implicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatConstructed, 0)
            ),
        ),
        namedtype.OptionalNamedType(
            "publicKey",
            univ.BitString().subtype(
                implicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatSimple, 1)
            ),
        ),
    )


#
# RSA keys
#


class RSAPublicKey(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("modulus", univ.Integer()),
        namedtype.NamedType("publicExponent", univ.Integer()),
    )


class OtherPrimeInfo(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("prime", univ.Integer()),
        namedtype.NamedType("exponent", univ.Integer()),
        namedtype.NamedType("coefficient", univ.Integer()),
    )


class OtherPrimeInfos(univ.SequenceOf):
    componentType = OtherPrimeInfo()
    subtypeSpec = univ.SequenceOf.subtypeSpec + constraint.ValueSizeConstraint(1, MAX)


RSA_PRIVATE_KEY_FIELDS = (
    "version",
    "modulus",
    "publicExponent",
    "privateExponent",
    "prime1",
    "prime2",
)
RSA_CRT_FIELDS = ("exponent1", "exponent2", "coefficient")


def _rsa_private_key_components(crt_present: int) -> namedtype.NamedTypes:
    """
    Component list of an RSAPrivateKey holding the first `crt_present' CRT parameters.

    The CRT parameters are all INTEGERs, so a decoder driven by tags can't tell
    which of several consecutive OPTIONAL ones are present. Each possible
    number of trailing CRT parameters therefore gets its own structure.
    """
    _names = RSA_PRIVATE_KEY_FIELDS + RSA_CRT_FIELDS[:crt_present]
    return namedtype.NamedTypes(
        *[namedtype.NamedType(name, univ.Integer()) for name in _names],
        namedtype.OptionalNamedType("otherPrimeInfos", OtherPrimeInfos()),
    )


class RSAPrivateKey(univ.Sequence):
    """PKCS#1 RSAPrivateKey with all CRT parameters, as every encoder produces it."""

    componentType = _rsa_private_key_components(3)


class RSAPrivateKeyTwoCRT(univ.Sequence):
    componentType = _rsa_private_key_components(2)


class RSAPrivateKeyOneCRT(univ.Sequence):
    componentType = _rsa_private_key_components(1)


class RSAPrivateKeyNoCRT(univ.Sequence):
    componentType = _rsa_private_key_components(0)


# At most one of these can match any given encoding
RSA_PRIVATE_KEY_SHAPES: tuple[type[univ.Sequence], ...] = (
    RSAPrivateKey,
    RSAPrivateKeyTwoCRT,
    RSAPrivateKeyOneCRT,
    RSAPrivateKeyNoCRT,
)
