"""Data classes for decoded RSA keys."""

from abc import ABC
from enum import Enum
from typing import Self

from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import BaseModel, ConfigDict, Field


class FrozenBaseModel(BaseModel, ABC):
    """
    A frozen abstract base class for Pydantic models.

    This variant allows coercion of data - used when loading configuration objects to e.g.
    get paths loaded transparently from strings.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")


class FrozenStrictBaseModel(BaseModel, ABC):
    """
    A frozen *strict* abstract base class for Pydantic models.

    This variant does NOT allow coercion of data - used for decoded keys.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", strict=True)


class KeyClass(Enum):
    """Public or private half of a key pair."""

    PUBLIC = "public"
    PRIVATE = "private"


class KeyEncoding(Enum):
    """Outer encoding of key material."""

    PEM = "pem"
    DER = "der"


class ContainerFormat(Enum):
    """
    ASN.1 containers an RSA key can be encoded in.

    The value is the name of the ASN.1 structure.
    """

    PKIX = "SubjectPublicKeyInfo"
    PKCS1_PUBLIC = "RSAPublicKey"
    PKCS8 = "PrivateKeyInfo"
    PKCS1_PRIVATE = "RSAPrivateKey"

    @property
    def key_class(self) -> KeyClass:
        """Return the class of keys this container holds."""
        if self in (ContainerFormat.PKIX, ContainerFormat.PKCS1_PUBLIC):
            return KeyClass.PUBLIC
        return KeyClass.PRIVATE


class PublicKeyRSA(FrozenStrictBaseModel):
    """A decoded RSA public key."""

    n: int = Field(repr=False)
    e: int

    @property
    def bits(self) -> int:
        """Size of the modulus in bits."""
        return self.n.bit_length()

    def __str__(self) -> str:
        """Return key as string."""
        return f"alg=RSA bits={self.bits} exp={self.e}"

    def to_cryptography_key(self) -> rsa.RSAPublicKey:
        """Return a 'cryptography' public key object."""
        return rsa.RSAPublicNumbers(self.e, self.n).public_key()

    @classmethod
    def from_cryptography_key(cls, key: rsa.RSAPublicKey) -> Self:
        numbers = key.public_numbers()
        return cls(n=numbers.n, e=numbers.e)


class OtherPrime(FrozenStrictBaseModel):
    """One additional (prime, exponent, coefficient) triple of a multi-prime RSA key."""

    prime: int = Field(repr=False)
    exponent: int = Field(repr=False)
    coefficient: int = Field(repr=False)


class PrivateKeyRSA(FrozenStrictBaseModel):
    """
    A decoded RSA private key.

    The CRT parameters (dp, dq, qinv) are None when they were not present in
    the encoding. They are never computed while decoding.
    """

    version: int = 0
    n: int = Field(repr=False)
    e: int
    d: int = Field(repr=False)
    p: int = Field(repr=False)
    q: int = Field(repr=False)
    dp: int | None = Field(default=None, repr=False)
    dq: int | None = Field(default=None, repr=False)
    qinv: int | None = Field(default=None, repr=False)
    other_primes: tuple[OtherPrime, ...] = ()

    @property
    def bits(self) -> int:
        """Size of the modulus in bits."""
        return self.n.bit_length()

    @property
    def num_primes(self) -> int:
        return 2 + len(self.other_primes)

    def __str__(self) -> str:
        """Return key as string."""
        return f"alg=RSA bits={self.bits} exp={self.e} primes={self.num_primes}"

    def public_key(self) -> PublicKeyRSA:
        """Return the public half of this key."""
        return PublicKeyRSA(n=self.n, e=self.e)

    def to_cryptography_key(self) -> rsa.RSAPrivateKey:
        """
        Return a 'cryptography' private key object.

        Missing CRT parameters are computed here. Multi-prime keys can't be
        represented by 'cryptography' and raise ValueError.
        """
        if self.other_primes:
            raise ValueError(
                f"Can't convert a {self.num_primes}-prime RSA key to a 'cryptography' key"
            )
        dp = self.dp if self.dp is not None else rsa.rsa_crt_dmp1(self.d, self.p)
        dq = self.dq if self.dq is not None else rsa.rsa_crt_dmq1(self.d, self.q)
        qinv = self.qinv if self.qinv is not None else rsa.rsa_crt_iqmp(self.p, self.q)
        numbers = rsa.RSAPrivateNumbers(
            p=self.p,
            q=self.q,
            d=self.d,
            dmp1=dp,
            dmq1=dq,
            iqmp=qinv,
            public_numbers=rsa.RSAPublicNumbers(self.e, self.n),
        )
        return numbers.private_key()

    @classmethod
    def from_cryptography_key(cls, key: rsa.RSAPrivateKey) -> Self:
        numbers = key.private_numbers()
        return cls(
            n=numbers.public_numbers.n,
            e=numbers.public_numbers.e,
            d=numbers.d,
            p=numbers.p,
            q=numbers.q,
            dp=numbers.dmp1,
            dq=numbers.dmq1,
            qinv=numbers.iqmp,
        )


class DecodedKey(FrozenStrictBaseModel):
    """A decoded key together with the container it was found in."""

    format: ContainerFormat
    key: PublicKeyRSA | PrivateKeyRSA

    @property
    def key_class(self) -> KeyClass:
        return self.format.key_class

    def __str__(self) -> str:
        return f"format={self.format.value} class={self.key_class.value} {self.key}"


class Envelope(FrozenStrictBaseModel):
    """A decoded PEM block."""

    label: str
    payload: bytes = Field(repr=False)
