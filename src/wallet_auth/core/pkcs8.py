"""Ed25519 PKCS#8 v2 (RFC 5958 ``OneAsymmetricKey``) parsing.

``cryptography`` loads v1 ``PrivateKeyInfo`` documents only. Key pair
documents that also carry the public key are parsed here with pyasn1. Both the
RFC 5958 ``[1] IMPLICIT`` public key and the ``[1] EXPLICIT`` form emitted by
ring are accepted.
"""

from __future__ import annotations

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from pyasn1.codec.der import decoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import namedtype, tag, univ

from wallet_auth.core.jwk import raw_public_bytes

ED25519_OID = univ.ObjectIdentifier("1.3.101.112")
_PUBLIC_KEY_TAG = 1


class AlgorithmIdentifier(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("algorithm", univ.ObjectIdentifier()),
        namedtype.OptionalNamedType("parameters", univ.Any()),
    )


class OneAsymmetricKey(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("version", univ.Integer()),
        namedtype.NamedType("privateKeyAlgorithm", AlgorithmIdentifier()),
        namedtype.NamedType("privateKey", univ.OctetString()),
        namedtype.OptionalNamedType(
            "publicKey",
            univ.BitString().subtype(
                implicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatSimple, _PUBLIC_KEY_TAG)
            ),
        ),
    )


class ExplicitOneAsymmetricKey(univ.Sequence):
    componentType = namedtype.NamedTypes(
        namedtype.NamedType("version", univ.Integer()),
        namedtype.NamedType("privateKeyAlgorithm", AlgorithmIdentifier()),
        namedtype.NamedType("privateKey", univ.OctetString()),
        namedtype.OptionalNamedType(
            "publicKey",
            univ.BitString().subtype(
                explicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatConstructed, _PUBLIC_KEY_TAG)
            ),
        ),
    )


def _decode(der: bytes) -> univ.Sequence:
    for spec in (OneAsymmetricKey(), ExplicitOneAsymmetricKey()):
        try:
            info, rest = decoder.decode(der, asn1Spec=spec)
        except PyAsn1Error:
            continue
        if not rest:
            return info
    raise ValueError("Not a PKCS#8 OneAsymmetricKey document")


def load_ed25519_pkcs8(der: bytes) -> Ed25519PrivateKey:
    """Return the Ed25519 private key held in a PKCS#8 v1 or v2 DER document.

    Raises:
        ValueError: If the document is not an Ed25519 key, or if its embedded
            public key does not belong to the private key.
    """
    info = _decode(der)
    if info["privateKeyAlgorithm"]["algorithm"] != ED25519_OID:
        raise ValueError("PKCS#8 document does not hold an Ed25519 key")

    try:
        seed, rest = decoder.decode(bytes(info["privateKey"]), asn1Spec=univ.OctetString())
    except PyAsn1Error as err:
        raise ValueError(f"Malformed Ed25519 private key: {err}") from err
    if rest:
        raise ValueError("Trailing data after Ed25519 private key")
    private_key = Ed25519PrivateKey.from_private_bytes(bytes(seed))

    public_key = info["publicKey"]
    if public_key.isValue:
        if public_key.asOctets() != raw_public_bytes(private_key.public_key()):
            raise ValueError("Embedded public key does not match the private key")
    return private_key
