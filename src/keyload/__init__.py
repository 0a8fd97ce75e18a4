"""Decode RSA keys from PEM or DER in any of the common ASN.1 containers."""
