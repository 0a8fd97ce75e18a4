"""Sub-package decoding RSA keys from PEM or DER."""
from keyload.decoder.errors import (  # noqa
    FormatMismatch,
    KeyDecodeError,
    MalformedEncoding,
    MissingEnvelope,
    UnrecognizedFormat,
    UnsupportedLabel,
)
from keyload.decoder.load import (  # noqa
    decode_key,
    decode_private_key_der,
    decode_private_key_pem,
    decode_public_key_der,
    decode_public_key_pem,
    load_key_file,
)
from keyload.decoder.probe import probe_private_key, probe_public_key  # noqa
