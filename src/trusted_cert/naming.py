"""Certificate naming for temporary trust files.

The resolved name is used as the stem of the scratch files written before a
certificate is handed to the operating system trust tools, so it has to be
stable for a given subject and safe to use as a file name.
"""
from __future__ import annotations

import re
import uuid

FALLBACK_PREFIX: str = "TrustedCertTest-"

_UNSAFE_CHARS = re.compile(r"[\s/\\]+")


def resolve_certificate_name(
    subject_name: str, fallback_prefix: str = FALLBACK_PREFIX
) -> str:
    """Return the common name of *subject_name*, or a unique fallback name.

    The subject is split on ``=``; the token following a ``CN`` attribute
    type is taken as the name, cut at the next RDN separator. Subjects with
    no usable ``CN`` yield ``fallback_prefix`` followed by a random UUID.

    Parameters
    ----------
    subject_name:
        Distinguished name string, e.g. ``"CN=TestRoot, O=Example"``.
    fallback_prefix:
        Prefix for generated names when no common name is present.

    Returns
    -------
    str
        A name suitable for use as a file name stem.
    """
    parts = subject_name.split("=")

    for index, part in enumerate(parts[:-1]):
        attribute_type = part.rsplit(",", 1)[-1].strip()
        if attribute_type != "CN":
            continue
        value = parts[index + 1].split(",", 1)[0].strip()
        if value:
            return _UNSAFE_CHARS.sub("_", value)

    return f"{fallback_prefix}{uuid.uuid4()}"


class CertificateNameResolver:
    """Resolves file-name-safe identifiers for certificates.

    Parameters
    ----------
    fallback_prefix:
        Namespace tag used for generated names when a subject has no CN.
    """

    def __init__(self, fallback_prefix: str = FALLBACK_PREFIX) -> None:
        self._fallback_prefix = fallback_prefix

    @property
    def fallback_prefix(self) -> str:
        return self._fallback_prefix

    def resolve(self, subject_name: str) -> str:
        """Return the name for a certificate with the given subject."""
        return resolve_certificate_name(subject_name, self._fallback_prefix)
