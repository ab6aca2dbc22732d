"""Test certificates and their revocation lists.

Generation here exists to feed trusted scopes with short-lived certificates;
it is not a general-purpose CA.
"""
from __future__ import annotations

from trusted_cert.certificates.authority import TestCertificateAuthority
from trusted_cert.certificates.revocation import (
    CertificateRevocationList,
    RevocationListExporter,
)
from trusted_cert.certificates.test_cert import TestCertificate

__all__ = [
    "CertificateRevocationList",
    "RevocationListExporter",
    "TestCertificate",
    "TestCertificateAuthority",
]
