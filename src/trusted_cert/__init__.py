"""trusted-cert — scoped, fully reversible certificate trust for tests.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Quick start
-----------
::

    from trusted_cert import (
        TestCertificate, StoreIdentity, StoreName, StoreLocation,
        FilesystemCredentialStore, TrustedCertificateScope,
    )

    cert = TestCertificate.generate_self_signed("Test Root")
    identity = StoreIdentity(StoreName.ROOT, StoreLocation.CURRENT_USER)
    with TrustedCertificateScope(cert, identity, tmp_path, trust_in_linux=True):
        ...
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Certificates
# ------------------------------------------------------------------
from trusted_cert.certificates.authority import TestCertificateAuthority
from trusted_cert.certificates.revocation import (
    CertificateRevocationList,
    RevocationListExporter,
)
from trusted_cert.certificates.test_cert import TestCertificate

# ------------------------------------------------------------------
# Credential stores
# ------------------------------------------------------------------
from trusted_cert.stores.base import (
    CredentialStore,
    StoreAccessError,
    StoreHandle,
    StoreIdentity,
    StoreLocation,
    StoreName,
)
from trusted_cert.stores.filesystem import FilesystemCredentialStore

# ------------------------------------------------------------------
# Trust
# ------------------------------------------------------------------
from trusted_cert.commands import (
    CommandRunner,
    RecordingCommandRunner,
    SubprocessCommandRunner,
)
from trusted_cert.config import TrustScopeSettings
from trusted_cert.convenience import trusted_certificate
from trusted_cert.naming import CertificateNameResolver, resolve_certificate_name
from trusted_cert.scope import (
    InvalidPeriodError,
    ScopeDisposedError,
    TrustedCertificateScope,
    create,
)
from trusted_cert.system_trust import (
    LinuxSystemTrustInstaller,
    MacSystemTrustInstaller,
    SystemTrustInstaller,
    current_platform,
)

__all__ = [
    "__version__",
    # certificates
    "CertificateRevocationList",
    "RevocationListExporter",
    "TestCertificate",
    "TestCertificateAuthority",
    # stores
    "CredentialStore",
    "FilesystemCredentialStore",
    "StoreAccessError",
    "StoreHandle",
    "StoreIdentity",
    "StoreLocation",
    "StoreName",
    # trust
    "CertificateNameResolver",
    "CommandRunner",
    "InvalidPeriodError",
    "LinuxSystemTrustInstaller",
    "MacSystemTrustInstaller",
    "RecordingCommandRunner",
    "ScopeDisposedError",
    "SubprocessCommandRunner",
    "SystemTrustInstaller",
    "TrustScopeSettings",
    "TrustedCertificateScope",
    "create",
    "current_platform",
    "resolve_certificate_name",
    "trusted_certificate",
]
