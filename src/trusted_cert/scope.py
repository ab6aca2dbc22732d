"""TrustedCertificateScope — temporary trust for a test certificate.

A scope grants a certificate trust for its lifetime and takes all of it
away again when it ends:

1. the certificate is added to a credential store,
2. on Linux or macOS, when requested, it is also installed as a
   system-wide trust anchor,
3. if its source publishes a revocation list, the CRL is exported.

:meth:`TrustedCertificateScope.dispose` undoes these steps in reverse
order. Every teardown step is attempted even if an earlier one fails, and
disposing twice is a no-op.

Usage::

    with TrustedCertificateScope(cert, identity, tmp_path, store=store):
        run_code_that_needs_trust()

A scope is not thread-safe; serialize access to a single instance.
"""
from __future__ import annotations

import datetime
import logging
from pathlib import Path
from types import TracebackType
from typing import Any, Callable, Optional

from trusted_cert.certificates.revocation import RevocationListExporter
from trusted_cert.certificates.test_cert import TestCertificate
from trusted_cert.commands import CommandRunner, SubprocessCommandRunner
from trusted_cert.config import TrustScopeSettings
from trusted_cert.naming import CertificateNameResolver
from trusted_cert.stores.base import CredentialStore, StoreHandle, StoreIdentity
from trusted_cert.stores.filesystem import FilesystemCredentialStore
from trusted_cert.system_trust import (
    LinuxSystemTrustInstaller,
    MacSystemTrustInstaller,
    SystemTrustInstaller,
    current_platform,
    is_linux,
    is_macos,
)

logger = logging.getLogger(__name__)


class InvalidPeriodError(ValueError):
    """Raised when a certificate is valid for longer than the trust ceiling.

    Parameters
    ----------
    validity_period:
        The certificate's ``not_after - not_before``.
    ceiling:
        The configured maximum validity period.
    """

    def __init__(
        self, validity_period: datetime.timedelta, ceiling: datetime.timedelta
    ) -> None:
        self.validity_period = validity_period
        self.ceiling = ceiling
        super().__init__(
            f"The certificate used is valid for more than {ceiling} "
            f"(validity period: {validity_period})."
        )


class ScopeDisposedError(RuntimeError):
    """Raised when installing a scope that has already been disposed."""


def resolve_revocation_list(source: Any) -> Optional[RevocationListExporter]:
    """Return the revocation-list capability exposed by *source*, if any.

    A source exposes the capability either through a ``crl`` attribute or
    by implementing :class:`RevocationListExporter` itself.
    """
    crl = getattr(source, "crl", None)
    if isinstance(crl, RevocationListExporter):
        return crl
    if isinstance(source, RevocationListExporter):
        return source
    return None


class TrustedCertificateScope:
    """Gives a certificate full trust for the life of the object.

    Construction checks the validity window and acquires nothing;
    :meth:`install` (or entering the ``with`` block) performs the trust
    changes and :meth:`dispose` (or leaving it) reverts them.

    Parameters
    ----------
    certificate:
        The certificate to trust. The scope never modifies it.
    store_identity:
        Which credential store the certificate is added to.
    scratch_dir:
        Directory for temporary certificate files.
    store:
        Credential store backend. Defaults to a filesystem store under
        ``scratch_dir / "credential-stores"``.
    validity_ceiling:
        Maximum tolerated validity window. Overrides the settings value.
    trust_in_linux:
        Also install the certificate as a system trust anchor on Linux.
    trust_in_mac:
        Also mark the certificate as a trusted root on macOS.
    source:
        Object the certificate came from. Defaults to *certificate*.
    crl:
        Revocation-list capability to export while trusted. Resolved from
        *source* when omitted.
    runner:
        Runs the system trust commands.
    platform_name:
        Platform to act for; detected when omitted.
    settings:
        Paths, elevation command and defaults.
    linux_installer, mac_installer:
        Replacement system trust installers.

    Raises
    ------
    InvalidPeriodError
        If the certificate's validity window exceeds the ceiling.
    """

    def __init__(
        self,
        certificate: TestCertificate,
        store_identity: StoreIdentity,
        scratch_dir: Path,
        *,
        store: CredentialStore | None = None,
        validity_ceiling: datetime.timedelta | None = None,
        trust_in_linux: bool = False,
        trust_in_mac: bool = False,
        source: Any = None,
        crl: RevocationListExporter | None = None,
        runner: CommandRunner | None = None,
        platform_name: str | None = None,
        settings: TrustScopeSettings | None = None,
        linux_installer: SystemTrustInstaller | None = None,
        mac_installer: SystemTrustInstaller | None = None,
    ) -> None:
        self._settings = settings or TrustScopeSettings()
        self._certificate = certificate
        self._source = source if source is not None else certificate
        self._store_identity = store_identity
        self._scratch_dir = Path(scratch_dir)
        self._validity_ceiling = (
            validity_ceiling
            if validity_ceiling is not None
            else self._settings.validity_ceiling
        )

        self.validate()

        self._store = store or FilesystemCredentialStore(
            self._scratch_dir / "credential-stores"
        )
        self._trust_in_linux = trust_in_linux
        self._trust_in_mac = trust_in_mac
        self._crl = crl if crl is not None else resolve_revocation_list(self._source)
        self._platform = platform_name or current_platform()

        runner = runner or SubprocessCommandRunner(
            elevation=self._settings.elevation_command,
            timeout=self._settings.command_timeout,
        )
        resolver = CertificateNameResolver(self._settings.name_prefix)
        self._linux_installer = linux_installer or LinuxSystemTrustInstaller(
            runner, resolver, ca_dir=self._settings.linux_ca_dir
        )
        self._mac_installer = mac_installer or MacSystemTrustInstaller(
            runner, resolver, keychain=self._settings.mac_keychain
        )

        self._handle: StoreHandle | None = None
        self._system_trust_path: Path | None = None
        self._trusted_in_mac = False
        self._crl_exported = False
        self._installed = False
        self._disposed = False

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        certificate: TestCertificate,
        store_identity: StoreIdentity,
        scratch_dir: Path,
        **kwargs: Any,
    ) -> "TrustedCertificateScope":
        """Construct a scope and install it in one call."""
        return cls(certificate, store_identity, scratch_dir, **kwargs).install()

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    @property
    def certificate(self) -> TestCertificate:
        return self._certificate

    @property
    def source(self) -> Any:
        return self._source

    @property
    def store_identity(self) -> StoreIdentity:
        return self._store_identity

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def validity_ceiling(self) -> datetime.timedelta:
        return self._validity_ceiling

    @property
    def system_trust_path(self) -> Path | None:
        """Path recorded by the system trust install, or None if it did not run."""
        return self._system_trust_path

    @property
    def trusted_in_mac(self) -> bool:
        return self._trusted_in_mac

    @property
    def crl(self) -> RevocationListExporter | None:
        return self._crl

    @property
    def installed(self) -> bool:
        return self._installed

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def validate(self) -> None:
        """Raise :class:`InvalidPeriodError` if the validity window is too long."""
        period = self._certificate.not_after - self._certificate.not_before
        if period > self._validity_ceiling:
            raise InvalidPeriodError(period, self._validity_ceiling)

    def install(self) -> "TrustedCertificateScope":
        """Grant trust. Calling it again on an installed scope is a no-op.

        If a step after the credential store addition fails, everything
        acquired so far is released before the exception propagates.

        Raises
        ------
        StoreAccessError
            If the credential store cannot be opened or written.
        ScopeDisposedError
            If the scope has already been disposed.
        """
        if self._disposed:
            raise ScopeDisposedError("Cannot install a disposed trusted certificate scope")
        if self._installed:
            return self

        self._add_to_store()
        self._installed = True

        try:
            if self._trust_in_linux and is_linux(self._platform):
                self._system_trust_path = self._linux_installer.install(
                    self._certificate, self._scratch_dir
                )
            elif self._trust_in_mac and is_macos(self._platform):
                self._trusted_in_mac = True
                self._system_trust_path = self._mac_installer.install(
                    self._certificate, self._scratch_dir
                )

            if self._crl is not None:
                self._crl_exported = True
                self._crl.export_crl()
        except Exception:
            logger.warning(
                "Installing trust for %s failed; reverting", self._certificate.subject_name
            )
            self.dispose()
            raise

        logger.info(
            "Trusted %s in %s (system trust: %s)",
            self._certificate.subject_name,
            self._store_identity,
            self._system_trust_path or "none",
        )
        return self

    def dispose(self) -> None:
        """Revert every trust change made by :meth:`install`.

        Steps run in reverse order of acquisition. A failing step is logged
        and the remaining steps still run; this method never raises.
        """
        if self._disposed:
            return

        steps: list[tuple[str, Callable[[], None]]] = [
            ("credential store removal", self._remove_from_store),
            ("Linux system trust removal", self._untrust_in_linux),
            ("macOS system trust removal", self._untrust_in_mac),
            ("CRL release", self._release_crl),
        ]
        for description, step in steps:
            try:
                step()
            except Exception:
                logger.exception(
                    "%s failed for %s", description, self._certificate.subject_name
                )

        self._system_trust_path = None
        self._trusted_in_mac = False
        self._installed = False
        self._disposed = True
        logger.info("Disposed trust for %s", self._certificate.subject_name)

    def __enter__(self) -> "TrustedCertificateScope":
        return self.install()

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _add_to_store(self) -> None:
        handle = self._store.open(self._store_identity, read_write=True)
        try:
            handle.add(self._certificate)
        except Exception:
            handle.close()
            raise
        self._handle = handle

    def _remove_from_store(self) -> None:
        if self._handle is None:
            return
        with self._handle as handle:
            self._handle = None
            handle.remove(self._certificate)

    def _untrust_in_linux(self) -> None:
        if self._system_trust_path is not None and is_linux(self._platform):
            self._linux_installer.remove(self._system_trust_path)

    def _untrust_in_mac(self) -> None:
        if self._trusted_in_mac and self._system_trust_path is not None and is_macos(
            self._platform
        ):
            self._mac_installer.remove(self._system_trust_path)

    def _release_crl(self) -> None:
        if self._crl is not None and self._crl_exported:
            self._crl_exported = False
            self._crl.release()


def create(
    certificate: TestCertificate,
    store_identity: StoreIdentity,
    scratch_dir: Path,
    **kwargs: Any,
) -> TrustedCertificateScope:
    """Construct and install a :class:`TrustedCertificateScope`."""
    return TrustedCertificateScope.create(certificate, store_identity, scratch_dir, **kwargs)
