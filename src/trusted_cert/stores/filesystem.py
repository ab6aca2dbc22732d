"""Filesystem-backed credential store.

Each store lives under ``<base_dir>/<location>/<name>/`` and holds one
``<thumbprint>.pem`` file per certificate.
"""
from __future__ import annotations

from pathlib import Path

from trusted_cert.certificates.test_cert import TestCertificate
from trusted_cert.stores.base import (
    CredentialStore,
    StoreAccessError,
    StoreHandle,
    StoreIdentity,
)


class FilesystemStoreHandle(StoreHandle):
    """Open handle onto a single store directory."""

    def __init__(self, identity: StoreIdentity, read_write: bool, store_dir: Path) -> None:
        super().__init__(identity, read_write)
        self._store_dir = store_dir

    @property
    def store_dir(self) -> Path:
        return self._store_dir

    def _add(self, cert: TestCertificate) -> None:
        try:
            self._cert_path(cert).write_bytes(cert.export_pem())
        except OSError as exc:
            raise StoreAccessError(self.identity, str(exc)) from exc

    def _remove(self, cert: TestCertificate) -> None:
        try:
            self._cert_path(cert).unlink(missing_ok=True)
        except OSError as exc:
            raise StoreAccessError(self.identity, str(exc)) from exc

    def _thumbprints(self) -> set[str]:
        try:
            return {path.stem for path in self._store_dir.glob("*.pem")}
        except OSError as exc:
            raise StoreAccessError(self.identity, str(exc)) from exc

    def _cert_path(self, cert: TestCertificate) -> Path:
        return self._store_dir / f"{cert.thumbprint}.pem"


class FilesystemCredentialStore(CredentialStore):
    """Credential stores persisted as PEM files under *base_dir*.

    Parameters
    ----------
    base_dir:
        Root directory for all store locations.
    """

    def __init__(self, base_dir: Path) -> None:
        self._base_dir = base_dir

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def open(self, identity: StoreIdentity, read_write: bool = False) -> FilesystemStoreHandle:
        store_dir = self.store_dir(identity)
        if read_write:
            try:
                store_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StoreAccessError(identity, str(exc)) from exc
        elif not store_dir.is_dir():
            raise StoreAccessError(identity, f"{store_dir} does not exist")
        return FilesystemStoreHandle(identity, read_write, store_dir)

    def store_dir(self, identity: StoreIdentity) -> Path:
        """Return the directory holding the store *identity*."""
        return (
            self._base_dir
            / identity.store_location.value
            / identity.store_name.value
        )
