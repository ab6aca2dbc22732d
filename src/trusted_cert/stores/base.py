"""Credential store — abstract interface.

A credential store is the per-user or per-machine certificate repository a
certificate is added to while it is trusted. Stores are addressed by a
:class:`StoreIdentity` and accessed through a :class:`StoreHandle` obtained
from :meth:`CredentialStore.open`; closing the handle releases the store.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from types import TracebackType
from typing import Optional

from trusted_cert.certificates.test_cert import TestCertificate


class StoreName(str, Enum):
    """Well-known credential store names."""

    MY = "my"
    ROOT = "root"
    CERTIFICATE_AUTHORITY = "ca"
    TRUSTED_PEOPLE = "trusted_people"
    TRUSTED_PUBLISHER = "trusted_publisher"
    DISALLOWED = "disallowed"


class StoreLocation(str, Enum):
    """Scope of a credential store."""

    CURRENT_USER = "current_user"
    LOCAL_MACHINE = "local_machine"


@dataclass(frozen=True)
class StoreIdentity:
    """The (name, location) pair identifying a credential store."""

    store_name: StoreName
    store_location: StoreLocation

    def __str__(self) -> str:
        return f"{self.store_location.value}/{self.store_name.value}"


class StoreAccessError(Exception):
    """Raised when a credential store cannot be opened or modified.

    Parameters
    ----------
    identity:
        The store that was being accessed.
    reason:
        Human-readable description of the failure.
    """

    def __init__(self, identity: StoreIdentity, reason: str) -> None:
        self.identity = identity
        self.reason = reason
        super().__init__(f"Credential store {identity} is not accessible: {reason}")


class StoreHandle(ABC):
    """An open credential store.

    Handles are context managers; leaving the ``with`` block closes them.
    Mutating a handle opened read-only, or any use after close, raises
    :class:`StoreAccessError`.
    """

    def __init__(self, identity: StoreIdentity, read_write: bool) -> None:
        self._identity = identity
        self._read_write = read_write
        self._closed = False

    @property
    def identity(self) -> StoreIdentity:
        return self._identity

    @property
    def read_write(self) -> bool:
        return self._read_write

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Store operations
    # ------------------------------------------------------------------

    def add(self, cert: TestCertificate) -> None:
        """Add *cert* to the store. Adding a present certificate is a no-op."""
        self._check_writable()
        self._add(cert)

    def remove(self, cert: TestCertificate) -> None:
        """Remove *cert* from the store. Removing an absent certificate is a no-op."""
        self._check_writable()
        self._remove(cert)

    def contains(self, cert: TestCertificate) -> bool:
        """Return True if *cert* is in the store."""
        self._check_open()
        return cert.thumbprint in self._thumbprints()

    def certificates(self) -> list[str]:
        """Return the sorted thumbprints of all certificates in the store."""
        self._check_open()
        return sorted(self._thumbprints())

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "StoreHandle":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _add(self, cert: TestCertificate) -> None:
        """Persist *cert*."""

    @abstractmethod
    def _remove(self, cert: TestCertificate) -> None:
        """Delete *cert* if present."""

    @abstractmethod
    def _thumbprints(self) -> set[str]:
        """Return the thumbprints currently stored."""

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _check_open(self) -> None:
        if self._closed:
            raise StoreAccessError(self._identity, "handle is closed")

    def _check_writable(self) -> None:
        self._check_open()
        if not self._read_write:
            raise StoreAccessError(self._identity, "handle was opened read-only")


class CredentialStore(ABC):
    """Abstract base class for credential store backends."""

    @abstractmethod
    def open(self, identity: StoreIdentity, read_write: bool = False) -> StoreHandle:
        """Open the store identified by *identity*.

        Parameters
        ----------
        identity:
            Which store to open.
        read_write:
            Open for modification when True.

        Raises
        ------
        StoreAccessError
            If the store cannot be opened.
        """
