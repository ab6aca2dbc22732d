"""Credential stores a certificate is added to while it is trusted."""
from __future__ import annotations

from trusted_cert.stores.base import (
    CredentialStore,
    StoreAccessError,
    StoreHandle,
    StoreIdentity,
    StoreLocation,
    StoreName,
)
from trusted_cert.stores.filesystem import FilesystemCredentialStore, FilesystemStoreHandle

__all__ = [
    "CredentialStore",
    "FilesystemCredentialStore",
    "FilesystemStoreHandle",
    "StoreAccessError",
    "StoreHandle",
    "StoreIdentity",
    "StoreLocation",
    "StoreName",
]
