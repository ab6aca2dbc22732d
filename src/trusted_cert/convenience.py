"""Convenience API for trusted-cert — a one-call trusted root.

Example
-------
::

    from trusted_cert import trusted_certificate

    with trusted_certificate("Test Root", tmp_path) as scope:
        ...  # scope.certificate is trusted here

"""
from __future__ import annotations

import contextlib
import datetime
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from trusted_cert.certificates.authority import TestCertificateAuthority
from trusted_cert.scope import TrustedCertificateScope
from trusted_cert.stores.base import StoreIdentity, StoreLocation, StoreName

DEFAULT_STORE = StoreIdentity(StoreName.ROOT, StoreLocation.CURRENT_USER)


@contextlib.contextmanager
def trusted_certificate(
    common_name: str,
    scratch_dir: Path,
    validity: datetime.timedelta = datetime.timedelta(hours=1),
    store_identity: StoreIdentity = DEFAULT_STORE,
    **kwargs: Any,
) -> Iterator[TrustedCertificateScope]:
    """Generate a short-lived root CA and trust it for the ``with`` block.

    The CA's CRL is exported under *scratch_dir* while the block runs.
    Extra keyword arguments are passed to :class:`TrustedCertificateScope`.
    """
    authority = TestCertificateAuthority.generate(
        common_name, crl_dir=Path(scratch_dir) / "crl", validity=validity
    )
    with TrustedCertificateScope(
        authority.certificate,
        store_identity,
        scratch_dir,
        source=authority,
        **kwargs,
    ) as scope:
        yield scope
