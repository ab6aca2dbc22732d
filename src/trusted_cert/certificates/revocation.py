"""Certificate Revocation List (CRL) export for trusted test issuers.

A trusted issuer may publish a CRL while it is trusted so that revocation
checks made by the code under test find one. The scope only sees the
:class:`RevocationListExporter` capability: ``export_crl()`` on install and
``release()`` on teardown.
"""
from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from trusted_cert.naming import resolve_certificate_name

logger = logging.getLogger(__name__)


@runtime_checkable
class RevocationListExporter(Protocol):
    """Optional capability of a certificate source that publishes a CRL."""

    def export_crl(self) -> None:
        """Publish the revocation list."""

    def release(self) -> None:
        """Withdraw the published revocation list."""


class CertificateRevocationList:
    """Revoked serial numbers for an issuer, exportable as a signed CRL file.

    Parameters
    ----------
    issuer_cert:
        Certificate of the issuing CA.
    issuer_key:
        Private key of the issuing CA, used to sign the CRL.
    output_dir:
        Directory the CRL file is written to.
    next_update:
        How far in the future the CRL's ``nextUpdate`` lies.
    """

    def __init__(
        self,
        issuer_cert: x509.Certificate,
        issuer_key: RSAPrivateKey,
        output_dir: Path,
        next_update: datetime.timedelta = datetime.timedelta(hours=1),
    ) -> None:
        self._issuer_cert = issuer_cert
        self._issuer_key = issuer_key
        self._output_dir = output_dir
        self._next_update = next_update
        self._revoked: dict[int, datetime.datetime] = {}
        self._exported_path: Path | None = None

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def revoke_cert(self, serial_number: int) -> None:
        """Add *serial_number* to the list, revoked as of now."""
        self._revoked.setdefault(
            serial_number, datetime.datetime.now(datetime.timezone.utc)
        )

    def is_revoked(self, serial_number: int) -> bool:
        return serial_number in self._revoked

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    @property
    def crl_path(self) -> Path:
        """Where :meth:`export_crl` writes the CRL."""
        name = resolve_certificate_name(self._issuer_cert.subject.rfc4514_string())
        return self._output_dir / f"{name}.crl"

    @property
    def exported_path(self) -> Path | None:
        """Path of the currently exported CRL, or None."""
        return self._exported_path

    def build(self) -> x509.CertificateRevocationList:
        """Build and sign the CRL from the current revoked serials."""
        now = datetime.datetime.now(datetime.timezone.utc)
        builder = (
            x509.CertificateRevocationListBuilder()
            .issuer_name(self._issuer_cert.subject)
            .last_update(now)
            .next_update(now + self._next_update)
        )
        for serial_number, revoked_at in sorted(self._revoked.items()):
            builder = builder.add_revoked_certificate(
                x509.RevokedCertificateBuilder()
                .serial_number(serial_number)
                .revocation_date(revoked_at)
                .build()
            )
        return builder.sign(self._issuer_key, hashes.SHA256())

    def export_crl(self) -> None:
        """Write the signed CRL as PEM under the output directory."""
        path = self.crl_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.build().public_bytes(serialization.Encoding.PEM))
        self._exported_path = path
        logger.info("Exported CRL with %d revoked serial(s) to %s", len(self._revoked), path)

    def release(self) -> None:
        """Delete the exported CRL file, if any."""
        if self._exported_path is None:
            return
        self._exported_path.unlink(missing_ok=True)
        logger.info("Removed CRL %s", self._exported_path)
        self._exported_path = None
