"""Short-lived Certificate Authority for tests.

Issues certificates whose validity windows fit inside the trust ceiling, so
they can be granted temporary trust. The CA certificate carries its own
revocation list, exported while the CA is trusted.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from trusted_cert.certificates.revocation import CertificateRevocationList
from trusted_cert.certificates.test_cert import DEFAULT_VALIDITY, TestCertificate, build_name


@dataclass
class TestCertificateAuthority:
    """Self-signed CA issuing short-lived leaf certificates.

    Parameters
    ----------
    certificate:
        The CA's own certificate, with ``crl`` attached.
    crl:
        Revocation list for certificates issued by this CA.
    """

    __test__ = False

    certificate: TestCertificate
    crl: CertificateRevocationList

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def generate(
        cls,
        common_name: str = "Trusted Cert Test Root",
        crl_dir: Path | None = None,
        validity: datetime.timedelta = DEFAULT_VALIDITY,
        organization: str | None = None,
    ) -> "TestCertificateAuthority":
        """Generate a CA valid for *validity* from now.

        Parameters
        ----------
        common_name:
            CN of the CA subject.
        crl_dir:
            Directory the CA's CRL is exported to. Defaults to the current
            working directory.
        validity:
            CA validity window (one hour by default).
        organization:
            Optional O attribute for the CA subject.
        """
        certificate = TestCertificate.generate_self_signed(
            common_name,
            validity=validity,
            organization=organization,
            ca=True,
        )
        assert certificate.private_key is not None
        crl = CertificateRevocationList(
            issuer_cert=certificate.certificate,
            issuer_key=certificate.private_key,
            output_dir=crl_dir if crl_dir is not None else Path.cwd(),
        )
        certificate.crl = crl
        return cls(certificate=certificate, crl=crl)

    # ------------------------------------------------------------------
    # Issuance
    # ------------------------------------------------------------------

    @property
    def private_key(self) -> RSAPrivateKey:
        assert self.certificate.private_key is not None
        return self.certificate.private_key

    def issue(
        self,
        common_name: str,
        validity: datetime.timedelta = DEFAULT_VALIDITY,
        organization: str | None = None,
    ) -> TestCertificate:
        """Issue a leaf certificate signed by this CA.

        Parameters
        ----------
        common_name:
            CN of the leaf subject.
        validity:
            Leaf validity window.
        organization:
            Optional O attribute for the leaf subject.
        """
        key: RSAPrivateKey = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        now = datetime.datetime.now(datetime.timezone.utc)

        leaf = (
            x509.CertificateBuilder()
            .subject_name(build_name(common_name, organization))
            .issuer_name(self.certificate.certificate.subject)
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now)
            .not_valid_after(now + validity)
            .add_extension(
                x509.BasicConstraints(ca=False, path_length=None),
                critical=True,
            )
            .sign(self.private_key, hashes.SHA256())
        )
        return TestCertificate(certificate=leaf, private_key=key)

    def revoke(self, certificate: TestCertificate) -> None:
        """Mark *certificate* revoked in this CA's CRL."""
        self.crl.revoke_cert(certificate.serial_number)
