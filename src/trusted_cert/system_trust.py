"""System trust installers — OS-wide trust anchors on Linux and macOS.

The credential store is enough for code that consults it directly; tools
that rely on the operating system's trust anchors (OpenSSL on Linux, the
System keychain on macOS) additionally need the certificate installed
system-wide. Installation and removal are done by privileged commands run
through a :class:`~trusted_cert.commands.CommandRunner`.

Removal always reuses the path returned by :meth:`SystemTrustInstaller.install`;
the certificate is never re-exported to compute it.
"""
from __future__ import annotations

import logging
import platform
import shlex
from abc import ABC, abstractmethod
from pathlib import Path

from trusted_cert.certificates.test_cert import TestCertificate
from trusted_cert.commands import CommandRunner
from trusted_cert.config import LINUX_CA_DIR, MAC_SYSTEM_KEYCHAIN
from trusted_cert.naming import CertificateNameResolver

logger = logging.getLogger(__name__)

LINUX = "linux"
MACOS = "macos"
WINDOWS = "windows"


def current_platform() -> str:
    """Return ``"linux"``, ``"macos"``, ``"windows"`` or the lowercased OS name."""
    system = platform.system()
    if system == "Darwin":
        return MACOS
    return system.lower()


def is_linux(platform_name: str | None = None) -> bool:
    return (platform_name or current_platform()) == LINUX


def is_macos(platform_name: str | None = None) -> bool:
    return (platform_name or current_platform()) == MACOS


class SystemTrustInstaller(ABC):
    """Installs and removes a certificate from the OS-wide trust anchors.

    Parameters
    ----------
    runner:
        Executes the privileged commands.
    resolver:
        Names the scratch files written for each certificate.
    """

    def __init__(
        self,
        runner: CommandRunner,
        resolver: CertificateNameResolver | None = None,
    ) -> None:
        self._runner = runner
        self._resolver = resolver or CertificateNameResolver()

    @property
    def runner(self) -> CommandRunner:
        return self._runner

    @abstractmethod
    def install(self, cert: TestCertificate, scratch_dir: Path) -> Path:
        """Trust *cert* system-wide.

        Parameters
        ----------
        cert:
            The certificate to trust.
        scratch_dir:
            Directory for the temporary certificate file.

        Returns
        -------
        Path
            The path that :meth:`remove` needs to undo the installation.
        """

    @abstractmethod
    def remove(self, trusted_path: Path) -> None:
        """Undo :meth:`install` given the path it returned."""

    def _scratch_file(self, cert: TestCertificate, scratch_dir: Path, suffix: str) -> Path:
        scratch_dir.mkdir(parents=True, exist_ok=True)
        return scratch_dir / f"{self._resolver.resolve(cert.subject_name)}{suffix}"


class LinuxSystemTrustInstaller(SystemTrustInstaller):
    """Adds a PEM anchor to the local CA directory and rebuilds the bundle.

    Parameters
    ----------
    runner:
        Executes ``cp``, ``rm`` and ``update-ca-certificates``.
    resolver:
        Names the ``.crt`` files.
    ca_dir:
        Local anchor directory read by ``update-ca-certificates``.
    """

    def __init__(
        self,
        runner: CommandRunner,
        resolver: CertificateNameResolver | None = None,
        ca_dir: str = LINUX_CA_DIR,
    ) -> None:
        super().__init__(runner, resolver)
        self._ca_dir = Path(ca_dir)

    def install(self, cert: TestCertificate, scratch_dir: Path) -> Path:
        temp_path = self._scratch_file(cert, scratch_dir, ".crt")
        temp_path.write_bytes(cert.export_pem())

        system_path = self._ca_dir / temp_path.name
        logger.info("Trusting %s system-wide at %s", cert.subject_name, system_path)

        self._runner.run("cp", f"{_quote(temp_path)} {_quote(system_path)}")
        self._runner.run("update-ca-certificates")
        return system_path

    def remove(self, trusted_path: Path) -> None:
        logger.info("Removing system-wide trust anchor %s", trusted_path)
        self._runner.run("rm", _quote(trusted_path))
        self._runner.run("update-ca-certificates")


class MacSystemTrustInstaller(SystemTrustInstaller):
    """Marks a DER certificate as a trusted root in the System keychain.

    Parameters
    ----------
    runner:
        Executes ``security``.
    resolver:
        Names the ``.cer`` files.
    keychain:
        Keychain the trust setting is added to.
    """

    def __init__(
        self,
        runner: CommandRunner,
        resolver: CertificateNameResolver | None = None,
        keychain: str = MAC_SYSTEM_KEYCHAIN,
    ) -> None:
        super().__init__(runner, resolver)
        self._keychain = keychain

    def install(self, cert: TestCertificate, scratch_dir: Path) -> Path:
        cert_path = self._scratch_file(cert, scratch_dir, ".cer")
        cert_path.write_bytes(cert.export_der())

        logger.info("Trusting %s in %s", cert.subject_name, self._keychain)
        self._runner.run(
            "security",
            f"-v add-trusted-cert -d -r trustRoot -k {_quote(self._keychain)} {_quote(cert_path)}",
        )
        return cert_path

    def remove(self, trusted_path: Path) -> None:
        logger.info("Removing trust setting for %s", trusted_path)
        self._runner.run("security", f"-v remove-trusted-cert -d {_quote(trusted_path)}")


def _quote(path: Path | str) -> str:
    return shlex.quote(str(path))
