"""Tests for trusted_cert.system_trust — Linux and macOS trust installers."""
from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from trusted_cert.certificates.test_cert import TestCertificate
from trusted_cert.commands import RecordingCommandRunner
from trusted_cert.naming import CertificateNameResolver
from trusted_cert.system_trust import (
    LinuxSystemTrustInstaller,
    MacSystemTrustInstaller,
    current_platform,
    is_linux,
    is_macos,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def cert() -> TestCertificate:
    return TestCertificate.generate_self_signed("TestRoot", organization="Example")


@pytest.fixture()
def runner() -> RecordingCommandRunner:
    return RecordingCommandRunner()


@pytest.fixture()
def scratch(tmp_path: Path) -> Path:
    return tmp_path / "scratch"


# ---------------------------------------------------------------------------
# Platform detection
# ---------------------------------------------------------------------------


class TestPlatform:
    @pytest.mark.parametrize(
        "system, expected",
        [("Linux", "linux"), ("Darwin", "macos"), ("Windows", "windows")],
    )
    def test_current_platform(self, system: str, expected: str) -> None:
        with patch("platform.system", return_value=system):
            assert current_platform() == expected

    def test_is_linux(self) -> None:
        assert is_linux("linux")
        assert not is_linux("macos")

    def test_is_macos(self) -> None:
        assert is_macos("macos")
        assert not is_macos("windows")

    def test_detects_when_not_given(self) -> None:
        with patch("platform.system", return_value="Darwin"):
            assert is_macos()
            assert not is_linux()


# ---------------------------------------------------------------------------
# Linux
# ---------------------------------------------------------------------------


class TestLinuxInstall:
    def test_returns_system_path(
        self, runner: RecordingCommandRunner, cert: TestCertificate, scratch: Path
    ) -> None:
        installer = LinuxSystemTrustInstaller(runner)
        path = installer.install(cert, scratch)
        assert path == Path("/usr/local/share/ca-certificates/TestRoot.crt")

    def test_writes_pem_to_scratch(
        self, runner: RecordingCommandRunner, cert: TestCertificate, scratch: Path
    ) -> None:
        LinuxSystemTrustInstaller(runner).install(cert, scratch)
        assert (scratch / "TestRoot.crt").read_bytes() == cert.export_pem()

    def test_commands(
        self, runner: RecordingCommandRunner, cert: TestCertificate, scratch: Path
    ) -> None:
        LinuxSystemTrustInstaller(runner).install(cert, scratch)
        assert runner.commands() == [
            f"cp {scratch / 'TestRoot.crt'} /usr/local/share/ca-certificates/TestRoot.crt",
            "update-ca-certificates",
        ]

    def test_custom_ca_dir(
        self, runner: RecordingCommandRunner, cert: TestCertificate, scratch: Path
    ) -> None:
        installer = LinuxSystemTrustInstaller(runner, ca_dir="/etc/anchors")
        assert installer.install(cert, scratch) == Path("/etc/anchors/TestRoot.crt")

    def test_failing_commands_do_not_raise(
        self, cert: TestCertificate, scratch: Path
    ) -> None:
        runner = RecordingCommandRunner(exit_code=1)
        LinuxSystemTrustInstaller(runner).install(cert, scratch)
        assert len(runner.invocations) == 2

    def test_fallback_name_for_cn_less_subject(
        self, runner: RecordingCommandRunner, scratch: Path
    ) -> None:
        cert = TestCertificate.generate_self_signed("ignored")
        installer = LinuxSystemTrustInstaller(runner, CertificateNameResolver("Suite-"))
        with patch.object(TestCertificate, "subject_name", new=property(lambda self: "O=NoCn")):
            path = installer.install(cert, scratch)
        assert path.name.startswith("Suite-")
        assert path.suffix == ".crt"


class TestLinuxRemove:
    def test_commands(self, runner: RecordingCommandRunner) -> None:
        path = Path("/usr/local/share/ca-certificates/TestRoot.crt")
        LinuxSystemTrustInstaller(runner).remove(path)
        assert runner.commands() == [
            "rm /usr/local/share/ca-certificates/TestRoot.crt",
            "update-ca-certificates",
        ]


# ---------------------------------------------------------------------------
# macOS
# ---------------------------------------------------------------------------


class TestMacInstall:
    def test_returns_scratch_path(
        self, runner: RecordingCommandRunner, cert: TestCertificate, scratch: Path
    ) -> None:
        path = MacSystemTrustInstaller(runner).install(cert, scratch)
        assert path == scratch / "TestRoot.cer"

    def test_writes_der(
        self, runner: RecordingCommandRunner, cert: TestCertificate, scratch: Path
    ) -> None:
        MacSystemTrustInstaller(runner).install(cert, scratch)
        assert (scratch / "TestRoot.cer").read_bytes() == cert.export_der()

    def test_command(
        self, runner: RecordingCommandRunner, cert: TestCertificate, scratch: Path
    ) -> None:
        MacSystemTrustInstaller(runner).install(cert, scratch)
        assert runner.commands() == [
            "security -v add-trusted-cert -d -r trustRoot "
            f"-k /Library/Keychains/System.keychain {scratch / 'TestRoot.cer'}"
        ]


class TestMacRemove:
    def test_command(self, runner: RecordingCommandRunner, scratch: Path) -> None:
        MacSystemTrustInstaller(runner).remove(scratch / "TestRoot.cer")
        assert runner.commands() == [
            f"security -v remove-trusted-cert -d {scratch / 'TestRoot.cer'}"
        ]
