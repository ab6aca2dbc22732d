#!/usr/bin/env python3
"""Example: Quickstart

Trusts a freshly generated root CA for the duration of a ``with`` block and
shows that the trust is gone afterwards. System trust commands are recorded
rather than executed, so no privileges are needed.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install trusted-cert
"""
from __future__ import annotations

import tempfile
from pathlib import Path

import trusted_cert
from trusted_cert import RecordingCommandRunner, trusted_certificate


def main() -> None:
    print(f"trusted-cert version: {trusted_cert.__version__}")
    runner = RecordingCommandRunner()

    with tempfile.TemporaryDirectory() as tmp:
        scratch = Path(tmp)

        with trusted_certificate(
            "Quickstart Root", scratch, runner=runner, trust_in_linux=True, platform_name="linux"
        ) as scope:
            print(f"Trusted: {scope.certificate.subject_name}")
            print(f"System trust path: {scope.system_trust_path}")
            with scope.store.open(scope.store_identity) as handle:
                print(f"In {scope.store_identity}: {handle.contains(scope.certificate)}")

        with scope.store.open(scope.store_identity) as handle:
            print(f"After scope: {handle.contains(scope.certificate)}")

    print("\nCommands issued:")
    for command in runner.commands():
        print(f"  sudo {command}")


if __name__ == "__main__":
    main()
