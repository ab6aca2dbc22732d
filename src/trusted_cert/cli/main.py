"""CLI entry point for trusted-cert.

Invoked as::

    trusted-cert [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m trusted_cert.cli.main

Commands
--------
version      Show version information
name         Print the scratch-file name resolved for a certificate
check        Check a certificate's validity window against the trust ceiling
generate     Write a short-lived self-signed certificate
store list   List the certificates in a filesystem credential store
"""
from __future__ import annotations

import datetime
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

console = Console()


def _load_certificate(cert_file: str):
    from trusted_cert.certificates.test_cert import TestCertificate

    data = Path(cert_file).read_bytes()
    if b"-----BEGIN CERTIFICATE-----" in data:
        return TestCertificate.from_pem(data)
    return TestCertificate.from_der(data)


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="WARNING",
    show_default=True,
    help="Logging verbosity.",
)
def cli(log_level: str) -> None:
    """Scoped, fully reversible certificate trust for tests"""
    logging.basicConfig(level=getattr(logging, log_level))


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from trusted_cert import __version__

    console.print(f"[bold]trusted-cert[/bold] v{__version__}")


# ------------------------------------------------------------------
# name
# ------------------------------------------------------------------


@cli.command(name="name")
@click.argument("cert_file", type=click.Path(exists=True, dir_okay=False))
def name_command(cert_file: str) -> None:
    """Print the file name stem used for CERT_FILE's temporary copies."""
    from trusted_cert.naming import resolve_certificate_name

    cert = _load_certificate(cert_file)
    click.echo(resolve_certificate_name(cert.subject_name))


# ------------------------------------------------------------------
# check
# ------------------------------------------------------------------


@cli.command(name="check")
@click.argument("cert_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--max-hours",
    type=float,
    default=None,
    help="Validity ceiling in hours (defaults to TRUSTED_CERT_VALIDITY_CEILING_HOURS or 2).",
)
def check_command(cert_file: str, max_hours: float | None) -> None:
    """Check that CERT_FILE is short-lived enough to be trusted."""
    from trusted_cert.config import TrustScopeSettings

    cert = _load_certificate(cert_file)
    ceiling = (
        datetime.timedelta(hours=max_hours)
        if max_hours is not None
        else TrustScopeSettings.from_env().validity_ceiling
    )

    table = Table(title="Certificate validity")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Subject", cert.subject_name)
    table.add_row("Not before", cert.not_before.isoformat())
    table.add_row("Not after", cert.not_after.isoformat())
    table.add_row("Validity period", str(cert.validity_period))
    table.add_row("Ceiling", str(ceiling))
    console.print(table)

    if cert.validity_period > ceiling:
        console.print(
            f"[red]FAIL[/red] certificate is valid for more than {ceiling}."
        )
        sys.exit(1)
    console.print("[green]OK[/green] certificate can be trusted.")


# ------------------------------------------------------------------
# generate
# ------------------------------------------------------------------


@cli.command(name="generate")
@click.argument("common_name")
@click.option(
    "--out",
    "out_file",
    type=click.Path(dir_okay=False),
    required=True,
    help="Where to write the PEM certificate.",
)
@click.option("--hours", type=float, default=1.0, show_default=True, help="Validity in hours.")
@click.option("--key-out", type=click.Path(dir_okay=False), default=None, help="Optional private key output.")
def generate_command(
    common_name: str, out_file: str, hours: float, key_out: str | None
) -> None:
    """Write a self-signed certificate for COMMON_NAME."""
    from cryptography.hazmat.primitives import serialization

    from trusted_cert.certificates.test_cert import TestCertificate

    cert = TestCertificate.generate_self_signed(
        common_name, validity=datetime.timedelta(hours=hours)
    )
    Path(out_file).write_bytes(cert.export_pem())
    if key_out and cert.private_key is not None:
        Path(key_out).write_bytes(
            cert.private_key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.NoEncryption(),
            )
        )

    console.print(f"[green]Generated[/green] certificate [bold]{common_name}[/bold]")
    console.print(f"  Thumbprint: {cert.thumbprint}")
    console.print(f"  Not after:  {cert.not_after.isoformat()}")


# ------------------------------------------------------------------
# store
# ------------------------------------------------------------------


@cli.group(name="store")
def store_group() -> None:
    """Inspect filesystem credential stores."""


@store_group.command(name="list")
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False),
    required=True,
    help="Root directory of the filesystem credential store.",
)
@click.option(
    "--store-name",
    type=click.Choice(
        ["my", "root", "ca", "trusted_people", "trusted_publisher", "disallowed"]
    ),
    default="root",
    show_default=True,
)
@click.option(
    "--store-location",
    type=click.Choice(["current_user", "local_machine"]),
    default="current_user",
    show_default=True,
)
def store_list_command(base_dir: str, store_name: str, store_location: str) -> None:
    """List certificate thumbprints in a credential store."""
    from trusted_cert.stores.base import (
        StoreAccessError,
        StoreIdentity,
        StoreLocation,
        StoreName,
    )
    from trusted_cert.stores.filesystem import FilesystemCredentialStore

    identity = StoreIdentity(StoreName(store_name), StoreLocation(store_location))
    store = FilesystemCredentialStore(Path(base_dir))

    try:
        with store.open(identity) as handle:
            thumbprints = handle.certificates()
    except StoreAccessError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    if not thumbprints:
        console.print(f"No certificates in {identity}.")
        return

    table = Table(title=f"Certificates in {identity}")
    table.add_column("Thumbprint", style="bold")
    for thumbprint in thumbprints:
        table.add_row(thumbprint)
    console.print(table)


if __name__ == "__main__":
    cli()
