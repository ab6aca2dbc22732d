"""TrustScopeSettings — tunables for scoped certificate trust.

Defaults match the conventional locations used by Debian-family Linux and
macOS. Every value can be overridden per scope or through ``TRUSTED_CERT_*``
environment variables.
"""
from __future__ import annotations

import datetime
import os
from collections.abc import Mapping
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from trusted_cert.naming import FALLBACK_PREFIX

DEFAULT_VALIDITY_CEILING = datetime.timedelta(hours=2)
LINUX_CA_DIR = "/usr/local/share/ca-certificates"
MAC_SYSTEM_KEYCHAIN = "/Library/Keychains/System.keychain"
ELEVATION_COMMAND = "/usr/bin/sudo"

ENV_PREFIX = "TRUSTED_CERT_"


class TrustScopeSettings(BaseModel):
    """Configuration for a trusted certificate scope.

    Parameters
    ----------
    validity_ceiling:
        Longest validity window (``not_after - not_before``) a certificate
        may have and still be trusted. Defaults to two hours.
    linux_ca_dir:
        Directory that ``update-ca-certificates`` picks local anchors from.
    mac_keychain:
        Keychain passed to ``security add-trusted-cert``.
    elevation_command:
        Executable used to run the trust commands with privileges.
    command_timeout:
        Optional bound in seconds on each external command. ``None`` waits
        for the command to exit however long it takes.
    name_prefix:
        Prefix for generated certificate names when the subject has no CN.
    """

    validity_ceiling: datetime.timedelta = DEFAULT_VALIDITY_CEILING
    linux_ca_dir: str = LINUX_CA_DIR
    mac_keychain: str = MAC_SYSTEM_KEYCHAIN
    elevation_command: str = ELEVATION_COMMAND
    command_timeout: Optional[float] = Field(default=None, gt=0)
    name_prefix: str = FALLBACK_PREFIX

    @field_validator("validity_ceiling")
    @classmethod
    def _ceiling_positive(cls, value: datetime.timedelta) -> datetime.timedelta:
        if value <= datetime.timedelta(0):
            raise ValueError(f"validity_ceiling must be positive, got {value}")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "TrustScopeSettings":
        """Build settings from ``TRUSTED_CERT_*`` environment variables.

        ``TRUSTED_CERT_VALIDITY_CEILING_HOURS`` is read as a float number of
        hours; the remaining fields are read verbatim from
        ``TRUSTED_CERT_<FIELD_NAME>``. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        hours = env.get(f"{ENV_PREFIX}VALIDITY_CEILING_HOURS")
        if hours:
            values["validity_ceiling"] = datetime.timedelta(hours=float(hours))

        for name in ("linux_ca_dir", "mac_keychain", "elevation_command", "name_prefix"):
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw:
                values[name] = raw

        timeout = env.get(f"{ENV_PREFIX}COMMAND_TIMEOUT")
        if timeout:
            values["command_timeout"] = float(timeout)

        return cls(**values)
