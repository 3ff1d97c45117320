# src/crewplan/settings.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Callable, Optional, TypeVar

from azure.core.exceptions import AzureError
from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient

from .plan import DEFAULT_RATE

T = TypeVar("T")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    default_rate: float = DEFAULT_RATE
    timeline_start_year: int = field(default_factory=lambda: date.today().year)
    timeline_years: int = 2
    log_level: str = "INFO"


def _parse(name: str, raw: str, cast: Callable[[str], T]) -> T:
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"{name} has an invalid value: {raw!r}") from None


def _env(name: str, cast: Callable[[str], T], default: T) -> T:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    return _parse(name, raw, cast)


def load_settings() -> Settings:
    """
    Reads planner settings from the environment:
      CREWPLAN_DEFAULT_RATE, CREWPLAN_START_YEAR, CREWPLAN_YEARS, CREWPLAN_LOG_LEVEL
    Unset variables fall back to defaults.
    """
    base = Settings()
    s = Settings(
        default_rate=_env("CREWPLAN_DEFAULT_RATE", float, base.default_rate),
        timeline_start_year=_env("CREWPLAN_START_YEAR", int, base.timeline_start_year),
        timeline_years=_env("CREWPLAN_YEARS", int, base.timeline_years),
        log_level=_env("CREWPLAN_LOG_LEVEL", str, base.log_level).upper(),
    )
    if s.default_rate <= 0:
        raise ValueError("CREWPLAN_DEFAULT_RATE must be > 0")
    if s.timeline_years < 1:
        raise ValueError("CREWPLAN_YEARS must be >= 1")
    return s


def _kv_uri_from_env() -> str:
    """Vault URL built from the KEYVAULT_NAME variable, e.g. crewplan-dev-kv."""
    name = os.getenv("KEYVAULT_NAME", "").strip()
    if not name:
        raise RuntimeError(
            "KEYVAULT_NAME is not set; cannot locate the planner's Key Vault. "
            "Pass kv_uri explicitly or export KEYVAULT_NAME."
        )
    return f"https://{name}.vault.azure.net/"


def _secret(client: SecretClient, name: str) -> Optional[str]:
    """Secret value, or None when the vault can't supply it (the env value is kept)."""
    try:
        return client.get_secret(name).value
    except AzureError:
        logging.getLogger(__name__).warning("Key Vault secret %s unavailable; using environment value", name)
        return None


def load_settings_from_key_vault(
    *,
    kv_uri: Optional[str] = None,
    client: Optional[SecretClient] = None,
    default_rate_secret_name: str = "crewplan-default-rate",
    start_year_secret_name: str = "crewplan-start-year",
    years_secret_name: str = "crewplan-years",
) -> Settings:
    """
    Environment settings overlaid with any Key Vault secrets that exist.

    Pass `client` to read from an existing SecretClient; otherwise one is
    created for kv_uri (or KEYVAULT_NAME) with DefaultAzureCredential.
    """
    base = load_settings()

    if client is None:
        uri = kv_uri or _kv_uri_from_env()
        # no browser login from a server process
        credential = DefaultAzureCredential(exclude_interactive_browser_credential=True)
        client = SecretClient(vault_url=uri, credential=credential)

    rate = _secret(client, default_rate_secret_name)
    start_year = _secret(client, start_year_secret_name)
    years = _secret(client, years_secret_name)

    return replace(
        base,
        default_rate=_parse(default_rate_secret_name, rate, float) if rate else base.default_rate,
        timeline_start_year=_parse(start_year_secret_name, start_year, int) if start_year else base.timeline_start_year,
        timeline_years=_parse(years_secret_name, years, int) if years else base.timeline_years,
    )


def configure_logging(level: str = "INFO", *, force: bool = False) -> None:
    """Initialise a basic logging configuration if none is present."""
    lvl = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(lvl, int):
        lvl = logging.INFO

    root = logging.getLogger()
    if root.handlers and not force:
        root.setLevel(lvl)
        return
    logging.basicConfig(level=lvl, format=LOG_FORMAT, force=force)


__all__ = [
    "Settings",
    "load_settings",
    "load_settings_from_key_vault",
    "configure_logging",
]
