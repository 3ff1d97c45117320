import logging
from types import SimpleNamespace

import pandas as pd
import pytest
from azure.core.exceptions import ResourceNotFoundError

from crewplan.io import read_crew_plan_csv
from crewplan.settings import configure_logging, load_settings, load_settings_from_key_vault
from crewplan.validation import departments_from_frame


class FakeSecretClient:
    def __init__(self, secrets):
        self.secrets = secrets

    def get_secret(self, name):
        if name not in self.secrets:
            raise ResourceNotFoundError(message=f"{name} not found")
        return SimpleNamespace(value=self.secrets[name])


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("CREWPLAN_DEFAULT_RATE", "CREWPLAN_START_YEAR", "CREWPLAN_YEARS", "CREWPLAN_LOG_LEVEL", "KEYVAULT_NAME"):
        monkeypatch.delenv(name, raising=False)


def test_load_settings_defaults():
    s = load_settings()
    assert s.default_rate == 8000.0
    assert s.timeline_years == 2
    assert s.log_level == "INFO"


def test_load_settings_from_env(monkeypatch):
    monkeypatch.setenv("CREWPLAN_DEFAULT_RATE", "9500")
    monkeypatch.setenv("CREWPLAN_START_YEAR", "2027")
    monkeypatch.setenv("CREWPLAN_YEARS", "3")
    monkeypatch.setenv("CREWPLAN_LOG_LEVEL", "debug")

    s = load_settings()
    assert (s.default_rate, s.timeline_start_year, s.timeline_years, s.log_level) == (9500.0, 2027, 3, "DEBUG")


def test_load_settings_rejects_bad_values(monkeypatch):
    monkeypatch.setenv("CREWPLAN_YEARS", "many")
    with pytest.raises(ValueError, match="CREWPLAN_YEARS"):
        load_settings()

    monkeypatch.setenv("CREWPLAN_YEARS", "0")
    with pytest.raises(ValueError):
        load_settings()


def test_key_vault_overlays_env(monkeypatch):
    monkeypatch.setenv("CREWPLAN_YEARS", "4")
    client = FakeSecretClient({"crewplan-default-rate": "11000", "crewplan-start-year": "2030"})

    s = load_settings_from_key_vault(client=client)

    assert s.default_rate == 11000.0
    assert s.timeline_start_year == 2030
    # missing secret -> environment value
    assert s.timeline_years == 4


def test_key_vault_requires_vault_name():
    with pytest.raises(RuntimeError, match="KEYVAULT_NAME"):
        load_settings_from_key_vault()


def test_configure_logging_sets_level():
    configure_logging("WARNING")
    assert logging.getLogger().level == logging.WARNING


def test_env_default_rate_reaches_table_and_csv_import(monkeypatch, tmp_path):
    monkeypatch.setenv("CREWPLAN_DEFAULT_RATE", "9500")
    settings = load_settings()

    df = pd.DataFrame(
        [{"name": "Editorial", "max_crew": 1, "start_month": 0, "end_month": 2, "ramp_up_duration": 0, "ramp_down_duration": 0}]
    )
    assert departments_from_frame(df, default_rate=settings.default_rate)[0].rate == 9500.0

    path = tmp_path / "plan.csv"
    path.write_text("Department,2025,,Rate\n,Jan,Feb,\nEditorial,1,1,\n", encoding="utf-8")
    assert read_crew_plan_csv(path, default_rate=settings.default_rate).departments[0].rate == 9500.0
